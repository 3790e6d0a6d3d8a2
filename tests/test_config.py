from netstack.address import Address
from netstack.config import FdAdapterBase, FdAdapterConfig, TCPConfig


def test_tcp_config_defaults():
    cfg = TCPConfig()
    assert cfg.rt_timeout == TCPConfig.TIMEOUT_DFLT == 1000
    assert cfg.recv_capacity == TCPConfig.DEFAULT_CAPACITY == 64000
    assert cfg.send_capacity == TCPConfig.DEFAULT_CAPACITY
    assert cfg.isn == 137


def test_tcp_config_overrides_keep_other_defaults():
    cfg = TCPConfig(rt_timeout=100, isn=5)
    assert cfg.rt_timeout == 100
    assert cfg.isn == 5
    assert cfg.recv_capacity == 64000
    assert cfg.send_capacity == 64000
    assert cfg.MAX_PAYLOAD_SIZE == 1000
    assert cfg.MAX_RETX_ATTEMPTS == 8


def test_adapter_config_defaults_to_any_address():
    cfg = FdAdapterConfig()
    assert cfg.source == Address.from_ip("0.0.0.0", 0)
    assert cfg.destination == Address.from_ip("0.0.0.0", 0)
    assert (cfg.loss_rate_dn, cfg.loss_rate_up) == (0, 0)


def test_listening_flag():
    adapter = FdAdapterBase()
    assert adapter.listening() is False
    adapter.set_listening(True)
    assert adapter.listening() is True
    adapter.set_listening(False)
    assert adapter.listening() is False


def test_config_is_mutable_in_place():
    adapter = FdAdapterBase()
    adapter.config().loss_rate_up = 7
    adapter.config().destination = Address.from_ip("10.0.0.2", 80)
    assert adapter.config().loss_rate_up == 7
    assert str(adapter.config().destination) == "10.0.0.2:80"


def test_adapters_have_independent_configs():
    first = FdAdapterBase()
    second = FdAdapterBase()
    first.config().loss_rate_dn = 3
    assert second.config().loss_rate_dn == 0
    assert first.config().loss_rate_dn == 3


def test_tick_leaves_state_alone():
    adapter = FdAdapterBase()
    before = FdAdapterConfig(**vars(adapter.config()))
    adapter.tick(100)
    assert adapter.config() == before
    assert adapter.listening() is False
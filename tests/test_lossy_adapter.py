import random

from netstack.config import FdAdapterBase
from netstack.lossy_adapter import LossyFdAdapter
from netstack.tcp_segment import TCPMessage, TCPSenderMessage


class RecordingAdapter(FdAdapterBase):
    def __init__(self):
        super().__init__()
        self.written = []
        self.ticks = []
        self.device = object()
        self.incoming = TCPMessage(sender=TCPSenderMessage(seqno=7, payload=b"x"))

    def read(self):
        return self.incoming

    def write(self, message):
        self.written.append(message)

    def tick(self, ms_since_last_tick):
        self.ticks.append(ms_since_last_tick)

    def fd(self):
        return self.device


class FixedRandom:
    def __init__(self, value):
        self.value = value

    def getrandbits(self, bits):
        return self.value


def test_no_loss_passes_everything():
    inner = RecordingAdapter()
    lossy = LossyFdAdapter(inner, random.Random(3))
    messages = [TCPMessage(sender=TCPSenderMessage(seqno=n)) for n in range(50)]
    for message in messages:
        lossy.write(message)
    assert inner.written == messages
    assert all(lossy.read() is inner.incoming for _ in range(50))


def test_uplink_drop_threshold():
    inner = RecordingAdapter()
    lossy = LossyFdAdapter(inner, FixedRandom(100))
    message = TCPMessage()
    inner.config().loss_rate_up = 101
    lossy.write(message)
    assert inner.written == []
    inner.config().loss_rate_up = 100
    lossy.write(message)
    assert inner.written == [message]


def test_downlink_drop_threshold():
    inner = RecordingAdapter()
    lossy = LossyFdAdapter(inner, FixedRandom(100))
    inner.config().loss_rate_dn = 101
    assert lossy.read() is None
    inner.config().loss_rate_dn = 100
    assert lossy.read() is inner.incoming


def test_uplink_rate_does_not_affect_reads():
    inner = RecordingAdapter()
    lossy = LossyFdAdapter(inner, FixedRandom(0))
    inner.config().loss_rate_up = 65535
    assert lossy.read() is inner.incoming
    lossy.write(TCPMessage())
    assert inner.written == []


def test_half_loss_drops_about_half():
    inner = RecordingAdapter()
    lossy = LossyFdAdapter(inner, random.Random(1))
    inner.config().loss_rate_up = 1 << 15
    for _ in range(10000):
        lossy.write(TCPMessage())
    assert 4500 < len(inner.written) < 5500


def test_passthroughs():
    inner = RecordingAdapter()
    lossy = LossyFdAdapter(inner)
    lossy.set_listening(True)
    assert inner.listening()
    assert lossy.config() is inner.config()
    lossy.tick(25)
    assert inner.ticks == [25]
    assert lossy.fd() is inner.device
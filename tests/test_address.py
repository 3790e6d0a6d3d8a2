import socket

import pytest

from netstack.address import Address, GaiError
from netstack.errors import TaggedError


def test_from_ip_accessors():
    addr = Address.from_ip("10.0.0.1", 80)
    assert addr.ip() == "10.0.0.1"
    assert addr.port() == 80
    assert addr.ip_port() == ("10.0.0.1", 80)
    assert str(addr) == "10.0.0.1:80"


def test_from_ip_default_port():
    assert Address.from_ip("10.0.0.1").port() == 0


def test_zero_means_any_address():
    assert Address.from_ip("0", 0).ip() == "0.0.0.0"


def test_ipv4_numeric_round_trip():
    addr = Address.from_ip("192.168.1.20")
    assert Address.from_ipv4_numeric(addr.ipv4_numeric()) == addr


def test_ipv4_numeric_extremes():
    assert Address.from_ip("255.255.255.255").ipv4_numeric() == 0xFFFFFFFF
    assert Address.from_ip("0.0.0.0").ipv4_numeric() == 0


def test_from_ipv4_numeric_out_of_range():
    with pytest.raises(ValueError):
        Address.from_ipv4_numeric(1 << 32)


def test_equality_and_hash():
    a = Address.from_ip("10.0.0.1", 80)
    b = Address.from_ip("10.0.0.1", 80)
    c = Address.from_ip("10.0.0.1", 81)
    assert a == b
    assert hash(a) == hash(b)
    assert (a == c) is False
    assert len({a, b, c}) == 2


def test_invalid_ip_raises_gai_error():
    with pytest.raises(GaiError) as info:
        Address.from_ip("not.an.ip", 0)
    assert isinstance(info.value, TaggedError)
    assert str(info.value).startswith("getaddrinfo(not.an.ip, 0): ")


def test_port_out_of_range():
    with pytest.raises(ValueError):
        Address.from_ip("10.0.0.1", 70000)


def test_resolve_numeric():
    addr = Address.resolve("127.0.0.1", "8080")
    assert addr == Address.from_ip("127.0.0.1", 8080)


def test_non_internet_address():
    addr = Address(socket.AF_UNIX, "/tmp/sock")
    assert str(addr) == "(non-Internet address)"
    with pytest.raises(RuntimeError):
        addr.ip_port()
    with pytest.raises(RuntimeError):
        addr.ipv4_numeric()


def test_ipv6_address():
    addr = Address(socket.AF_INET6, ("::1", 53, 0, 0))
    assert addr.ip_port() == ("::1", 53)
    assert str(addr) == "::1:53"
    with pytest.raises(RuntimeError):
        addr.ipv4_numeric()
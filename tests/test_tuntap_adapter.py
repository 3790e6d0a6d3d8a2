import socket

import pytest

from netstack.address import Address
from netstack.file_descriptor import FileDescriptor
from netstack.ipv4 import IPv4Datagram, IPv4Header
from netstack.parser import parse
from netstack.tcp_segment import TCPMessage, TCPReceiverMessage, TCPSenderMessage
from netstack.tuntap_adapter import TCPOverIPv4OverTunFdAdapter


@pytest.fixture
def link():
    a, b = socket.socketpair(socket.AF_UNIX, socket.SOCK_DGRAM)
    first, second = FileDescriptor(a.detach()), FileDescriptor(b.detach())
    yield first, second
    for fd in (first, second):
        if not fd.closed():
            fd.close()


def _configure(adapter, src, sport, dst, dport):
    cfg = adapter.config()
    cfg.source = Address.from_ip(src, sport)
    cfg.destination = Address.from_ip(dst, dport)


def _message():
    return TCPMessage(
        sender=TCPSenderMessage(seqno=1234, syn=True, payload=b"hello"),
        receiver=TCPReceiverMessage(ackno=99, window_size=1000),
    )


def test_round_trip_between_adapters(link):
    left = TCPOverIPv4OverTunFdAdapter(link[0])
    right = TCPOverIPv4OverTunFdAdapter(link[1])
    _configure(left, "10.0.0.1", 1000, "10.0.0.2", 2000)
    _configure(right, "10.0.0.2", 2000, "10.0.0.1", 1000)
    message = _message()
    left.write(message)
    assert right.read() == message


def test_written_bytes_are_an_ipv4_datagram(link):
    left = TCPOverIPv4OverTunFdAdapter(link[0])
    _configure(left, "10.0.0.1", 1000, "10.0.0.2", 2000)
    left.write(_message())
    raw = link[1].read()
    assert raw[0] == 0x45
    assert raw[9] == IPv4Header.PROTO_TCP
    assert len(raw) == IPv4Header.LENGTH + 20 + len(b"hello")
    datagram = IPv4Datagram()
    assert parse(datagram, [raw])
    assert datagram.header.src == Address.from_ip("10.0.0.1").ipv4_numeric()
    assert datagram.header.dst == Address.from_ip("10.0.0.2").ipv4_numeric()


def test_unrelated_port_is_ignored(link):
    left = TCPOverIPv4OverTunFdAdapter(link[0])
    right = TCPOverIPv4OverTunFdAdapter(link[1])
    _configure(left, "10.0.0.1", 1000, "10.0.0.2", 2000)
    _configure(right, "10.0.0.2", 2001, "10.0.0.1", 1000)
    left.write(_message())
    assert right.read() is None


def test_garbage_is_ignored(link):
    right = TCPOverIPv4OverTunFdAdapter(link[1])
    _configure(right, "10.0.0.2", 2000, "10.0.0.1", 1000)
    link[0].write(b"junk")
    assert right.read() is None


def test_listening_adapter_learns_peer(link):
    left = TCPOverIPv4OverTunFdAdapter(link[0])
    right = TCPOverIPv4OverTunFdAdapter(link[1])
    _configure(left, "10.0.0.1", 1000, "10.0.0.2", 2000)
    right.config().source = Address.from_ip("0.0.0.0", 2000)
    right.set_listening(True)
    message = _message()
    left.write(message)
    assert right.read() == message
    assert not right.listening()
    assert right.config().destination.ip_port() == ("10.0.0.1", 1000)
    assert right.config().source.ip_port() == ("10.0.0.2", 2000)


def test_nonblocking_read_with_nothing_waiting(link):
    right = TCPOverIPv4OverTunFdAdapter(link[1])
    link[1].set_blocking(False)
    assert right.read() is None


def test_fd_is_the_device(link):
    adapter = TCPOverIPv4OverTunFdAdapter(link[0])
    assert adapter.fd() is link[0]
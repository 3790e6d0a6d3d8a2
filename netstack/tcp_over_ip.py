"""Carrying TCP messages inside IPv4 datagrams."""

from __future__ import annotations

from ipaddress import IPv4Address
from typing import Optional

from .address import Address
from .config import FdAdapterBase
from .ipv4 import IPv4Datagram, IPv4Header
from .parser import parse, serialize
from .tcp_segment import TCPMessage, TCPSegment

_TCP_HEADER_LENGTH = 20


class TCPOverIPv4Adapter(FdAdapterBase):
    """Converts between TCP messages and IPv4 datagrams for one connection."""

    def unwrap_tcp_in_ip(self, datagram: IPv4Datagram) -> Optional[TCPMessage]:
        """The TCP message in ``datagram``, or ``None`` if invalid or unrelated.

        While listening, a SYN (without RST) fixes the connection's addresses
        and ports, and listening stops.
        """
        header = datagram.header
        cfg = self.config()

        if not self.listening() and header.dst != cfg.source.ipv4_numeric():
            return None
        if not self.listening() and header.src != cfg.destination.ipv4_numeric():
            return None
        if header.proto != IPv4Header.PROTO_TCP:
            return None

        segment = TCPSegment()
        if not parse(segment, datagram.payload, header.pseudo_checksum()):
            return None

        if segment.udinfo.dst_port != cfg.source.port():
            return None

        if self.listening():
            sender = segment.message.sender
            if not (sender.syn and not sender.rst):
                return None
            cfg.source = Address.from_ip(str(IPv4Address(header.dst)), cfg.source.port())
            cfg.destination = Address.from_ip(
                str(IPv4Address(header.src)), segment.udinfo.src_port
            )
            self.set_listening(False)

        if segment.udinfo.src_port != cfg.destination.port():
            return None

        return segment.message

    def wrap_tcp_in_ip(self, message: TCPMessage) -> IPv4Datagram:
        """Put ``message`` in a TCP segment inside an IPv4 datagram, with checksums."""
        cfg = self.config()
        segment = TCPSegment(message=message)
        segment.udinfo.src_port = cfg.source.port()
        segment.udinfo.dst_port = cfg.destination.port()

        datagram = IPv4Datagram()
        datagram.header.src = cfg.source.ipv4_numeric()
        datagram.header.dst = cfg.destination.ipv4_numeric()
        datagram.header.length = (
            datagram.header.hlen * 4 + _TCP_HEADER_LENGTH + len(message.sender.payload)
        )

        segment.compute_checksum(datagram.header.pseudo_checksum())
        datagram.header.compute_checksum()
        datagram.payload = serialize(segment)
        return datagram
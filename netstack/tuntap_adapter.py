"""TCP over IPv4 carried through a TUN device."""

from __future__ import annotations

from typing import Optional

from .file_descriptor import FileDescriptor
from .ipv4 import IPv4Datagram, IPv4Header
from .parser import parse, serialize
from .tcp_over_ip import TCPOverIPv4Adapter
from .tcp_segment import TCPMessage


class TCPOverIPv4OverTunFdAdapter(TCPOverIPv4Adapter):
    """Reads and writes IPv4 datagrams holding TCP segments on a TUN descriptor."""

    def __init__(self, tun: FileDescriptor) -> None:
        super().__init__()
        self._tun = tun

    def read(self) -> Optional[TCPMessage]:
        """Read one datagram; the TCP message if it is valid and for this connection."""
        chunks = self._tun.read_vectored([IPv4Header.LENGTH, 0])
        if not chunks:
            return None
        datagram = IPv4Datagram()
        if parse(datagram, chunks):
            return self.unwrap_tcp_in_ip(datagram)
        return None

    def write(self, message: TCPMessage) -> None:
        """Wrap ``message`` in an IPv4 datagram and write it to the device."""
        self._tun.write(serialize(self.wrap_tcp_in_ip(message)))

    def fd(self) -> FileDescriptor:
        """The underlying device descriptor."""
        return self._tun
"""Network sockets built on FileDescriptor."""

from __future__ import annotations

import errno
import socket
import struct
from contextlib import contextmanager
from typing import Iterator, Optional

from .address import Address
from .errors import UnixError
from .file_descriptor import READ_BUFFER_SIZE, FileDescriptor

AF_PACKET = getattr(socket, "AF_PACKET", 17)
SOL_PACKET = getattr(socket, "SOL_PACKET", 263)
PACKET_ADD_MEMBERSHIP = 1
PACKET_MR_PROMISC = 1

_SO_DOMAIN = getattr(socket, "SO_DOMAIN", 39)
_SO_PROTOCOL = getattr(socket, "SO_PROTOCOL", 38)
_SO_BINDTODEVICE = getattr(socket, "SO_BINDTODEVICE", 25)
_MSG_TRUNC = getattr(socket, "MSG_TRUNC", 0x20)


class Socket(FileDescriptor):
    """Base class for network sockets."""

    def __init__(
        self,
        family: int,
        kind: int,
        protocol: int = 0,
        fd: Optional[FileDescriptor] = None,
    ) -> None:
        if fd is None:
            try:
                sock = socket.socket(family, kind, protocol)
            except OSError as exc:
                raise UnixError("socket", exc.errno or 0) from exc
            super().__init__(sock.detach())
            return

        self._wrapper = fd._wrapper
        for option, expected, what in (
            (_SO_DOMAIN, family, "domain"),
            (socket.SO_TYPE, kind, "type"),
            (_SO_PROTOCOL, protocol, "protocol"),
        ):
            if self._getsockopt(socket.SOL_SOCKET, option) != expected:
                raise RuntimeError(f"socket {what} mismatch")

    @contextmanager
    def _borrowed(self, attempt: str) -> Iterator[socket.socket]:
        """A socket object over this descriptor that does not own it."""
        try:
            sock = socket.socket(fileno=self.fd_num())
        except OSError as exc:
            raise UnixError(attempt, exc.errno or errno.EBADF) from exc
        try:
            yield sock
        finally:
            sock.detach()

    def _getsockopt(self, level: int, option: int) -> int:
        with self._borrowed("getsockopt") as sock:
            value = self._check("getsockopt", sock.getsockopt, level, option)
        return int(value or 0)

    def _setsockopt(self, level: int, option: int, value: int | bytes) -> None:
        with self._borrowed("setsockopt") as sock:
            self._check("setsockopt", sock.setsockopt, level, option, value)

    def _get_address(self, name_of_function: str, peer: bool) -> Address:
        with self._borrowed(name_of_function) as sock:
            call = sock.getpeername if peer else sock.getsockname
            raw = self._check(name_of_function, call)
            family = sock.family
        return Address(family, raw)

    def bind(self, address: Address) -> None:
        with self._borrowed("bind") as sock:
            self._check("bind", sock.bind, address.sockaddr)

    def bind_to_device(self, device_name: str) -> None:
        self._setsockopt(socket.SOL_SOCKET, _SO_BINDTODEVICE, device_name.encode())

    def connect(self, address: Address) -> None:
        with self._borrowed("connect") as sock:
            self._check("connect", sock.connect, address.sockaddr)

    def shutdown(self, how: int) -> None:
        with self._borrowed("shutdown") as sock:
            self._check("shutdown", sock.shutdown, how)
        if how == socket.SHUT_RD:
            self._register_read()
        elif how == socket.SHUT_WR:
            self._register_write()
        elif how == socket.SHUT_RDWR:
            self._register_read()
            self._register_write()
        else:
            raise RuntimeError("Socket::shutdown() called with invalid `how`")

    def local_address(self) -> Address:
        return self._get_address("getsockname", peer=False)

    def peer_address(self) -> Address:
        return self._get_address("getpeername", peer=True)

    def set_reuseaddr(self) -> None:
        """Allow the local address to be reused sooner, at some cost in robustness."""
        self._setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

    def check_error(self) -> None:
        """Raise the pending socket error, if any (seen on non-blocking sockets)."""
        socket_error = self._getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        if socket_error:
            raise UnixError("socket error", socket_error)


class DatagramSocket(Socket):
    """A socket that sends and receives whole datagrams."""

    def recv(self) -> tuple[Optional[Address], bytes]:
        """Receive one datagram and its sender.

        A non-blocking call with nothing waiting returns ``(None, b"")``.
        """
        buf = bytearray(READ_BUFFER_SIZE)
        with self._borrowed("recvfrom") as sock:
            result = self._check("recvfrom", sock.recvfrom_into, buf, 0, _MSG_TRUNC)
            family = sock.family
        if result is None:
            return None, b""
        length, source = result
        if length > len(buf):
            raise RuntimeError("recvfrom (oversized datagram)")
        self._register_read()
        return Address(family, source), bytes(buf[:length])

    def sendto(self, destination: Address, payload: bytes) -> None:
        with self._borrowed("sendto") as sock:
            self._check("sendto", sock.sendto, bytes(payload), destination.sockaddr)
        self._register_write()

    def send(self, payload: bytes) -> None:
        """Send to the connected peer (``connect`` must come first)."""
        with self._borrowed("send") as sock:
            self._check("send", sock.send, bytes(payload))
        self._register_write()


class UDPSocket(DatagramSocket):
    """An IPv4 UDP socket."""

    def __init__(self, fd: Optional[FileDescriptor] = None) -> None:
        super().__init__(socket.AF_INET, socket.SOCK_DGRAM, 0, fd)


class TCPSocket(Socket):
    """An IPv4 TCP socket."""

    def __init__(self, fd: Optional[FileDescriptor] = None) -> None:
        protocol = 0 if fd is None else socket.IPPROTO_TCP
        super().__init__(socket.AF_INET, socket.SOCK_STREAM, protocol, fd)

    def listen(self, backlog: int = 16) -> None:
        with self._borrowed("listen") as sock:
            self._check("listen", sock.listen, backlog)

    def accept(self) -> TCPSocket:
        """Accept a new connection (blocks unless the socket is non-blocking)."""
        self._register_read()
        with self._borrowed("accept") as sock:
            result = self._check("accept", sock.accept)
        if result is None:
            raise UnixError("accept", errno.EAGAIN)
        conn, _ = result
        return TCPSocket(FileDescriptor(conn.detach()))


class PacketSocket(DatagramSocket):
    """A link-layer packet socket."""

    def __init__(self, kind: int, protocol: int) -> None:
        super().__init__(AF_PACKET, kind, protocol)

    def set_promiscuous(self) -> None:
        address = self.local_address()
        if address.family != AF_PACKET:
            raise RuntimeError("Address::as() conversion failure")
        ifindex = socket.if_nametoindex(address.sockaddr[0])
        request = struct.pack("iHH8s", ifindex, PACKET_MR_PROMISC, 0, b"")
        self._setsockopt(SOL_PACKET, PACKET_ADD_MEMBERSHIP, request)


class LocalStreamSocket(Socket):
    """A Unix-domain stream socket."""

    def __init__(self, fd: FileDescriptor) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_STREAM, 0, fd)

    @classmethod
    def pair(cls) -> tuple[LocalStreamSocket, LocalStreamSocket]:
        """A pair of connected sockets."""
        try:
            first, second = socket.socketpair(socket.AF_UNIX, socket.SOCK_STREAM)
        except OSError as exc:
            raise UnixError("socketpair", exc.errno or 0) from exc
        return (
            cls(FileDescriptor(first.detach())),
            cls(FileDescriptor(second.detach())),
        )


class LocalDatagramSocket(DatagramSocket):
    """A Unix-domain datagram socket."""

    def __init__(self, fd: Optional[FileDescriptor] = None) -> None:
        super().__init__(socket.AF_UNIX, socket.SOCK_DGRAM, 0, fd)
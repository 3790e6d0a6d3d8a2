"""Socket addresses and name resolution."""

from __future__ import annotations

import socket
from ipaddress import IPv4Address
from typing import Any

from .errors import TaggedError

_GAI_MESSAGES_BY_NAME = {
    "EAI_AGAIN": "Temporary failure in name resolution",
    "EAI_BADFLAGS": "Bad value for ai_flags",
    "EAI_FAIL": "Non-recoverable failure in name resolution",
    "EAI_FAMILY": "ai_family not supported",
    "EAI_MEMORY": "Memory allocation failure",
    "EAI_NODATA": "No address associated with hostname",
    "EAI_NONAME": "Name or service not known",
    "EAI_SERVICE": "Servname not supported for ai_socktype",
    "EAI_SOCKTYPE": "ai_socktype not supported",
    "EAI_SYSTEM": "System error",
    "EAI_OVERFLOW": "Argument buffer overflow",
}

_GAI_MESSAGES = {
    getattr(socket, name): text
    for name, text in _GAI_MESSAGES_BY_NAME.items()
    if hasattr(socket, name)
}

_INTERNET_FAMILIES = (socket.AF_INET, socket.AF_INET6)


class GaiError(TaggedError):
    """A failure reported by getaddrinfo or getnameinfo."""

    def __init__(self, attempt: str, error_code: int) -> None:
        message = _GAI_MESSAGES.get(error_code, f"Unknown error {error_code}")
        super().__init__(attempt, error_code, message)


def _lookup(node: str, service: str, flags: int) -> tuple[int, Any]:
    try:
        results = socket.getaddrinfo(node, service, socket.AF_INET, 0, 0, flags)
    except socket.gaierror as exc:
        raise GaiError(f"getaddrinfo({node}, {service})", exc.errno or 0) from exc
    if not results:
        raise RuntimeError("getaddrinfo returned successfully but with no results")
    family, _, _, _, sockaddr = results[0]
    return family, sockaddr


def _check_port(port: int) -> int:
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port out of range: {port}")
    return port


class Address:
    """A socket address: an address family and its socket-module address value."""

    __slots__ = ("_family", "_sockaddr")

    def __init__(self, family: int, sockaddr: Any) -> None:
        self._family = int(family)
        self._sockaddr = tuple(sockaddr) if isinstance(sockaddr, (list, tuple)) else sockaddr

    @property
    def family(self) -> int:
        return self._family

    @property
    def sockaddr(self) -> Any:
        return self._sockaddr

    @classmethod
    def resolve(cls, hostname: str, service: str) -> Address:
        """Resolve a hostname and service name (or port string) to an IPv4 address."""
        family, sockaddr = _lookup(hostname, service, getattr(socket, "AI_ALL", 0))
        return cls(family, sockaddr)

    @classmethod
    def from_ip(cls, ip: str, port: int = 0) -> Address:
        """Build from a dotted-quad string and numeric port, with no name lookup."""
        _check_port(port)
        family, sockaddr = _lookup(
            ip, str(port), socket.AI_NUMERICHOST | socket.AI_NUMERICSERV
        )
        return cls(family, sockaddr)

    @classmethod
    def from_ipv4_numeric(cls, ip_address: int) -> Address:
        """Build from a 32-bit IPv4 address in host order (port 0)."""
        if not 0 <= ip_address <= 0xFFFFFFFF:
            raise ValueError(f"IPv4 address out of range: {ip_address}")
        return cls(socket.AF_INET, (str(IPv4Address(ip_address)), 0))

    def ip_port(self) -> tuple[str, int]:
        """The numeric host string and port."""
        if self._family not in _INTERNET_FAMILIES:
            raise RuntimeError("Address::ip_port() called on non-Internet address")
        try:
            host, port = socket.getnameinfo(
                self._sockaddr, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
            )
        except socket.gaierror as exc:
            raise GaiError("getnameinfo", exc.errno or 0) from exc
        return host, int(port)

    def ip(self) -> str:
        return self.ip_port()[0]

    def port(self) -> int:
        return self.ip_port()[1]

    def ipv4_numeric(self) -> int:
        """The IPv4 address as an integer in host order."""
        if self._family != socket.AF_INET:
            raise RuntimeError("ipv4_numeric called on non-IPV4 address")
        return int(IPv4Address(self._sockaddr[0]))

    def __str__(self) -> str:
        if self._family in _INTERNET_FAMILIES:
            host, port = self.ip_port()
            return f"{host}:{port}"
        return "(non-Internet address)"

    def __repr__(self) -> str:
        return f"Address({self._family!r}, {self._sockaddr!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Address):
            return NotImplemented
        return self._family == other._family and self._sockaddr == other._sockaddr

    def __hash__(self) -> int:
        return hash((self._family, self._sockaddr))
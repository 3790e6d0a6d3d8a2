"""Ethernet addresses, headers and frames."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterable

from .parser import Parser, Serializer

ADDRESS_LENGTH = 6
ETHERNET_BROADCAST = b"\xff" * ADDRESS_LENGTH


def format_ethernet_address(address: Iterable[int]) -> str:
    """Format six bytes as ``aa:bb:cc:dd:ee:ff``."""
    return ":".join(f"{b:02x}" for b in address)


def _check_address(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != ADDRESS_LENGTH:
        raise ValueError(f"{name} must be {ADDRESS_LENGTH} bytes, got {len(value)}")
    return value


@dataclass
class EthernetHeader:
    """Ethernet frame header."""

    LENGTH: ClassVar[int] = 14
    TYPE_IPV4: ClassVar[int] = 0x800
    TYPE_ARP: ClassVar[int] = 0x806

    dst: bytes = bytes(ADDRESS_LENGTH)
    src: bytes = bytes(ADDRESS_LENGTH)
    type: int = 0

    def __post_init__(self) -> None:
        self.dst = _check_address(self.dst, "dst")
        self.src = _check_address(self.src, "src")

    def __str__(self) -> str:
        if self.type == self.TYPE_IPV4:
            kind = "IPv4"
        elif self.type == self.TYPE_ARP:
            kind = "ARP"
        else:
            kind = f"[unknown type {self.type:x}!]"
        return (
            f"dst={format_ethernet_address(self.dst)}"
            f" src={format_ethernet_address(self.src)} type={kind}"
        )

    def parse(self, parser: Parser) -> None:
        dst = parser.integer(ADDRESS_LENGTH)
        src = parser.integer(ADDRESS_LENGTH)
        kind = parser.integer(2)
        if parser.has_error():
            return
        self.dst = dst.to_bytes(ADDRESS_LENGTH, "big")
        self.src = src.to_bytes(ADDRESS_LENGTH, "big")
        self.type = kind

    def serialize(self, serializer: Serializer) -> None:
        serializer.integer(int.from_bytes(self.dst, "big"), ADDRESS_LENGTH)
        serializer.integer(int.from_bytes(self.src, "big"), ADDRESS_LENGTH)
        serializer.integer(self.type, 2)


@dataclass
class EthernetFrame:
    """An Ethernet header followed by its payload chunks."""

    header: EthernetHeader = field(default_factory=EthernetHeader)
    payload: list[bytes] = field(default_factory=list)

    def parse(self, parser: Parser) -> None:
        self.header.parse(parser)
        self.payload = parser.all_remaining()

    def serialize(self, serializer: Serializer) -> None:
        self.header.serialize(serializer)
        serializer.buffers(self.payload)
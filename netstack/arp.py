"""ARP messages for resolving IPv4 addresses to Ethernet addresses."""

from __future__ import annotations

from dataclasses import dataclass
from ipaddress import IPv4Address
from typing import ClassVar

from .ethernet import ADDRESS_LENGTH, EthernetHeader, format_ethernet_address
from .parser import Parser, Serializer

_IPV4_ADDRESS_LENGTH = 4


def _check_address(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != ADDRESS_LENGTH:
        raise ValueError(f"{name} must be {ADDRESS_LENGTH} bytes, got {len(value)}")
    return value


@dataclass
class ARPMessage:
    """An ARP request or reply for Ethernet and IPv4."""

    LENGTH: ClassVar[int] = 28
    TYPE_ETHERNET: ClassVar[int] = 1
    OPCODE_REQUEST: ClassVar[int] = 1
    OPCODE_REPLY: ClassVar[int] = 2

    hardware_type: int = 1
    protocol_type: int = EthernetHeader.TYPE_IPV4
    hardware_address_size: int = ADDRESS_LENGTH
    protocol_address_size: int = _IPV4_ADDRESS_LENGTH
    opcode: int = 0

    sender_ethernet_address: bytes = bytes(ADDRESS_LENGTH)
    sender_ip_address: int = 0

    target_ethernet_address: bytes = bytes(ADDRESS_LENGTH)
    target_ip_address: int = 0

    def __post_init__(self) -> None:
        self.sender_ethernet_address = _check_address(
            self.sender_ethernet_address, "sender_ethernet_address"
        )
        self.target_ethernet_address = _check_address(
            self.target_ethernet_address, "target_ethernet_address"
        )

    def supported(self) -> bool:
        """Whether this combination of fields can be parsed and serialized."""
        return (
            self.hardware_type == self.TYPE_ETHERNET
            and self.protocol_type == EthernetHeader.TYPE_IPV4
            and self.hardware_address_size == ADDRESS_LENGTH
            and self.protocol_address_size == _IPV4_ADDRESS_LENGTH
            and self.opcode in (self.OPCODE_REQUEST, self.OPCODE_REPLY)
        )

    def __str__(self) -> str:
        if self.opcode == self.OPCODE_REQUEST:
            opcode = "REQUEST"
        elif self.opcode == self.OPCODE_REPLY:
            opcode = "REPLY"
        else:
            opcode = "(unknown type)"
        sender_ip = IPv4Address(self.sender_ip_address & 0xFFFFFFFF)
        target_ip = IPv4Address(self.target_ip_address & 0xFFFFFFFF)
        return (
            f"opcode={opcode}, sender={format_ethernet_address(self.sender_ethernet_address)}"
            f"/{sender_ip}, target={format_ethernet_address(self.target_ethernet_address)}"
            f"/{target_ip}"
        )

    def parse(self, parser: Parser) -> None:
        self.hardware_type = parser.integer(2)
        self.protocol_type = parser.integer(2)
        self.hardware_address_size = parser.integer(1)
        self.protocol_address_size = parser.integer(1)
        self.opcode = parser.integer(2)

        if not self.supported():
            parser.set_error()
            return

        self.sender_ethernet_address = parser.integer(ADDRESS_LENGTH).to_bytes(ADDRESS_LENGTH, "big")
        self.sender_ip_address = parser.integer(_IPV4_ADDRESS_LENGTH)
        self.target_ethernet_address = parser.integer(ADDRESS_LENGTH).to_bytes(ADDRESS_LENGTH, "big")
        self.target_ip_address = parser.integer(_IPV4_ADDRESS_LENGTH)

    def serialize(self, serializer: Serializer) -> None:
        if not self.supported():
            raise ValueError(
                "ARPMessage: unsupported field combination (must be Ethernet/IP, and request or reply)"
            )
        serializer.integer(self.hardware_type, 2)
        serializer.integer(self.protocol_type, 2)
        serializer.integer(self.hardware_address_size, 1)
        serializer.integer(self.protocol_address_size, 1)
        serializer.integer(self.opcode, 2)
        serializer.integer(int.from_bytes(self.sender_ethernet_address, "big"), ADDRESS_LENGTH)
        serializer.integer(self.sender_ip_address, _IPV4_ADDRESS_LENGTH)
        serializer.integer(int.from_bytes(self.target_ethernet_address, "big"), ADDRESS_LENGTH)
        serializer.integer(self.target_ip_address, _IPV4_ADDRESS_LENGTH)
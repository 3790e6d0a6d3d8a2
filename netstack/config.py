"""Configuration for TCP peers and datagram adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar

from .address import Address


def _any_address() -> Address:
    return Address.from_ipv4_numeric(0)


@dataclass
class TCPConfig:
    """Settings for a TCP sender and receiver."""

    DEFAULT_CAPACITY: ClassVar[int] = 64000
    MAX_PAYLOAD_SIZE: ClassVar[int] = 1000
    TIMEOUT_DFLT: ClassVar[int] = 1000
    MAX_RETX_ATTEMPTS: ClassVar[int] = 8

    rt_timeout: int = 1000
    recv_capacity: int = 64000
    send_capacity: int = 64000
    isn: int = 137


@dataclass
class FdAdapterConfig:
    """Addresses and loss rates for a datagram adapter."""

    source: Address = field(default_factory=_any_address)
    destination: Address = field(default_factory=_any_address)
    loss_rate_dn: int = 0
    loss_rate_up: int = 0


class FdAdapterBase:
    """State shared by the adapters that carry TCP messages in datagrams."""

    def __init__(self) -> None:
        self._config = FdAdapterConfig()
        self._listening = False

    def set_listening(self, listening: bool) -> None:
        self._listening = listening

    def listening(self) -> bool:
        """Whether the adapter is waiting for a new connection."""
        return self._listening

    def config(self) -> FdAdapterConfig:
        """The adapter's configuration, which may be changed in place."""
        return self._config

    def tick(self, ms_since_last_tick: int) -> None:
        """Called as time passes; the base adapter keeps no timers."""
"""The Internet checksum (ones' complement sum of 16-bit words)."""

from __future__ import annotations

from typing import Iterable

_MASK32 = 0xFFFFFFFF


class InternetChecksum:
    """Accumulates bytes and yields the Internet checksum."""

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & _MASK32
        self._odd = False

    def add(self, data: bytes) -> None:
        """Add bytes; a chunk may end in the middle of a 16-bit word."""
        total = self._sum
        odd = self._odd
        for byte in data:
            total += byte if odd else byte << 8
            odd = not odd
        self._sum = total & _MASK32
        self._odd = odd

    def add_all(self, chunks: Iterable[bytes]) -> None:
        for chunk in chunks:
            self.add(chunk)

    def value(self) -> int:
        ret = self._sum
        while ret > 0xFFFF:
            ret = (ret >> 16) + (ret & 0xFFFF)
        return ~ret & 0xFFFF
"""Big-endian wire parsing and serialization over lists of byte chunks."""

from __future__ import annotations

from collections import deque
from typing import Any, Iterable


class Parser:
    """Reads big-endian fields from a sequence of byte chunks.

    Errors are sticky: once a read runs past the end of the input, every
    later read is skipped and ``has_error()`` stays true.
    """

    def __init__(self, buffers: Iterable[bytes]) -> None:
        self._chunks: deque[bytes] = deque(bytes(b) for b in buffers if b)
        self._skip = 0
        self._size = sum(len(c) for c in self._chunks)
        self._error = False

    def has_error(self) -> bool:
        return self._error

    def set_error(self) -> None:
        self._error = True

    def remaining(self) -> int:
        """Number of unread bytes."""
        return self._size

    def remove_prefix(self, n: int) -> None:
        """Discard up to ``n`` bytes from the front of the input."""
        self._advance(min(n, self._size))

    def _advance(self, n: int) -> None:
        while n and self._chunks:
            front = self._chunks[0]
            step = min(n, len(front) - self._skip)
            self._skip += step
            self._size -= step
            n -= step
            if self._skip == len(front):
                self._chunks.popleft()
                self._skip = 0

    def _take(self, n: int) -> bytes:
        parts = []
        while n:
            front = self._chunks[0]
            step = min(n, len(front) - self._skip)
            parts.append(front[self._skip : self._skip + step])
            self._advance(step)
            n -= step
        return b"".join(parts)

    def _ready(self, size: int) -> bool:
        if size > self._size:
            self._error = True
        return not self._error

    def integer(self, width: int) -> int:
        """Read an unsigned big-endian integer of ``width`` bytes (0 on error)."""
        if not self._ready(width):
            return 0
        return int.from_bytes(self._take(width), "big")

    def read_bytes(self, size: int) -> bytes:
        """Read exactly ``size`` bytes (empty on error)."""
        if not self._ready(size):
            return b""
        return self._take(size)

    def all_remaining(self) -> list[bytes]:
        """Consume and return every unread chunk."""
        out = list(self._chunks)
        if out and self._skip:
            out[0] = out[0][self._skip :]
        self._chunks.clear()
        self._skip = 0
        self._size = 0
        return out

    def all_remaining_bytes(self) -> bytes:
        """Consume and return every unread byte as one string."""
        return b"".join(self.all_remaining())

    def buffer(self) -> list[bytes]:
        """The unread chunks, without consuming them."""
        out = list(self._chunks)
        if out and self._skip:
            out[0] = out[0][self._skip :]
        return out


class Serializer:
    """Writes big-endian fields, collecting output as a list of chunks."""

    def __init__(self, initial: bytes = b"") -> None:
        self._output: list[bytes] = []
        self._pending = bytearray(initial)

    def integer(self, value: int, width: int) -> None:
        """Append ``value`` as an unsigned big-endian integer of ``width`` bytes."""
        mask = (1 << (8 * width)) - 1
        self._pending += (value & mask).to_bytes(width, "big")

    def buffer(self, data: bytes) -> None:
        """Append ``data`` as its own chunk (empty data is dropped)."""
        self.flush()
        if data:
            self._output.append(bytes(data))

    def buffers(self, chunks: Iterable[bytes]) -> None:
        for chunk in chunks:
            self.buffer(chunk)

    def flush(self) -> None:
        if self._pending:
            self._output.append(bytes(self._pending))
            self._pending.clear()

    def output(self) -> list[bytes]:
        self.flush()
        return list(self._output)


def serialize(obj: Any) -> list[bytes]:
    """Serialize any object that has a ``serialize(serializer)`` method."""
    serializer = Serializer()
    obj.serialize(serializer)
    return serializer.output()


def parse(obj: Any, buffers: Iterable[bytes], *args: Any) -> bool:
    """Parse ``buffers`` into ``obj``; return True on success."""
    parser = Parser(buffers)
    obj.parse(parser, *args)
    return not parser.has_error()
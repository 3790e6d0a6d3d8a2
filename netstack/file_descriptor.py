"""Reference-counted handles on kernel file descriptors."""

from __future__ import annotations

import errno
import os
import sys
from typing import Any, Callable, Iterable, Optional, TypeVar, Union

from .errors import UnixError

READ_BUFFER_SIZE = 16384

_WOULD_BLOCK = (errno.EAGAIN, errno.EINPROGRESS)

T = TypeVar("T")

BytesLike = Union[bytes, bytearray, memoryview]


class _FDWrapper:
    """The shared state of one kernel file descriptor; closes it when collected."""

    __slots__ = ("fd", "eof", "closed", "non_blocking", "read_count", "write_count")

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise RuntimeError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0
        self.non_blocking = False
        try:
            self.non_blocking = not os.get_blocking(fd)
        except OSError as exc:
            self.closed = True
            raise UnixError("fcntl", exc.errno or errno.EBADF) from exc

    def close(self) -> None:
        try:
            os.close(self.fd)
        except OSError as exc:
            if not (self.non_blocking and exc.errno in _WOULD_BLOCK):
                raise UnixError("close", exc.errno or errno.EBADF) from exc
        self.eof = self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except Exception as exc:  # never raise from a finalizer
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


class FileDescriptor:
    """A handle on a file descriptor; copies made by ``duplicate`` share its state.

    The descriptor is closed when it is closed explicitly or when the last
    handle sharing it is garbage collected.
    """

    def __init__(self, fd: int) -> None:
        self._wrapper = _FDWrapper(fd)

    def _check(self, attempt: str, call: Callable[..., T], *args: Any) -> Optional[T]:
        """Run a system call; ``None`` means a non-blocking call would have blocked."""
        try:
            return call(*args)
        except OSError as exc:
            if self._wrapper.non_blocking and exc.errno in _WOULD_BLOCK:
                return None
            raise UnixError(attempt, exc.errno or 0) from exc

    def _set_eof(self) -> None:
        self._wrapper.eof = True

    def _register_read(self) -> None:
        self._wrapper.read_count += 1

    def _register_write(self) -> None:
        self._wrapper.write_count += 1

    def read(self, size: int = READ_BUFFER_SIZE) -> bytes:
        """Read up to ``size`` bytes (empty if a non-blocking read would block)."""
        if size <= 0:
            size = READ_BUFFER_SIZE
        data = self._check("read", os.read, self.fd_num(), size)
        if data is None:
            return b""
        self._register_read()
        if not data:
            self._set_eof()
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        return data

    def read_vectored(self, sizes: Iterable[int]) -> list[bytes]:
        """Scatter one read into buffers of the given sizes.

        The last buffer is always given the full read-buffer size. Buffers
        after the end of the data come back empty; a non-blocking read that
        would block returns an empty list.
        """
        sizes = list(sizes)
        if not sizes:
            return []
        sizes[-1] = READ_BUFFER_SIZE
        buffers = [bytearray(n) for n in sizes]
        count = self._check("read", os.readv, self.fd_num(), buffers)
        if count is None:
            return []
        self._register_read()
        if count > sum(sizes):
            raise RuntimeError("read() read more than requested")
        out = []
        remaining = count
        for buf in buffers:
            take = min(remaining, len(buf))
            out.append(bytes(buf[:take]))
            remaining -= take
        return out

    def write(self, data: Union[BytesLike, Iterable[BytesLike]]) -> int:
        """Write one buffer or a sequence of buffers; return the bytes written."""
        if isinstance(data, (bytes, bytearray, memoryview)):
            chunks = [bytes(data)]
        else:
            chunks = [bytes(chunk) for chunk in data]
        total = sum(len(chunk) for chunk in chunks)

        written = self._check("writev", os.writev, self.fd_num(), chunks)
        if written is None:
            written = 0
        self._register_write()

        if written == 0 and total != 0:
            raise RuntimeError("write returned 0 given non-empty input buffer")
        if written > total:
            raise RuntimeError("write wrote more than length of input buffer")
        return written

    def close(self) -> None:
        self._wrapper.close()

    def duplicate(self) -> FileDescriptor:
        """Another handle on the same descriptor and state."""
        other = FileDescriptor.__new__(FileDescriptor)
        other._wrapper = self._wrapper
        return other

    def set_blocking(self, blocking: bool) -> None:
        try:
            os.set_blocking(self.fd_num(), blocking)
        except OSError as exc:
            raise UnixError("fcntl", exc.errno or 0) from exc
        self._wrapper.non_blocking = not blocking

    def fd_num(self) -> int:
        return self._wrapper.fd

    def eof(self) -> bool:
        return self._wrapper.eof

    def closed(self) -> bool:
        return self._wrapper.closed

    def read_count(self) -> int:
        return self._wrapper.read_count

    def write_count(self) -> int:
        return self._wrapper.write_count

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        if not self.closed():
            self.close()
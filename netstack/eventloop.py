"""Waits for events on file descriptors and runs the matching callbacks."""

from __future__ import annotations

import errno
import select
import socket
import sys
import weakref
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable, Optional, Union

from .errors import UnixError
from .file_descriptor import FileDescriptor

Callback = Callable[[], None]
Interest = Callable[[], bool]

_ALWAYS_POLLED = select.POLLERR | select.POLLNVAL | select.POLLHUP


def _always() -> bool:
    return True


def _nothing() -> None:
    return None


class Direction(IntEnum):
    """Whether a rule waits for its descriptor to be readable or writable."""

    IN = select.POLLIN
    OUT = select.POLLOUT


class Result(Enum):
    """Outcome of one call to ``EventLoop.wait_next_event``."""

    SUCCESS = "success"
    TIMEOUT = "timeout"
    EXIT = "exit"


@dataclass(eq=False)
class _Rule:
    category_id: int
    interest: Interest
    callback: Callback
    cancel_requested: bool = False


@dataclass(eq=False)
class _FDRule(_Rule):
    fd: Optional[FileDescriptor] = None
    direction: Direction = Direction.IN
    on_cancel: Callback = field(default=_nothing)
    on_error: Callback = field(default=_nothing)

    def service_count(self) -> int:
        assert self.fd is not None
        return self.fd.read_count() if self.direction is Direction.IN else self.fd.write_count()


class RuleHandle:
    """A handle that can cancel a rule without keeping it alive."""

    def __init__(self, rule: _Rule) -> None:
        self._rule = weakref.ref(rule)

    def cancel(self) -> None:
        rule = self._rule()
        if rule is not None:
            rule.cancel_requested = True


class EventLoop:
    """Runs callbacks for ready file descriptors and for standalone tasks."""

    MAX_CATEGORIES = 64
    BUSY_WAIT_LIMIT = 128

    def __init__(self) -> None:
        self._categories: list[str] = []
        self._fd_rules: list[_FDRule] = []
        self._tasks: list[_Rule] = []

    def add_category(self, name: str) -> int:
        """Register a rule category name and return its id."""
        if len(self._categories) >= self.MAX_CATEGORIES:
            raise RuntimeError("maximum categories reached")
        self._categories.append(name)
        return len(self._categories) - 1

    def _category_id(self, category: Union[int, str]) -> int:
        if isinstance(category, str):
            return self.add_category(category)
        if not 0 <= category < len(self._categories):
            raise IndexError("bad category_id")
        return category

    def add_rule(
        self,
        category: Union[int, str],
        fd: FileDescriptor,
        direction: Direction,
        callback: Callback,
        interest: Interest = _always,
        cancel: Callback = _nothing,
        error: Callback = _nothing,
    ) -> RuleHandle:
        """Call ``callback`` when ``fd`` is ready in ``direction`` and ``interest()`` holds.

        A category given by name is registered first.
        """
        category_id = self._category_id(category)
        rule = _FDRule(
            category_id,
            interest,
            callback,
            fd=fd.duplicate(),
            direction=Direction(direction),
            on_cancel=cancel,
            on_error=error,
        )
        self._fd_rules.append(rule)
        return RuleHandle(rule)

    def add_task(
        self,
        category: Union[int, str],
        callback: Callback,
        interest: Interest = _always,
    ) -> RuleHandle:
        """Call ``callback`` for as long as ``interest()`` holds, with no descriptor."""
        category_id = self._category_id(category)
        rule = _Rule(category_id, interest, callback)
        self._tasks.append(rule)
        return RuleHandle(rule)

    def _name(self, rule: _Rule) -> str:
        return self._categories[rule.category_id]

    def _report_fd_error(self, rule: _FDRule) -> None:
        assert rule.fd is not None
        try:
            sock = socket.socket(fileno=rule.fd.fd_num())
        except OSError as exc:
            if exc.errno == errno.ENOTSOCK:
                print(
                    f'error on polled file descriptor for rule "{self._name(rule)}"',
                    file=sys.stderr,
                )
                return
            raise UnixError("getsockopt", exc.errno or errno.EBADF) from exc
        try:
            socket_error = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        except OSError as exc:
            raise UnixError("getsockopt", exc.errno or 0) from exc
        finally:
            sock.detach()
        if socket_error:
            print(
                f'error on polled socket for rule "{self._name(rule)}": '
                f"{errno.errorcode.get(socket_error, socket_error)}",
                file=sys.stderr,
            )

    def _run_tasks(self) -> bool:
        for rule in list(self._tasks):
            if rule.cancel_requested:
                self._tasks.remove(rule)
                continue
            fired = False
            iterations = 0
            while rule.interest():
                if iterations >= self.BUSY_WAIT_LIMIT:
                    raise RuntimeError(
                        f'EventLoop: busy wait detected: rule "{self._name(rule)}" '
                        f"is still interested after {iterations + 1} iterations"
                    )
                iterations += 1
                fired = True
                rule.callback()
            if fired:
                return True
        return False

    def wait_next_event(self, timeout_ms: int) -> Result:
        """Serve at most one rule, waiting up to ``timeout_ms`` (negative: forever)."""
        if self._run_tasks():
            return Result.SUCCESS

        masks: list[int] = []
        something_to_poll = False
        for rule in list(self._fd_rules):
            assert rule.fd is not None
            if rule.cancel_requested:
                self._fd_rules.remove(rule)
                continue
            if (rule.direction is Direction.IN and rule.fd.eof()) or rule.fd.closed():
                rule.on_cancel()
                self._fd_rules.remove(rule)
                continue
            if rule.interest():
                masks.append(int(rule.direction))
                something_to_poll = True
            else:
                masks.append(0)

        if not something_to_poll:
            return Result.EXIT

        rules = list(self._fd_rules)
        combined: dict[int, int] = {}
        for rule, mask in zip(rules, masks):
            assert rule.fd is not None
            fd_num = rule.fd.fd_num()
            combined[fd_num] = combined.get(fd_num, 0) | mask

        poller = select.poll()
        for fd_num, mask in combined.items():
            poller.register(fd_num, mask)
        try:
            events = poller.poll(timeout_ms)
        except OSError as exc:
            raise UnixError("poll", exc.errno or 0) from exc
        if not events:
            return Result.TIMEOUT

        revents_by_fd = dict(events)
        for rule, mask in zip(rules, masks):
            assert rule.fd is not None
            revents = revents_by_fd.get(rule.fd.fd_num(), 0) & (mask | _ALWAYS_POLLED)

            if revents & (select.POLLERR | select.POLLNVAL):
                self._report_fd_error(rule)
                rule.on_error()
                rule.on_cancel()
                self._fd_rules.remove(rule)
                continue

            ready = bool(revents & mask)
            hangup = bool(revents & select.POLLHUP)
            if hangup and ((mask and not ready) or rule.direction is Direction.OUT):
                rule.on_cancel()
                self._fd_rules.remove(rule)
                continue

            if ready:
                count_before = rule.service_count()
                rule.callback()
                if (
                    count_before == rule.service_count()
                    and not rule.fd.closed()
                    and rule.interest()
                ):
                    raise RuntimeError(
                        f'EventLoop: busy wait detected: rule "{self._name(rule)}" '
                        "did not read/write fd and is still interested"
                    )
                return Result.SUCCESS

        return Result.SUCCESS
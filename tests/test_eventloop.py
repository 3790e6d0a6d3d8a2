import os

import pytest

from netstack.eventloop import Direction, EventLoop, Result
from netstack.file_descriptor import FileDescriptor


@pytest.fixture
def pipe():
    read_fd, write_fd = os.pipe()
    reader = FileDescriptor(read_fd)
    writer = FileDescriptor(write_fd)
    yield reader, writer
    for fd in (reader, writer):
        if not fd.closed():
            fd.close()


def test_categories_are_numbered_in_order():
    loop = EventLoop()
    assert loop.add_category("a") == 0
    assert loop.add_category("b") == 1


def test_category_limit():
    loop = EventLoop()
    for i in range(EventLoop.MAX_CATEGORIES):
        loop.add_category(str(i))
    with pytest.raises(RuntimeError, match="maximum categories reached"):
        loop.add_category("one too many")


def test_bad_category_id():
    loop = EventLoop()
    with pytest.raises(IndexError, match="bad category_id"):
        loop.add_task(0, lambda: None)


def test_no_rules_means_exit():
    assert EventLoop().wait_next_event(0) is Result.EXIT


def test_task_runs_while_interested():
    loop = EventLoop()
    count = []
    loop.add_task("count", lambda: count.append(1), lambda: len(count) < 3)
    assert loop.wait_next_event(0) is Result.SUCCESS
    assert len(count) == 3
    assert loop.wait_next_event(0) is Result.EXIT


def test_busy_task_detected():
    loop = EventLoop()
    loop.add_task("spin", lambda: None)
    with pytest.raises(RuntimeError, match='busy wait detected: rule "spin"'):
        loop.wait_next_event(0)


def test_cancelled_task_does_not_run():
    loop = EventLoop()
    calls = []
    handle = loop.add_task("t", lambda: calls.append(1), lambda: not calls)
    handle.cancel()
    assert loop.wait_next_event(0) is Result.EXIT
    assert calls == []


def test_read_rule_and_hangup(pipe):
    reader, writer = pipe
    loop = EventLoop()
    received = []
    cancelled = []
    loop.add_rule(
        "read",
        reader,
        Direction.IN,
        lambda: received.append(reader.read()),
        cancel=lambda: cancelled.append(True),
    )
    writer.write(b"hi")
    writer.close()
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert received == [b"hi"]
    results = [loop.wait_next_event(1000) for _ in range(3)]
    assert results[-1] is Result.EXIT
    assert cancelled == [True]


def test_timeout_when_nothing_ready(pipe):
    reader, _ = pipe
    loop = EventLoop()
    loop.add_rule("read", reader, Direction.IN, lambda: reader.read())
    assert loop.wait_next_event(0) is Result.TIMEOUT


def test_uninterested_rule_means_exit(pipe):
    reader, writer = pipe
    loop = EventLoop()
    writer.write(b"x")
    loop.add_rule("read", reader, Direction.IN, lambda: reader.read(), lambda: False)
    assert loop.wait_next_event(0) is Result.EXIT


def test_busy_fd_rule_detected(pipe):
    reader, writer = pipe
    loop = EventLoop()
    writer.write(b"x")
    loop.add_rule("lazy", reader, Direction.IN, lambda: None)
    with pytest.raises(RuntimeError, match="did not read/write fd"):
        loop.wait_next_event(1000)


def test_closed_fd_rule_is_cancelled(pipe):
    reader, _ = pipe
    loop = EventLoop()
    cancelled = []
    loop.add_rule(
        "read", reader, Direction.IN, lambda: reader.read(), cancel=lambda: cancelled.append(1)
    )
    reader.close()
    assert loop.wait_next_event(0) is Result.EXIT
    assert cancelled == [1]


def test_write_rule(pipe):
    reader, writer = pipe
    loop = EventLoop()
    pending = [b"payload"]

    def push():
        writer.write(pending.pop())

    loop.add_rule("write", writer, Direction.OUT, push, lambda: bool(pending))
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert reader.read() == b"payload"
    assert writer.write_count() == 1


def test_error_on_write_end_calls_error_and_cancel(pipe):
    reader, writer = pipe
    loop = EventLoop()
    events = []
    loop.add_rule(
        "write",
        writer,
        Direction.OUT,
        lambda: writer.write(b"x"),
        cancel=lambda: events.append("cancel"),
        error=lambda: events.append("error"),
    )
    reader.close()
    assert loop.wait_next_event(1000) is Result.SUCCESS
    assert events == ["error", "cancel"]
    assert loop.wait_next_event(0) is Result.EXIT


def test_cancelled_fd_rule_is_dropped_silently(pipe):
    reader, writer = pipe
    loop = EventLoop()
    cancelled = []
    handle = loop.add_rule(
        "read", reader, Direction.IN, lambda: reader.read(), cancel=lambda: cancelled.append(1)
    )
    writer.write(b"x")
    handle.cancel()
    assert loop.wait_next_event(0) is Result.EXIT
    assert cancelled == []
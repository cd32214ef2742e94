import threading
from datetime import timedelta

import pytest

from tsddlib.context import AppContext, OnlineStatus
from tsddlib.messages import MessageResp


@pytest.fixture
def ctx():
    c = AppContext()
    yield c
    c.close()


def test_value_round_trip(ctx):
    ctx.set_value({"a": 1}, "k")
    assert ctx.value("k") == {"a": 1}


def test_missing_value_is_none(ctx):
    assert ctx.value("absent") is None


def test_set_value_overwrites(ctx):
    ctx.set_value(1, "k")
    ctx.set_value(2, "k")
    assert ctx.value("k") == 2


def test_memory_cache_is_shared(ctx):
    cache = ctx.memory_cache()
    cache.set("key", "v")
    assert ctx.memory_cache() is cache
    assert ctx.memory_cache().get("key") == "v"


def test_online_status_listeners_in_order(ctx):
    seen = []
    first = lambda statuses: seen.append(("first", statuses))
    second = lambda statuses: seen.append(("second", statuses))
    ctx.add_online_status_listener(first)
    ctx.add_online_status_listener(second)
    listeners = ctx.get_all_online_status_listeners()
    assert listeners == [first, second]
    status = [OnlineStatus(uid="u1", online=True)]
    for listener in listeners:
        listener(status)
    assert [name for name, _ in seen] == ["first", "second"]


def test_event_listeners_by_event(ctx):
    a = lambda data, commit: commit(None)
    b = lambda data, commit: commit(None)
    ctx.add_event_listener("group.create", a)
    ctx.add_event_listener("group.create", b)
    ctx.add_event_listener("user.register", b)
    assert ctx.get_event_listeners("group.create") == [a, b]
    assert ctx.get_event_listeners("user.register") == [b]
    assert ctx.get_event_listeners("unknown") == []


def test_contexts_do_not_share_listeners():
    one, two = AppContext(), AppContext()
    one.add_messages_listener(lambda messages: None)
    received = []
    two.add_messages_listener(received.append)
    one.notify_messages_listeners([MessageResp(channel_id="x")])
    assert received == []


def test_notify_messages_listeners(ctx):
    received = []
    ctx.add_messages_listener(lambda messages: received.append(("a", messages)))
    ctx.add_messages_listener(lambda messages: received.append(("b", messages)))
    messages = [MessageResp(channel_id="g1")]
    ctx.notify_messages_listeners(messages)
    assert received == [("a", messages), ("b", messages)]


def test_schedule_repeats_until_closed():
    ctx = AppContext()
    calls = []
    done = threading.Event()

    def tick():
        calls.append(1)
        if len(calls) >= 3:
            done.set()

    task = ctx.schedule(timedelta(milliseconds=10), tick)
    assert done.wait(5)
    ctx.close()
    assert task.active is False
    assert len(calls) >= 3


def test_scheduled_task_stop(ctx):
    ran = threading.Event()
    task = ctx.schedule(0.01, ran.set)
    assert ran.wait(5)
    task.stop()
    assert task.active is False


def test_schedule_rejects_non_positive_interval(ctx):
    with pytest.raises(ValueError):
        ctx.schedule(0, lambda: None)


def test_context_manager_closes_tasks():
    with AppContext() as ctx:
        task = ctx.schedule(0.01, lambda: None)
    assert task.active is False
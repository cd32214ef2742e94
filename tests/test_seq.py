import threading

import pytest

from tsddlib.seq import SeqRecord, SequenceGenerator, SqliteSeqStore


@pytest.fixture
def store():
    s = SqliteSeqStore()
    yield s
    s.close()


def test_query_missing_returns_none(store):
    assert store.query("seq:nothing") is None


def test_add_then_query(store):
    store.add_or_update(SeqRecord(key="seq:a", min_seq=50, step=7))
    assert store.query("seq:a") == SeqRecord(key="seq:a", min_seq=50, step=7)


def test_update_replaces_only_min_seq(store):
    store.add_or_update(SeqRecord(key="seq:a", min_seq=50, step=7))
    store.add_or_update(SeqRecord(key="seq:a", min_seq=90, step=3))
    assert store.query("seq:a") == SeqRecord(key="seq:a", min_seq=90, step=7)


def test_first_value_and_reservation(store):
    gen = SequenceGenerator(store)
    assert gen.gen_seq("user") == 1000001
    assert store.query("seq:user").min_seq == 1001000


def test_values_increase_by_one(store):
    gen = SequenceGenerator(store, step=5)
    values = [gen.gen_seq("group") for _ in range(12)]
    assert values == list(range(values[0], values[0] + 12))


def test_flags_are_independent(store):
    gen = SequenceGenerator(store)
    a = gen.gen_seq("a")
    b = gen.gen_seq("b")
    assert a == b
    assert gen.gen_seq("a") == a + 1


def test_reservation_advances_when_block_used(store):
    gen = SequenceGenerator(store, step=3)
    values = [gen.gen_seq("x") for _ in range(4)]
    assert store.query("seq:x").min_seq >= values[-1]


def test_restart_continues_past_reserved_bound(store):
    first = SequenceGenerator(store, step=10)
    issued = [first.gen_seq("friend") for _ in range(3)]
    reserved = store.query("seq:friend").min_seq
    second = SequenceGenerator(store, step=10)
    nxt = second.gen_seq("friend")
    assert nxt == reserved + 1
    assert nxt > max(issued)
    assert store.query("seq:friend").min_seq == reserved + 10


def test_concurrent_values_are_unique(store):
    gen = SequenceGenerator(store, step=7)
    results = []
    lock = threading.Lock()

    def work():
        local = [gen.gen_seq("c") for _ in range(50)]
        with lock:
            results.extend(local)

    threads = [threading.Thread(target=work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(set(results)) == len(results) == 200
    assert sorted(results) == list(range(min(results), min(results) + 200))
    assert store.query("seq:c").min_seq >= max(results)


def test_non_positive_step_rejected(store):
    with pytest.raises(ValueError):
        SequenceGenerator(store, step=0)
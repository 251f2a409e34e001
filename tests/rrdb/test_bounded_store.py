from __future__ import annotations

import random
import threading

import pytest

from kvcache.db import (
    EmptyKeyError,
    IndexOutOfRangeError,
    Iterable,
    NotFoundError,
)
from kvcache.rrdb import BoundedStore


def test_store_satisfies_iterable_contract() -> None:
    assert isinstance(BoundedStore(1), Iterable)


def test_read_write_delete_round_trip() -> None:
    store = BoundedStore(10)

    with pytest.raises(NotFoundError):
        store.get("alpha")

    store.insert("alpha", b"\x01\x02")
    assert store.get("alpha") == b"\x01\x02"

    store.delete("alpha")
    with pytest.raises(NotFoundError):
        store.get("alpha")


def test_delete_is_idempotent() -> None:
    store = BoundedStore(2)
    store.delete("missing")
    store.insert("a", b"1")
    store.delete("a")
    store.delete("a")
    assert store.size() == 0


def test_empty_key_is_rejected_without_mutation() -> None:
    store = BoundedStore(2)
    store.insert("a", b"1")
    with pytest.raises(EmptyKeyError):
        store.insert("", b"x")
    assert store.size() == 1
    assert store.get("a") == b"1"


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        BoundedStore(0)


def test_size_never_exceeds_capacity() -> None:
    rng = random.Random(7)
    for capacity in (1, 2, 5, 17):
        store = BoundedStore(capacity, rng=random.Random(capacity))
        for _ in range(200):
            key = f"k{rng.randrange(40)}"
            if rng.random() < 0.2:
                store.delete(key)
            else:
                store.insert(key, key.encode())
            assert 0 <= store.size() <= capacity


def test_overflow_keeps_exactly_capacity_entries() -> None:
    capacity = 8
    store = BoundedStore(capacity)
    inserted = {f"key-{i}": bytes([i]) for i in range(3 * capacity)}
    for key, value in inserted.items():
        store.insert(key, value)

    assert store.size() == capacity
    it = store.iterator()
    survivors = dict(it)
    assert len(survivors) == capacity
    for key, value in survivors.items():
        assert inserted[key] == value


def test_capacity_one_keeps_exactly_one_of_two() -> None:
    store = BoundedStore(1)
    store.insert("a", b"\x01")
    store.insert("b", b"\x02")

    assert store.size() == 1
    results = {}
    missing = []
    for key in ("a", "b"):
        try:
            results[key] = store.get(key)
        except NotFoundError:
            missing.append(key)
    assert len(missing) == 1
    ((key, value),) = results.items()
    assert value == {"a": b"\x01", "b": b"\x02"}[key]


def test_overwriting_existing_key_when_full_does_not_evict() -> None:
    store = BoundedStore(3)
    for key in ("a", "b", "c"):
        store.insert(key, b"old")
    store.insert("b", b"new")

    assert store.size() == 3
    assert store.get("a") == b"old"
    assert store.get("b") == b"new"
    assert store.get("c") == b"old"


def test_eviction_choice_follows_injected_rng() -> None:
    # Two stores fed the same seed evict the same victims.
    first = BoundedStore(4, rng=random.Random(1234))
    second = BoundedStore(4, rng=random.Random(1234))
    for i in range(20):
        first.insert(f"k{i}", b"v")
        second.insert(f"k{i}", b"v")
    assert sorted(dict(first.iterator())) == sorted(dict(second.iterator()))


def test_eviction_is_not_fifo() -> None:
    # With a uniform pick the oldest key cannot survive every round by chance
    # across many trials, nor be evicted every time.
    oldest_evicted = 0
    trials = 200
    for seed in range(trials):
        store = BoundedStore(4, rng=random.Random(seed))
        for key in ("a", "b", "c", "d", "e"):
            store.insert(key, b"v")
        if "a" not in store:
            oldest_evicted += 1
    assert 0 < oldest_evicted < trials


def test_iterator_yields_every_entry_once() -> None:
    store = BoundedStore(16)
    expected = {f"{i}": bytes([i, i]) for i in range(10)}
    for key, value in expected.items():
        store.insert(key, value)

    it = store.iterator()
    seen = {}
    while it.next():
        key = it.key()
        assert key not in seen
        seen[key] = it.value()
    assert seen == expected


def test_iterator_is_a_snapshot() -> None:
    store = BoundedStore(4)
    store.insert("a", b"1")
    store.insert("b", b"2")

    it = store.iterator()
    store.insert("c", b"3")
    store.delete("a")

    assert dict(it) == {"a": b"1", "b": b"2"}
    assert store.size() == 2


def test_iterator_state_machine() -> None:
    store = BoundedStore(2)
    store.insert("a", b"1")
    it = store.iterator()

    with pytest.raises(IndexOutOfRangeError):
        it.key()
    with pytest.raises(IndexOutOfRangeError):
        it.value()

    assert it.next() is True
    assert it.key() == "a"
    assert it.value() == b"1"

    assert it.next() is False
    with pytest.raises(IndexOutOfRangeError):
        it.key()
    with pytest.raises(IndexOutOfRangeError):
        it.value()
    assert it.next() is False


def test_iterator_over_empty_store() -> None:
    it = BoundedStore(1).iterator()
    assert it.next() is False
    with pytest.raises(IndexOutOfRangeError):
        it.key()


def test_concurrent_writers_respect_capacity() -> None:
    capacity = 32
    store = BoundedStore(capacity)
    errors: list[BaseException] = []

    def writer(worker: int) -> None:
        try:
            for i in range(500):
                store.insert(f"w{worker}-{i}", b"x")
                assert store.size() <= capacity
                if i % 7 == 0:
                    store.delete(f"w{worker}-{i - 1}")
                store.iterator()
        except BaseException as exc:  # pragma: no cover - surfaced below
            errors.append(exc)

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert not errors
    assert store.size() <= capacity
    assert len(dict(store.iterator())) == store.size()

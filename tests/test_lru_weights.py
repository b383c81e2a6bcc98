"""Weighted capacity, oversize items and in-place modification."""

from __future__ import annotations

import random

import pytest

from writeback_lru import LRUCache, MappingBackend
from writeback_lru.backends.recording import RecordingBackend


class WeightedBackend(RecordingBackend):
    """Recording backend whose items weigh their ``len()``."""

    def weight(self, index, item):
        return len(item)


def test_weight_sum_tracks_item_weights():
    backend = WeightedBackend()
    cache = LRUCache(backend, capacity=10)
    cache.insert("a", "xxx")
    cache.insert("b", "yyyy")
    assert cache.weight_sum == 7
    cache.insert("c", "zzzz")
    assert [c["index"] for c in backend.calls] == ["a"]
    assert cache.weight_sum == 8
    cache.check_invariants()


def test_heavy_insert_evicts_several_in_lru_order():
    backend = WeightedBackend()
    cache = LRUCache(backend, capacity=6)
    cache.insert("a", "x")
    cache.insert("b", "xx")
    cache.insert("c", "xxx")
    cache.insert("d", "xxxxx")
    assert [c["index"] for c in backend.calls] == ["a", "b", "c"]
    assert cache.keys_lru_order() == ["d"]


def test_oversize_item_is_admitted_alone():
    """An item heavier than capacity empties the cache and is still cached."""
    backend = WeightedBackend()
    cache = LRUCache(backend, capacity=3)
    cache.insert("a", "x")
    cache.insert("b", "x")
    cache.insert("big", "xxxxxx")
    assert [c["index"] for c in backend.calls] == ["a", "b"]
    assert cache.keys_lru_order() == ["big"]
    assert cache.weight_sum == 6
    cache.check_invariants()

    cache.insert("c", "x")
    assert backend.calls[-1]["index"] == "big"
    assert cache.keys_lru_order() == ["c"]
    cache.check_invariants()


def test_oversize_item_into_empty_cache():
    backend = WeightedBackend()
    cache = LRUCache(backend, capacity=1)
    cache.insert("big", "xxxx")
    assert len(cache) == 1
    assert backend.calls == []
    cache.insert("big2", "yyyy")
    assert [c["index"] for c in backend.calls] == ["big"]


def test_zero_weight_items_do_not_count():
    backend = MappingBackend(weigher=lambda index, item: 0)
    cache = LRUCache(backend, capacity=1)
    for i in range(5):
        cache.insert(i, i)
    assert len(cache) == 5
    assert cache.weight_sum == 0


def test_negative_weight_rejected():
    backend = MappingBackend(weigher=lambda index, item: -1)
    cache = LRUCache(backend, capacity=1)
    with pytest.raises(ValueError, match="negative"):
        cache.insert("k", "v")
    assert len(cache) == 0


def test_backend_without_weight_counts_one_per_item():
    class Bare:
        def __init__(self):
            self.written = []

        def load(self, index):
            return None

        def write_back(self, index, item, dirty):
            self.written.append(index)

    bare = Bare()
    cache = LRUCache(bare, capacity=2)
    for i in range(3):
        cache.insert(i, str(i))
    assert bare.written == [0]
    assert cache.weight_sum == 2


def test_modify_replaces_immutable_item_and_dirties(backend):
    cache = LRUCache(backend, capacity=2)
    assert cache.get(4) == 4
    assert cache.modify(4, lambda v: v + 1) == 5
    assert cache.get(4) == 5
    cache.flush()
    assert backend.store == {4: 5}


def test_modify_missing_returns_none():
    cache = LRUCache(MappingBackend(), capacity=2)
    assert cache.modify("absent", lambda v: v) is None


def test_modify_rejects_none_result(backend):
    cache = LRUCache(backend, capacity=2)
    cache.insert("k", "v")
    with pytest.raises(ValueError):
        cache.modify("k", lambda v: None)
    assert cache.peek("k") == "v"


def test_modify_growth_evicts_others_not_itself():
    backend = WeightedBackend()
    cache = LRUCache(backend, capacity=4)
    cache.insert("a", "x")
    cache.insert("b", "x")
    cache.insert("c", "x")
    cache.modify("a", lambda v: v * 3)
    assert [c["index"] for c in backend.calls] == ["b"]
    assert cache.keys_lru_order() == ["c", "a"]
    assert cache.weight_sum == 4

    cache.modify("a", lambda v: v * 3)
    assert [c["index"] for c in backend.calls] == ["b", "c"]
    assert cache.keys_lru_order() == ["a"]
    assert cache.weight_sum == 9
    cache.check_invariants()


@pytest.mark.parametrize("seed", range(15))
def test_random_weighted_traffic_keeps_invariants(seed):
    rng = random.Random(seed)
    backend = WeightedBackend(echo=False)
    backend.store.update({i: "x" * (i % 4) for i in range(10)})
    cache = LRUCache(backend, capacity=rng.randint(1, 4))
    for step in range(200):
        key = rng.randrange(10)
        op = rng.random()
        if op < 0.4:
            cache.insert(key, "y" * rng.randint(0, 5))
        elif op < 0.8:
            cache.get(key)
        else:
            cache.modify(key, lambda v: v + "z")
        cache.check_invariants()

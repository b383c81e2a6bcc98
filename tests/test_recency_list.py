"""Tests for the arena-backed recency list."""

from __future__ import annotations

import pytest

from writeback_lru.structures import RecencyList


def _drain_heads(lst: RecencyList):
    out = []
    while True:
        handle = lst.remove_head()
        if handle is None:
            return out
        out.append(lst.slot_of(handle))


def test_promotions_reorder_removal():
    """Moving nodes to the tail changes the order heads are removed in."""
    lst = RecencyList()
    handles = {value: lst.push_tail(value) for value in [1, 2, 3, 4, 5]}
    lst.move_to_tail(handles[3])
    lst.move_to_tail(handles[1])
    lst.move_to_tail(handles[1])
    assert _drain_heads(lst) == [2, 4, 5, 3, 1]
    assert len(lst) == 0
    assert lst.head is None and lst.tail is None


def test_move_tail_is_noop():
    lst = RecencyList()
    a = lst.push_tail(10)
    b = lst.push_tail(20)
    lst.move_to_tail(b)
    assert list(lst) == [a, b]
    assert lst.check_links() is None


def test_move_head_updates_head():
    lst = RecencyList()
    a = lst.push_tail(10)
    b = lst.push_tail(20)
    c = lst.push_tail(30)
    lst.move_to_tail(a)
    assert lst.head == b
    assert lst.tail == a
    assert [lst.slot_of(h) for h in lst] == [20, 30, 10]
    assert lst.check_links() is None
    lst.move_to_tail(c)
    assert [lst.slot_of(h) for h in lst] == [20, 10, 30]


def test_handles_survive_unrelated_removals():
    lst = RecencyList()
    a = lst.push_tail(1)
    b = lst.push_tail(2)
    c = lst.push_tail(3)
    assert lst.remove_head() == a
    lst.move_to_tail(b)
    assert lst.slot_of(b) == 2
    assert lst.slot_of(c) == 3
    assert [lst.slot_of(h) for h in lst] == [3, 2]


def test_removed_handles_are_recycled():
    lst = RecencyList()
    a = lst.push_tail(1)
    lst.push_tail(2)
    lst.remove(a)
    assert not lst.is_linked(a)
    again = lst.push_tail(7)
    assert again == a
    assert lst.slot_of(again) == 7
    assert [lst.slot_of(h) for h in lst] == [2, 7]


def test_remove_middle_node():
    lst = RecencyList()
    lst.push_tail(1)
    mid = lst.push_tail(2)
    lst.push_tail(3)
    lst.remove(mid)
    assert [lst.slot_of(h) for h in lst] == [1, 3]
    assert lst.check_links() is None


def test_unlinked_handle_rejected():
    lst = RecencyList()
    a = lst.push_tail(1)
    lst.remove(a)
    with pytest.raises(KeyError):
        lst.move_to_tail(a)
    with pytest.raises(KeyError):
        lst.remove(a)


def test_remove_head_on_empty_list():
    assert RecencyList().remove_head() is None

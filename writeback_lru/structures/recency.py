"""Recency ordering for resident slots.

The list is kept in an arena: every node lives at an integer position in three
parallel arrays (slot id, previous, next). A node handle is that integer
position, so handles stay valid across any number of promotions and
unrelated removals, and no node ever references another by ownership.

The head of the list is the least-recently-used node and the tail the
most-recently-used one.
"""

from __future__ import annotations

from typing import Iterator, List, Optional

_NIL = -1


class RecencyList:
    """Doubly linked list of slot ids with O(1) promotion and head removal.

    Handles returned by :meth:`push_tail` remain valid until the node they
    refer to is removed. A removed handle may still be passed to
    :meth:`slot_of` until the next :meth:`push_tail`, which may recycle it.
    """

    def __init__(self) -> None:
        self._slot: List[int] = []
        self._prev: List[int] = []
        self._next: List[int] = []
        self._linked: List[bool] = []
        self._free: List[int] = []
        self._head = _NIL
        self._tail = _NIL
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[int]:
        """Yield node handles from head (LRU) to tail (MRU)."""
        node = self._head
        while node != _NIL:
            yield node
            node = self._next[node]

    @property
    def head(self) -> Optional[int]:
        return None if self._head == _NIL else self._head

    @property
    def tail(self) -> Optional[int]:
        return None if self._tail == _NIL else self._tail

    def slot_of(self, handle: int) -> int:
        """Return the slot id stored in the node behind ``handle``."""
        return self._slot[handle]

    def is_linked(self, handle: int) -> bool:
        return 0 <= handle < len(self._linked) and self._linked[handle]

    def push_tail(self, slot_id: int) -> int:
        """Append a node for ``slot_id`` at the tail and return its handle."""
        if self._free:
            handle = self._free.pop()
            self._slot[handle] = slot_id
        else:
            handle = len(self._slot)
            self._slot.append(slot_id)
            self._prev.append(_NIL)
            self._next.append(_NIL)
            self._linked.append(False)
        self._link_tail(handle)
        self._size += 1
        return handle

    def move_to_tail(self, handle: int) -> None:
        """Promote ``handle`` to most-recently-used; no-op if already tail."""
        if not self._linked[handle]:
            raise KeyError(f"recency node {handle} is not linked")
        if handle == self._tail:
            return
        self._unlink(handle)
        self._link_tail(handle)

    def remove_head(self) -> Optional[int]:
        """Unlink the least-recently-used node and return its handle."""
        if self._head == _NIL:
            return None
        handle = self._head
        self.remove(handle)
        return handle

    def remove(self, handle: int) -> None:
        """Unlink an arbitrary node and release its handle for reuse."""
        if not self._linked[handle]:
            raise KeyError(f"recency node {handle} is not linked")
        self._unlink(handle)
        self._free.append(handle)
        self._size -= 1

    def _link_tail(self, handle: int) -> None:
        self._prev[handle] = self._tail
        self._next[handle] = _NIL
        if self._tail == _NIL:
            self._head = handle
        else:
            self._next[self._tail] = handle
        self._tail = handle
        self._linked[handle] = True

    def _unlink(self, handle: int) -> None:
        prev, nxt = self._prev[handle], self._next[handle]
        if prev == _NIL:
            self._head = nxt
        else:
            self._next[prev] = nxt
        if nxt == _NIL:
            self._tail = prev
        else:
            self._prev[nxt] = prev
        self._prev[handle] = _NIL
        self._next[handle] = _NIL
        self._linked[handle] = False

    def check_links(self) -> Optional[str]:
        """Return a description of the first structural defect, if any."""
        seen = 0
        prev = _NIL
        node = self._head
        while node != _NIL:
            if not self._linked[node]:
                return f"node {node} reachable but not marked linked"
            if self._prev[node] != prev:
                return f"node {node} has prev {self._prev[node]}, expected {prev}"
            seen += 1
            if seen > self._size:
                return "cycle detected in recency list"
            prev, node = node, self._next[node]
        if prev != self._tail:
            return f"tail is {self._tail}, last reachable node is {prev}"
        if seen != self._size:
            return f"list length {self._size} but {seen} nodes reachable"
        return None

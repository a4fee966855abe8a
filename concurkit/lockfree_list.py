"""A sorted singly linked list with lock-free insert, delete and lookup.

Deletion first marks a node's ``next`` link (logical removal) and then
unlinks it. Three search strategies differ in how they clean up marked
nodes while traversing.
"""

from __future__ import annotations

import threading
from typing import Callable, Generic, Optional, Tuple, TypeVar

__all__ = ["Node", "Cursor", "List"]

K = TypeVar("K")
V = TypeVar("V")


class _CursorRetry(Exception):
    """The cursor lost a race and the operation must restart from the head."""


class _Link(Generic[K, V]):
    """An atomic reference to a node together with a one-bit deletion mark."""

    __slots__ = ("_node", "_mark", "_mutex")

    def __init__(self, node: Optional[Node[K, V]] = None, mark: int = 0) -> None:
        self._node = node
        self._mark = mark
        self._mutex = threading.Lock()

    def load(self) -> Tuple[Optional[Node[K, V]], int]:
        with self._mutex:
            return self._node, self._mark

    def store(self, node: Optional[Node[K, V]], mark: int = 0) -> None:
        with self._mutex:
            self._node = node
            self._mark = mark

    def compare_exchange(
        self,
        expected: Optional[Node[K, V]],
        expected_mark: int,
        new: Optional[Node[K, V]],
        new_mark: int = 0,
    ) -> bool:
        with self._mutex:
            if self._node is expected and self._mark == expected_mark:
                self._node = new
                self._mark = new_mark
                return True
            return False

    def fetch_mark(self) -> Tuple[Optional[Node[K, V]], int]:
        """Set the mark; return the link as it was before."""
        with self._mutex:
            old = (self._node, self._mark)
            self._mark = 1
            return old


class Node(Generic[K, V]):
    """A list node holding a key and its value."""

    __slots__ = ("key", "value", "next")

    def __init__(self, key: K, value: V) -> None:
        self.key = key
        self.value = value
        self.next: _Link[K, V] = _Link()

    def into_value(self) -> V:
        """Return the node's value."""
        return self.value

    def __repr__(self) -> str:
        return f"Node({self.key!r}, {self.value!r})"


class Cursor(Generic[K, V]):
    """A position in the list: the link ``prev`` that points at node ``curr``.

    Methods that can lose a race raise an internal retry error; the list
    operations catch it and restart from the head.
    """

    def __init__(self, prev: _Link[K, V], curr: Optional[Node[K, V]]) -> None:
        self._prev = prev
        self._curr = curr

    def curr(self) -> Optional[Node[K, V]]:
        """The current node, or None at the end of the list."""
        return self._curr

    def find_harris(self, key: K) -> bool:
        """Move to ``key``, unlinking the whole chain of marked nodes before it."""
        prev_next = self._curr
        while True:
            curr = self._curr
            if curr is None:
                found = False
                break
            nxt, mark = curr.next.load()
            if mark:
                self._curr = nxt
                continue
            if curr.key < key:
                self._curr = nxt
                self._prev = curr.next
                prev_next = nxt
            elif curr.key == key:
                found = True
                break
            else:
                found = False
                break

        if prev_next is self._curr:
            return found
        if not self._prev.compare_exchange(prev_next, 0, self._curr, 0):
            raise _CursorRetry()
        return found

    def find_harris_michael(self, key: K) -> bool:
        """Move to ``key``, unlinking marked nodes one at a time."""
        while True:
            curr = self._curr
            if curr is None:
                return False
            nxt, mark = curr.next.load()
            if mark:
                if not self._prev.compare_exchange(curr, 0, nxt, 0):
                    raise _CursorRetry()
                self._curr = nxt
                continue
            if curr.key < key:
                self._prev = curr.next
                self._curr = nxt
            elif curr.key == key:
                return True
            else:
                return False

    def find_harris_herlihy_shavit(self, key: K) -> bool:
        """Move to ``key`` without any cleanup; never needs a retry."""
        while True:
            curr = self._curr
            if curr is None:
                return False
            if curr.key < key:
                self._prev = curr.next
                self._curr = curr.next.load()[0]
            elif curr.key == key:
                return curr.next.load()[1] == 0
            else:
                return False

    def lookup(self) -> V:
        """The value at the current node."""
        if self._curr is None:
            raise RuntimeError("cursor is at the end of the list")
        return self._curr.value

    def insert(self, node: Node[K, V]) -> None:
        """Insert ``node`` between the previous and the current node."""
        node.next.store(self._curr, 0)
        if not self._prev.compare_exchange(self._curr, 0, node, 0):
            raise _CursorRetry()
        self._curr = node

    def delete(self) -> V:
        """Delete the current node and return its value."""
        curr = self._curr
        if curr is None:
            raise RuntimeError("cursor is at the end of the list")
        nxt, mark = curr.next.fetch_mark()
        if mark:
            raise _CursorRetry()
        self._prev.compare_exchange(curr, 0, nxt, 0)
        self._curr = nxt
        return curr.value

    def copy(self) -> Cursor[K, V]:
        """Return an independent cursor at the same position."""
        return Cursor(self._prev, self._curr)

    def __repr__(self) -> str:
        return f"Cursor(curr={self._curr!r})"


_Finder = Callable[[Cursor, object], bool]


class List(Generic[K, V]):
    """A sorted lock-free singly linked list mapping keys to values."""

    def __init__(self) -> None:
        self._head: _Link[K, V] = _Link()

    def head(self) -> Cursor[K, V]:
        """A cursor at the start of the list."""
        return Cursor(self._head, self._head.load()[0])

    def _find(self, key: K, find: _Finder) -> Tuple[bool, Cursor[K, V]]:
        while True:
            cursor = self.head()
            try:
                return find(cursor, key), cursor
            except _CursorRetry:
                continue

    def _lookup(self, key: K, find: _Finder) -> Optional[V]:
        found, cursor = self._find(key, find)
        return cursor.lookup() if found else None

    def _insert(self, key: K, value: V, find: _Finder) -> bool:
        node = Node(key, value)
        while True:
            found, cursor = self._find(node.key, find)
            if found:
                return False
            try:
                cursor.insert(node)
                return True
            except _CursorRetry:
                continue

    def _delete(self, key: K, find: _Finder) -> Optional[V]:
        while True:
            found, cursor = self._find(key, find)
            if not found:
                return None
            try:
                return cursor.delete()
            except _CursorRetry:
                continue

    def harris_lookup(self, key: K) -> Optional[V]:
        """Look up ``key`` with the Harris strategy."""
        return self._lookup(key, Cursor.find_harris)

    def harris_insert(self, key: K, value: V) -> bool:
        """Insert with the Harris strategy; False if the key is present."""
        return self._insert(key, value, Cursor.find_harris)

    def harris_delete(self, key: K) -> Optional[V]:
        """Delete ``key`` with the Harris strategy; return its value."""
        return self._delete(key, Cursor.find_harris)

    def harris_michael_lookup(self, key: K) -> Optional[V]:
        """Look up ``key`` with the Harris-Michael strategy."""
        return self._lookup(key, Cursor.find_harris_michael)

    def harris_michael_insert(self, key: K, value: V) -> bool:
        """Insert with the Harris-Michael strategy; False if the key is present."""
        return self._insert(key, value, Cursor.find_harris_michael)

    def harris_michael_delete(self, key: K) -> Optional[V]:
        """Delete ``key`` with the Harris-Michael strategy; return its value."""
        return self._delete(key, Cursor.find_harris_michael)

    def harris_herlihy_shavit_lookup(self, key: K) -> Optional[V]:
        """Look up ``key`` with the Harris-Herlihy-Shavit strategy."""
        return self._lookup(key, Cursor.find_harris_herlihy_shavit)

    def __repr__(self) -> str:
        return "List()"
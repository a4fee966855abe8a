"""A concurrent sorted set on a singly linked list with optimistic per-link locking.

Every link is protected by a sequence lock. Readers traverse without blocking
writers and validate what they read; writers upgrade a validated read into
the writer's lock.
"""

from __future__ import annotations

from typing import Generic, Optional, Tuple, TypeVar

from .seqlock import ReadGuard, SeqLock, UpgradeError

__all__ = ["IterationInvalidated", "OptimisticFineGrainedListSet", "OptimisticIter"]

T = TypeVar("T")


class IterationInvalidated(Exception):
    """The list changed under an iterator; the iteration must be restarted."""


class _Retry(Exception):
    """A traversal lost a race and must restart from the head."""


class _Node(Generic[T]):
    __slots__ = ("data", "next")

    def __init__(self, data: T, nxt: Optional[_Node[T]]) -> None:
        self.data = data
        self.next: SeqLock[Optional[_Node[T]]] = SeqLock(nxt)


class _Cursor(Generic[T]):
    """A read guard on the link that points at ``curr``."""

    __slots__ = ("prev", "curr")

    def __init__(self, prev: ReadGuard[Optional[_Node[T]]], curr: Optional[_Node[T]]) -> None:
        self.prev = prev
        self.curr = curr

    def _reload(self) -> None:
        self.prev.restart()
        self.curr = self.prev.value
        if self.curr is None:
            raise _Retry()

    def find(self, key: T) -> bool:
        """Move to the position of ``key``; return whether it is present."""
        while (node := self.curr) is not None:
            if not self.prev.validate():
                self._reload()
                continue
            if node.data == key:
                return True
            if node.data > key:
                return False
            old, self.prev = self.prev, node.next.read_lock()
            self.curr = self.prev.value
            old.finish()
        if self.prev.validate():
            return False
        raise _Retry()


class OptimisticFineGrainedListSet(Generic[T]):
    """A sorted set whose readers never block its writers."""

    def __init__(self) -> None:
        self._head: SeqLock[Optional[_Node[T]]] = SeqLock(None)

    def _head_cursor(self) -> _Cursor[T]:
        prev = self._head.read_lock()
        return _Cursor(prev, prev.value)

    def _find(self, key: T) -> Tuple[bool, _Cursor[T]]:
        cursor = self._head_cursor()
        try:
            found = cursor.find(key)
        except _Retry:
            cursor.prev.finish()
            raise
        if cursor.prev.validate():
            return found, cursor
        cursor.prev.finish()
        raise _Retry()

    def contains(self, key: T) -> bool:
        """Whether ``key`` is in the set."""
        while True:
            try:
                found, cursor = self._find(key)
            except _Retry:
                continue
            if cursor.prev.finish():
                return found

    def __contains__(self, key: object) -> bool:
        return self.contains(key)  # type: ignore[arg-type]

    def insert(self, key: T) -> bool:
        """Add ``key``; return False if it was already present."""
        while True:
            try:
                found, cursor = self._find(key)
            except _Retry:
                continue
            if found:
                cursor.prev.finish()
                return False
            try:
                handle = cursor.prev.upgrade()
            except UpgradeError:
                continue
            with handle:
                handle.value = _Node(key, cursor.curr)
            return True

    def remove(self, key: T) -> bool:
        """Remove ``key``; return False if it was absent."""
        while True:
            try:
                found, cursor = self._find(key)
            except _Retry:
                continue
            if not found:
                cursor.prev.finish()
                return False
            try:
                handle = cursor.prev.upgrade()
            except UpgradeError:
                continue
            node = cursor.curr
            assert node is not None
            with handle, node.next.write_lock() as curr_handle:
                nxt = curr_handle.value
                curr_handle.value = None
                handle.value = nxt
            return True

    def iter(self) -> OptimisticIter[T]:
        """An iterator over all elements in order.

        It raises IterationInvalidated when a concurrent write invalidates
        its position; the caller must then start a new iteration.
        """
        return OptimisticIter(self._head_cursor())

    def __repr__(self) -> str:
        return "OptimisticFineGrainedListSet()"


class OptimisticIter(Generic[T]):
    """An optimistic, validating iterator over an OptimisticFineGrainedListSet."""

    def __init__(self, cursor: _Cursor[T]) -> None:
        self._cursor = cursor

    def __iter__(self) -> OptimisticIter[T]:
        return self

    def __next__(self) -> T:
        cursor = self._cursor
        if not cursor.prev.validate():
            raise IterationInvalidated("the list changed during iteration")
        node = cursor.curr
        if node is None:
            raise StopIteration
        new = node.next.read_lock()
        data = node.data
        old, cursor.prev = cursor.prev, new
        cursor.curr = new.value
        if not old.validate():
            cursor.prev = old
            cursor.curr = old.value
            new.finish()
            raise IterationInvalidated("the list changed during iteration")
        old.finish()
        return data

    def __repr__(self) -> str:
        return "OptimisticIter()"
"""A concurrent sorted set on a singly linked list with hand-over-hand locking."""

from __future__ import annotations

import threading
from typing import Generic, Iterator, Optional, Tuple, TypeVar

__all__ = ["FineGrainedListSet"]

T = TypeVar("T")


class _Link(Generic[T]):
    """A pointer to the next node, guarded by its own mutex."""

    __slots__ = ("node", "mutex")

    def __init__(self, node: Optional[_Node[T]] = None) -> None:
        self.node = node
        self.mutex = threading.Lock()


class _Node(Generic[T]):
    __slots__ = ("data", "next")

    def __init__(self, data: T, nxt: Optional[_Node[T]]) -> None:
        self.data = data
        self.next: _Link[T] = _Link(nxt)


class FineGrainedListSet(Generic[T]):
    """A sorted set where each link has its own lock (lock coupling)."""

    def __init__(self) -> None:
        self._head: _Link[T] = _Link()

    def _find(self, key: T) -> Tuple[bool, _Link[T]]:
        """Lock-couple to the position of ``key``.

        Returns whether it was found and the link pointing at that position,
        which is left locked for the caller to release.
        """
        link = self._head
        link.mutex.acquire()
        while (node := link.node) is not None:
            if node.data == key:
                return True, link
            if node.data > key:
                return False, link
            nxt = node.next
            nxt.mutex.acquire()
            link.mutex.release()
            link = nxt
        return False, link

    def contains(self, key: T) -> bool:
        """Whether ``key`` is in the set."""
        found, link = self._find(key)
        link.mutex.release()
        return found

    def __contains__(self, key: object) -> bool:
        return self.contains(key)  # type: ignore[arg-type]

    def insert(self, key: T) -> bool:
        """Add ``key``; return False if it was already present."""
        found, link = self._find(key)
        try:
            if found:
                return False
            link.node = _Node(key, link.node)
            return True
        finally:
            link.mutex.release()

    def remove(self, key: T) -> bool:
        """Remove ``key``; return False if it was absent."""
        found, link = self._find(key)
        try:
            if not found:
                return False
            node = link.node
            assert node is not None
            with node.next.mutex:
                link.node = node.next.node
            return True
        finally:
            link.mutex.release()

    def __iter__(self) -> Iterator[T]:
        """Visit all elements in order, holding the lock just ahead of the cursor."""
        link = self._head
        link.mutex.acquire()
        try:
            while (node := link.node) is not None:
                nxt = node.next
                nxt.mutex.acquire()
                link.mutex.release()
                link = nxt
                yield node.data
        finally:
            link.mutex.release()

    def __repr__(self) -> str:
        return f"FineGrainedListSet({list(self)!r})"
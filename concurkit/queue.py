"""Michael-Scott lock-free queue, usable with any number of producers and consumers."""

from __future__ import annotations

from typing import Generic, Optional, Tuple, TypeVar

from .locks import _Atomic, _Backoff

__all__ = ["Queue"]

T = TypeVar("T")

_EMPTY = object()


class _Node(Generic[T]):
    __slots__ = ("data", "next")

    def __init__(self, data: object) -> None:
        self.data = data
        self.next: _Atomic[Optional[_Node[T]]] = _Atomic(None)


class Queue(Generic[T]):
    """A FIFO queue built on a singly linked list with a sentinel node at the front.

    The tail pointer may lag behind the real tail; operations help move it forward.
    """

    def __init__(self) -> None:
        sentinel: _Node[T] = _Node(_EMPTY)
        self._head: _Atomic[_Node[T]] = _Atomic(sentinel)
        self._tail: _Atomic[_Node[T]] = _Atomic(sentinel)

    def push(self, t: T) -> None:
        """Add ``t`` to the back of the queue."""
        new: _Node[T] = _Node(t)
        while True:
            tail = self._tail.load()
            nxt = tail.next.load()
            if nxt is not None:
                # The tail is stale; help move it forward.
                self._tail.compare_exchange(tail, nxt)
                continue
            if tail.next.compare_exchange(None, new):
                self._tail.compare_exchange(tail, new)
                return

    def _take(self) -> Tuple[bool, Optional[T]]:
        while True:
            head = self._head.load()
            nxt = head.next.load()
            if nxt is None:
                return False, None
            tail = self._tail.load()
            if tail is head:
                self._tail.compare_exchange(tail, nxt)
            if self._head.compare_exchange(head, nxt):
                result = nxt.data
                # ``nxt`` is the new sentinel; it no longer owns a value.
                nxt.data = _EMPTY
                return True, result  # type: ignore[return-value]

    def try_pop(self) -> Optional[T]:
        """Remove and return the front value, or None if the queue looks empty."""
        return self._take()[1]

    def pop(self) -> T:
        """Remove and return the front value, waiting until one is available."""
        backoff = _Backoff()
        while True:
            found, value = self._take()
            if found:
                return value  # type: ignore[return-value]
            backoff.snooze()

    def is_empty(self) -> bool:
        """Whether the queue is observed to hold no values."""
        return self._head.load().next.load() is None

    def __repr__(self) -> str:
        return f"Queue(empty={self.is_empty()})"
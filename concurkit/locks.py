"""Spin, ticket, CLH, MCS and MCS-parking locks.

Each lock hands out a token from ``lock()`` that must be passed back to
``unlock()``.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Generic, Optional, TypeVar

__all__ = ["SpinLock", "TicketLock", "ClhLock", "McsLock", "McsParkingLock"]

V = TypeVar("V")

_SPIN_LIMIT = 6
_YIELD_LIMIT = 10


class _Backoff:
    """Exponential backoff for spin loops: yield first, then sleep briefly."""

    __slots__ = ("_step",)

    def __init__(self) -> None:
        self._step = 0

    def snooze(self) -> None:
        if self._step <= _SPIN_LIMIT:
            time.sleep(0)
        else:
            time.sleep(1e-6 * (1 << min(self._step - _SPIN_LIMIT, _YIELD_LIMIT)))
        self._step += 1


class _Atomic(Generic[V]):
    """A cell whose read-modify-write operations are atomic."""

    __slots__ = ("_value", "_mutex")

    def __init__(self, value: V) -> None:
        self._value = value
        self._mutex = threading.Lock()

    def load(self) -> V:
        return self._value

    def store(self, value: V) -> None:
        with self._mutex:
            self._value = value

    def swap(self, value: V) -> V:
        with self._mutex:
            old, self._value = self._value, value
            return old

    def compare_exchange(self, expected: V, new: V) -> bool:
        with self._mutex:
            current = self._value
            if current is expected or current == expected:
                self._value = new
                return True
            return False

    def fetch_add(self, delta: Any) -> V:
        with self._mutex:
            old = self._value
            self._value = old + delta  # type: ignore[operator]
            return old


class SpinLock:
    """A test-and-set spin lock."""

    def __init__(self) -> None:
        self._inner = _Atomic(False)

    def lock(self) -> None:
        """Acquire the lock, spinning until it is free. The token is None."""
        backoff = _Backoff()
        while not self._inner.compare_exchange(False, True):
            backoff.snooze()

    def unlock(self, token: None = None) -> None:
        """Release the lock."""
        self._inner.store(False)

    def try_lock(self) -> bool:
        """Acquire the lock if it is free; return whether it was acquired."""
        return self._inner.compare_exchange(False, True)

    def __repr__(self) -> str:
        return f"SpinLock(locked={self._inner.load()})"


class TicketLock:
    """A FIFO ticket lock."""

    def __init__(self) -> None:
        self._curr = _Atomic(0)
        self._next = _Atomic(0)

    def lock(self) -> int:
        """Take a ticket and wait for its turn; return the ticket."""
        ticket = self._next.fetch_add(1)
        backoff = _Backoff()
        while self._curr.load() != ticket:
            backoff.snooze()
        return ticket

    def unlock(self, ticket: int) -> None:
        """Release the lock held with ``ticket``."""
        self._curr.store(ticket + 1)

    def __repr__(self) -> str:
        return f"TicketLock(curr={self._curr.load()}, next={self._next.load()})"


class _ClhNode:
    __slots__ = ("locked",)

    def __init__(self, locked: bool) -> None:
        self.locked = locked


class ClhLock:
    """A CLH queue lock: each waiter spins on its predecessor's node."""

    def __init__(self) -> None:
        self._tail: _Atomic[_ClhNode] = _Atomic(_ClhNode(False))

    def lock(self) -> _ClhNode:
        """Acquire the lock; return the token to pass to unlock()."""
        node = _ClhNode(True)
        prev = self._tail.swap(node)
        backoff = _Backoff()
        while prev.locked:
            backoff.snooze()
        return node

    def unlock(self, token: _ClhNode) -> None:
        """Release the lock acquired with ``token``."""
        token.locked = False

    def __repr__(self) -> str:
        return "ClhLock()"


class _McsNode:
    __slots__ = ("locked", "next", "event")

    def __init__(self) -> None:
        self.locked = True
        self.next: Optional[_McsNode] = None
        self.event = threading.Event()


class McsLock:
    """An MCS queue lock: each waiter spins on its own node."""

    def __init__(self) -> None:
        self._tail: _Atomic[Optional[_McsNode]] = _Atomic(None)

    def lock(self) -> _McsNode:
        """Acquire the lock; return the token to pass to unlock()."""
        node = _McsNode()
        prev = self._tail.swap(node)
        if prev is None:
            return node
        prev.next = node
        backoff = _Backoff()
        while node.locked:
            backoff.snooze()
        return node

    def unlock(self, token: _McsNode) -> None:
        """Release the lock acquired with ``token``, handing it to a waiter."""
        nxt = _wait_successor(self._tail, token)
        if nxt is not None:
            nxt.locked = False

    def __repr__(self) -> str:
        return "McsLock()"


class McsParkingLock:
    """An MCS queue lock whose waiters sleep instead of spinning."""

    def __init__(self) -> None:
        self._tail: _Atomic[Optional[_McsNode]] = _Atomic(None)

    def lock(self) -> _McsNode:
        """Acquire the lock; return the token to pass to unlock()."""
        node = _McsNode()
        prev = self._tail.swap(node)
        if prev is None:
            return node
        prev.next = node
        while node.locked:
            node.event.wait()
        return node

    def unlock(self, token: _McsNode) -> None:
        """Release the lock acquired with ``token``, waking a waiter."""
        nxt = _wait_successor(self._tail, token)
        if nxt is not None:
            nxt.locked = False
            nxt.event.set()

    def __repr__(self) -> str:
        return "McsParkingLock()"


def _wait_successor(
    tail: _Atomic[Optional[_McsNode]], node: _McsNode
) -> Optional[_McsNode]:
    """Return the node queued behind ``node``, or None if the queue emptied."""
    nxt = node.next
    if nxt is not None:
        return nxt
    if tail.compare_exchange(node, None):
        return None
    backoff = _Backoff()
    while (nxt := node.next) is None:
        backoff.snooze()
    return nxt
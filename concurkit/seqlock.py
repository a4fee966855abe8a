"""A sequence lock: optimistic readers, exclusive writers."""

from __future__ import annotations

from typing import Callable, Generic, Optional, TypeVar

from .locks import _Atomic, _Backoff

__all__ = ["UpgradeError", "RawSeqLock", "SeqLock", "WriteGuard", "ReadGuard"]

T = TypeVar("T")
R = TypeVar("R")


class UpgradeError(Exception):
    """Raised when a read guard cannot be upgraded to a write guard."""


class RawSeqLock:
    """A raw sequence lock.

    The sequence number is even when unlocked or read-locked, odd when
    write-locked, and only ever increases.
    """

    def __init__(self) -> None:
        self._seq = _Atomic(0)

    def write_lock(self) -> int:
        """Acquire the writer's lock; return the sequence number it started from."""
        backoff = _Backoff()
        while True:
            seq = self._seq.load()
            if seq & 1 == 0 and self._seq.compare_exchange(seq, seq + 1):
                return seq
            backoff.snooze()

    def write_unlock(self, seq: int) -> None:
        """Release the writer's lock taken at ``seq``."""
        self._seq.store(seq + 2)

    def read_begin(self) -> int:
        """Wait for no writer to be active; return the sequence number."""
        backoff = _Backoff()
        while True:
            seq = self._seq.load()
            if seq & 1 == 0:
                return seq
            backoff.snooze()

    def read_validate(self, seq: int) -> bool:
        """Whether reads started at ``seq`` saw no concurrent write."""
        return seq == self._seq.load()

    def upgrade(self, seq: int) -> bool:
        """Try to turn a read at ``seq`` into the writer's lock."""
        return self._seq.compare_exchange(seq, seq + 1)

    def __repr__(self) -> str:
        return f"RawSeqLock(seq={self._seq.load()})"


class SeqLock(Generic[T]):
    """A sequence lock protecting a value."""

    def __init__(self, data: T) -> None:
        self._inner = RawSeqLock()
        self._data = data

    def into_inner(self) -> T:
        """Return the protected value."""
        return self._data

    def write_lock(self) -> WriteGuard[T]:
        """Acquire the writer's lock."""
        return WriteGuard(self, self._inner.write_lock())

    def read_lock(self) -> ReadGuard[T]:
        """Begin an optimistic read."""
        return ReadGuard(self, self._inner.read_begin())

    def read(self, f: Callable[[T], R]) -> Optional[R]:
        """Run ``f`` on the value; return its result, or None if a write interfered."""
        guard = self.read_lock()
        result = f(guard.value)
        return result if guard.finish() else None

    def __repr__(self) -> str:
        return f"SeqLock({self._data!r})"


class WriteGuard(Generic[T]):
    """Exclusive access to a SeqLock's value until released."""

    def __init__(self, lock: SeqLock[T], seq: int) -> None:
        self._lock = lock
        self._seq = seq
        self._released = False

    @property
    def value(self) -> T:
        return self._lock._data

    @value.setter
    def value(self, data: T) -> None:
        if self._released:
            raise RuntimeError("write guard already released")
        self._lock._data = data

    def release(self) -> None:
        """Release the writer's lock."""
        if self._released:
            raise RuntimeError("write guard already released")
        self._released = True
        self._lock._inner.write_unlock(self._seq)

    def __enter__(self) -> WriteGuard[T]:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if not self._released:
            self.release()

    def __repr__(self) -> str:
        return f"WriteGuard(seq={self._seq}, released={self._released})"


class ReadGuard(Generic[T]):
    """An optimistic read of a SeqLock's value; validate before trusting it."""

    def __init__(self, lock: SeqLock[T], seq: int) -> None:
        self._lock = lock
        self._seq = seq
        self._finished = False

    def _check(self) -> None:
        if self._finished:
            raise RuntimeError("read guard already finished")

    @property
    def value(self) -> T:
        self._check()
        return self._lock._data

    def validate(self) -> bool:
        """Whether no write happened since the read began."""
        self._check()
        return self._lock._inner.read_validate(self._seq)

    def restart(self) -> None:
        """Begin the read critical section again."""
        self._check()
        self._seq = self._lock._inner.read_begin()

    def finish(self) -> bool:
        """End the read; return whether it was valid."""
        result = self.validate()
        self._finished = True
        return result

    def upgrade(self) -> WriteGuard[T]:
        """Turn this read into the writer's lock; raise UpgradeError if stale."""
        self._check()
        self._finished = True
        if not self._lock._inner.upgrade(self._seq):
            raise UpgradeError("the value was written since the read began")
        return WriteGuard(self._lock, self._seq)

    def copy(self) -> ReadGuard[T]:
        """Return another read guard at the same sequence number."""
        self._check()
        return ReadGuard(self._lock, self._seq)

    def __repr__(self) -> str:
        return f"ReadGuard(seq={self._seq}, finished={self._finished})"
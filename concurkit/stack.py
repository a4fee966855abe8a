"""Treiber's lock-free stack."""

from __future__ import annotations

from typing import Generic, Optional, TypeVar

from .locks import _Atomic

__all__ = ["Stack"]

T = TypeVar("T")


class _Node(Generic[T]):
    __slots__ = ("data", "next")

    def __init__(self, data: T, nxt: Optional[_Node[T]]) -> None:
        self.data = data
        self.next = nxt


class Stack(Generic[T]):
    """A lock-free stack usable by any number of producers and consumers."""

    def __init__(self) -> None:
        self._head: _Atomic[Optional[_Node[T]]] = _Atomic(None)

    def push(self, t: T) -> None:
        """Push a value on top of the stack."""
        node = _Node(t, None)
        while True:
            head = self._head.load()
            node.next = head
            if self._head.compare_exchange(head, node):
                return

    def pop(self) -> Optional[T]:
        """Pop the top value, or return None if the stack is empty."""
        while True:
            head = self._head.load()
            if head is None:
                return None
            if self._head.compare_exchange(head, head.next):
                return head.data

    def is_empty(self) -> bool:
        return self._head.load() is None

    def __repr__(self) -> str:
        return f"Stack(empty={self.is_empty()})"
"""A doubly-linked list with constant-time operations at both ends."""

from __future__ import annotations

from typing import Any, Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


class _Node(Generic[T]):
    __slots__ = ("element", "next", "prev")

    def __init__(self, element: T) -> None:
        self.element = element
        self.next: Optional[_Node[T]] = None
        self.prev: Optional[_Node[T]] = None


def _compare(a: Any, b: Any) -> Optional[int]:
    """Three-way comparison; None when the values are unordered (e.g. NaN)."""
    if a < b:
        return -1
    if a > b:
        return 1
    if a == b:
        return 0
    return None


class LinkedList(Generic[T]):
    """A doubly-linked list allowing pushes and pops at either end in O(1)."""

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, iterable: Optional[Iterable[T]] = None) -> None:
        self._head: Optional[_Node[T]] = None
        self._tail: Optional[_Node[T]] = None
        self._len = 0
        if iterable is not None:
            for elt in iterable:
                self.push_back(elt)

    # -- node-level primitives -------------------------------------------

    def _link_front(self, node: _Node[T]) -> None:
        node.next = self._head
        node.prev = None
        if self._head is None:
            self._tail = node
        else:
            self._head.prev = node
        self._head = node
        self._len += 1

    def _link_back(self, node: _Node[T]) -> None:
        node.prev = self._tail
        node.next = None
        if self._tail is None:
            self._head = node
        else:
            self._tail.next = node
        self._tail = node
        self._len += 1

    def _take(self) -> tuple[Optional[_Node[T]], Optional[_Node[T]], int]:
        taken = (self._head, self._tail, self._len)
        self._head = self._tail = None
        self._len = 0
        return taken

    # -- public API ------------------------------------------------------

    def append(self, other: LinkedList[T]) -> None:
        """Move all elements of ``other`` to the end of this list in O(1)."""
        if other is self:
            raise ValueError("cannot append a list to itself")
        head, tail, length = other._take()
        if head is None:
            return
        if self._tail is None:
            self._head = head
        else:
            self._tail.next = head
            head.prev = self._tail
        self._tail = tail
        self._len += length

    def prepend(self, other: LinkedList[T]) -> None:
        """Move all elements of ``other`` to the front of this list in O(1)."""
        if other is self:
            raise ValueError("cannot prepend a list to itself")
        head, tail, length = other._take()
        if tail is None:
            return
        if self._head is None:
            self._tail = tail
        else:
            tail.next = self._head
            self._head.prev = tail
        self._head = head
        self._len += length

    def iter(self) -> Iter[T]:
        """Return a double-ended iterator over the elements."""
        return Iter(self._head, self._tail, self._len)

    def iter_mut(self) -> IterMut[T]:
        """Return a double-ended iterator that can modify the list."""
        return IterMut(self)

    def __iter__(self) -> Iterator[T]:
        return self.iter()

    def __reversed__(self) -> Iterator[T]:
        node = self._tail
        while node is not None:
            yield node.element
            node = node.prev

    def is_empty(self) -> bool:
        return self._head is None

    def __len__(self) -> int:
        return self._len

    def clear(self) -> None:
        """Remove all elements."""
        self._take()

    def __contains__(self, x: object) -> bool:
        return any(e == x for e in self)

    def front(self) -> Optional[T]:
        """The first element, or None if the list is empty."""
        return None if self._head is None else self._head.element

    def back(self) -> Optional[T]:
        """The last element, or None if the list is empty."""
        return None if self._tail is None else self._tail.element

    def set_front(self, value: T) -> None:
        """Replace the first element."""
        if self._head is None:
            raise IndexError("set_front on an empty list")
        self._head.element = value

    def set_back(self, value: T) -> None:
        """Replace the last element."""
        if self._tail is None:
            raise IndexError("set_back on an empty list")
        self._tail.element = value

    def push_front(self, elt: T) -> None:
        self._link_front(_Node(elt))

    def pop_front(self) -> Optional[T]:
        """Remove and return the first element, or None if empty."""
        node = self._head
        if node is None:
            return None
        self._head = node.next
        if self._head is None:
            self._tail = None
        else:
            self._head.prev = None
        self._len -= 1
        node.next = None
        return node.element

    def push_back(self, elt: T) -> None:
        self._link_back(_Node(elt))

    def pop_back(self) -> Optional[T]:
        """Remove and return the last element, or None if empty."""
        node = self._tail
        if node is None:
            return None
        self._tail = node.prev
        if self._tail is None:
            self._head = None
        else:
            self._tail.next = None
        self._len -= 1
        node.prev = None
        return node.element

    def copy(self) -> LinkedList[T]:
        """Return a shallow copy."""
        return LinkedList(self)

    # -- comparisons -----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LinkedList):
            return NotImplemented
        return len(self) == len(other) and all(a == b for a, b in zip(self, other))

    def _partial_cmp(self, other: LinkedList[T]) -> Optional[int]:
        for a, b in zip(self, other):
            result = _compare(a, b)
            if result != 0:
                return result
        return (len(self) > len(other)) - (len(self) < len(other))

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, LinkedList):
            return NotImplemented
        return self._partial_cmp(other) == -1

    def __le__(self, other: object) -> bool:
        if not isinstance(other, LinkedList):
            return NotImplemented
        return self._partial_cmp(other) in (-1, 0)

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, LinkedList):
            return NotImplemented
        return self._partial_cmp(other) == 1

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, LinkedList):
            return NotImplemented
        return self._partial_cmp(other) in (1, 0)

    def __repr__(self) -> str:
        return "[" + ", ".join(repr(e) for e in self) + "]"


class Iter(Generic[T]):
    """A double-ended iterator over the elements of a LinkedList."""

    def __init__(
        self, head: Optional[_Node[T]], tail: Optional[_Node[T]], length: int
    ) -> None:
        self._head = head
        self._tail = tail
        self._len = length

    def __iter__(self) -> Iter[T]:
        return self

    def __next__(self) -> T:
        node = self._head
        if self._len == 0 or node is None:
            raise StopIteration
        self._len -= 1
        self._head = node.next
        return node.element

    def next_back(self) -> Optional[T]:
        """Take the element from the back end, or None when exhausted."""
        node = self._tail
        if self._len == 0 or node is None:
            return None
        self._len -= 1
        self._tail = node.prev
        return node.element

    def copy(self) -> Iter[T]:
        """Return an independent iterator at the same position."""
        return Iter(self._head, self._tail, self._len)

    def __repr__(self) -> str:
        return f"Iter({self._len})"


class IterMut(Generic[T]):
    """A double-ended iterator that can modify and insert into a LinkedList."""

    def __init__(self, owner: LinkedList[T]) -> None:
        self._list = owner
        self._head = owner._head
        self._tail = owner._tail
        self._len = owner._len
        self._current: Optional[_Node[T]] = None

    def __iter__(self) -> IterMut[T]:
        return self

    def __next__(self) -> T:
        node = self._head
        if self._len == 0 or node is None:
            raise StopIteration
        self._len -= 1
        self._head = node.next
        self._current = node
        return node.element

    def next_back(self) -> Optional[T]:
        """Take the element from the back end, or None when exhausted."""
        node = self._tail
        if self._len == 0 or node is None:
            return None
        self._len -= 1
        self._tail = node.prev
        self._current = node
        return node.element

    def set_current(self, value: T) -> None:
        """Replace the element most recently returned by the iterator."""
        if self._current is None:
            raise IndexError("no element has been returned yet")
        self._current.element = value

    def insert_next(self, element: T) -> None:
        """Insert just after the element most recently returned by next().

        The inserted element is not visited by this iterator.
        """
        head = self._head
        if self._len == 0 or head is None:
            self._list.push_back(element)
            return
        prev = head.prev
        if prev is None:
            self._list.push_front(element)
            return
        node = _Node(element)
        node.next = head
        node.prev = prev
        prev.next = node
        head.prev = node
        self._list._len += 1

    def peek_next(self) -> Optional[T]:
        """The next element without advancing, or None when exhausted."""
        if self._len == 0 or self._head is None:
            return None
        return self._head.element

    def set_next(self, value: T) -> None:
        """Replace the next element without advancing."""
        if self._len == 0 or self._head is None:
            raise IndexError("iterator is exhausted")
        self._head.element = value

    def __repr__(self) -> str:
        return f"IterMut({self._list!r}, {self._len})"
"""Locks, sequence locks, lock-free structures, concurrent list sets, a thread pool and an HTTP example."""

__version__ = "0.1.0"

__all__ = [
    "fine_grained",
    "http_example",
    "linked_list",
    "lockfree_list",
    "locks",
    "optimistic_fine_grained",
    "queue",
    "seqlock",
    "stack",
    "threadpool",
]
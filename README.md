# concurkit

Concurrency building blocks for Python threads, with no dependencies
outside the standard library.

## What is in it

- `concurkit.linked_list`
  - `LinkedList`: a doubly linked list with O(1) `push_front`, `push_back`,
    `pop_front` and `pop_back` (the pops return `None` on an empty list),
    `front`/`back`, `set_front`/`set_back`, O(1) `append` and `prepend`
    that move every node out of another list, `clear`, `copy`, `in`,
    `len()`, `reversed()`, element-wise equality and ordering (values that
    do not compare, such as NaN, make every ordering comparison false) and
    a list-like `repr`.
  - `Iter` (from `iter()` or plain iteration): also takes elements from the
    back with `next_back()`; `copy()` gives an independent iterator.
  - `IterMut` (from `iter_mut()`): additionally `set_current`,
    `peek_next`, `set_next` and `insert_next`, which inserts after the
    element most recently returned without visiting the new element.
- `concurkit.locks`: `SpinLock` (with `try_lock()`), `TicketLock`,
  `ClhLock`, `McsLock` and `McsParkingLock` (waiters sleep on an event
  rather than spin). `lock()` returns a token that must be passed back to
  `unlock()`. The locks are not reentrant and are not context managers.
- `concurkit.seqlock`
  - `RawSeqLock`: `write_lock`, `write_unlock`, `read_begin`,
    `read_validate` and `upgrade` on a sequence number.
  - `SeqLock`: wraps a value. `write_lock()` returns a `WriteGuard`
    (a context manager whose `value` can be assigned; `release()` ends it).
    `read_lock()` returns a `ReadGuard` that can `validate()`, `restart()`,
    `finish()` (returning whether the read was valid), `copy()` or
    `upgrade()` to a `WriteGuard`, raising `UpgradeError` if a write
    happened in between. `read(f)` runs `f` on the value and returns its
    result, or `None` if a write interfered.
- `concurkit.lockfree_list`: `List`, a sorted key/value list.
  `harris_*`, `harris_michael_*` (`lookup`, `insert`, `delete`) and
  `harris_herlihy_shavit_lookup` use different strategies for unlinking
  deleted nodes. `insert` returns `False` if the key is present; `lookup`
  and `delete` return the value or `None`. `Node` and `Cursor` (from
  `head()`) are exposed for lower-level use.
- `concurkit.stack.Stack`: a Treiber stack with `push`, `pop` (returns
  `None` when empty) and `is_empty`.
- `concurkit.queue.Queue`: a Michael-Scott queue with `push`, `try_pop`
  (returns `None` when empty), `pop` (waits until a value arrives) and
  `is_empty`.
- `concurkit.fine_grained.FineGrainedListSet`: a sorted set using
  hand-over-hand locking; `insert`, `remove`, `contains`/`in`, and
  iteration in order.
- `concurkit.optimistic_fine_grained.OptimisticFineGrainedListSet`: a
  sorted set whose links are guarded by sequence locks, so readers never
  block writers. `iter()` returns an `OptimisticIter`, which raises
  `IterationInvalidated` when a concurrent change invalidates its position;
  start a new iteration then.
- `concurkit.threadpool.ThreadPool`: a fixed number of worker threads
  taking jobs from a shared queue. `execute(closure)` submits a job;
  `shutdown()` (also run on leaving a `with` block) finishes all submitted
  jobs, joins the workers and re-raises the first exception a job raised.
  A job that raises ends the worker that ran it.
- `concurkit.http_example`: a tiny HTTP server, plus the pieces it is made
  of: `parse_request_line` (returns a `Request` with `path`, `content`,
  `version`, or raises `ValueError`), `parse_header_line`,
  `build_response`, `invalid_request`, `handle_connection`, `serve`,
  `serve_single` and `main`.

## Installing

```
pip install .
```

## Examples

```python
from concurkit.linked_list import LinkedList

items = LinkedList([1, 4])
it = items.iter_mut()
next(it)
it.insert_next(2)
it.insert_next(3)
assert list(items) == [1, 2, 3, 4]
```

```python
from concurkit.locks import TicketLock

lock = TicketLock()
ticket = lock.lock()
try:
    ...  # critical section
finally:
    lock.unlock(ticket)
```

```python
from concurkit.seqlock import SeqLock

cell = SeqLock(0)
with cell.write_lock() as guard:
    guard.value = 42
assert cell.read(lambda v: v + 1) == 43
```

```python
from concurkit.fine_grained import FineGrainedListSet

s = FineGrainedListSet()
s.insert(3)
s.insert(1)
assert 1 in s
assert list(s) == [1, 3]
```

```python
from concurkit.threadpool import ThreadPool

with ThreadPool(4) as pool:
    pool.execute(lambda: print("hello from a worker"))
```

## The HTTP example

```
concurkit-http-example
```

starts the server on `127.0.0.1:8000`, handling connections on a pool of
eight workers. Options: `--host`, `--port`, `--workers`, and `--single`
to handle connections one at a time on the main thread.

A request line such as `GET /hello?content=world HTTP/1.1` is answered
with `200 OK` and a short text body that echoes the path and the
`content` value; each connection waits one second before it is parsed,
and request details and headers are printed to standard output.
Anything that is not such a `GET` line, or a header line not ending in
CRLF, gets `400 Bad Request`. The server serves no files and answers one
request per connection.

## Running the tests

```
pip install ".[test]"
pytest
```
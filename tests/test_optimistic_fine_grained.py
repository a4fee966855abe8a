import random
import threading

import pytest

from concurkit.optimistic_fine_grained import (
    IterationInvalidated,
    OptimisticFineGrainedListSet,
)


def _snapshot(s):
    values = []
    try:
        for v in s.iter():
            values.append(v)
    except IterationInvalidated:
        pass
    return values


def test_smoke():
    s = OptimisticFineGrainedListSet()
    assert s.insert(1)
    assert s.insert(2)
    assert s.insert(3)
    assert s.remove(2)
    assert list(s.iter()) == [1, 3]
    assert s.remove(3)


def test_duplicates_and_missing():
    s = OptimisticFineGrainedListSet()
    assert s.insert(5)
    assert not s.insert(5)
    assert not s.remove(7)
    assert s.contains(5)
    assert 5 in s
    assert 7 not in s


def test_read_no_block():
    s = OptimisticFineGrainedListSet()
    assert s.insert(1)
    assert s.insert(2)
    it = s.iter()
    assert next(it) == 1

    def writer():
        for v in range(3, 100):
            s.insert(v)

    t = threading.Thread(target=writer)
    t.start()
    t.join(timeout=3)
    assert not t.is_alive(), "Read should not block other operations"
    assert next(it) == 2


def test_iter_invalidate_end():
    s = OptimisticFineGrainedListSet()
    assert s.insert(1)
    assert s.insert(2)
    it = s.iter()
    assert next(it) == 1
    assert next(it) == 2
    assert s.insert(3)
    with pytest.raises(IterationInvalidated):
        next(it)


def test_iter_invalidate_deleted():
    s = OptimisticFineGrainedListSet()
    assert s.insert(1)
    assert s.insert(2)
    assert s.insert(3)
    it = s.iter()
    assert next(it) == 1
    assert s.remove(1)
    assert s.remove(2)
    with pytest.raises(IterationInvalidated):
        next(it)


def test_iter_exhausted():
    s = OptimisticFineGrainedListSet()
    assert list(s.iter()) == []
    assert next(s.iter(), "end") == "end"
    assert s.insert(1)
    it = s.iter()
    assert next(it) == 1
    assert next(it, "end") == "end"


def test_stress_sequential():
    rng = random.Random(431)
    s = OptimisticFineGrainedListSet()
    model = set()
    for _ in range(4096):
        key = rng.randrange(256)
        op = rng.randrange(3)
        if op == 0:
            assert s.insert(key) == (key not in model)
            model.add(key)
        elif op == 1:
            assert s.remove(key) == (key in model)
            model.discard(key)
        else:
            assert s.contains(key) == (key in model)
    assert list(s.iter()) == sorted(model)


def test_concurrent_disjoint_ranges():
    s = OptimisticFineGrainedListSet()
    threads_count = 4
    per_thread = 100

    def work(i):
        keys = range(i * per_thread, (i + 1) * per_thread)
        for k in keys:
            assert s.insert(k)
        for k in keys:
            if k % 2:
                assert s.remove(k)

    threads = [threading.Thread(target=work, args=(i,)) for i in range(threads_count)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    expected = [k for k in range(threads_count * per_thread) if k % 2 == 0]
    assert list(s.iter()) == expected


def test_iter_consistent():
    threads_count = 4
    steps = 500
    s = OptimisticFineGrainedListSet()
    for i in reversed(range(0, 100, 2)):
        assert s.insert(i)
    evens = set(s.iter())
    assert evens == set(range(0, 100, 2))

    done = threading.Event()
    failures = []

    def mutate(seed):
        rng = random.Random(seed)
        for _ in range(steps):
            key = 2 * rng.randrange(50) + 1
            if rng.random() < 0.5:
                s.insert(key)
            else:
                s.remove(key)
        done.set()

    def check():
        while not done.is_set():
            snapshot = _snapshot(s)
            if any(a > b for a, b in zip(snapshot, snapshot[1:])):
                failures.append(("unsorted", snapshot))
            top = snapshot[-1] if snapshot else 0
            expected = {x for x in evens if x <= top}
            if not expected <= set(snapshot):
                failures.append(("missing evens", snapshot))

    threads = [threading.Thread(target=mutate, args=(i,)) for i in range(threads_count)]
    checker = threading.Thread(target=check)
    checker.start()
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    checker.join()
    assert failures == []
    assert evens <= set(s.iter())
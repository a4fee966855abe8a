import threading

import pytest

from concurkit.lockfree_list import Cursor, List, Node, _CursorRetry

STRATEGIES = [
    ("harris_lookup", "harris_insert", "harris_delete"),
    ("harris_michael_lookup", "harris_michael_insert", "harris_michael_delete"),
    ("harris_herlihy_shavit_lookup", "harris_michael_insert", "harris_michael_delete"),
]


def _keys(lst):
    keys = []
    node = lst.head().curr()
    while node is not None:
        keys.append(node.key)
        node = node.next.load()[0]
    return keys


@pytest.mark.parametrize("lookup,insert,delete", STRATEGIES)
def test_smoke(lookup, insert, delete):
    lst = List()
    look, ins, dele = (getattr(lst, n) for n in (lookup, insert, delete))
    assert ins(37, 37) is True
    assert look(42) is None
    assert look(37) == 37

    assert ins(42, 42) is True
    assert look(42) == 42
    assert look(37) == 37

    assert dele(37) == 37
    assert look(42) == 42
    assert look(37) is None

    assert dele(37) is None
    assert look(42) == 42
    assert look(37) is None


@pytest.mark.parametrize("insert", ["harris_insert", "harris_michael_insert"])
def test_duplicate_insert_rejected(insert):
    lst = List()
    assert getattr(lst, insert)(5, "a") is True
    assert getattr(lst, insert)(5, "b") is False
    assert lst.harris_lookup(5) == "a"


def test_keys_are_kept_sorted():
    lst = List()
    for k in [5, 1, 9, 3, 7]:
        lst.harris_insert(k, str(k))
    assert _keys(lst) == sorted([5, 1, 9, 3, 7])


def test_node_into_value():
    assert Node(1, "one").into_value() == "one"


def test_cursor_on_empty_list():
    lst = List()
    cursor = lst.head()
    assert cursor.curr() is None
    with pytest.raises(RuntimeError):
        cursor.lookup()
    with pytest.raises(RuntimeError):
        cursor.delete()


def test_cursor_insert_and_conflict():
    lst = List()
    c1 = lst.head()
    c2 = lst.head()
    node = Node(1, "a")
    c1.insert(node)
    assert c1.curr() is node
    assert lst.harris_lookup(1) == "a"
    with pytest.raises(_CursorRetry):
        c2.insert(Node(0, "z"))
    assert _keys(lst) == [1]


def test_cursor_double_delete_retries():
    lst = List()
    lst.harris_insert(1, "a")
    c1 = lst.head()
    c2 = c1.copy()
    assert c1.delete() == "a"
    with pytest.raises(_CursorRetry):
        c2.delete()
    assert lst.harris_lookup(1) is None


def _list_with_marked_middle():
    """Build 1, 2, 3 where 2 is marked deleted but still linked."""
    lst = List()
    for k in (1, 2, 3):
        lst.harris_insert(k, k)
    cursor = lst.head()
    assert cursor.find_harris_herlihy_shavit(2) is True
    assert lst.harris_delete(1) == 1
    assert cursor.delete() == 2
    return lst


def test_marked_node_invisible_to_herlihy_shavit():
    lst = _list_with_marked_middle()
    assert _keys(lst) == [2, 3]
    assert lst.harris_herlihy_shavit_lookup(2) is None
    assert _keys(lst) == [2, 3]


@pytest.mark.parametrize("lookup", ["harris_lookup", "harris_michael_lookup"])
def test_marked_node_cleaned_up(lookup):
    lst = _list_with_marked_middle()
    assert getattr(lst, lookup)(3) == 3
    assert _keys(lst) == [3]


def test_find_strategies_agree():
    lst = List()
    for k in range(0, 20, 2):
        lst.harris_insert(k, k)
    for k in range(20):
        expected = k % 2 == 0
        for finder in (
            Cursor.find_harris,
            Cursor.find_harris_michael,
            Cursor.find_harris_herlihy_shavit,
        ):
            cursor = lst.head()
            assert finder(cursor, k) is expected
            if expected:
                assert cursor.lookup() == k


def test_concurrent_insert_delete():
    lst = List()
    threads_n, per = 4, 200
    errors = []

    def worker(t):
        try:
            for i in range(per):
                key = t * per + i
                if not lst.harris_michael_insert(key, key):
                    errors.append(("insert", key))
                if i % 2 and lst.harris_delete(key) != key:
                    errors.append(("delete", key))
        except Exception as exc:  # pragma: no cover
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(t,)) for t in range(threads_n)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()

    assert errors == []
    expected = [t * per + i for t in range(threads_n) for i in range(per) if i % 2 == 0]
    assert _keys(lst) == expected
import threading

from concurkit.stack import Stack


def test_push_concurrent():
    stack = Stack()
    failures = []

    def worker():
        for i in range(10_000):
            stack.push(i)
            if stack.pop() is None:
                failures.append(i)

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()

    assert failures == []
    assert stack.is_empty()


def test_lifo_order():
    stack = Stack()
    for v in (1, 2, 3):
        stack.push(v)
    assert [stack.pop(), stack.pop(), stack.pop()] == [3, 2, 1]
    assert stack.pop() is None


def test_is_empty_transitions():
    stack = Stack()
    assert stack.is_empty() is True
    stack.push("x")
    assert stack.is_empty() is False
    assert stack.pop() == "x"
    assert stack.is_empty() is True


def test_concurrent_pushes_all_popped():
    stack = Stack()

    def worker(base):
        for i in range(1000):
            stack.push(base + i)

    threads = [threading.Thread(target=worker, args=(t * 1000,)) for t in range(4)]
    for th in threads:
        th.start()
    for th in threads:
        th.join()

    popped = []
    while (v := stack.pop()) is not None:
        popped.append(v)
    assert sorted(popped) == list(range(4000))
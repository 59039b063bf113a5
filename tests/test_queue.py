from daemonkit.queue import Queue


def test_fifo_order():
    queue = Queue()
    for item in ["a", "b", "c"]:
        queue.push(item)
    assert [queue.pop() for _ in range(3)] == ["a", "b", "c"]
    assert len(queue) == 0


def test_push_returns_item():
    queue = Queue()
    item = {"x": 1}
    assert queue.push(item) is item
    assert queue.peek() is item


def test_peek_empty_is_none():
    assert Queue().peek() is None


def test_peek_does_not_remove():
    queue = Queue(["first", "second"])
    assert queue.peek() == "first"
    assert len(queue) == 2


def test_pop_empty_is_noop():
    queue = Queue()
    calls = []
    assert queue.pop(calls.append) is None
    assert calls == []
    assert len(queue) == 0


def test_pop_calls_destroy():
    queue = Queue(["x", "y"])
    destroyed = []
    assert queue.pop(destroyed.append) == "x"
    assert destroyed == ["x"]
    assert list(queue) == ["y"]


def test_clear_destroys_all_in_order():
    queue = Queue([1, 2, 3])
    destroyed = []
    queue.clear(destroyed.append)
    assert destroyed == [1, 2, 3]
    assert len(queue) == 0
    assert queue.peek() is None


def test_push_after_emptying():
    queue = Queue()
    queue.push("a")
    queue.pop()
    queue.push("b")
    assert list(queue) == ["b"]
    assert queue.peek() == "b"
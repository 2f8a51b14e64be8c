import pytest

from linkq.models import Element
from linkq.queue import (
    Queue, QueueCorruption,
    q_new, q_free, q_insert_head, q_insert_tail, q_remove_head,
    q_size, q_reverse, q_sort,
)


def _failing_allocator(value):
    raise MemoryError("no memory")


def test_new_queue_is_empty():
    q = q_new()
    assert q is not None
    assert q.head is None and q.tail is None
    assert q_size(q) == 0
    q.check()


def test_insert_head_then_remove():
    q = q_new()
    assert q_insert_head(q, "b")
    assert q_insert_head(q, "a")
    assert list(q) == ["a", "b"]
    buf = bytearray(16)
    assert q_remove_head(q, buf)
    assert bytes(buf[:2]) == b"a\0"
    assert q_size(q) == 1
    q.check()


def test_first_insert_sets_head_and_tail():
    q = Queue()
    assert q.insert_tail("x")
    assert q.head is q.tail
    assert q.tail.next is None
    q = Queue()
    assert q.insert_head("x")
    assert q.head is q.tail


def test_fifo_and_lifo_orders(make_queue):
    q = make_queue("1", "2", "3")
    q.insert_head("0")
    assert list(q) == ["0", "1", "2", "3"]
    assert q.tail.value == "3"
    q.check()


def test_size_tracks_inserts_minus_removes(make_queue):
    q = make_queue(*[str(i) for i in range(10)])
    for _ in range(4):
        assert q.remove_head()
    assert q_size(q) == 6
    assert len(q) == 6
    q.check()


def test_remove_last_element_clears_tail(make_queue):
    q = make_queue("only")
    assert q.remove_head()
    assert q.head is None and q.tail is None
    assert q.size == 0
    q.check()


def test_remove_from_empty_fails():
    q = Queue()
    assert not q.remove_head()
    assert not q_remove_head(q, bytearray(8))


def test_insert_copies_mutable_input():
    q = Queue()
    data = bytearray(b"hello")
    assert q.insert_tail(data)
    data[0] = ord("j")
    assert list(q) == ["hello"]


def test_bytes_input_stops_at_nul():
    q = Queue()
    assert q.insert_tail(b"abc\0def")
    assert list(q) == ["abc"]


def test_remove_truncates_to_buffer_size(make_queue):
    q = make_queue("abcdefgh")
    buf = bytearray(b"\xff" * 8)
    assert q.remove_head(buf, 4)
    assert bytes(buf[:4]) == b"abc\0"
    # bytes past bufsize are left alone
    assert bytes(buf[4:]) == b"\xff" * 4


def test_remove_pads_with_zeros(make_queue):
    q = make_queue("ab")
    buf = bytearray(b"\xff" * 6)
    assert q.remove_head(buf)
    assert bytes(buf) == b"ab\0\0\0\0"


def test_remove_empty_string_round_trip(make_queue):
    q = make_queue("")
    buf = bytearray(b"x" * 4)
    assert q.remove_head(buf)
    assert bytes(buf) == b"\0\0\0\0"


def test_remove_without_buffer(make_queue):
    q = make_queue("a", "b")
    assert q.remove_head(None)
    assert list(q) == ["b"]


def test_allocation_failure_leaves_queue_unchanged(make_queue):
    q = make_queue("a", "b")
    q.allocator = _failing_allocator
    assert not q.insert_head("x")
    assert not q.insert_tail("y")
    assert list(q) == ["a", "b"]
    assert q.size == 2
    q.check()


def test_allocation_failure_on_empty_queue():
    q = Queue(allocator=_failing_allocator)
    assert not q.insert_tail("x")
    assert q.head is None and q.tail is None
    q.check()


def test_absent_queue_is_tolerated():
    assert not q_insert_head(None, "a")
    assert not q_insert_tail(None, "a")
    assert not q_remove_head(None, bytearray(4))
    assert q_size(None) == 0
    q_reverse(None)
    q_sort(None)
    q_sort(None, "natural")
    q_free(None)


def test_free_releases_every_element(make_queue):
    q = make_queue("a", "b", "c")
    first = q.head
    q_free(q)
    assert q.head is None and q.tail is None and q.size == 0
    assert first.next is None


def test_reverse(make_queue):
    q = make_queue("a", "b", "c", "d")
    nodes = []
    e = q.head
    while e is not None:
        nodes.append(e)
        e = e.next
    q.reverse()
    assert list(q) == ["d", "c", "b", "a"]
    assert q.head is nodes[-1]
    assert q.tail is nodes[0]
    q.check()


def test_reverse_twice_is_identity(make_queue):
    q = make_queue("x", "y", "z")
    q_reverse(q)
    q_reverse(q)
    assert list(q) == ["x", "y", "z"]
    q.check()


def test_reverse_empty_and_single():
    q = Queue()
    q.reverse()
    assert q.head is None and q.tail is None
    q.insert_tail("a")
    q.reverse()
    assert q.head is q.tail
    q.check()


def test_sort_lexicographic(make_queue):
    q = make_queue("3", "1", "2", "10", "20")
    q_sort(q)
    assert list(q) == ["1", "10", "2", "20", "3"]
    assert q.tail.value == "3"
    q.check()


def test_sort_natural(make_queue):
    q = make_queue("3", "1", "2", "10", "20")
    q_sort(q, "natural")
    assert list(q) == ["1", "2", "3", "10", "20"]
    assert q.tail.value == "20"
    q.check()


@pytest.mark.parametrize("algo", ["merge", "bottom_up"])
def test_sort_keeps_elements(make_queue, algo):
    vals = ["pear", "apple", "fig", "apple", "kiwi", "banana", "cherry"]
    q = make_queue(*vals)
    before = set()
    e = q.head
    while e is not None:
        before.add(id(e))
        e = e.next
    q.sort(algo=algo)
    after = set()
    e = q.head
    while e is not None:
        after.add(id(e))
        e = e.next
    assert before == after
    assert list(q) == sorted(vals)
    q.check()


def test_sort_empty_and_single_is_noop():
    q = Queue()
    q.sort()
    assert q.head is None and q.tail is None
    q.insert_tail("a")
    only = q.head
    q.sort("natural")
    assert q.head is only and q.tail is only


@pytest.mark.parametrize("algo", ["merge", "bottom_up"])
def test_sort_already_sorted_keeps_links(make_queue, algo):
    q = make_queue("a", "b", "c", "d", "e")
    nodes = []
    e = q.head
    while e is not None:
        nodes.append(e)
        e = e.next
    q.sort(algo=algo)
    e = q.head
    for n in nodes:
        assert e is n
        e = e.next


def test_sort_rejects_unknown_algo(make_queue):
    q = make_queue("b", "a")
    with pytest.raises(ValueError):
        q.sort(algo="quick")


def test_check_detects_bad_size(make_queue):
    q = make_queue("a", "b")
    q.size = 3
    with pytest.raises(QueueCorruption):
        q.check()


def test_check_detects_stale_tail(make_queue):
    q = make_queue("a", "b")
    q.tail = Element("z")
    with pytest.raises(QueueCorruption):
        q.check()

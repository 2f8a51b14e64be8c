"""
Linked-list queue
=================

This is the heart of the project: a queue of strings stored as a singly linked
list of `Element` objects.

1) `head` is the first element, `tail` the last, `size` the element count
2) Insertions at either end are O(1) thanks to the `tail` reference
3) Removal happens at the head (FIFO with `insert_tail`, LIFO with `insert_head`)
4) `reverse` and `sort` only rewrite links; elements are never copied

Failures are reported by return value (False / 0 / None), never by raising.
The `q_*` functions are the handle-style surface used by the command harness:
they accept `None` for "no queue" and behave as a no-op or return a failure
value in that case.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Union
import logging
from .models import Element
from .compare import Comparator, get_comparator
from .dsa import SORTS, last

logger = logging.getLogger(__name__)

Allocator = Callable[[str], Element]
Text = Union[str, bytes, bytearray]


class QueueCorruption(RuntimeError):
    """Raised by `Queue.check` when the head/tail/size bookkeeping is broken."""
    pass


def _copy_text(s: Text) -> str:
    """Take a private copy of `s`. Byte strings end at their first NUL."""
    if isinstance(s, (bytes, bytearray, memoryview)):
        raw = bytes(s)
        nul = raw.find(b"\0")
        if nul >= 0:
            raw = raw[:nul]
        return raw.decode("utf-8", errors="replace")
    return str(s)


@dataclass(eq=False, repr=False)
class Queue:
    """Queue of strings backed by a singly linked list.

    `allocator` builds new elements (default: `Element`). The harness swaps
    in an allocator that raises `MemoryError` to test allocation failures.
    """
    allocator: Optional[Allocator] = None
    head: Optional[Element] = field(default=None, init=False)
    tail: Optional[Element] = field(default=None, init=False)
    size: int = field(default=0, init=False)

    def _new_element(self, s: Text) -> Optional[Element]:
        try:
            value = _copy_text(s)
            return (self.allocator or Element)(value)
        except MemoryError:
            logger.debug("element allocation failed")
            return None

    # ---------------- Insert / remove ----------------
    def insert_head(self, s: Text) -> bool:
        """Insert a copy of `s` at the head. False if allocation fails."""
        e = self._new_element(s)
        if e is None:
            return False
        if self.head is None:
            self.tail = e
        e.next = self.head
        self.head = e
        self.size += 1
        return True

    def insert_tail(self, s: Text) -> bool:
        """Insert a copy of `s` at the tail. False if allocation fails."""
        e = self._new_element(s)
        if e is None:
            return False
        e.next = None
        if self.head is None:
            self.head = e
        else:
            self.tail.next = e
        self.tail = e
        self.size += 1
        return True

    def remove_head(self, sp: Optional[bytearray] = None, bufsize: Optional[int] = None) -> bool:
        """Remove the head element.

        If `sp` is given, the removed string (UTF-8) is copied into it: at
        most `bufsize - 1` bytes, followed by zero bytes up to `bufsize`.
        `bufsize` defaults to `len(sp)`; a longer value is cut silently.
        Returns False if the queue is empty.
        """
        e = self.head
        if e is None:
            return False
        self.head = e.next
        if e.next is None:
            self.tail = None
        e.next = None
        self.size -= 1
        if sp is not None:
            _copy_out(e.value, sp, len(sp) if bufsize is None else bufsize)
        return True

    def free(self) -> None:
        """Drop every element, one at a time."""
        e = self.head
        while e is not None:
            self.head = e.next
            e.next = None
            e = self.head
        self.tail = None
        self.size = 0

    # ---------------- Reordering ----------------
    def reverse(self) -> None:
        """Reverse the element order in place."""
        if self.head is None:
            return
        prev = None
        cur = self.head
        self.tail = self.head
        while cur is not None:
            nxt = cur.next
            cur.next = prev
            prev = cur
            cur = nxt
        self.head = prev

    def sort(self, cmp: Union[str, Comparator, None] = None, algo: str = "merge") -> None:
        """Sort in non-descending order under `cmp`.

        `cmp` is a comparator or one of "lexicographic" (default) / "natural".
        `algo` is "merge" (recursive) or "bottom_up" (iterative).
        """
        compare = get_comparator(cmp)
        try:
            sorter = SORTS[algo]
        except KeyError:
            raise ValueError("algo must be 'merge' or 'bottom_up'") from None
        if self.head is None or self.head.next is None:
            return
        self.head = sorter(self.head, compare)
        self.tail = last(self.head)

    # ---------------- Inspection ----------------
    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[str]:
        e = self.head
        while e is not None:
            yield e.value
            e = e.next

    def values(self) -> List[str]:
        return list(self)

    def check(self) -> None:
        """Verify the head/tail/size invariants; raise QueueCorruption if broken."""
        if self.size == 0:
            if self.head is not None or self.tail is not None:
                raise QueueCorruption("empty queue has a head or tail")
            return
        if self.head is None or self.tail is None:
            raise QueueCorruption(f"queue of size {self.size} has no head or tail")
        if self.tail.next is not None:
            raise QueueCorruption("tail is not the last element")
        n = 0
        e = self.head
        prev = None
        while e is not None and n <= self.size:
            n += 1
            prev = e
            e = e.next
        if n != self.size:
            raise QueueCorruption(f"size is {self.size} but {n if e is None else 'more'} elements are linked")
        if prev is not self.tail:
            raise QueueCorruption("walk from head does not end at tail")

    def __repr__(self) -> str:
        return f"Queue(size={self.size})"


def _copy_out(value: str, sp: bytearray, bufsize: int) -> None:
    if bufsize <= 0:
        return
    if len(sp) < bufsize:
        sp.extend(bytes(bufsize - len(sp)))
    data = value.encode("utf-8")
    n = min(len(data), bufsize - 1)
    sp[:n] = data[:n]
    sp[n:bufsize] = bytes(bufsize - n)


# ---------------- Handle-style surface ----------------
def q_new(allocator: Optional[Allocator] = None) -> Optional[Queue]:
    """Create an empty queue, or None if it cannot be allocated."""
    try:
        return Queue(allocator=allocator)
    except MemoryError:
        logger.debug("queue allocation failed")
        return None


def q_free(q: Optional[Queue]) -> None:
    if q is None:
        return
    q.free()


def q_insert_head(q: Optional[Queue], s: Text) -> bool:
    return q is not None and q.insert_head(s)


def q_insert_tail(q: Optional[Queue], s: Text) -> bool:
    return q is not None and q.insert_tail(s)


def q_remove_head(q: Optional[Queue], sp: Optional[bytearray] = None, bufsize: Optional[int] = None) -> bool:
    return q is not None and q.remove_head(sp, bufsize)


def q_size(q: Optional[Queue]) -> int:
    return q.size if q is not None else 0


def q_reverse(q: Optional[Queue]) -> None:
    if q is not None:
        q.reverse()


def q_sort(q: Optional[Queue], cmp: Union[str, Comparator, None] = None, algo: str = "merge") -> None:
    if q is not None:
        q.sort(cmp, algo)

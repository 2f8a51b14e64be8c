"""
DSA utilities
=============

This file implements the linked-list sorting primitives used by the queue.
Everything here works directly on `Element` chains: no element is created or
dropped, only `next` links are rewritten.

Included:
- Split a chain in two halves (fast/slow pointer walk)
- Merge two sorted chains (stable, iterative)
- Merge Sort, recursive (O(n log n), O(log n) stack)
- Merge Sort, bottom-up (O(n log n), O(1) extra space)
"""

from __future__ import annotations
from typing import Callable, Optional, Tuple
from .models import Element

Comparator = Callable[[str, str], int]


def split(head: Element) -> Tuple[Element, Optional[Element]]:
    """Split a chain into (front, back); front gets the extra element."""
    slow = head
    fast = head.next
    # fast moves two steps for each step of slow
    while fast is not None:
        fast = fast.next
        if fast is not None:
            slow = slow.next
            fast = fast.next
    back = slow.next
    slow.next = None
    return head, back


def merge(a: Optional[Element], b: Optional[Element], cmp: Comparator) -> Optional[Element]:
    """Merge two sorted chains; ties take from `a`."""
    if a is None:
        return b
    if b is None:
        return a
    if cmp(a.value, b.value) <= 0:
        head = a; a = a.next
    else:
        head = b; b = b.next
    tail = head
    while a is not None and b is not None:
        if cmp(a.value, b.value) <= 0:
            tail.next = a; a = a.next
        else:
            tail.next = b; b = b.next
        tail = tail.next
    tail.next = a if a is not None else b
    return head


def merge_sort(head: Optional[Element], cmp: Comparator) -> Optional[Element]:
    """Recursive merge sort. Returns the new head."""
    if head is None or head.next is None:
        return head
    front, back = split(head)
    return merge(merge_sort(front, cmp), merge_sort(back, cmp), cmp)


def _take(head: Optional[Element], n: int) -> Optional[Element]:
    """Cut the chain after `n` elements and return the rest."""
    for _ in range(n - 1):
        if head is None:
            return None
        head = head.next
    if head is None:
        return None
    rest = head.next
    head.next = None
    return rest


def merge_sort_bottom_up(head: Optional[Element], cmp: Comparator) -> Optional[Element]:
    """Iterative merge sort: merge runs of width 1, 2, 4, ... until one run is left."""
    if head is None or head.next is None:
        return head
    n = length(head)
    width = 1
    while width < n:
        new_head = prev = None
        cur = head
        while cur is not None:
            left = cur
            right = _take(left, width)
            cur = _take(right, width)
            merged = merge(left, right, cmp)
            if prev is None:
                new_head = merged
            else:
                prev.next = merged
            prev = last(merged)
        head = new_head
        width *= 2
    return head


def length(head: Optional[Element]) -> int:
    n = 0
    while head is not None:
        n += 1
        head = head.next
    return n


def last(head: Element) -> Element:
    """Walk to the final element of a non-empty chain."""
    while head.next is not None:
        head = head.next
    return head


SORTS = {
    "merge": merge_sort,
    "bottom_up": merge_sort_bottom_up,
}

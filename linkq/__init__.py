"""
LINKQ package
=============

This package contains a string queue backed by a singly linked list, plus the
small command harness used to drive it.

- The queue (insert/remove/reverse/sort) is in `linkq/queue.py`.
- The linked-list merge sort is in `linkq/dsa.py`, its comparators in
  `linkq/compare.py`.
- The CLI entry point is in `linkq/cli.py`.
"""

from .models import Element
from .queue import (
    Queue, QueueCorruption,
    q_new, q_free, q_insert_head, q_insert_tail, q_remove_head,
    q_size, q_reverse, q_sort,
)
from .compare import strcmp, strnatcmp, get_comparator

__version__ = '0.3.0'

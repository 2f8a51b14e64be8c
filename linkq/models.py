"""
Data model (Element)
====================

Each value stored in a queue lives in one `Element`: the text payload plus a
`next` link to the following element.

- Elements are created only when a string is inserted.
- Reverse and sort never copy elements, they only rewrite `next` links.
- An element belongs to exactly one queue; removing it hands the text back to
  the caller and drops the element.
"""

from __future__ import annotations
from typing import Optional


class Element:
    """One linked-list cell holding one text value."""
    __slots__ = ("value", "next")

    def __init__(self, value: str, next: Optional[Element] = None) -> None:
        self.value = value
        self.next = next

    def __repr__(self) -> str:
        return f"Element(value={self.value!r}, next={getattr(self.next, 'value', None)!r})"

"""
String comparators
==================

Comparators return a negative number, zero, or a positive number, like C's
`strcmp`. The queue sort takes one of these as its ordering.

Included:
- `strcmp`: plain lexicographic order (the default sort order)
- `strnatcmp`: "natural" order, where digit runs compare by value
  ("a2" < "a10"), with a leading-zero rule described in `compare_int`
"""

from __future__ import annotations
from typing import Callable, Dict, Union

Comparator = Callable[[str, str], int]

# C locale isdigit / isspace
_DIGITS = frozenset("0123456789")
_SPACES = frozenset(" \t\n\v\f\r")


def _sign(a, b) -> int:
    return (a > b) - (a < b)


def strcmp(a: str, b: str) -> int:
    """Lexicographic comparison by code point (same order as UTF-8 bytes)."""
    return _sign(a, b)


def compare_int(a: str, i: int, b: str, j: int) -> int:
    """Compare the digit runs starting at `a[i]` and `b[j]`.

    Digits are compared pairwise while both runs continue and the first
    difference is remembered. When either run starts with '0' the numbers are
    treated as strings: as soon as another pair is compared after a
    difference, that first difference is returned. Otherwise, once one run
    ends, the run with digits left is the bigger number; runs of equal length
    are ordered by their first difference.
    """
    lead_zero = a[i] == "0" or b[j] == "0"
    result = 0
    while i < len(a) and j < len(b) and a[i] in _DIGITS and b[j] in _DIGITS:
        if not result:
            result = _sign(a[i], b[j])
        elif lead_zero:
            return result
        i += 1; j += 1
    a_more = i < len(a) and a[i] in _DIGITS
    b_more = j < len(b) and b[j] in _DIGITS
    if a_more and not b_more:
        return 1
    if b_more and not a_more:
        return -1
    return result


def strnatcmp(a: str, b: str) -> int:
    """Compare two strings in natural order.

    Both strings are scanned in lock-step. Whitespace is skipped on each side
    before every comparison. Where both sides have a digit the digit runs are
    compared with `compare_int`; any other pair compares by ordinal. The
    first non-zero result wins. A string that runs out first is the smaller
    one.
    """
    i = j = 0
    while True:
        while i < len(a) and a[i] in _SPACES:
            i += 1
        while j < len(b) and b[j] in _SPACES:
            j += 1
        if i >= len(a) or j >= len(b):
            return _sign(i < len(a), j < len(b))
        if a[i] in _DIGITS and b[j] in _DIGITS:
            result = compare_int(a, i, b, j)
        else:
            result = _sign(a[i], b[j])
        if result:
            return result
        i += 1; j += 1


COMPARATORS: Dict[str, Comparator] = {
    "lexicographic": strcmp,
    "strcmp": strcmp,
    "natural": strnatcmp,
    "strnatcmp": strnatcmp,
}


def get_comparator(cmp: Union[str, Comparator, None] = None) -> Comparator:
    """Resolve a comparator by name; callables are returned unchanged."""
    if cmp is None:
        return strcmp
    if callable(cmp):
        return cmp
    try:
        return COMPARATORS[str(cmp).lower().strip()]
    except KeyError:
        raise ValueError("comparator must be: lexicographic, natural") from None

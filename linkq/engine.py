"""
Command harness (engine)
========================

The harness drives one queue through the handle-style `q_*` functions and
checks the results, the way a test driver would:

1) Keep the current queue (or None when no queue exists)
2) Keep a shadow count of elements to cross-check `q_size`
3) Verify removals, sort order, and the head/tail/size invariants
4) Count errors, and give up once the error limit is reached

It can also inject allocation failures (`option malloc <percent>`) so the
queue's failure paths get exercised.

The CLI in `linkq/cli.py` maps commands onto the methods below.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional
import logging
import random
import string
import time
from .models import Element
from .queue import (
    Queue, QueueCorruption,
    q_new, q_free, q_insert_head, q_insert_tail, q_remove_head,
    q_size, q_reverse, q_sort,
)
from .compare import get_comparator
from .loader import load_strings

logger = logging.getLogger(__name__)

# verbosity -> logging level for the "linkq" logger
VERBOSITY_LEVELS = {0: logging.CRITICAL, 1: logging.ERROR, 2: logging.WARNING, 3: logging.INFO, 4: logging.DEBUG}

# Longest queue prefix printed by `show`
MAX_SHOW = 50


def set_verbosity(level: int) -> None:
    if level not in VERBOSITY_LEVELS:
        raise ValueError("verbose must be between 0 and 4")
    logging.getLogger("linkq").setLevel(VERBOSITY_LEVELS[level])


@dataclass
class HarnessOptions:
    """Runtime options, changed with the `option` command."""
    # Buffer size used when removing strings
    length: int = 1024
    # Percent chance that an allocation fails
    malloc: int = 0
    # Number of errors before the harness gives up
    fail: int = 30
    verbose: int = 3
    # Echo commands read from a script
    echo: bool = True
    seed: Optional[int] = None


OPTION_HELP = {
    "length": "Maximum length of displayed and removed strings",
    "malloc": "Malloc failure probability percent",
    "fail": "Number of errors before giving up",
    "verbose": "Verbosity level (0-4)",
    "echo": "Do/don't echo commands",
    "seed": "Seed for the allocation failure generator",
}


class FaultInjector:
    """Allocator that fails a given percentage of the time."""

    def __init__(self, percent: int = 0, seed: Optional[int] = None) -> None:
        self.percent = percent
        self.rng = random.Random(seed)

    def fails(self) -> bool:
        return self.percent > 0 and self.rng.randrange(100) < self.percent

    def allocate(self, value: str) -> Element:
        if self.fails():
            raise MemoryError("injected allocation failure")
        return Element(value)


@dataclass
class Harness:
    """Test driver for one queue at a time.

    Every command returns True when it behaved correctly. Failures found by
    the checks are counted in `errors`.
    """
    options: HarnessOptions = field(default_factory=HarnessOptions)
    # Commands run so far (written into JSON exports)
    command_log: List[str] = field(default_factory=list)
    q: Optional[Queue] = field(default=None, init=False)
    # Shadow element count
    qcnt: int = field(default=0, init=False)
    errors: int = field(default=0, init=False)
    _injector: FaultInjector = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._injector = FaultInjector(self.options.malloc, self.options.seed)

    # ---------------- Error bookkeeping ----------------
    def _error(self, msg: str) -> bool:
        self.errors += 1
        logger.error("ERROR: %s", msg)
        if self.exceeded:
            logger.error("Error limit exceeded.  Stopping command execution")
        return False

    @property
    def exceeded(self) -> bool:
        return self.errors >= self.options.fail

    def _null_warning(self, what: str) -> None:
        if self.q is None:
            logger.warning("Warning: Calling %s on null queue", what)

    # ---------------- Queue lifecycle ----------------
    def new(self) -> bool:
        """Create a fresh queue, freeing the current one."""
        if self.q is not None:
            q_free(self.q)
        self.q = None if self._injector.fails() else q_new(self._injector.allocate)
        self.qcnt = 0
        if self.q is None:
            logger.warning("q_new failed")
        return self.show()

    def free(self) -> bool:
        if self.q is None:
            logger.warning("Warning: Calling free on null queue")
        q_free(self.q)
        self.q = None
        self.qcnt = 0
        return self.show()

    # ---------------- Insert / remove ----------------
    def insert_head(self, s: str, n: int = 1) -> bool:
        return self._insert(q_insert_head, "insert head", s, n)

    def insert_tail(self, s: str, n: int = 1) -> bool:
        return self._insert(q_insert_tail, "insert tail", s, n)

    def _insert(self, op, what: str, s: str, n: int) -> bool:
        if n < 1:
            raise ValueError(f"Invalid number of insertions '{n}'")
        self._null_warning(what)
        ok = True
        for _ in range(n):
            if op(self.q, s):
                self.qcnt += 1
            else:
                logger.warning("Insertion of %s failed", s)
                ok = False
        logger.debug("%s %r x%d", what, s, n)
        return self.show() and ok

    def remove_head(self, expected: Optional[str] = None) -> bool:
        """Remove the head and compare it with `expected` when given."""
        return self._remove(expected, quiet=False)

    def remove_head_quiet(self) -> bool:
        """Remove the head without copying the value out."""
        return self._remove(None, quiet=True)

    def _remove(self, expected: Optional[str], quiet: bool) -> bool:
        self._null_warning("remove head")
        if self.q is not None and self.q.head is None:
            logger.warning("Warning: Calling remove head on empty queue")
        buf = None if quiet else bytearray(self.options.length)
        if not q_remove_head(self.q, buf):
            if self.qcnt > 0:
                return self._error("Removal from queue failed")
            logger.info("Removal from queue failed")
            self.show()
            return False
        self.qcnt -= 1
        ok = True
        if buf is not None:
            removed = _from_buffer(buf)
            if expected is not None:
                want = _truncate(expected, self.options.length)
                if removed != want:
                    ok = self._error(f"Removed value {removed} != expected value {want}")
            if ok:
                logger.info("Removed %s from queue", removed)
        return self.show() and ok

    # ---------------- Size / reorder ----------------
    def size(self, n: int = 1) -> bool:
        """Call q_size `n` times and compare with the shadow count."""
        if n < 1:
            raise ValueError(f"Invalid number of calls to size '{n}'")
        self._null_warning("size")
        cnt = 0
        for _ in range(n):
            cnt = q_size(self.q)
        if cnt != self.qcnt:
            return self._error(f"Computed queue size as {cnt}, but correct value is {self.qcnt}")
        logger.info("Queue size = %d", cnt)
        return self.show()

    def reverse(self) -> bool:
        self._null_warning("reverse")
        q_reverse(self.q)
        return self.show()

    def sort(self, cmp: str = "lexicographic", algo: str = "merge") -> bool:
        """Sort the queue and verify the adjacent pairs are in order."""
        compare = get_comparator(cmp)
        self._null_warning("sort")
        if self.q is not None and self.q.head is None:
            logger.warning("Warning: Calling sort on empty queue")
        q_sort(self.q, compare, algo)
        if self.q is not None:
            e = self.q.head
            while e is not None and e.next is not None:
                if compare(e.value, e.next.value) > 0:
                    return self._error(f"Not sorted in {cmp} order")
                e = e.next
        return self.show()

    # ---------------- Inspection ----------------
    def render(self) -> str:
        if self.q is None:
            return "q = NULL"
        vals = []
        for i, v in enumerate(self.q):
            if i >= MAX_SHOW:
                vals.append("...")
                break
            vals.append(_truncate(v, self.options.length))
        return "q = [" + " ".join(vals) + "]"

    def show(self) -> bool:
        """Check the invariants and log the queue contents."""
        if self.q is not None:
            try:
                self.q.check()
            except QueueCorruption as e:
                return self._error(str(e))
            if self.q.size != self.qcnt:
                return self._error(f"Queue has {self.q.size} elements, expected {self.qcnt}")
        logger.info(self.render())
        return True

    # ---------------- Options ----------------
    def option_values(self) -> Dict[str, Any]:
        return {f.name: getattr(self.options, f.name) for f in fields(self.options)}

    def set_option(self, name: str, value: str) -> None:
        """Parse and set one option; raises ValueError on bad input."""
        name = name.lower()
        if name not in OPTION_HELP:
            raise ValueError(f"Unknown option '{name}'")
        if name == "echo":
            parsed: Any = value.lower() in ("1", "true", "yes", "on")
        elif name == "seed" and value.lower() == "none":
            parsed = None
        else:
            try:
                parsed = int(value)
            except ValueError:
                raise ValueError(f"Option {name} expects an integer, got '{value}'") from None
        if name == "length" and parsed < 1:
            raise ValueError("length must be at least 1")
        if name == "malloc" and not 0 <= parsed <= 100:
            raise ValueError("malloc must be a percentage (0-100)")
        if name == "verbose":
            set_verbosity(parsed)
        setattr(self.options, name, parsed)
        if name == "malloc":
            self._injector.percent = parsed
        if name == "seed":
            self._injector.rng.seed(parsed)

    # ---------------- Bulk load / export ----------------
    def load(self, path: str, column: Optional[str] = None) -> bool:
        """Insert every string of a table column at the tail."""
        strings = load_strings(path, column)
        self._null_warning("load")
        if self.q is None:
            return False
        ok = True
        for s in strings:
            if q_insert_tail(self.q, s):
                self.qcnt += 1
            else:
                logger.warning("Insertion of %s failed", s)
                ok = False
        logger.info("Loaded %d strings from %s", len(strings), path)
        return self.show() and ok

    def _current_values(self) -> List[str]:
        if self.q is None:
            raise ValueError("Nothing to export: no queue.")
        return self.q.values()

    def export_csv(self, path: str) -> None:
        import csv
        vals = self._current_values()
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["position", "value"])
            for i, v in enumerate(vals):
                w.writerow([i, v])

    def export_json(self, path: str) -> None:
        """Export the queue contents (head first) to a JSON file."""
        import json
        vals = self._current_values()
        payload = {"size": q_size(self.q), "values": vals, "commands": self.command_log}
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)

    # ---------------- Benchmark ----------------
    def bench(self, n: int, rounds: int = 5, cmp: str = "lexicographic") -> Dict[str, float]:
        """Time both sort algorithms on `n` random strings (ms per round)."""
        if n < 0:
            raise ValueError(f"Invalid number of strings '{n}'")
        if rounds < 1:
            raise ValueError(f"Invalid number of rounds '{rounds}'")
        rng = random.Random(self.options.seed)
        alphabet = string.ascii_lowercase + string.digits
        data = ["".join(rng.choice(alphabet) for _ in range(rng.randint(1, 12))) for _ in range(n)]
        out: Dict[str, float] = {}
        for algo in ("merge", "bottom_up"):
            total = 0.0
            for _ in range(rounds):
                q = Queue()
                for s in data:
                    q.insert_tail(s)
                t0 = time.perf_counter()
                q.sort(cmp, algo)
                total += time.perf_counter() - t0
            out[f"{algo}_ms"] = total * 1000 / rounds
        return out


def _from_buffer(buf: bytearray) -> str:
    nul = buf.find(0)
    raw = bytes(buf if nul < 0 else buf[:nul])
    return raw.decode("utf-8", errors="replace")


def _truncate(s: str, length: int) -> str:
    """Cut `s` the way a removal buffer of `length` bytes would."""
    data = s.encode("utf-8")[:max(length - 1, 0)]
    return data.decode("utf-8", errors="replace")

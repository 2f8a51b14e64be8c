"""
LINKQ Command Line Interface (CLI)
==================================

This file provides the interactive queue test driver you run like:

    python -m linkq.cli
    python -m linkq.cli -f traces/trace-01.cmd -v 2

It demonstrates:
- Argument parsing (argparse)
- A REPL loop (Read-Eval-Print Loop) for commands
- Mapping user commands to harness methods (insert, remove, reverse, sort)

Commands can also be read from a script with `-f` or `source`. Lines starting
with '#' are comments.
"""

from __future__ import annotations
import argparse, logging, shlex
from typing import Optional
from .engine import Harness, HarnessOptions, OPTION_HELP, set_verbosity
from .queue import q_free

logger = logging.getLogger(__name__)

# -----------------------------
# Help text (grouped, with examples)
# -----------------------------
HELP_TEXT = """
LINKQ commands (grouped)
-----------------------

1) Queue lifecycle
   new                              Create new queue
   free                             Delete queue

2) Insert / remove
   ih str [n]                       Insert string str at head n times (example: ih dolphin 10)
   it str [n]                       Insert string str at tail n times (example: it "a b" 2)
   rh [str]                         Remove from head, optionally compare to str
   rhq                              Remove from head without reporting value
   load "<path>" [column]           Insert every string of a CSV/Excel column at the tail

3) Inspect
   size [n]                         Compute queue size n times
   show                             Display queue contents

4) Reorder
   reverse                          Reverse queue
   sort [lexicographic|natural] [merge|bottom_up]
                                    (example: sort natural bottom_up)

5) Export (current queue)
   export csv "<out.csv>"           (example: export csv "queue.csv")
   export json "<out.json>"         (example: export json "queue.json")

6) Driver
   option [name value]              Display or set options (example: option malloc 10)
   source "<file>"                  Read commands from file
   log "<file>"                     Copy output to file
   bench <n> [rounds]               Time both sort algorithms on n random strings
   help
   quit
"""


def _int_arg(parts, i: int, default: int) -> int:
    if len(parts) <= i:
        return default
    try:
        return int(parts[i])
    except ValueError:
        raise ValueError(f"Invalid number '{parts[i]}'") from None


def handle(harness: Harness, line: str) -> Optional[bool]:
    """Handle one command line.

    Returns the harness result for queue commands, None for driver commands.
    """
    if line.lstrip().startswith("#"):
        return None
    parts = shlex.split(line)
    if not parts:
        return None
    cmd = parts[0].lower()
    harness.command_log.append(line.strip())

    if cmd == "help":
        print(HELP_TEXT)
        return None

    if cmd == "new":
        return harness.new()

    if cmd == "free":
        return harness.free()

    if cmd in ("ih", "it"):
        if len(parts) < 2:
            raise ValueError(f"{cmd} needs a string argument")
        n = _int_arg(parts, 2, 1)
        if cmd == "ih":
            return harness.insert_head(parts[1], n)
        return harness.insert_tail(parts[1], n)

    if cmd == "rh":
        return harness.remove_head(parts[1] if len(parts) >= 2 else None)

    if cmd == "rhq":
        return harness.remove_head_quiet()

    if cmd == "size":
        return harness.size(_int_arg(parts, 1, 1))

    if cmd == "show":
        return harness.show()

    if cmd == "reverse":
        return harness.reverse()

    if cmd == "sort":
        cmp = parts[1].lower() if len(parts) >= 2 else "lexicographic"
        algo = parts[2].lower() if len(parts) >= 3 else "merge"
        return harness.sort(cmp, algo)

    if cmd == "load":
        if len(parts) < 2:
            raise ValueError('Usage: load "path.csv" [column]')
        return harness.load(parts[1], parts[2] if len(parts) >= 3 else None)

    if cmd == "option":
        if len(parts) == 1:
            for name, value in harness.option_values().items():
                print(f"\t{name}\t{value}\t{OPTION_HELP[name]}")
            return None
        if len(parts) != 3:
            raise ValueError("Usage: option <name> <value>")
        harness.set_option(parts[1], parts[2])
        return None

    if cmd == "source":
        if len(parts) < 2:
            raise ValueError('Usage: source "file"')
        run_file(harness, parts[1])
        return None

    if cmd == "log":
        if len(parts) < 2:
            raise ValueError('Usage: log "file"')
        _add_log_file(parts[1])
        print(f"Logging to {parts[1]}")
        return None

    if cmd == "export":
        if len(parts) < 3:
            print('Usage: export csv "out.csv"  OR  export json "out.json"')
            return None
        fmt = parts[1].lower()
        out_path = parts[2]
        if fmt == "csv":
            harness.export_csv(out_path)
            print(f"Exported CSV to {out_path}")
            return None
        if fmt == "json":
            harness.export_json(out_path)
            print(f"Exported JSON to {out_path}")
            return None
        print("Unknown export format. Use: csv or json")
        return None

    if cmd == "bench":
        n = _int_arg(parts, 1, 1000)
        rounds = _int_arg(parts, 2, 5)
        res = harness.bench(n, rounds)
        print(f"merge={res['merge_ms']:.3f}ms | bottom_up={res['bottom_up_ms']:.3f}ms")
        return None

    print("Unknown command. Type 'help'.")
    return False


def run_line(harness: Harness, line: str) -> bool:
    """Run one command, turning handler exceptions into counted errors.

    Returns False once the command loop should stop.
    """
    stripped = line.strip()
    if stripped.lower() in ("quit", "exit"):
        return False
    try:
        handle(harness, stripped)
    except Exception as e:
        print(f"Error: {e}")
        harness.errors += 1
    return not harness.exceeded


def run_file(harness: Harness, path: str) -> bool:
    """Run every command in a script file."""
    with open(path, encoding="utf-8") as f:
        for line in f:
            line = line.rstrip("\n")
            if harness.options.echo and line.strip():
                print(f"cmd> {line}")
            if not run_line(harness, line):
                return False
    return True


# Handler installed by `log` / --log; replaced on each call
_log_handler: Optional[logging.FileHandler] = None


def _add_log_file(path: str) -> None:
    global _log_handler
    log = logging.getLogger("linkq")
    if _log_handler is not None:
        log.removeHandler(_log_handler)
        _log_handler.close()
    h = logging.FileHandler(path, encoding="utf-8")
    h.setFormatter(logging.Formatter("%(message)s"))
    log.addHandler(h)
    _log_handler = h


def main(argv=None) -> int:
    """Entry point for the LINKQ CLI.

    1) Parse options and set up logging
    2) Run a command script if one was given
    3) Otherwise start an interactive REPL
    """
    ap = argparse.ArgumentParser(description="Interactive driver for the linked-list string queue")
    ap.add_argument("-f", "--file", help="Read commands from file")
    ap.add_argument("-v", "--verbose", type=int, default=3, choices=range(5), help="Verbosity level (0-4)")
    ap.add_argument("-l", "--log", help="Copy output to file")
    ap.add_argument("--seed", type=int, default=None, help="Seed for allocation failure injection")
    args = ap.parse_args(argv)

    logging.basicConfig(format="%(message)s")
    set_verbosity(args.verbose)
    if args.log:
        _add_log_file(args.log)

    harness = Harness(options=HarnessOptions(verbose=args.verbose, seed=args.seed))

    if args.file:
        try:
            run_file(harness, args.file)
        except OSError as e:
            print(f"Error: {e}")
            return 1
    else:
        print("Type 'help' for commands.")
        while True:
            try:
                line = input("cmd> ")
            except EOFError:
                break
            if not run_line(harness, line):
                break

    q_free(harness.q)
    harness.q = None
    if harness.errors:
        logger.error("%d error(s) found", harness.errors)
    return 0 if harness.errors == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())

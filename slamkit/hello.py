"""The smallest program in the toolkit: a greeting."""

from __future__ import annotations

import argparse
import sys

GREETING = "Hello SLAM"


def _greeting_line() -> str:
    return f"{GREETING}\n"


def print_hello() -> str:
    """Write the greeting line to standard output and return the greeting."""
    line = _greeting_line()
    sys.stdout.write(line)
    sys.stdout.flush()
    return line.rstrip("\n")


def main(argv: list[str] | None = None) -> int:
    """Print the greeting and return the exit status."""
    parser = argparse.ArgumentParser(prog="slamkit-hello", description="Print a greeting.")
    parser.parse_args(argv)
    print_hello()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
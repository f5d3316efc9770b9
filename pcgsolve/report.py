"""Text reporting helpers: vector snippets and kernel timings."""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Sequence, TextIO


def format_snippet(values: Sequence[float], n: int) -> str:
    """Format the first ``n`` values with two decimals each, ending in a newline."""
    if n < 0:
        raise ValueError("Snippet length must not be negative")
    if n > len(values):
        raise ValueError(f"Cannot show {n} values of a vector of length {len(values)}")
    return "".join(f" {float(value):.2f} " for value in values[:n]) + "\n"


def format_timing(label: str, milliseconds: float) -> str:
    """Format one timing line: label padded to 40 columns, then milliseconds."""
    return f"{label:<40} {milliseconds:<6.3f} ms\n"


@dataclass
class _Timing:
    label: str
    milliseconds: float = 0.0


@contextmanager
def timed(label: str, out: TextIO | None = None) -> Iterator[_Timing]:
    """Time the enclosed block and write a timing line to ``out`` when it ends."""
    stream = sys.stdout if out is None else out
    timing = _Timing(label)
    start = time.perf_counter()
    yield timing
    timing.milliseconds = (time.perf_counter() - start) * 1e3
    stream.write(format_timing(label, timing.milliseconds))
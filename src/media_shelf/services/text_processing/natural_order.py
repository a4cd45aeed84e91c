"""Natural ordering for file and folder names."""

import re
from typing import Callable, Iterable, List, TypeVar

T = TypeVar("T")

_DIGIT_RUN = re.compile(r"(\d+)")


def natural_key(text: str) -> tuple:
    """
    Sort key that compares embedded digit runs by numeric value.

    ``re.split`` with a capturing group alternates text and digit runs,
    so position i always holds the same kind in every key and the parts
    compare str-to-str and int-to-int. The raw string is appended as a
    final tie-breaker so "p01" and "p1" still have a stable order.

    Examples:
        >>> sorted(["ch1", "ch10", "ch2"], key=natural_key)
        ['ch1', 'ch2', 'ch10']
    """
    parts = _DIGIT_RUN.split(text)
    key = tuple(int(part) if i % 2 else part for i, part in enumerate(parts))
    return (key, text)


def natural_sorted(items: Iterable[T], key: Callable[[T], str] = str) -> List[T]:
    """Return ``items`` sorted by the natural order of ``key(item)``."""
    return sorted(items, key=lambda item: natural_key(key(item)))

"""
Deduplication helpers for crawler outputs.
"""
from __future__ import annotations

import re
from typing import Callable, Hashable, Iterable, List, TypeVar

T = TypeVar("T")

_WHITESPACE = re.compile(r"\s+")


def title_key(title: str) -> str:
    """Comparison key for titles: case-folded, whitespace-insensitive."""
    return _WHITESPACE.sub("", title or "").casefold()


def dedupe_by_key(items: Iterable[T], key_fn: Callable[[T], Hashable]) -> List[T]:
    seen = set()
    result: List[T] = []
    for item in items:
        key = key_fn(item)
        if key in seen:
            continue
        seen.add(key)
        result.append(item)
    return result

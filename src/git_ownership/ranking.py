from __future__ import annotations

from typing import Callable, Iterable

from .errors import UnknownOrderKey
from .models import AuthorRecord

# primary key first, then the fixed fallbacks used on ties
KEY_ORDER: dict[str, tuple[str, str, str]] = {
    "lines": ("lines", "commits", "files"),
    "commits": ("commits", "lines", "files"),
    "files": ("files", "lines", "commits"),
}

_METRICS: dict[str, Callable[[AuthorRecord], int]] = {
    "lines": lambda a: a.line_count,
    "commits": lambda a: a.commit_count,
    "files": lambda a: a.file_count,
}


def sort_key_for(order_by: str) -> Callable[[AuthorRecord], tuple[int, int, int, str]]:
    try:
        first, second, third = KEY_ORDER[order_by]
    except KeyError:
        raise UnknownOrderKey(f"unknown order key {order_by!r}; expected one of: {', '.join(KEY_ORDER)}") from None
    m1, m2, m3 = _METRICS[first], _METRICS[second], _METRICS[third]

    def key(a: AuthorRecord) -> tuple[int, int, int, str]:
        return (-m1(a), -m2(a), -m3(a), a.name)

    return key


def rank_authors(authors: Iterable[AuthorRecord], order_by: str = "lines") -> list[AuthorRecord]:
    return sorted(authors, key=sort_key_for(order_by))

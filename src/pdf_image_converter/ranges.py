"""Page range expressions such as ``"1, 3-5"``.

Parsing is permissive: a token that does not parse, or that lies entirely
outside the document, is dropped while the rest of the expression still
applies. Partially typed input like ``"1, 3-"`` therefore resolves to the
pages that are already meaningful.
"""

from __future__ import annotations

import re

_INTEGER = re.compile(r"\+?[0-9]+")


def _parse_int(value: str) -> int | None:
    text = value.strip()
    if not _INTEGER.fullmatch(text):
        return None
    return int(text)


def _expand_span(token: str, total_pages: int) -> range:
    # Only the first two fields count, so "1-2-3" reads as 1-2.
    fields = token.split("-")
    start = _parse_int(fields[0])
    end = _parse_int(fields[1])
    if start is None or end is None:
        return range(0)
    lo = max(1, min(start, end))
    hi = min(total_pages, max(start, end))
    return range(lo, hi + 1)


def parse_page_range(expression: str, total_pages: int) -> list[int]:
    """Resolve *expression* to ascending, distinct 1-based page numbers.

    An empty or whitespace-only expression selects every page.

    >>> parse_page_range("1, 3-5, 99", 5)
    [1, 3, 4, 5]
    >>> parse_page_range("5-3", 5)
    [3, 4, 5]
    """
    if total_pages <= 0:
        return []
    if not expression or not expression.strip():
        return list(range(1, total_pages + 1))

    pages: set[int] = set()
    for part in expression.split(","):
        token = part.strip()
        if not token:
            continue
        if "-" in token:
            pages.update(_expand_span(token, total_pages))
            continue
        number = _parse_int(token)
        if number is not None and 1 <= number <= total_pages:
            pages.add(number)
    return sorted(pages)


__all__ = ["parse_page_range"]

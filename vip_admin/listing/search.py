"""Client-side search over the records already loaded in a list view."""

from collections.abc import Sequence
from typing import TypeVar

RecordT = TypeVar("RecordT")


def search_overlay(buffer: Sequence[RecordT], term: str | None, fields: Sequence[str]) -> Sequence[RecordT]:
    """Return the loaded records where any of ``fields`` contains ``term``.

    Matching is a case-insensitive substring test. An empty term returns
    ``buffer`` itself; otherwise a new list in buffer order. Never queries
    the store.
    """
    if not term:
        return buffer
    needle = term.lower()
    return [
        record
        for record in buffer
        if any(needle in str(getattr(record, name, None) or "").lower() for name in fields)
    ]

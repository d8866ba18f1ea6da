"""
Free-text filter applied to an already fetched page of events.
Matching is case-insensitive substring over title, description, location
and category names. No index is involved.
"""

from typing import Iterable, Optional, Protocol, Sequence, TypeVar


class Searchable(Protocol):
    title: str
    description: Optional[str]
    location: Optional[str]
    categories: Sequence[str]


T = TypeVar("T", bound=Searchable)


def matches_search(item: Searchable, query: str) -> bool:
    needle = query.strip().lower()
    if not needle:
        return True
    fields = [item.title, item.description or "", item.location or "", *item.categories]
    return any(needle in field.lower() for field in fields)


def filter_by_search(items: Iterable[T], query: Optional[str]) -> list[T]:
    if not query or not query.strip():
        return list(items)
    return [item for item in items if matches_search(item, query)]

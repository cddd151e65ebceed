"""Filtered/searched memo list and counters derived from the board's state. Pure functions only."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from memoboard.memos.schemas import ALL_CATEGORIES, Memo


@dataclass(frozen=True)
class MemoFilters:
    query: str = ""
    category: str = ALL_CATEGORIES


@dataclass(frozen=True)
class MemoStats:
    total: int
    by_category: dict[str, int] = field(default_factory=dict)
    filtered: int = 0


def filter_by_category(memos: Iterable[Memo], category: str) -> list[Memo]:
    if category == ALL_CATEGORIES:
        return list(memos)
    return [m for m in memos if m.category == category]


def matches(memo: Memo, needle: str) -> bool:
    """Case-insensitive substring match on title, content or any tag. `needle` must be lowercased."""
    return (
        needle in memo.title.lower()
        or needle in memo.content.lower()
        or any(needle in tag.lower() for tag in memo.tags)
    )


def search(memos: Iterable[Memo], query: str) -> list[Memo]:
    needle = query.strip().lower()
    if not needle:
        return list(memos)
    return [m for m in memos if matches(m, needle)]


def apply_filters(memos: Sequence[Memo], filters: MemoFilters) -> list[Memo]:
    # category first, then search; both keep relative order
    return search(filter_by_category(memos, filters.category), filters.query)


def compute_stats(canonical: Sequence[Memo], filtered: Sequence[Memo]) -> MemoStats:
    by_category: dict[str, int] = {}
    for memo in canonical:
        by_category[memo.category] = by_category.get(memo.category, 0) + 1
    return MemoStats(total=len(canonical), by_category=by_category, filtered=len(filtered))


def project(
    optimistic: Sequence[Memo],
    canonical: Sequence[Memo],
    filters: MemoFilters,
) -> tuple[list[Memo], MemoStats]:
    visible = apply_filters(optimistic, filters)
    return visible, compute_stats(canonical, visible)

"""Trending search keywords, derived from the SearchLog.

Searches are grouped by the raw material the keyword extractor recognised,
falling back to the normalized keyword when none was found. Blank searches
(browsing without a keyword) are not counted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from protean.exceptions import ValidationError

from marketplace.discovery.search_log import SearchLog
from marketplace.shared.lookup import find_all

MAX_TRENDING = 50


@dataclass(frozen=True)
class TrendingKeyword:
    keyword: str
    category: str | None
    search_count: int
    last_searched_at: datetime | None


def _group_key(log: SearchLog) -> str:
    return (log.raw_material or log.normalized_keyword or "").strip().lower()


def trending_keywords(limit: int = 10, category: str | None = None) -> list[TrendingKeyword]:
    """Most searched keywords first; ties break alphabetically."""
    if not 1 <= limit <= MAX_TRENDING:
        raise ValidationError({"limit": [f"must be between 1 and {MAX_TRENDING}"]})

    logs = find_all(SearchLog, category=category) if category else find_all(SearchLog)

    groups: dict[str, list[SearchLog]] = {}
    for log in logs:
        key = _group_key(log)
        if key:
            groups.setdefault(key, []).append(log)

    trending = []
    for keyword, entries in groups.items():
        stamped = [entry for entry in entries if entry.searched_at is not None]
        latest = max(stamped, key=lambda entry: entry.searched_at) if stamped else entries[-1]
        trending.append(
            TrendingKeyword(
                keyword=keyword,
                category=latest.category or next((entry.category for entry in entries if entry.category), None),
                search_count=len(entries),
                last_searched_at=latest.searched_at,
            )
        )

    trending.sort(key=lambda trend: (-trend.search_count, trend.keyword))
    return trending[:limit]

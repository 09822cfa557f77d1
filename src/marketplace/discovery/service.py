"""Discovery service: runs a requester's search end to end.

Normalizes the query, snapshots the active fulfillers, ranks them and records
the search. Only the ranking step decides what a requester sees; everything
around it is best-effort.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from marketplace.discovery.engine import Candidate, RankedFulfiller, SearchFilters, rank_fulfillers
from marketplace.discovery.normalization import ExtractedKeywords, NormalizedQuery, extract_keywords, normalize_query
from marketplace.discovery.search_log import SearchLog
from marketplace.discovery.translation import get_translator
from marketplace.discovery.translation.port import TranslationPort
from marketplace.party.fulfiller import Fulfiller
from marketplace.shared.geo import GeoPoint
from marketplace.shared.lookup import find_all

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DiscoveryResult:
    query: NormalizedQuery
    keywords: ExtractedKeywords
    filters: SearchFilters
    results: list[RankedFulfiller]

    @property
    def fallback(self) -> bool:
        return self.query.fallback


def load_candidates() -> list[Candidate]:
    """Point-in-time snapshot of every active fulfiller."""
    return [Candidate.from_fulfiller(fulfiller) for fulfiller in find_all(Fulfiller, is_active=True)]


def discover_fulfillers(
    latitude: float,
    longitude: float,
    keyword: str | None = None,
    filters: SearchFilters | None = None,
    requester_id: str | None = None,
    translator: TranslationPort | None = None,
) -> DiscoveryResult:
    origin = GeoPoint(latitude=latitude, longitude=longitude)
    filters = filters or SearchFilters()

    query = normalize_query(keyword, translator or get_translator())
    keywords = extract_keywords(query.processed_text)
    results = rank_fulfillers(
        origin.latitude,
        origin.longitude,
        load_candidates(),
        keyword=query.processed_text,
        filters=filters,
    )

    current_domain.repository_for(SearchLog).add(
        SearchLog(
            requester_id=requester_id,
            keyword=query.original_text,
            normalized_keyword=query.processed_text,
            detected_language=query.detected_language,
            was_translated=query.was_translated,
            fallback=query.fallback,
            raw_material=keywords.raw_material,
            category=keywords.category,
            results_count=len(results),
            latitude=origin.latitude,
            longitude=origin.longitude,
            filters=json.dumps(filters.as_dict()),
            searched_at=datetime.now(UTC),
        )
    )

    logger.info(
        "fulfillers_discovered",
        keyword=query.processed_text,
        results=len(results),
        fallback=query.fallback,
        **filters.as_dict(),
    )
    return DiscoveryResult(query=query, keywords=keywords, filters=filters, results=results)

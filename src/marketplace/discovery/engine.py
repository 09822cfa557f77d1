"""Geo-keyword discovery: filters and ranks fulfillers for a requester.

Pure functions over plain snapshots: nothing here touches a repository, so the
ranking is reproducible for any given set of candidates.

Pipeline:
    1. keyword filter   (skipped for an empty keyword)
    2. distance filter  (haversine; candidates without a location are dropped)
    3. rating filter    (minimum average, optionally verified fulfillers only)
    4. ranking          (rating desc, distance asc, fulfiller id asc)
"""

from __future__ import annotations

from dataclasses import dataclass, field

from protean.exceptions import ValidationError

from marketplace.shared.geo import haversine_km

DEFAULT_MAX_DISTANCE_KM = 10.0
DEFAULT_MIN_RATING = 0.0


@dataclass(frozen=True)
class SearchFilters:
    max_distance_km: float = DEFAULT_MAX_DISTANCE_KM
    min_rating: float = DEFAULT_MIN_RATING
    verified_only: bool = False

    def __post_init__(self):
        errors = {}
        if self.max_distance_km is None or self.max_distance_km <= 0:
            errors["max_distance_km"] = ["Maximum distance must be greater than 0"]
        if self.min_rating is None or not 0 <= self.min_rating <= 5:
            errors["min_rating"] = ["Minimum rating must be between 0 and 5"]
        if errors:
            raise ValidationError(errors)

    def as_dict(self) -> dict:
        return {
            "max_distance_km": self.max_distance_km,
            "min_rating": self.min_rating,
            "verified_only": self.verified_only,
        }


@dataclass(frozen=True)
class CandidateItem:
    item_id: str
    name: str
    unit_price: float
    unit: str
    description: str | None = None
    category: str | None = None
    is_available: bool = True
    minimum_order_quantity: int = 1

    def matches(self, keyword: str) -> bool:
        needle = keyword.lower()
        return any(needle in (value or "").lower() for value in (self.name, self.description, self.category))


@dataclass(frozen=True)
class Candidate:
    """Point-in-time snapshot of a fulfiller as seen by discovery."""

    fulfiller_id: str
    name: str
    latitude: float | None = None
    longitude: float | None = None
    address: str | None = None
    business_name: str | None = None
    rating_average: float = 0.0
    rating_count: int = 0
    is_verified: bool = False
    items: tuple[CandidateItem, ...] = field(default_factory=tuple)

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @classmethod
    def from_fulfiller(cls, fulfiller) -> Candidate:
        location = fulfiller.location
        rating = fulfiller.rating
        return cls(
            fulfiller_id=str(fulfiller.id),
            name=fulfiller.name,
            business_name=fulfiller.business_name,
            latitude=location.latitude if location else None,
            longitude=location.longitude if location else None,
            address=location.address if location else None,
            rating_average=rating.average if rating else 0.0,
            rating_count=rating.count if rating else 0,
            is_verified=bool(fulfiller.is_verified),
            items=tuple(
                CandidateItem(
                    item_id=str(item.id),
                    name=item.name,
                    description=item.description,
                    category=item.category,
                    unit_price=item.unit_price,
                    unit=item.unit,
                    is_available=bool(item.is_available),
                    minimum_order_quantity=item.minimum_order_quantity or 1,
                )
                for item in fulfiller.catalog
            ),
        )


@dataclass(frozen=True)
class RankedFulfiller:
    candidate: Candidate
    distance_km: float
    matching_items: tuple[CandidateItem, ...]

    @property
    def display_distance_km(self) -> float:
        return round(self.distance_km, 2)


def matching_items(candidate: Candidate, keyword: str | None) -> tuple[CandidateItem, ...]:
    """Available items that match the keyword; every available item when there is none."""
    available = tuple(item for item in candidate.items if item.is_available)
    if not keyword:
        return available
    return tuple(item for item in available if item.matches(keyword))


def rank_fulfillers(
    latitude: float,
    longitude: float,
    candidates,
    keyword: str | None = None,
    filters: SearchFilters | None = None,
) -> list[RankedFulfiller]:
    """Filter and rank candidates around the given coordinate.

    Zero results is a normal outcome, never an error.
    """
    filters = filters or SearchFilters()
    keyword = (keyword or "").strip()

    ranked = []
    for candidate in candidates:
        items = matching_items(candidate, keyword)
        if keyword and not items:
            continue

        if not candidate.has_location:
            continue
        distance = haversine_km(latitude, longitude, candidate.latitude, candidate.longitude)
        if distance > filters.max_distance_km:
            continue

        if candidate.rating_average < filters.min_rating:
            continue
        if filters.verified_only and not candidate.is_verified:
            continue

        ranked.append(RankedFulfiller(candidate=candidate, distance_km=distance, matching_items=items))

    ranked.sort(key=lambda r: (-r.candidate.rating_average, r.distance_km, r.candidate.fulfiller_id))
    return ranked

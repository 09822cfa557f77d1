"""Tests for the discovery filter/rank pipeline."""

import pytest
from protean.exceptions import ValidationError

from marketplace.discovery.engine import (
    Candidate,
    CandidateItem,
    SearchFilters,
    matching_items,
    rank_fulfillers,
)

ORIGIN = (18.5204, 73.8567)
KM_PER_DEGREE_LATITUDE = 111.19492664455873


def _north_of_origin(km):
    return ORIGIN[0] + km / KM_PER_DEGREE_LATITUDE


def _item(name="Basmati Rice", **overrides):
    fields = {"item_id": f"item-{name.lower().replace(' ', '-')}", "name": name, "unit_price": 80.0, "unit": "kg"}
    fields.update(overrides)
    return CandidateItem(**fields)


def _candidate(fulfiller_id, km, rating=0.0, verified=False, items=None, located=True):
    return Candidate(
        fulfiller_id=fulfiller_id,
        name=fulfiller_id.title(),
        latitude=_north_of_origin(km) if located else None,
        longitude=ORIGIN[1] if located else None,
        rating_average=rating,
        rating_count=1 if rating else 0,
        is_verified=verified,
        items=tuple(items if items is not None else [_item()]),
    )


def _ids(ranked):
    return [r.candidate.fulfiller_id for r in ranked]


class TestDistanceFilter:
    def test_three_eight_twelve_km_with_ten_km_radius(self):
        candidates = [
            _candidate("near", 3, rating=4.0),
            _candidate("mid", 8, rating=4.5),
            _candidate("far", 12, rating=5.0),
        ]
        ranked = rank_fulfillers(*ORIGIN, candidates, filters=SearchFilters(max_distance_km=10))
        assert _ids(ranked) == ["mid", "near"]

    def test_distances_are_reported(self):
        ranked = rank_fulfillers(*ORIGIN, [_candidate("near", 3)])
        assert ranked[0].display_distance_km == pytest.approx(3.0, abs=0.01)

    def test_candidates_without_location_are_excluded(self):
        candidates = [_candidate("nowhere", 0, located=False), _candidate("near", 1)]
        assert _ids(rank_fulfillers(*ORIGIN, candidates)) == ["near"]

    def test_default_radius_is_ten_km(self):
        candidates = [_candidate("inside", 9.9), _candidate("outside", 10.1)]
        assert _ids(rank_fulfillers(*ORIGIN, candidates)) == ["inside"]


class TestRanking:
    def test_rating_then_distance(self):
        candidates = [
            _candidate("close-low", 1, rating=3.0),
            _candidate("far-high", 6, rating=4.8),
            _candidate("close-high", 2, rating=4.8),
        ]
        assert _ids(rank_fulfillers(*ORIGIN, candidates)) == ["close-high", "far-high", "close-low"]

    def test_ties_broken_by_id(self):
        candidates = [_candidate("b-traders", 2, rating=4.0), _candidate("a-traders", 2, rating=4.0)]
        assert _ids(rank_fulfillers(*ORIGIN, candidates)) == ["a-traders", "b-traders"]

    def test_no_results_is_not_an_error(self):
        assert rank_fulfillers(*ORIGIN, []) == []


class TestKeywordFilter:
    def test_keyword_matches_name_case_insensitively(self):
        candidates = [
            _candidate("rice-seller", 2, items=[_item("Basmati Rice")]),
            _candidate("dal-seller", 2, items=[_item("Toor Dal")]),
        ]
        assert _ids(rank_fulfillers(*ORIGIN, candidates, keyword="RICE")) == ["rice-seller"]

    def test_keyword_matches_category_and_description(self):
        candidates = [
            _candidate("by-category", 1, items=[_item("Sona Masoori", category="rice")]),
            _candidate("by-description", 2, items=[_item("Kolam", description="aged rice, 25 kg bag")]),
        ]
        assert _ids(rank_fulfillers(*ORIGIN, candidates, keyword="rice")) == ["by-category", "by-description"]

    def test_unavailable_items_do_not_match(self):
        candidates = [_candidate("sold-out", 1, items=[_item("Basmati Rice", is_available=False)])]
        assert rank_fulfillers(*ORIGIN, candidates, keyword="rice") == []

    def test_only_matching_items_are_returned(self):
        candidate = _candidate("mixed", 1, items=[_item("Basmati Rice"), _item("Toor Dal")])
        ranked = rank_fulfillers(*ORIGIN, [candidate], keyword="dal")
        assert [item.name for item in ranked[0].matching_items] == ["Toor Dal"]

    def test_empty_keyword_skips_filter(self):
        candidates = [_candidate("a", 1, items=[]), _candidate("b", 2)]
        assert _ids(rank_fulfillers(*ORIGIN, candidates, keyword="  ")) == ["a", "b"]

    def test_matching_items_without_keyword_returns_available(self):
        candidate = _candidate("x", 1, items=[_item("Rice"), _item("Dal", is_available=False)])
        assert [item.name for item in matching_items(candidate, None)] == ["Rice"]


class TestRatingFilters:
    def test_min_rating(self):
        candidates = [_candidate("good", 1, rating=4.2), _candidate("poor", 1, rating=2.9)]
        ranked = rank_fulfillers(*ORIGIN, candidates, filters=SearchFilters(min_rating=3.0))
        assert _ids(ranked) == ["good"]

    def test_verified_only(self):
        candidates = [_candidate("verified", 3, verified=True), _candidate("unverified", 1)]
        ranked = rank_fulfillers(*ORIGIN, candidates, filters=SearchFilters(verified_only=True))
        assert _ids(ranked) == ["verified"]


class TestSearchFilters:
    @pytest.mark.parametrize("distance", [0, -1])
    def test_distance_must_be_positive(self, distance):
        with pytest.raises(ValidationError) as exc:
            SearchFilters(max_distance_km=distance)
        assert "max_distance_km" in exc.value.messages

    @pytest.mark.parametrize("rating", [-0.1, 5.1])
    def test_rating_must_be_in_range(self, rating):
        with pytest.raises(ValidationError) as exc:
            SearchFilters(min_rating=rating)
        assert "min_rating" in exc.value.messages

    def test_as_dict(self):
        assert SearchFilters().as_dict() == {"max_distance_km": 10.0, "min_rating": 0.0, "verified_only": False}

"""SearchLog aggregate: one record per discovery query, for demand analytics."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from marketplace.domain import marketplace


@marketplace.aggregate
class SearchLog:
    requester_id = Identifier()
    keyword = String(max_length=500)
    normalized_keyword = String(max_length=500)
    detected_language = String(max_length=10)
    was_translated = Boolean(default=False)
    fallback = Boolean(default=False)
    raw_material = String(max_length=100)
    category = String(max_length=100)
    results_count = Integer(default=0, min_value=0)
    latitude = Float()
    longitude = Float()
    filters = Text()  # JSON: SearchFilters.as_dict()
    searched_at = DateTime()

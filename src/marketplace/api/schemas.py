"""Pydantic request/response schemas for the marketplace API.

These are external contracts, separate from internal Protean commands.
Response models are built from aggregates with ``from_aggregate``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class GeoPointSchema(BaseModel):
    latitude: float
    longitude: float
    address: str | None = None

    @classmethod
    def from_value(cls, point) -> GeoPointSchema | None:
        if point is None:
            return None
        return cls(latitude=point.latitude, longitude=point.longitude, address=point.address)


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Parties
# ---------------------------------------------------------------------------
class RegisterPartyRequest(BaseModel):
    id: str = Field(min_length=1, max_length=255)
    name: str = Field(min_length=1, max_length=200)
    business_name: str | None = None
    phone: str | None = None
    email: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    address: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "ful-001",
                    "name": "Ramesh Patil",
                    "business_name": "Patil Agro Traders",
                    "phone": "+91 98200 00000",
                    "latitude": 18.5204,
                    "longitude": 73.8567,
                }
            ]
        }
    }


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    business_name: str | None = None
    phone: str | None = None
    email: str | None = None


class UpdateLocationRequest(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: str | None = None


class VerifyFulfillerRequest(BaseModel):
    is_verified: bool = True


class PartyIdResponse(BaseModel):
    id: str


class RatingSchema(BaseModel):
    average: float
    count: int


class CatalogItemResponse(BaseModel):
    id: str
    name: str
    description: str | None = None
    category: str | None = None
    unit_price: float
    unit: str
    quantity_available: int
    is_available: bool
    minimum_order_quantity: int
    delivery_time: str | None = None

    @classmethod
    def from_entity(cls, item) -> CatalogItemResponse:
        return cls(
            id=str(item.id),
            name=item.name,
            description=item.description,
            category=item.category,
            unit_price=item.unit_price,
            unit=item.unit,
            quantity_available=item.quantity_available or 0,
            is_available=bool(item.is_available),
            minimum_order_quantity=item.minimum_order_quantity or 1,
            delivery_time=item.delivery_time,
        )


class PartyResponse(BaseModel):
    id: str
    name: str
    business_name: str | None = None
    phone: str | None = None
    email: str | None = None
    location: GeoPointSchema | None = None

    @classmethod
    def from_aggregate(cls, party) -> PartyResponse:
        return cls(
            id=str(party.id),
            name=party.name,
            business_name=party.business_name,
            phone=party.phone,
            email=party.email,
            location=GeoPointSchema.from_value(party.location),
        )


class FulfillerResponse(PartyResponse):
    is_verified: bool = False
    is_active: bool = True
    rating: RatingSchema
    catalog: list[CatalogItemResponse] = []

    @classmethod
    def from_aggregate(cls, fulfiller) -> FulfillerResponse:
        rating = fulfiller.rating
        return cls(
            id=str(fulfiller.id),
            name=fulfiller.name,
            business_name=fulfiller.business_name,
            phone=fulfiller.phone,
            email=fulfiller.email,
            location=GeoPointSchema.from_value(fulfiller.location),
            is_verified=bool(fulfiller.is_verified),
            is_active=bool(fulfiller.is_active),
            rating=RatingSchema(
                average=rating.average if rating else 0.0,
                count=rating.count if rating else 0,
            ),
            catalog=[CatalogItemResponse.from_entity(item) for item in fulfiller.catalog],
        )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------
class AddCatalogItemRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    category: str | None = None
    unit_price: float
    unit: str
    quantity_available: int = 0
    is_available: bool = True
    minimum_order_quantity: int = 1
    delivery_time: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Basmati Rice",
                    "category": "grains",
                    "unit_price": 85.0,
                    "unit": "kg",
                    "quantity_available": 500,
                    "minimum_order_quantity": 10,
                }
            ]
        }
    }


class UpdateCatalogItemRequest(BaseModel):
    name: str | None = None
    description: str | None = None
    category: str | None = None
    unit_price: float | None = None
    unit: str | None = None
    quantity_available: int | None = None
    is_available: bool | None = None
    minimum_order_quantity: int | None = None
    delivery_time: str | None = None


class ItemIdResponse(BaseModel):
    item_id: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemRequest(BaseModel):
    item_id: str
    quantity: int = Field(ge=1)


class CreateOrderRequest(BaseModel):
    fulfiller_id: str
    items: list[OrderItemRequest] = Field(min_length=1)
    delivery_note: str | None = None
    delivery_address: str | None = None
    is_urgent: bool = False
    payment_method: Literal["cash", "online"] = "online"

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "fulfiller_id": "ful-001",
                    "items": [{"item_id": "item-abc", "quantity": 25}],
                    "delivery_note": "Deliver before noon",
                }
            ]
        }
    }


class TransitionRequest(BaseModel):
    note: str | None = None


class RejectOrderRequest(BaseModel):
    reason: str = Field(min_length=1)


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class LineItemResponse(BaseModel):
    item_id: str
    name: str
    quantity: int
    unit: str
    unit_price: float
    line_total: float


class StatusEntryResponse(BaseModel):
    status: str
    note: str | None = None
    timestamp: str


class PaymentResponse(BaseModel):
    method: str
    transaction_id: str
    external_order_ref: str
    amount: float
    currency: str
    paid_at: str


class OrderResponse(BaseModel):
    order_id: str
    requester_id: str
    fulfiller_id: str
    status: str
    items: list[LineItemResponse]
    total_amount: float
    currency: str
    payment_method: str
    payment_status: str
    payment: PaymentResponse | None = None
    delivery_note: str | None = None
    delivery_address: str | None = None
    is_urgent: bool = False
    rejection_reason: str | None = None
    cancellation_reason: str | None = None
    status_history: list[StatusEntryResponse]
    created_at: str
    updated_at: str

    @classmethod
    def from_aggregate(cls, order) -> OrderResponse:
        payment = order.payment
        return cls(
            order_id=str(order.id),
            requester_id=str(order.requester_id),
            fulfiller_id=str(order.fulfiller_id),
            status=order.status,
            items=[
                LineItemResponse(
                    item_id=str(line.item_id),
                    name=line.name,
                    quantity=line.quantity,
                    unit=line.unit,
                    unit_price=line.unit_price,
                    line_total=line.line_total,
                )
                for line in order.line_items()
            ],
            total_amount=order.total_amount,
            currency=order.currency,
            payment_method=order.payment_method,
            payment_status=order.payment_status,
            payment=(
                PaymentResponse(
                    method=payment.method,
                    transaction_id=payment.transaction_id,
                    external_order_ref=payment.external_order_ref,
                    amount=payment.amount,
                    currency=payment.currency,
                    paid_at=payment.paid_at.isoformat(),
                )
                if payment
                else None
            ),
            delivery_note=order.delivery_note,
            delivery_address=order.delivery_address,
            is_urgent=bool(order.is_urgent),
            rejection_reason=order.rejection_reason,
            cancellation_reason=order.cancellation_reason,
            status_history=[
                StatusEntryResponse(status=entry.status, note=entry.note, timestamp=entry.timestamp.isoformat())
                for entry in order.history()
            ],
            created_at=order.created_at.isoformat(),
            updated_at=order.updated_at.isoformat(),
        )


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class CreateIntentRequest(BaseModel):
    order_id: str
    amount: float = Field(gt=0)


class IntentResponse(BaseModel):
    intent_id: str
    order_id: str
    external_order_ref: str
    amount: float
    amount_minor: int
    currency: str
    receipt: str
    status: str
    key_id: str | None = None

    @classmethod
    def from_aggregate(cls, intent, key_id: str | None = None) -> IntentResponse:
        return cls(
            intent_id=str(intent.id),
            order_id=str(intent.order_id),
            external_order_ref=intent.external_order_ref,
            amount=intent.amount,
            amount_minor=intent.amount_minor,
            currency=intent.currency,
            receipt=intent.receipt,
            status=intent.status,
            key_id=key_id,
        )


class VerifyPaymentRequest(BaseModel):
    external_order_ref: str
    external_payment_ref: str
    signature: str
    amount: float = Field(gt=0)


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------
class MatchedItemResponse(BaseModel):
    item_id: str
    name: str
    unit_price: float
    unit: str
    category: str | None = None
    minimum_order_quantity: int = 1


class FulfillerMatchResponse(BaseModel):
    fulfiller_id: str
    name: str
    business_name: str | None = None
    distance_km: float
    rating_average: float
    rating_count: int
    is_verified: bool
    location: GeoPointSchema
    items: list[MatchedItemResponse]

    @classmethod
    def from_ranked(cls, ranked) -> FulfillerMatchResponse:
        candidate = ranked.candidate
        return cls(
            fulfiller_id=candidate.fulfiller_id,
            name=candidate.name,
            business_name=candidate.business_name,
            distance_km=ranked.display_distance_km,
            rating_average=candidate.rating_average,
            rating_count=candidate.rating_count,
            is_verified=candidate.is_verified,
            location=GeoPointSchema(
                latitude=candidate.latitude, longitude=candidate.longitude, address=candidate.address
            ),
            items=[
                MatchedItemResponse(
                    item_id=item.item_id,
                    name=item.name,
                    unit_price=item.unit_price,
                    unit=item.unit,
                    category=item.category,
                    minimum_order_quantity=item.minimum_order_quantity,
                )
                for item in ranked.matching_items
            ],
        )


class QueryResponse(BaseModel):
    original_text: str
    processed_text: str
    detected_language: str
    was_translated: bool
    fallback: bool


class KeywordsResponse(BaseModel):
    raw_material: str | None = None
    category: str | None = None
    quantity: dict | None = None
    terms: list[str] = []


class DiscoveryResponse(BaseModel):
    query: QueryResponse
    keywords: KeywordsResponse
    filters: dict
    fallback: bool
    count: int
    results: list[FulfillerMatchResponse]

    @classmethod
    def from_result(cls, result) -> DiscoveryResponse:
        quantity = result.keywords.quantity
        return cls(
            query=QueryResponse(**result.query.as_dict()),
            keywords=KeywordsResponse(
                raw_material=result.keywords.raw_material,
                category=result.keywords.category,
                quantity={"value": quantity.value, "unit": quantity.unit} if quantity else None,
                terms=list(result.keywords.terms),
            ),
            filters=result.filters.as_dict(),
            fallback=result.fallback,
            count=len(result.results),
            results=[FulfillerMatchResponse.from_ranked(ranked) for ranked in result.results],
        )


class TrendingKeywordResponse(BaseModel):
    keyword: str
    category: str | None = None
    search_count: int
    last_searched_at: str | None = None

    @classmethod
    def from_trend(cls, trend) -> TrendingKeywordResponse:
        return cls(
            keyword=trend.keyword,
            category=trend.category,
            search_count=trend.search_count,
            last_searched_at=trend.last_searched_at.isoformat() if trend.last_searched_at else None,
        )


class TrendingResponse(BaseModel):
    count: int
    keywords: list[TrendingKeywordResponse]


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
class SubmitReviewRequest(BaseModel):
    order_id: str
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=10, max_length=500)


class ReviewResponse(BaseModel):
    review_id: str
    order_id: str
    requester_id: str
    fulfiller_id: str
    rating: int
    comment: str
    is_trusted: bool
    submitted_at: str

    @classmethod
    def from_aggregate(cls, review) -> ReviewResponse:
        return cls(
            review_id=str(review.id),
            order_id=str(review.order_id),
            requester_id=str(review.requester_id),
            fulfiller_id=str(review.fulfiller_id),
            rating=review.rating,
            comment=review.comment,
            is_trusted=bool(review.is_trusted),
            submitted_at=review.submitted_at.isoformat(),
        )


class FulfillerReviewsResponse(BaseModel):
    fulfiller_id: str
    rating: RatingSchema
    reviews: list[ReviewResponse]

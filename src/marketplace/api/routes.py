"""FastAPI routes for the marketplace: parties, catalogs, orders, payments,
discovery and reviews.

The acting user is taken from the ``X-User-Id`` header. Handlers that call an
external service or wait on an order lock are plain functions, so FastAPI runs
them in its threadpool and the event loop keeps serving requests and live
channels.
"""

import os

from fastapi import APIRouter, Header, Query
from protean.utils.globals import current_domain

from marketplace.api.schemas import (
    AddCatalogItemRequest,
    CancelOrderRequest,
    CatalogItemResponse,
    CreateIntentRequest,
    CreateOrderRequest,
    DiscoveryResponse,
    FulfillerResponse,
    FulfillerReviewsResponse,
    IntentResponse,
    ItemIdResponse,
    OrderResponse,
    PartyIdResponse,
    PartyResponse,
    RatingSchema,
    RegisterPartyRequest,
    RejectOrderRequest,
    ReviewResponse,
    StatusResponse,
    SubmitReviewRequest,
    TransitionRequest,
    TrendingKeywordResponse,
    TrendingResponse,
    UpdateCatalogItemRequest,
    UpdateLocationRequest,
    UpdateProfileRequest,
    VerifyFulfillerRequest,
    VerifyPaymentRequest,
)
from marketplace.discovery.engine import SearchFilters
from marketplace.discovery.geocoding import resolve_address
from marketplace.discovery.service import discover_fulfillers
from marketplace.discovery.trending import MAX_TRENDING, trending_keywords
from marketplace.ordering.lifecycle import OrderLifecycle
from marketplace.party.catalog import AddCatalogItem, RemoveCatalogItem, UpdateCatalogItem
from marketplace.party.fulfiller import Fulfiller
from marketplace.party.profile import (
    RelocateFulfiller,
    RelocateRequester,
    UpdateFulfillerProfile,
    UpdateRequesterProfile,
    VerifyFulfiller,
)
from marketplace.party.registration import RegisterFulfiller, RegisterRequester
from marketplace.party.requester import Requester
from marketplace.payments.gate import PaymentGate
from marketplace.reviews.service import RatingAggregator
from marketplace.shared.errors import NotFoundError
from marketplace.shared.lookup import load


def _require_self(actor_id: str, party: str, party_id: str) -> None:
    """Parties may only change their own records."""
    if str(actor_id) != str(party_id):
        raise NotFoundError(party, party_id)


def _address_for(body: UpdateLocationRequest) -> str:
    if body.address:
        return body.address
    address, _fallback = resolve_address(body.latitude, body.longitude)
    return address


# ---------------------------------------------------------------------------
# Requester Router
# ---------------------------------------------------------------------------
requester_router = APIRouter(prefix="/requesters", tags=["requesters"])


@requester_router.post("", status_code=201, response_model=PartyIdResponse)
async def register_requester(body: RegisterPartyRequest) -> PartyIdResponse:
    command = RegisterRequester(
        requester_id=body.id,
        name=body.name,
        business_name=body.business_name,
        phone=body.phone,
        email=body.email,
        latitude=body.latitude,
        longitude=body.longitude,
        address=body.address,
    )
    result = current_domain.process(command, asynchronous=False)
    return PartyIdResponse(id=result)


@requester_router.get("/{requester_id}", response_model=PartyResponse)
async def get_requester(requester_id: str) -> PartyResponse:
    return PartyResponse.from_aggregate(load(Requester, requester_id))


@requester_router.put("/{requester_id}/profile", response_model=StatusResponse)
async def update_requester_profile(
    requester_id: str, body: UpdateProfileRequest, x_user_id: str = Header()
) -> StatusResponse:
    _require_self(x_user_id, "Requester", requester_id)
    command = UpdateRequesterProfile(
        requester_id=requester_id,
        name=body.name,
        business_name=body.business_name,
        phone=body.phone,
        email=body.email,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@requester_router.put("/{requester_id}/location", response_model=PartyResponse)
def update_requester_location(
    requester_id: str, body: UpdateLocationRequest, x_user_id: str = Header()
) -> PartyResponse:
    _require_self(x_user_id, "Requester", requester_id)
    command = RelocateRequester(
        requester_id=requester_id,
        latitude=body.latitude,
        longitude=body.longitude,
        address=_address_for(body),
    )
    current_domain.process(command, asynchronous=False)
    return PartyResponse.from_aggregate(load(Requester, requester_id))


# ---------------------------------------------------------------------------
# Fulfiller Router
# ---------------------------------------------------------------------------
fulfiller_router = APIRouter(prefix="/fulfillers", tags=["fulfillers"])


@fulfiller_router.post("", status_code=201, response_model=PartyIdResponse)
async def register_fulfiller(body: RegisterPartyRequest) -> PartyIdResponse:
    command = RegisterFulfiller(
        fulfiller_id=body.id,
        name=body.name,
        business_name=body.business_name,
        phone=body.phone,
        email=body.email,
        latitude=body.latitude,
        longitude=body.longitude,
        address=body.address,
    )
    result = current_domain.process(command, asynchronous=False)
    return PartyIdResponse(id=result)


@fulfiller_router.get("/{fulfiller_id}", response_model=FulfillerResponse)
async def get_fulfiller(fulfiller_id: str) -> FulfillerResponse:
    return FulfillerResponse.from_aggregate(load(Fulfiller, fulfiller_id))


@fulfiller_router.put("/{fulfiller_id}/profile", response_model=StatusResponse)
async def update_fulfiller_profile(
    fulfiller_id: str, body: UpdateProfileRequest, x_user_id: str = Header()
) -> StatusResponse:
    _require_self(x_user_id, "Fulfiller", fulfiller_id)
    command = UpdateFulfillerProfile(
        fulfiller_id=fulfiller_id,
        name=body.name,
        business_name=body.business_name,
        phone=body.phone,
        email=body.email,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@fulfiller_router.put("/{fulfiller_id}/location", response_model=FulfillerResponse)
def update_fulfiller_location(
    fulfiller_id: str, body: UpdateLocationRequest, x_user_id: str = Header()
) -> FulfillerResponse:
    _require_self(x_user_id, "Fulfiller", fulfiller_id)
    command = RelocateFulfiller(
        fulfiller_id=fulfiller_id,
        latitude=body.latitude,
        longitude=body.longitude,
        address=_address_for(body),
    )
    current_domain.process(command, asynchronous=False)
    return FulfillerResponse.from_aggregate(load(Fulfiller, fulfiller_id))


@fulfiller_router.put("/{fulfiller_id}/verification", response_model=StatusResponse)
async def verify_fulfiller(fulfiller_id: str, body: VerifyFulfillerRequest) -> StatusResponse:
    command = VerifyFulfiller(fulfiller_id=fulfiller_id, is_verified=body.is_verified)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Catalog (nested under fulfillers)
# ---------------------------------------------------------------------------
@fulfiller_router.get("/{fulfiller_id}/catalog", response_model=list[CatalogItemResponse])
async def list_catalog(fulfiller_id: str) -> list[CatalogItemResponse]:
    fulfiller = load(Fulfiller, fulfiller_id)
    return [CatalogItemResponse.from_entity(item) for item in fulfiller.catalog]


@fulfiller_router.post("/{fulfiller_id}/catalog", status_code=201, response_model=ItemIdResponse)
async def add_catalog_item(
    fulfiller_id: str, body: AddCatalogItemRequest, x_user_id: str = Header()
) -> ItemIdResponse:
    _require_self(x_user_id, "Fulfiller", fulfiller_id)
    command = AddCatalogItem(fulfiller_id=fulfiller_id, **body.model_dump())
    result = current_domain.process(command, asynchronous=False)
    return ItemIdResponse(item_id=result)


@fulfiller_router.put("/{fulfiller_id}/catalog/{item_id}", response_model=StatusResponse)
async def update_catalog_item(
    fulfiller_id: str, item_id: str, body: UpdateCatalogItemRequest, x_user_id: str = Header()
) -> StatusResponse:
    _require_self(x_user_id, "Fulfiller", fulfiller_id)
    command = UpdateCatalogItem(fulfiller_id=fulfiller_id, item_id=item_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@fulfiller_router.delete("/{fulfiller_id}/catalog/{item_id}", response_model=StatusResponse)
async def remove_catalog_item(fulfiller_id: str, item_id: str, x_user_id: str = Header()) -> StatusResponse:
    _require_self(x_user_id, "Fulfiller", fulfiller_id)
    current_domain.process(RemoveCatalogItem(fulfiller_id=fulfiller_id, item_id=item_id), asynchronous=False)
    return StatusResponse()


@fulfiller_router.get("/{fulfiller_id}/reviews", response_model=FulfillerReviewsResponse)
async def list_fulfiller_reviews(fulfiller_id: str) -> FulfillerReviewsResponse:
    fulfiller = load(Fulfiller, fulfiller_id)
    reviews = RatingAggregator().reviews_for_fulfiller(fulfiller_id)
    rating = fulfiller.rating
    return FulfillerReviewsResponse(
        fulfiller_id=str(fulfiller.id),
        rating=RatingSchema(average=rating.average if rating else 0.0, count=rating.count if rating else 0),
        reviews=[ReviewResponse.from_aggregate(review) for review in reviews],
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def create_order(body: CreateOrderRequest, x_user_id: str = Header()) -> OrderResponse:
    order = OrderLifecycle().place(
        requester_id=x_user_id,
        fulfiller_id=body.fulfiller_id,
        items=[item.model_dump() for item in body.items],
        delivery_note=body.delivery_note,
        delivery_address=body.delivery_address,
        is_urgent=body.is_urgent,
        payment_method=body.payment_method,
    )
    return OrderResponse.from_aggregate(order)


@order_router.get("", response_model=list[OrderResponse])
async def list_orders(
    role: str,
    status: str | None = None,
    limit: int = Query(20, ge=1, le=100),
    page: int = Query(1, ge=1),
    x_user_id: str = Header(),
) -> list[OrderResponse]:
    orders = OrderLifecycle().orders_for(x_user_id, role, status=status, limit=limit, page=page)
    return [OrderResponse.from_aggregate(order) for order in orders]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, x_user_id: str = Header()) -> OrderResponse:
    return OrderResponse.from_aggregate(OrderLifecycle().get(order_id, x_user_id))


@order_router.put("/{order_id}/approve", response_model=OrderResponse)
def approve_order(
    order_id: str, body: TransitionRequest | None = None, x_user_id: str = Header()
) -> OrderResponse:
    order = OrderLifecycle().approve(order_id, x_user_id, note=body.note if body else None)
    return OrderResponse.from_aggregate(order)


@order_router.put("/{order_id}/reject", response_model=OrderResponse)
def reject_order(order_id: str, body: RejectOrderRequest, x_user_id: str = Header()) -> OrderResponse:
    order = OrderLifecycle().reject(order_id, x_user_id, reason=body.reason)
    return OrderResponse.from_aggregate(order)


@order_router.put("/{order_id}/dispatch", response_model=OrderResponse)
def dispatch_order(
    order_id: str, body: TransitionRequest | None = None, x_user_id: str = Header()
) -> OrderResponse:
    order = OrderLifecycle().dispatch(order_id, x_user_id, note=body.note if body else None)
    return OrderResponse.from_aggregate(order)


@order_router.put("/{order_id}/deliver", response_model=OrderResponse)
def deliver_order(
    order_id: str, body: TransitionRequest | None = None, x_user_id: str = Header()
) -> OrderResponse:
    order = OrderLifecycle().deliver(order_id, x_user_id, note=body.note if body else None)
    return OrderResponse.from_aggregate(order)


@order_router.put("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: str, body: CancelOrderRequest | None = None, x_user_id: str = Header()
) -> OrderResponse:
    order = OrderLifecycle().cancel(order_id, x_user_id, reason=body.reason if body else None)
    return OrderResponse.from_aggregate(order)


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/intents", status_code=201, response_model=IntentResponse)
def create_payment_intent(body: CreateIntentRequest, x_user_id: str = Header()) -> IntentResponse:
    intent = PaymentGate().create_intent(body.order_id, x_user_id, body.amount)
    return IntentResponse.from_aggregate(intent, key_id=os.environ.get("PAYMENT_KEY_ID"))


@payment_router.post("/verify", response_model=OrderResponse)
def verify_payment(body: VerifyPaymentRequest, x_user_id: str = Header()) -> OrderResponse:
    order = PaymentGate().verify(
        external_order_ref=body.external_order_ref,
        external_payment_ref=body.external_payment_ref,
        signature=body.signature,
        amount=body.amount,
        actor_id=x_user_id,
    )
    return OrderResponse.from_aggregate(order)


# ---------------------------------------------------------------------------
# Discovery Router
# ---------------------------------------------------------------------------
discovery_router = APIRouter(prefix="/discovery", tags=["discovery"])


@discovery_router.get("/fulfillers", response_model=DiscoveryResponse)
def search_fulfillers(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    keyword: str | None = None,
    max_distance_km: float = 10.0,
    min_rating: float = 0.0,
    verified_only: bool = False,
    x_user_id: str | None = Header(default=None),
) -> DiscoveryResponse:
    result = discover_fulfillers(
        latitude,
        longitude,
        keyword=keyword,
        filters=SearchFilters(max_distance_km=max_distance_km, min_rating=min_rating, verified_only=verified_only),
        requester_id=x_user_id,
    )
    return DiscoveryResponse.from_result(result)


@discovery_router.get("/trending", response_model=TrendingResponse)
async def trending(
    limit: int = Query(10, ge=1, le=MAX_TRENDING),
    category: str | None = None,
) -> TrendingResponse:
    keywords = [TrendingKeywordResponse.from_trend(trend) for trend in trending_keywords(limit, category=category)]
    return TrendingResponse(count=len(keywords), keywords=keywords)


# ---------------------------------------------------------------------------
# Review Router
# ---------------------------------------------------------------------------
review_router = APIRouter(prefix="/reviews", tags=["reviews"])


@review_router.post("", status_code=201, response_model=ReviewResponse)
def submit_review(body: SubmitReviewRequest, x_user_id: str = Header()) -> ReviewResponse:
    review = RatingAggregator().submit_review(
        order_id=body.order_id,
        requester_id=x_user_id,
        rating=body.rating,
        comment=body.comment,
    )
    return ReviewResponse.from_aggregate(review)

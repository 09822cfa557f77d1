"""Marketplace API package."""

from marketplace.api.realtime import router as realtime_router
from marketplace.api.routes import (
    discovery_router,
    fulfiller_router,
    order_router,
    payment_router,
    requester_router,
    review_router,
)

__all__ = [
    "requester_router",
    "fulfiller_router",
    "order_router",
    "payment_router",
    "discovery_router",
    "review_router",
    "realtime_router",
]

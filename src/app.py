"""Marketplace FastAPI application.

Processes commands synchronously via HTTP and serves the live notification
WebSocket. Domain events are handled in-process, so the dispatcher that
holds the live channels sees every notification.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketplace.domain import marketplace
from marketplace.utils.logging import add_context, clear_context, configure_logging

# ---------------------------------------------------------------------------
# Logging and domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV selects the domain.toml overlay; LOG_* variables shape logging.
configure_logging()
marketplace.init()

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Marketplace API",
    description="Requester/fulfiller marketplace: orders, payments, discovery, reviews",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the marketplace domain context and bind request-scoped log fields."""
    request_id = request.headers.get("X-Request-Id") or uuid4().hex
    clear_context()
    add_context(request_id=request_id, user_id=request.headers.get("X-User-Id"))
    try:
        with marketplace.domain_context():
            response = await call_next(request)
    finally:
        clear_context()
    response.headers["X-Request-Id"] = request_id
    return response


# ---------------------------------------------------------------------------
# Routers and error handlers
# ---------------------------------------------------------------------------
from marketplace.api import (  # noqa: E402
    discovery_router,
    fulfiller_router,
    order_router,
    payment_router,
    realtime_router,
    requester_router,
    review_router,
)
from marketplace.api.errors import register_error_handlers  # noqa: E402
from marketplace.realtime import get_dispatcher  # noqa: E402

app.include_router(requester_router)
app.include_router(fulfiller_router)
app.include_router(order_router)
app.include_router(payment_router)
app.include_router(discovery_router)
app.include_router(review_router)
app.include_router(realtime_router)

register_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domain": marketplace.name,
            "connections": get_dispatcher().connected_count(),
        }
    )

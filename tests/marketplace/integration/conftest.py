import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from marketplace.api import (
    discovery_router,
    fulfiller_router,
    order_router,
    payment_router,
    realtime_router,
    requester_router,
    review_router,
)
from marketplace.api.errors import register_error_handlers


@pytest.fixture()
def app():
    app = FastAPI()
    for router in (
        requester_router,
        fulfiller_router,
        order_router,
        payment_router,
        discovery_router,
        review_router,
        realtime_router,
    ):
        app.include_router(router)
    register_error_handlers(app)
    return app


@pytest.fixture()
def client(app):
    return TestClient(app)

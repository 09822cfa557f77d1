from types import SimpleNamespace

import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

from marketplace.discovery.geocoding import reset_geocoder, set_geocoder
from marketplace.discovery.geocoding.fake_adapter import FakeGeocoder
from marketplace.discovery.translation import reset_translator, set_translator
from marketplace.discovery.translation.fake_adapter import FakeTranslator
from marketplace.ordering.lifecycle import OrderLifecycle
from marketplace.party.catalog import AddCatalogItem
from marketplace.party.registration import RegisterFulfiller, RegisterRequester
from marketplace.payments.gateway import reset_gateway, set_gateway
from marketplace.payments.gateway.fake_adapter import FakeGateway
from marketplace.realtime import reset_dispatcher, set_dispatcher
from marketplace.realtime.dispatcher import Dispatcher

TEST_SECRET = "test_secret"

# Pune city centre; every fixture location is measured from here
ORIGIN = (18.5204, 73.8567)


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield
        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Fake collaborators, installed fresh for every test
# ---------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def gateway():
    fake = FakeGateway(secret=TEST_SECRET)
    set_gateway(fake)
    yield fake
    reset_gateway()


@pytest.fixture(autouse=True)
def translator():
    fake = FakeTranslator({"चावल": "rice", "दाल": "lentils", "प्याज": "onion"})
    set_translator(fake)
    yield fake
    reset_translator()


@pytest.fixture(autouse=True)
def geocoder():
    fake = FakeGeocoder()
    set_geocoder(fake)
    yield fake
    reset_geocoder()


@pytest.fixture(autouse=True)
def dispatcher():
    instance = Dispatcher()
    set_dispatcher(instance)
    yield instance
    reset_dispatcher()


# ---------------------------------------------------------------------------
# Registered parties and orders
# ---------------------------------------------------------------------------
def register_requester(requester_id="req-001", name="Asha Kulkarni", latitude=ORIGIN[0], longitude=ORIGIN[1]):
    return current_domain.process(
        RegisterRequester(
            requester_id=requester_id,
            name=name,
            business_name="Kulkarni Caterers",
            phone="+91 98220 11111",
            latitude=latitude,
            longitude=longitude,
        ),
        asynchronous=False,
    )


def register_fulfiller(fulfiller_id="ful-001", name="Ramesh Patil", latitude=18.5384, longitude=73.8567):
    return current_domain.process(
        RegisterFulfiller(
            fulfiller_id=fulfiller_id,
            name=name,
            business_name="Patil Agro Traders",
            phone="+91 98200 22222",
            latitude=latitude,
            longitude=longitude,
            address="Shivajinagar, Pune",
        ),
        asynchronous=False,
    )


def add_item(fulfiller_id, name="Basmati Rice", unit_price=80.0, unit="kg", **overrides):
    fields = {
        "category": "grains",
        "quantity_available": 500,
        "minimum_order_quantity": 1,
    }
    fields.update(overrides)
    return current_domain.process(
        AddCatalogItem(fulfiller_id=fulfiller_id, name=name, unit_price=unit_price, unit=unit, **fields),
        asynchronous=False,
    )


@pytest.fixture()
def parties():
    """A requester in central Pune and a fulfiller about 2 km north, with two items."""
    requester_id = register_requester()
    fulfiller_id = register_fulfiller()
    rice_id = add_item(fulfiller_id, name="Basmati Rice", unit_price=80.0, unit="kg", minimum_order_quantity=10)
    dal_id = add_item(fulfiller_id, name="Toor Dal", unit_price=120.5, unit="kg", category="pulses")
    return SimpleNamespace(
        requester_id=requester_id,
        fulfiller_id=fulfiller_id,
        rice_id=rice_id,
        dal_id=dal_id,
    )


@pytest.fixture()
def pending_order(parties):
    """25 kg rice and 4 kg dal: 25 * 80.0 + 4 * 120.5 = 2482.0."""
    return OrderLifecycle().place(
        requester_id=parties.requester_id,
        fulfiller_id=parties.fulfiller_id,
        items=[
            {"item_id": parties.rice_id, "quantity": 25},
            {"item_id": parties.dal_id, "quantity": 4},
        ],
        delivery_note="Deliver before noon",
    )


@pytest.fixture()
def approved_order(parties, pending_order):
    return OrderLifecycle().approve(pending_order.id, parties.fulfiller_id)


@pytest.fixture()
def make_requester():
    return register_requester


@pytest.fixture()
def make_fulfiller():
    return register_fulfiller


@pytest.fixture()
def make_item():
    return add_item

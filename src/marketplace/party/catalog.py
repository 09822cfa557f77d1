"""Catalog maintenance: a fulfiller adds, edits and withdraws its offerings."""

from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.party.fulfiller import Fulfiller
from marketplace.shared.lookup import load

_EDITABLE = (
    "name",
    "description",
    "category",
    "unit_price",
    "unit",
    "quantity_available",
    "is_available",
    "minimum_order_quantity",
    "delivery_time",
)


@marketplace.command(part_of="Fulfiller")
class AddCatalogItem:
    fulfiller_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    description = Text()
    category = String(max_length=100)
    unit_price = Float(required=True, min_value=0.0)
    unit = String(required=True, max_length=20)
    quantity_available = Integer(default=0, min_value=0)
    is_available = Boolean(default=True)
    minimum_order_quantity = Integer(default=1, min_value=1)
    delivery_time = String(max_length=100)


@marketplace.command(part_of="Fulfiller")
class UpdateCatalogItem:
    fulfiller_id = Identifier(required=True)
    item_id = Identifier(required=True)
    name = String(max_length=200)
    description = Text()
    category = String(max_length=100)
    unit_price = Float()
    unit = String(max_length=20)
    quantity_available = Integer()
    is_available = Boolean()
    minimum_order_quantity = Integer()
    delivery_time = String(max_length=100)


@marketplace.command(part_of="Fulfiller")
class RemoveCatalogItem:
    fulfiller_id = Identifier(required=True)
    item_id = Identifier(required=True)


@marketplace.command_handler(part_of=Fulfiller)
class CatalogHandler:
    @handle(AddCatalogItem)
    def add_item(self, command):
        fulfiller = load(Fulfiller, command.fulfiller_id)
        item = fulfiller.add_catalog_item(
            name=command.name,
            description=command.description,
            category=command.category,
            unit_price=command.unit_price,
            unit=command.unit,
            quantity_available=command.quantity_available or 0,
            is_available=command.is_available if command.is_available is not None else True,
            minimum_order_quantity=command.minimum_order_quantity or 1,
            delivery_time=command.delivery_time,
        )
        current_domain.repository_for(Fulfiller).add(fulfiller)
        return str(item.id)

    @handle(UpdateCatalogItem)
    def update_item(self, command):
        fulfiller = load(Fulfiller, command.fulfiller_id)
        changes = {field: getattr(command, field) for field in _EDITABLE if getattr(command, field) is not None}
        fulfiller.update_catalog_item(command.item_id, **changes)
        current_domain.repository_for(Fulfiller).add(fulfiller)

    @handle(RemoveCatalogItem)
    def remove_item(self, command):
        fulfiller = load(Fulfiller, command.fulfiller_id)
        fulfiller.remove_catalog_item(command.item_id)
        current_domain.repository_for(Fulfiller).add(fulfiller)

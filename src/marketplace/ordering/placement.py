"""Order placement: command and handler.

Requested items are checked against the fulfiller's catalog as it is right
now. Later catalog edits never touch an order that was already placed.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.ordering.order import Order, PaymentMethod
from marketplace.party.fulfiller import Fulfiller
from marketplace.party.requester import Requester
from marketplace.shared.errors import InvalidItemError, NotFoundError, QuantityTooLowError
from marketplace.shared.lookup import load


@marketplace.command(part_of="Order")
class PlaceOrder:
    requester_id = Identifier(required=True)
    fulfiller_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {"item_id", "quantity"}
    delivery_note = Text()
    delivery_address = String(max_length=500)
    is_urgent = Boolean(default=False)
    payment_method = String(max_length=20, default=PaymentMethod.ONLINE.value)


def catalog_lines(fulfiller, requested):
    """Price requested items from the fulfiller's catalog.

    Raises InvalidItemError for unknown or unavailable items and
    QuantityTooLowError when a quantity is below the item's minimum.
    """
    if not requested:
        raise ValidationError({"items": ["An order needs at least one item"]})

    lines = []
    seen = set()
    for entry in requested:
        item_id = str(entry.get("item_id") or "")
        quantity = entry.get("quantity")
        if not item_id:
            raise ValidationError({"items": ["Every item needs an item_id"]})
        if item_id in seen:
            raise ValidationError({"items": [f"Item {item_id} is listed more than once"]})
        seen.add(item_id)
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ValidationError({"items": [f"Item {item_id}: quantity must be a positive integer"]})

        item = fulfiller.catalog_item(item_id)
        if item is None:
            raise InvalidItemError(item_id, "not in the fulfiller's catalog")
        if not item.is_available:
            raise InvalidItemError(item_id, "currently unavailable")
        minimum = item.minimum_order_quantity or 1
        if quantity < minimum:
            raise QuantityTooLowError(item_id, quantity, minimum)

        lines.append(
            {
                "item_id": item_id,
                "name": item.name,
                "quantity": quantity,
                "unit": item.unit,
                "unit_price": item.unit_price,
            }
        )
    return lines


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        requested = json.loads(command.items) if isinstance(command.items, str) else command.items

        requester = load(Requester, command.requester_id)
        fulfiller = load(Fulfiller, command.fulfiller_id)
        if not fulfiller.is_active:
            raise NotFoundError("Fulfiller", command.fulfiller_id)

        order = Order.place(
            requester=requester,
            fulfiller=fulfiller,
            lines=catalog_lines(fulfiller, requested),
            delivery_note=command.delivery_note,
            delivery_address=command.delivery_address,
            is_urgent=bool(command.is_urgent),
            payment_method=command.payment_method or PaymentMethod.ONLINE.value,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)

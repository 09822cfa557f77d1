"""Marketplace error taxonomy.

Every error carries a stable ``code`` and a ``messages`` dict shaped like
Protean's ``ValidationError.messages`` (field -> list of messages), so the API
layer can render all failures the same way.
"""


class MarketplaceError(Exception):
    """Base class for all marketplace failures."""

    code = "marketplace_error"
    status_code = 400

    def __init__(self, message: str, messages: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.messages = messages or {}

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message, "details": self.messages}


class InvalidStateError(MarketplaceError):
    """The aggregate is not in a status that permits the operation."""

    code = "invalid_state"
    status_code = 409


class ConflictError(InvalidStateError):
    """The expected source status no longer holds.

    Raised when a transition's precondition fails, typically because a
    concurrent request changed the order first. Callers recover by re-fetching.
    """

    code = "conflict"

    def __init__(self, message: str, current_status: str | None = None, expected: list[str] | None = None) -> None:
        messages = {"status": [message]}
        if current_status is not None:
            messages["current_status"] = [current_status]
        if expected:
            messages["expected_status"] = sorted(expected)
        super().__init__(message, messages)
        self.current_status = current_status
        self.expected = expected or []


class NotFoundError(MarketplaceError):
    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, identifier) -> None:
        super().__init__(f"{entity} {identifier} not found", {"id": [str(identifier)]})
        self.entity = entity
        self.identifier = identifier


class InvalidItemError(MarketplaceError):
    """An ordered item is unknown to the fulfiller's catalog or unavailable."""

    code = "invalid_item"
    status_code = 422

    def __init__(self, item_id, reason: str) -> None:
        super().__init__(f"Item {item_id}: {reason}", {"items": [f"{item_id}: {reason}"]})
        self.item_id = item_id


class QuantityTooLowError(MarketplaceError):
    code = "quantity_too_low"
    status_code = 422

    def __init__(self, item_id, quantity: int, minimum: int) -> None:
        super().__init__(
            f"Item {item_id}: quantity {quantity} is below the minimum order quantity {minimum}",
            {"items": [f"{item_id}: minimum order quantity is {minimum}"]},
        )
        self.item_id = item_id
        self.quantity = quantity
        self.minimum = minimum


class SignatureInvalidError(MarketplaceError):
    """A payment assertion's signature does not match. Never retried."""

    code = "signature_invalid"
    status_code = 400

    def __init__(self, message: str = "Payment signature verification failed") -> None:
        super().__init__(message, {"signature": ["Signature does not match"]})


class DuplicateReviewError(MarketplaceError):
    code = "duplicate_review"
    status_code = 409

    def __init__(self, order_id, requester_id) -> None:
        super().__init__(
            f"Order {order_id} has already been reviewed",
            {"order_id": [str(order_id)], "requester_id": [str(requester_id)]},
        )


class ExternalServiceError(MarketplaceError):
    """An external collaborator (translation, geocoding, gateway) failed or timed out."""

    code = "external_service_error"
    status_code = 503

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service}: {message}", {"service": [service]})
        self.service = service

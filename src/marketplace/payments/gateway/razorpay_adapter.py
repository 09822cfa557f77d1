"""Razorpay payment gateway adapter.

Creates orders through the Razorpay Orders REST API and verifies checkout
signatures locally with the key secret.
"""

import requests
import structlog

from marketplace.payments.gateway.port import GatewayOrder, PaymentGateway
from marketplace.payments.signature import signature_matches
from marketplace.shared.errors import ExternalServiceError

logger = structlog.get_logger(__name__)

CREATE_ORDER_TIMEOUT_S = 15.0


class RazorpayGateway(PaymentGateway):
    service_name = "razorpay"

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout_s: float = CREATE_ORDER_TIMEOUT_S,
        session: requests.Session | None = None,
    ) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def create_order(self, amount_minor: int, currency: str, receipt: str, notes: dict | None = None) -> GatewayOrder:
        try:
            response = self.session.post(
                f"{self.base_url}/orders",
                json={"amount": amount_minor, "currency": currency, "receipt": receipt, "notes": notes or {}},
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout_s,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout as exc:
            logger.warning("gateway_timeout", receipt=receipt, timeout_s=self.timeout_s)
            raise ExternalServiceError(self.service_name, f"timed out after {self.timeout_s}s") from exc
        except (requests.RequestException, ValueError) as exc:
            logger.error("gateway_order_failed", receipt=receipt, error=str(exc))
            raise ExternalServiceError(self.service_name, str(exc)) from exc

        return GatewayOrder(
            external_order_ref=payload["id"],
            amount_minor=payload.get("amount", amount_minor),
            currency=payload.get("currency", currency),
            receipt=payload.get("receipt", receipt),
            status=payload.get("status", "created"),
        )

    def verify_payment_signature(self, external_order_ref: str, external_payment_ref: str, signature: str) -> bool:
        return signature_matches(self.key_secret, external_order_ref, external_payment_ref, signature)

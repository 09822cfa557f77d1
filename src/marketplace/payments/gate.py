"""PaymentGate: entry point for creating payment intents and verifying payments.

Verification holds the same per-order lock as the order lifecycle, so a
payment cannot interleave with a concurrent dispatch or cancellation.
"""

from protean.utils.globals import current_domain

from marketplace.ordering.locks import KeyedLock, order_locks
from marketplace.ordering.order import Order
from marketplace.payments.creation import CreatePaymentIntent
from marketplace.payments.intent import PaymentIntent
from marketplace.payments.verification import VerifyPayment, intent_for_ref
from marketplace.shared.lookup import load


class PaymentGate:
    def __init__(self, locks: KeyedLock | None = None) -> None:
        self.locks = locks or order_locks

    def create_intent(self, order_id, actor_id, amount) -> PaymentIntent:
        with self.locks.hold(order_id):
            intent_id = current_domain.process(
                CreatePaymentIntent(order_id=order_id, actor_id=actor_id, amount=amount),
                asynchronous=False,
            )
        return load(PaymentIntent, intent_id)

    def verify(self, external_order_ref, external_payment_ref, signature, amount, actor_id) -> Order:
        intent = intent_for_ref(external_order_ref)
        with self.locks.hold(intent.order_id):
            order_id = current_domain.process(
                VerifyPayment(
                    external_order_ref=external_order_ref,
                    external_payment_ref=external_payment_ref,
                    signature=signature,
                    amount=amount,
                    actor_id=actor_id,
                ),
                asynchronous=False,
            )
            return load(Order, order_id)

"""Payment assertion signatures.

A gateway signs ``"<external order ref>|<external payment ref>"`` with the
merchant secret using HMAC-SHA256 and sends the hex digest along with the
payment. Verification recomputes it and compares in constant time.
"""

import hashlib
import hmac


def compute_signature(secret: str, external_order_ref: str, external_payment_ref: str) -> str:
    message = f"{external_order_ref}|{external_payment_ref}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def signature_matches(secret: str, external_order_ref: str, external_payment_ref: str, signature: str | None) -> bool:
    if not signature:
        return False
    expected = compute_signature(secret, external_order_ref, external_payment_ref)
    return hmac.compare_digest(expected.encode(), signature.encode("utf-8"))

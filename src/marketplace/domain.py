"""Marketplace bounded context: requesters, fulfillers and the orders between them.

Owns the order lifecycle, payment verification, fulfiller discovery, reviews
and rating aggregation, and fans every state change out to the affected
parties over the live channel.
"""

import structlog
from protean.domain import Domain

marketplace = Domain(name="marketplace")

logger = structlog.get_logger(__name__)

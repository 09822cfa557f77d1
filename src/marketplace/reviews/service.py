"""RatingAggregator: entry point for review submission and review queries."""

import structlog
from protean.utils.globals import current_domain

from marketplace.ordering.access import order_for_requester
from marketplace.ordering.locks import KeyedLock
from marketplace.reviews.review import Review
from marketplace.reviews.submission import SubmitReview
from marketplace.shared.lookup import find_all, load

logger = structlog.get_logger(__name__)

# Reviews for one fulfiller are aggregated one at a time
fulfiller_locks = KeyedLock()


class RatingAggregator:
    def __init__(self, locks: KeyedLock | None = None) -> None:
        self.locks = locks or fulfiller_locks

    def submit_review(self, order_id, requester_id, rating, comment) -> Review:
        order = order_for_requester(order_id, requester_id)
        with self.locks.hold(order.fulfiller_id):
            review_id = current_domain.process(
                SubmitReview(order_id=order_id, requester_id=requester_id, rating=rating, comment=comment),
                asynchronous=False,
            )
        logger.info("review_submitted", review_id=review_id, order_id=str(order_id), rating=rating)
        return load(Review, review_id)

    def reviews_for_fulfiller(self, fulfiller_id) -> list[Review]:
        """Reviews of a fulfiller, newest first."""
        reviews = find_all(Review, fulfiller_id=str(fulfiller_id))
        return sorted(reviews, key=lambda review: (review.submitted_at, str(review.id)), reverse=True)

"""Review submission: command and handler.

Only the requester of a delivered order may review it, once. The fulfiller's
rating is recomputed from every one of its reviews in the same unit of work.
"""

from protean import handle
from protean.fields import Identifier, Integer, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.ordering.access import order_for_requester
from marketplace.ordering.order import OrderStatus
from marketplace.party.fulfiller import Fulfiller
from marketplace.reviews.aggregation import aggregate_ratings
from marketplace.reviews.review import Review
from marketplace.shared.errors import DuplicateReviewError, InvalidStateError
from marketplace.shared.lookup import find_all, load


@marketplace.command(part_of="Review")
class SubmitReview:
    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = Text(required=True)


@marketplace.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        order = order_for_requester(command.order_id, command.requester_id)
        if OrderStatus(order.status) != OrderStatus.DELIVERED:
            raise InvalidStateError(
                "Only delivered orders can be reviewed",
                {"status": [order.status]},
            )

        if find_all(Review, requester_id=str(command.requester_id), order_id=str(command.order_id)):
            raise DuplicateReviewError(command.order_id, command.requester_id)

        # Read before adding, so the new review is counted exactly once
        prior = find_all(Review, fulfiller_id=str(order.fulfiller_id))

        review = Review.submit(
            order_id=order.id,
            requester_id=command.requester_id,
            fulfiller_id=order.fulfiller_id,
            rating=command.rating,
            comment=command.comment,
        )
        average, count = aggregate_ratings([r.rating for r in prior] + [review.rating])

        fulfiller = load(Fulfiller, order.fulfiller_id)
        fulfiller.apply_rating(average, count)

        current_domain.repository_for(Review).add(review)
        current_domain.repository_for(Fulfiller).add(fulfiller)
        return str(review.id)

"""Review aggregate: a requester's rating of a fulfiller for one delivered order.

Reviews are write-once: the rating and text never change after submission.
At most one review exists per (requester, order) pair.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, Text

from marketplace.domain import marketplace

MIN_COMMENT_LENGTH = 10
MAX_COMMENT_LENGTH = 500


@marketplace.event(part_of="Review")
class ReviewSubmitted:
    """A requester reviewed a fulfiller after delivery."""

    __version__ = 1

    review_id = Identifier(required=True)
    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    fulfiller_id = Identifier(required=True)
    rating = Integer(required=True)
    comment = Text(required=True)
    submitted_at = DateTime(required=True)


@marketplace.aggregate
class Review:
    order_id = Identifier(required=True)
    requester_id = Identifier(required=True)
    fulfiller_id = Identifier(required=True)
    rating = Integer(required=True, min_value=1, max_value=5)
    comment = Text(required=True)
    is_trusted = Boolean(default=False)
    submitted_at = DateTime()

    @invariant.post
    def comment_length_within_bounds(self):
        if self.comment is None:
            return
        length = len(self.comment.strip())
        if length < MIN_COMMENT_LENGTH or length > MAX_COMMENT_LENGTH:
            raise ValidationError(
                {"comment": [f"Comment must be between {MIN_COMMENT_LENGTH} and {MAX_COMMENT_LENGTH} characters"]}
            )

    @classmethod
    def submit(cls, order_id, requester_id, fulfiller_id, rating, comment, is_trusted=True):
        now = datetime.now(UTC)
        review = cls(
            order_id=str(order_id),
            requester_id=str(requester_id),
            fulfiller_id=str(fulfiller_id),
            rating=rating,
            comment=comment.strip() if comment else comment,
            is_trusted=is_trusted,
            submitted_at=now,
        )
        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                order_id=str(order_id),
                requester_id=str(requester_id),
                fulfiller_id=str(fulfiller_id),
                rating=rating,
                comment=review.comment,
                submitted_at=now,
            )
        )
        return review

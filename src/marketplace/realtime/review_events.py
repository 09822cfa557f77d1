"""Review events → the reviewed fulfiller."""

from protean import handle

from marketplace.domain import marketplace
from marketplace.realtime import get_dispatcher
from marketplace.realtime.notifier import Notifier
from marketplace.reviews.review import Review, ReviewSubmitted


@marketplace.event_handler(part_of=Review)
class ReviewNotificationsHandler:
    @handle(ReviewSubmitted)
    def on_review_submitted(self, event: ReviewSubmitted) -> None:
        Notifier(get_dispatcher()).notify(
            event.fulfiller_id,
            "review_submitted",
            event.review_id,
            event.requester_id,
            f"New {event.rating}-star review received",
            event.submitted_at,
            order_id=str(event.order_id),
            rating=event.rating,
            comment=event.comment,
        )

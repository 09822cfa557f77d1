"""Repository lookups that speak the marketplace error taxonomy."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.shared.errors import NotFoundError

# Upper bound on rows pulled by full scans (discovery candidates, review
# re-aggregation). The DAO applies a small default page size otherwise.
SCAN_LIMIT = 10_000


def load(aggregate_cls, identifier):
    """Fetch an aggregate by id, raising NotFoundError when it does not exist."""
    try:
        return current_domain.repository_for(aggregate_cls).get(identifier)
    except ObjectNotFoundError as exc:
        raise NotFoundError(aggregate_cls.__name__, identifier) from exc


def find_all(aggregate_cls, **filters):
    """Return every aggregate matching the filters, up to SCAN_LIMIT."""
    query = current_domain.repository_for(aggregate_cls)._dao.query
    if filters:
        query = query.filter(**filters)
    return query.limit(SCAN_LIMIT).all().items

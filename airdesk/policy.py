# airdesk/policy.py
from airdesk.errors import ForbiddenError
from airdesk.schemas.user import Identity


def ensure(allowed: bool, message: str | None = None) -> None:
    if not allowed:
        raise ForbiddenError(message)


def is_owner(identity: Identity, ticket: dict) -> bool:
    return str(ticket.get("owner_id")) == identity.id


def can_view_ticket(identity: Identity, ticket: dict) -> bool:
    return identity.is_admin or is_owner(identity, ticket)


def can_modify_ticket(identity: Identity, ticket: dict) -> bool:
    return identity.is_admin or is_owner(identity, ticket)


def can_manage_tickets(identity: Identity) -> bool:
    # list all, assigned-to-me, assign and stats
    return identity.is_admin


def can_review_ticket(identity: Identity, ticket: dict) -> bool:
    return can_view_ticket(identity, ticket)


def can_modify_review(identity: Identity, review: dict) -> bool:
    return identity.is_admin or str(review.get("author_id")) == identity.id

# airdesk/services/tickets.py
import logging
import uuid
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from airdesk import policy
from airdesk.errors import NotFoundError, StaleRevisionError
from airdesk.schemas.ticket import ReviewCreate, ReviewUpdate, TicketCreate, TicketStatus, TicketUpdate
from airdesk.schemas.user import Identity, Role
from airdesk.serializers import parse_object_id, public_user, serialize, user_summary, utcnow

logger = logging.getLogger(__name__)

NO_HASH = {"hashed_password": 0}
TICKET_CODE_ATTEMPTS = 3


def new_ticket_code() -> str:
    return uuid.uuid4().hex[:8].upper()


# -----------------------------
# Helpers: loading and response shaping
# -----------------------------
async def _load_ticket(db: AsyncIOMotorDatabase, ticket_id: str) -> dict:
    ticket = await db["tickets"].find_one({"_id": parse_object_id(ticket_id, "Ticket")})
    if not ticket:
        raise NotFoundError("Ticket not found")
    return ticket


def _find_review(ticket: dict, review_id: str) -> dict:
    rid = parse_object_id(review_id, "Review")
    for review in ticket.get("reviews", []):
        if review.get("_id") == rid:
            return review
    raise NotFoundError("Review not found")


async def _users_by_id(db: AsyncIOMotorDatabase, ids) -> dict:
    oids = {ObjectId(str(i)) for i in ids if i and ObjectId.is_valid(str(i))}
    if not oids:
        return {}
    cursor = db["users"].find({"_id": {"$in": list(oids)}}, NO_HASH)
    return {str(u["_id"]): u async for u in cursor}


def _shape(ticket: dict, users: dict, owner_key: str = "owner", with_authors: bool = False) -> dict:
    doc = dict(ticket)
    owner_id = doc.pop("owner_id", None)
    doc[owner_key] = user_summary(users.get(str(owner_id)))
    assigned = doc.get("assigned_to")
    doc["assigned_to"] = user_summary(users.get(str(assigned))) if assigned else None

    reviews = sorted(doc.get("reviews", []), key=lambda r: (r["created_at"], r["_id"]))
    if with_authors:
        reviews = [_shape_review(r, user_summary(users.get(str(r.get("author_id"))))) for r in reviews]
    doc["reviews"] = reviews
    return serialize(doc)


def _shape_review(review: dict, author) -> dict:
    doc = {k: v for k, v in review.items() if k != "author_id"}
    doc["author"] = author
    return serialize(doc)


async def _resolve(db: AsyncIOMotorDatabase, tickets: list, owner_key: str = "owner", with_authors: bool = False) -> list:
    ids = set()
    for t in tickets:
        ids.add(t.get("owner_id"))
        ids.add(t.get("assigned_to"))
        if with_authors:
            ids.update(r.get("author_id") for r in t.get("reviews", []))
    users = await _users_by_id(db, ids)
    return [_shape(t, users, owner_key, with_authors) for t in tickets]


async def _find_sorted(db: AsyncIOMotorDatabase, query: dict) -> list:
    cursor = db["tickets"].find(query).sort([("created_at", -1), ("_id", -1)])
    return [t async for t in cursor]


# -----------------------------
# Listing
# -----------------------------
async def list_mine(db: AsyncIOMotorDatabase, identity: Identity) -> list:
    # Admin sees every ticket, a normal user only their own
    query = {} if identity.is_admin else {"owner_id": identity.id}
    return await _resolve(db, await _find_sorted(db, query))


async def list_all(db: AsyncIOMotorDatabase, identity: Identity) -> list:
    policy.ensure(policy.can_manage_tickets(identity), "Admins only")
    return await _resolve(db, await _find_sorted(db, {}), owner_key="user")


async def list_assigned_to_me(db: AsyncIOMotorDatabase, identity: Identity) -> list:
    policy.ensure(policy.can_manage_tickets(identity), "Admins only")
    tickets = await _find_sorted(db, {"assigned_to": identity.id})
    return await _resolve(db, tickets, owner_key="user")


async def get_mine(db: AsyncIOMotorDatabase, identity: Identity, ticket_id: str) -> dict:
    ticket = await _load_ticket(db, ticket_id)
    policy.ensure(policy.can_view_ticket(identity, ticket), "You are not authorized to view this ticket")

    [shaped] = await _resolve(db, [ticket], with_authors=True)
    if not ticket.get("assigned_to"):
        admin = await db["users"].find_one({"role": Role.ADMIN.value}, NO_HASH)
        shaped["managing_admin"] = user_summary(admin)
    return shaped


# -----------------------------
# Ticket CRUD
# -----------------------------
async def create(db: AsyncIOMotorDatabase, identity: Identity, data: TicketCreate) -> dict:
    owner = await db["users"].find_one({"_id": parse_object_id(identity.id, "User")}, NO_HASH)
    if not owner:
        raise NotFoundError("User not found")

    now = utcnow()
    ticket = {
        "owner_id": identity.id,
        **data.model_dump(mode="json"),
        "status": TicketStatus.OPEN.value,
        "assigned_to": None,
        "reviews": [],
        "revision": 0,
        "created_at": now,
        "updated_at": now,
    }
    for attempt in range(TICKET_CODE_ATTEMPTS):
        ticket["ticket_id"] = new_ticket_code()
        try:
            result = await db["tickets"].insert_one(ticket)
            break
        except DuplicateKeyError:
            ticket.pop("_id", None)
            if attempt == TICKET_CODE_ATTEMPTS - 1:
                raise
    ticket["_id"] = result.inserted_id

    logger.info("Ticket %s created by %s", ticket["ticket_id"], identity.email)
    return _shape(ticket, {identity.id: owner})


async def update(db: AsyncIOMotorDatabase, identity: Identity, ticket_id: str, patch: TicketUpdate) -> dict:
    ticket = await _load_ticket(db, ticket_id)
    policy.ensure(policy.can_modify_ticket(identity, ticket))

    query = {"_id": ticket["_id"]}
    if patch.revision is not None:
        query["revision"] = patch.revision

    updated = await db["tickets"].find_one_and_update(
        query,
        {"$set": {**patch.changes(), "updated_at": utcnow()}, "$inc": {"revision": 1}},
        return_document=ReturnDocument.AFTER,
    )
    if updated is None:
        if patch.revision is not None:
            raise StaleRevisionError()
        raise NotFoundError("Ticket not found")

    [shaped] = await _resolve(db, [updated], with_authors=True)
    return shaped


async def delete(db: AsyncIOMotorDatabase, identity: Identity, ticket_id: str) -> dict:
    ticket = await _load_ticket(db, ticket_id)
    policy.ensure(policy.can_modify_ticket(identity, ticket))

    result = await db["tickets"].delete_one({"_id": ticket["_id"]})
    if result.deleted_count == 0:
        raise NotFoundError("Ticket not found")

    logger.info("Ticket %s deleted by %s", ticket.get("ticket_id"), identity.email)
    return serialize(ticket)


async def assign(db: AsyncIOMotorDatabase, identity: Identity, ticket_id: str) -> dict:
    policy.ensure(policy.can_manage_tickets(identity), "Admins only")
    ticket = await _load_ticket(db, ticket_id)

    if ticket.get("assigned_to") != identity.id:
        ticket = await db["tickets"].find_one_and_update(
            {"_id": ticket["_id"]},
            {"$set": {"assigned_to": identity.id, "updated_at": utcnow()}, "$inc": {"revision": 1}},
            return_document=ReturnDocument.AFTER,
        )
        if ticket is None:
            raise NotFoundError("Ticket not found")
        logger.info("Ticket %s assigned to %s", ticket.get("ticket_id"), identity.email)

    [shaped] = await _resolve(db, [ticket], owner_key="user")
    return shaped


# -----------------------------
# Reviews
# -----------------------------
async def add_review(db: AsyncIOMotorDatabase, identity: Identity, ticket_id: str, data: ReviewCreate) -> dict:
    ticket = await _load_ticket(db, ticket_id)
    policy.ensure(policy.can_review_ticket(identity, ticket), "You are not authorized to review this ticket")

    now = utcnow()
    review = {"_id": ObjectId(), "author_id": identity.id, "text": data.text, "created_at": now, "updated_at": now}
    result = await db["tickets"].update_one(
        {"_id": ticket["_id"]},
        {"$push": {"reviews": review}, "$set": {"updated_at": now}, "$inc": {"revision": 1}},
    )
    if result.matched_count == 0:
        raise NotFoundError("Ticket not found")

    author = await db["users"].find_one({"_id": parse_object_id(identity.id, "User")}, NO_HASH)
    if author is None:
        author = {"_id": identity.id, "username": identity.username, "email": identity.email, "role": identity.role.value}
    return _shape_review(review, public_user(author))


async def update_review(
    db: AsyncIOMotorDatabase, identity: Identity, ticket_id: str, review_id: str, data: ReviewUpdate
) -> dict:
    ticket = await _load_ticket(db, ticket_id)
    review = _find_review(ticket, review_id)
    policy.ensure(policy.can_modify_review(identity, review))

    now = utcnow()
    result = await db["tickets"].update_one(
        {"_id": ticket["_id"], "reviews._id": review["_id"]},
        {
            "$set": {"reviews.$.text": data.text, "reviews.$.updated_at": now, "updated_at": now},
            "$inc": {"revision": 1},
        },
    )
    if result.matched_count == 0:
        raise NotFoundError("Review not found")
    return {"message": "Review has been successfully updated."}


async def remove_review(db: AsyncIOMotorDatabase, identity: Identity, ticket_id: str, review_id: str) -> dict:
    ticket = await _load_ticket(db, ticket_id)
    review = _find_review(ticket, review_id)
    policy.ensure(policy.can_modify_review(identity, review))

    result = await db["tickets"].update_one(
        {"_id": ticket["_id"], "reviews._id": review["_id"]},
        {"$pull": {"reviews": {"_id": review["_id"]}}, "$set": {"updated_at": utcnow()}, "$inc": {"revision": 1}},
    )
    if result.matched_count == 0:
        raise NotFoundError("Review not found")
    return {"message": "Review has been successfully removed."}

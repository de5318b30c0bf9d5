# airdesk/serializers.py
from datetime import datetime, timezone
from bson import ObjectId
from bson.errors import InvalidId

from airdesk.errors import NotFoundError

SUMMARY_FIELDS = ("_id", "username", "email")


def utcnow() -> datetime:
    # MongoDB hands datetimes back naive (UTC), keep ours the same
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_object_id(value: str, label: str = "Document") -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(f"{label} not found")


# -----------------------------
# Helper: Convert ObjectId to string (recursive for nested dicts/lists)
# -----------------------------
def serialize(obj):
    if isinstance(obj, dict):
        return {k: serialize(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [serialize(i) for i in obj]
    elif isinstance(obj, ObjectId):
        return str(obj)
    else:
        return obj


def public_user(user: dict | None):
    if not user:
        return None
    user = {k: v for k, v in user.items() if k != "hashed_password"}
    return serialize(user)


def user_summary(user: dict | None):
    if not user:
        return None
    return serialize({field: user.get(field) for field in SUMMARY_FIELDS})

# airdesk/services/reporting.py
from collections import Counter
from datetime import datetime
from motor.motor_asyncio import AsyncIOMotorDatabase

from airdesk.errors import ValidationError


def _day(stamp: datetime) -> str:
    return stamp.strftime("%Y-%m-%d")


def _week(stamp: datetime) -> str:
    iso = stamp.isocalendar()
    return f"{iso[0]:04d}-W{iso[1]:02d}"


def _month(stamp: datetime) -> str:
    return stamp.strftime("%Y-%m")


# labels are zero padded so string order is chronological order
BUCKETS = {"day": _day, "week": _week, "month": _month}


async def ticket_stats(db: AsyncIOMotorDatabase, group_by: str = "day") -> dict:
    bucket = BUCKETS.get(group_by or "day")
    if bucket is None:
        raise ValidationError(f"groupBy must be one of: {', '.join(BUCKETS)}")

    counts = Counter()
    async for ticket in db["tickets"].find({}, {"created_at": 1}):
        counts[bucket(ticket["created_at"])] += 1

    labels = sorted(counts)
    return {"labels": labels, "data": [counts[label] for label in labels]}

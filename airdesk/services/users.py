# airdesk/services/users.py
import logging
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError

from airdesk.auth import create_access_token, get_password_hash, verify_password
from airdesk.errors import ConflictError, InvalidCredentialsError
from airdesk.schemas.user import Role, UserCreate
from airdesk.serializers import public_user, utcnow

logger = logging.getLogger(__name__)

NO_HASH = {"hashed_password": 0}


async def sign_up(db: AsyncIOMotorDatabase, config, data: UserCreate) -> dict:
    users = db["users"]
    existing_user = await users.find_one({"$or": [{"username": data.username}, {"email": data.email}]})
    if existing_user:
        raise ConflictError()

    now = utcnow()
    user = {
        "username": data.username,
        "email": data.email,
        "hashed_password": get_password_hash(data.password, config.HASH_ROUNDS),
        "role": (data.role or Role.USER).value,
        "created_at": now,
        "updated_at": now,
    }
    try:
        result = await users.insert_one(user)
    except DuplicateKeyError:
        # lost a race with a concurrent signup for the same email
        raise ConflictError()
    user["_id"] = result.inserted_id

    logger.info("User %s signed up with role %s", user["email"], user["role"])
    return {"user": public_user(user), "token": create_access_token(user, config)}


async def sign_in(db: AsyncIOMotorDatabase, config, email: str, password: str) -> dict:
    user = await db["users"].find_one({"email": email})
    if not user or not verify_password(password, user["hashed_password"], config.HASH_ROUNDS):
        logger.info("Failed sign-in for %s", email)
        raise InvalidCredentialsError()

    return {"user": public_user(user), "token": create_access_token(user, config)}


async def list_users(db: AsyncIOMotorDatabase) -> list:
    cursor = db["users"].find({}, NO_HASH)
    return [public_user(u) async for u in cursor]


async def create_admin(db: AsyncIOMotorDatabase, config, username: str, email: str, password: str) -> dict:
    data = UserCreate(username=username, email=email, password=password, role=Role.ADMIN)
    result = await sign_up(db, config, data)
    return result["user"]

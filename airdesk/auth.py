# airdesk/auth.py
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from jose import jwt, JWTError
from passlib.context import CryptContext

from airdesk.errors import UnauthorizedError
from airdesk.schemas.user import Identity

CLAIMS = ("sub", "username", "email", "role")


# Use argon2 for password hashing; rounds is the argon2 time cost
@lru_cache(maxsize=None)
def password_context(rounds: int) -> CryptContext:
    return CryptContext(schemes=["argon2"], deprecated="auto", argon2__rounds=rounds)


# Hash password
def get_password_hash(password: str, rounds: int):
    return password_context(rounds).hash(password)


# Verify password
def verify_password(plain_password: str, hashed_password: str, rounds: int):
    try:
        return password_context(rounds).verify(plain_password, hashed_password)
    except ValueError:
        # stored value is not a hash this context understands
        return False


# Create JWT token
def create_access_token(user: dict, config) -> str:
    to_encode = {
        "sub": str(user["_id"]),
        "username": user["username"],
        "email": user["email"],
        "role": user["role"],
    }
    if config.ACCESS_TOKEN_EXPIRE_MINUTES > 0:
        expire = datetime.now(timezone.utc) + timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES)
        to_encode["exp"] = expire
    return jwt.encode(to_encode, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


# Decode JWT token into the caller identity
def decode_access_token(token: str | None, config) -> Identity:
    if not token:
        raise UnauthorizedError("Not authenticated")
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except JWTError:
        raise UnauthorizedError("Invalid token")

    if any(payload.get(claim) is None for claim in CLAIMS):
        raise UnauthorizedError("Invalid token")

    try:
        return Identity(
            id=payload["sub"],
            username=payload["username"],
            email=payload["email"],
            role=payload["role"],
        )
    except ValueError:
        raise UnauthorizedError("Invalid token")

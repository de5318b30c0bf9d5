# airdesk/config.py
import os
from dotenv import load_dotenv

load_dotenv()


def _as_int(val: str | None, default: int) -> int:
    if val is None or not str(val).strip():
        return default
    return int(val)


def _as_list(val: str | None, default: list[str]) -> list[str]:
    if val is None or not str(val).strip():
        return default
    return [item.strip() for item in val.split(",") if item.strip()]


class Config:
    # --- Core ---
    APP_NAME = "airdesk"
    APP_VERSION = os.getenv("APP_VERSION")

    # --- MongoDB ---
    MONGODB_URI = os.getenv("MONGODB_URI") or os.getenv("MONGO_URI") or "mongodb://localhost:27017"
    MONGODB_DB = os.getenv("MONGODB_DB", "airdesk")

    # --- JWT ---
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    # 0 keeps tokens valid until the secret rotates
    ACCESS_TOKEN_EXPIRE_MINUTES = _as_int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES"), 0)

    # --- Passwords (argon2 time cost) ---
    HASH_ROUNDS = _as_int(os.getenv("HASH_ROUNDS") or os.getenv("SALT_ROUNDS"), 3)

    # --- CORS ---
    CORS_ORIGINS = _as_list(os.getenv("CORS_ORIGINS"), ["*"])

    # --- Logging ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE")

# airdesk/main.py
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from airdesk.config import Config
from airdesk.db import connect, ensure_indexes
from airdesk.errors import register_error_handlers
from airdesk.routers import tickets, users

logger = logging.getLogger("airdesk")


# -------------------------
# Logging
# -------------------------
def _init_logging(config):
    level = getattr(logging, str(config.LOG_LEVEL).upper(), logging.INFO)
    logger.setLevel(level)
    if logger.handlers:
        return

    formatter = logging.Formatter("[%(asctime)s] %(levelname)s in %(module)s: %(message)s")

    # Stream to stdout (useful on dev/docker)
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    # Rotating file handler (5MB x 5) when a log file is configured
    if config.LOG_FILE:
        file_handler = RotatingFileHandler(config.LOG_FILE, maxBytes=5_000_000, backupCount=5, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.info("Logging initialized.")


# -------------------------
# App factory
# -------------------------
def create_app(config=None, db=None) -> FastAPI:
    config = config or Config
    _init_logging(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await ensure_indexes(app.state.db)
        yield

    app = FastAPI(title="Airdesk Support Ticket API", version=config.APP_VERSION or "0.1.0", lifespan=lifespan)
    app.state.config = config
    app.state.db = db if db is not None else connect(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    register_error_handlers(app)

    # -------------------------
    # Include Routers
    # -------------------------
    app.include_router(users.router)
    app.include_router(tickets.router)

    # -------------------------
    # Root Route
    # -------------------------
    @app.get("/")
    async def read_root():
        return {"message": "Welcome to the Airdesk Support Ticket API!"}

    # -------------------------
    # Health (DB ping + version)
    # -------------------------
    @app.get("/status")
    async def health():
        ok_db = True
        try:
            await app.state.db.command("ping")
        except Exception as e:
            logger.error(f"DB health failed: {e}")
            ok_db = False

        return {
            "service": config.APP_NAME,
            "version": config.APP_VERSION,
            "time_utc": datetime.now(timezone.utc).isoformat(),
            "checks": {"database": "ok" if ok_db else "fail"},
        }

    return app


app = create_app()

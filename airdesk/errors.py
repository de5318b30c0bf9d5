# airdesk/errors.py
import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Something went wrong, try again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"


class ConflictError(AppError):
    # duplicate identity fields are reported as a bad request
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Username or email already exists. Try again"


class InvalidCredentialsError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid Credentials"


class UnauthorizedError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Unable to access: Unauthorized."


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "You're not allowed to do that!"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class StaleRevisionError(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "Ticket was modified by someone else. Reload and try again"


def error_body(code: int, message: str) -> dict:
    return {"status": code, "message": message}


# -------------------------
# Handlers
# -------------------------
async def handle_app_error(request: Request, exc: AppError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, exc.message),
        headers=headers,
    )


async def handle_validation_error(request: Request, exc: RequestValidationError):
    problems = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        problems.append(f"{field}: {err.get('msg')}" if field else err.get("msg"))
    message = "; ".join(problems) or ValidationError.message
    return JSONResponse(status_code=400, content=error_body(400, message))


async def handle_http_exception(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected(request: Request, exc: Exception):
    # Don't leak internals, just log and answer with a generic 500
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body(500, AppError.message))


def register_error_handlers(app: FastAPI):
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)

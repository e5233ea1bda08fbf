"""
Error taxonomy shared by the services and the HTTP layer.

Every failure a caller can observe is one of three kinds, each with a stable
machine-readable code and a stable human-readable message:

  BadRequest       — caller-correctable business-rule violation   (400)
  Unauthenticated  — missing/invalid session or failed login      (401)
  InternalError    — unexpected store failure                     (500)

Store-level uniqueness violations are translated into BadRequest through the
UNIQUE_VIOLATION_MESSAGES table; anything else coming out of the store becomes
an InternalError.
"""
import enum
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class ErrorCode(str, enum.Enum):
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    INTERNAL_SERVER_ERROR = "INTERNAL_SERVER_ERROR"


class ServiceError(Exception):
    code: ErrorCode = ErrorCode.INTERNAL_SERVER_ERROR
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"code": self.code.value, "message": self.message}


class BadRequest(ServiceError):
    code = ErrorCode.BAD_REQUEST
    status_code = status.HTTP_400_BAD_REQUEST


class Unauthenticated(ServiceError):
    code = ErrorCode.UNAUTHENTICATED
    status_code = status.HTTP_401_UNAUTHORIZED


class InternalError(ServiceError):
    code = ErrorCode.INTERNAL_SERVER_ERROR
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# table written → message reported when its unique constraint fires
UNIQUE_VIOLATION_MESSAGES = {
    "users": "User with this email or username already exists",
    "relations": "You are already following this user",
}

_UNIQUE_SQLSTATE = "23505"        # PostgreSQL
_MYSQL_DUPLICATE_ENTRY = 1062


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the store rejected a write because of a unique/primary key."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate:
        return sqlstate == _UNIQUE_SQLSTATE

    args = getattr(orig, "args", ())
    if args and args[0] == _MYSQL_DUPLICATE_ENTRY:
        return True

    message = str(orig)
    return "UNIQUE constraint failed" in message or "Duplicate entry" in message


def translate_integrity_error(
    exc: IntegrityError, table: str, fallback_message: str
) -> ServiceError:
    if is_unique_violation(exc) and table in UNIQUE_VIOLATION_MESSAGES:
        return BadRequest(UNIQUE_VIOLATION_MESSAGES[table])
    logger.error("Integrity error writing %s: %s", table, exc.orig)
    return InternalError(fallback_message)


# ─────────────────────────── HTTP mapping ────────────────────────────────

async def handle_service_error(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Unhandled store error on %s %s", request.method, request.url.path, exc_info=exc)
    error = InternalError("An unexpected error occurred.")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # e.g. "Invalid request: email, password"; location prefix (body/query) dropped
    fields = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ())]
        name = ".".join(loc[1:]) or ".".join(loc) or "request"
        if name not in fields:
            fields.append(name)
    error = BadRequest(f"Invalid request: {', '.join(fields)}")
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ServiceError, handle_service_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(SQLAlchemyError, handle_store_error)

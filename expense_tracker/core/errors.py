from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

logger = logging.getLogger("expense_tracker.errors")

MISSING_OWNER_MESSAGE = "Cannot create expense without ownerId"


class ExpenseTrackerError(Exception):
    """Base class for errors raised by the client services."""


class MissingOwnerError(ExpenseTrackerError):
    def __init__(self, message: str = MISSING_OWNER_MESSAGE):
        super().__init__(message)


class StoreError(ExpenseTrackerError):
    """The expense store could not complete a request."""


class ExpenseNotFoundError(StoreError):
    def __init__(self, expense_id: str):
        super().__init__(f"expense '{expense_id}' not found")
        self.expense_id = expense_id


class AuthError(ExpenseTrackerError):
    """Login, registration or profile update failed."""


class InvalidCredentialsError(AuthError):
    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class EmailInUseError(AuthError):
    def __init__(self, message: str = "Email already in use"):
        super().__init__(message)


def _error(status_code: int, error: str, detail) -> JSONResponse:  # type: ignore[no-untyped-def]
    return JSONResponse(
        status_code=status_code, content={"error": error, "detail": detail}
    )


def http_error_handler(request: Request, exc: StarletteHTTPException):  # type: ignore
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return _error(
            exc.status_code,
            "not_found",
            f"No route for {request.method} {request.url.path}",
        )
    return _error(exc.status_code, "http_error", exc.detail)


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    # pydantic error contexts may hold exception instances
    return _error(422, "validation_error", jsonable_encoder(exc.errors()))


def missing_owner_handler(request: Request, exc: MissingOwnerError):  # type: ignore
    return _error(status.HTTP_401_UNAUTHORIZED, "not_authenticated", str(exc))


def auth_error_handler(request: Request, exc: AuthError):  # type: ignore
    if isinstance(exc, EmailInUseError):
        return _error(status.HTTP_409_CONFLICT, "email_in_use", str(exc))
    if isinstance(exc, InvalidCredentialsError):
        return _error(status.HTTP_401_UNAUTHORIZED, "invalid_credentials", str(exc))
    logger.warning("auth failure: %s", exc)
    return _error(status.HTTP_502_BAD_GATEWAY, "auth_unavailable", str(exc))


def store_error_handler(request: Request, exc: StoreError):  # type: ignore
    if isinstance(exc, ExpenseNotFoundError):
        return _error(status.HTTP_404_NOT_FOUND, "not_found", str(exc))
    logger.warning("store failure: %s", exc)
    return _error(status.HTTP_502_BAD_GATEWAY, "store_unavailable", str(exc))


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.exception("unhandled exception")
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "internal_error",
        "An unexpected error occurred.",
    )

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .core import errors
from .routers import dashboard, expenses, session as session_router
from .services.auth_service import AuthService
from .services.expense_list import ExpenseListController
from .services.expense_store import make_expense_store
from .services.http_client import JsonClient
from .services.session import Session


def create_app(
    settings_override: Settings | None = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment. Falls back to cached get_settings().
    transport: httpx transport for the remote API client (tests pass a
    MockTransport so no network is touched).
    """
    settings = settings_override or get_settings()
    settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug)

    client = JsonClient(
        settings.base_url,
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
        backoff=settings.http_backoff_seconds,
        transport=transport,
    )
    session = Session(AuthService(client))
    controller = ExpenseListController(
        make_expense_store(settings.expense_store, client),
        page_size=settings.page_size,
    )
    # Owner changes (login / logout) reset and reload the expense list
    session.subscribe(controller.set_owner)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.getLogger("expense_tracker").info(
            "starting with %s expense store at %s", settings.expense_store, settings.base_url
        )
        try:
            yield
        finally:
            await client.aclose()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=settings.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.session = session
    app.state.expenses = controller

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(errors.MissingOwnerError, errors.missing_owner_handler)
    app.add_exception_handler(errors.AuthError, errors.auth_error_handler)
    app.add_exception_handler(errors.StoreError, errors.store_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(session_router.router)
    app.include_router(expenses.router)
    app.include_router(dashboard.router)

    @app.get("/")
    async def root():
        return {"message": "Expense Tracker API", "version": settings.version}

    return app


app = create_app()

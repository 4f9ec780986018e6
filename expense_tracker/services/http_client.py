from __future__ import annotations

"""Async JSON client for the remote mock API.

Wraps httpx.AsyncClient with the transport policy the services rely on:
per-request timeout, limited retries with exponential backoff for idempotent
methods, and a single error type carrying the HTTP status.
"""
import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from expense_tracker.core.errors import ExpenseTrackerError

logger = logging.getLogger("expense_tracker.http")

IDEMPOTENT_METHODS = frozenset({"GET", "PUT", "DELETE"})


class HttpError(ExpenseTrackerError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class JsonClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 5.0,
        retries: int = 2,
        backoff: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._retries = retries
        self._backoff = backoff
        self._client_options: Dict[str, Any] = dict(
            base_url=base_url,
            timeout=timeout,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )
        self._client: Optional[httpx.AsyncClient] = None

    def _http(self) -> httpx.AsyncClient:
        # reopened after aclose() so an app can go through several lifespans
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(**self._client_options)
        return self._client

    @property
    def closed(self) -> bool:
        return self._client is None or self._client.is_closed

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def request_json(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        method = method.upper()
        attempts = self._retries + 1 if method in IDEMPOTENT_METHODS else 1
        last_err: Optional[Exception] = None
        for attempt in range(attempts):
            try:
                resp = await self._http().request(method, path, params=params, json=json)
            except httpx.TransportError as e:
                last_err = e
            else:
                if resp.status_code >= 500:
                    last_err = HttpError(
                        f"HTTP {resp.status_code} for {method} {path}", resp.status_code
                    )
                elif resp.status_code >= 400:
                    # client errors are not retried
                    raise HttpError(
                        f"HTTP {resp.status_code} for {method} {path}", resp.status_code
                    )
                else:
                    return _decode(resp, method, path)
            if attempt + 1 < attempts:
                delay = self._backoff * (2**attempt)
                logger.debug(
                    "retrying %s %s in %.2fs after %s", method, path, delay, last_err
                )
                await asyncio.sleep(delay)
        status_code = getattr(last_err, "status_code", None)
        raise HttpError(f"{method} {path} failed: {last_err}", status_code)

    async def get(self, path: str, **params: Any) -> Any:
        return await self.request_json("GET", path, params=params or None)

    async def post(self, path: str, payload: Any) -> Any:
        return await self.request_json("POST", path, json=payload)

    async def put(self, path: str, payload: Any) -> Any:
        return await self.request_json("PUT", path, json=payload)

    async def delete(self, path: str) -> Any:
        return await self.request_json("DELETE", path)


def _decode(resp: httpx.Response, method: str, path: str) -> Any:
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError as e:
        raise HttpError(f"Invalid JSON from {method} {path}: {e}", resp.status_code) from e

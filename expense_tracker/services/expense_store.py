from __future__ import annotations

"""Expense store abstraction and concrete stores.

'HttpExpenseStore' talks to the remote mock API; 'InMemoryExpenseStore' keeps
records in process so the client can run (and be tested) without a network.
Both honour the same contract, including ExpenseNotFoundError for unknown ids.
"""
import itertools
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from expense_tracker.core.errors import ExpenseNotFoundError, StoreError
from expense_tracker.models.expense import Expense, ExpenseUpdate
from expense_tracker.services.http_client import HttpError, JsonClient

logger = logging.getLogger("expense_tracker.store")

UpdateFields = Union[ExpenseUpdate, Dict[str, Any]]


def _update_payload(fields: UpdateFields) -> Dict[str, Any]:
    if isinstance(fields, ExpenseUpdate):
        return fields.to_wire()
    return dict(fields)


class ExpenseStore(ABC):
    @abstractmethod
    async def list_by_owner(
        self, owner_id: str, page: int, page_size: int
    ) -> List[Expense]:
        """Return one page (1-based) of the owner's expenses."""
        raise NotImplementedError

    @abstractmethod
    async def create(self, expense: Expense) -> Expense:
        """Persist a new expense; the store assigns id and createdAt."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, expense_id: str, fields: UpdateFields) -> Expense:
        """Apply a partial update and return the full updated record."""
        raise NotImplementedError

    @abstractmethod
    async def delete(self, expense_id: str) -> None:
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, expense_id: str) -> Expense:
        raise NotImplementedError


class HttpExpenseStore(ExpenseStore):
    def __init__(self, client: JsonClient, collection: str = "/expenses"):
        self._client = client
        self._collection = collection

    def _item_path(self, expense_id: str) -> str:
        return f"{self._collection}/{expense_id}"

    async def _call(self, method: str, path: str, expense_id: Optional[str] = None, **kw: Any) -> Any:
        try:
            return await self._client.request_json(method, path, **kw)
        except HttpError as e:
            if e.status_code == 404 and expense_id is not None:
                raise ExpenseNotFoundError(expense_id) from e
            raise StoreError(str(e)) from e

    @staticmethod
    def _parse(data: Any) -> Expense:
        try:
            return Expense.model_validate(data)
        except ValidationError as e:
            raise StoreError(f"malformed expense record: {e}") from e

    async def list_by_owner(
        self, owner_id: str, page: int, page_size: int
    ) -> List[Expense]:
        params = {"ownerId": owner_id, "page": page, "limit": page_size}
        try:
            data = await self._client.request_json("GET", self._collection, params=params)
        except HttpError as e:
            # the mock API answers a filter with no matches with 404 "Not found"
            if e.status_code == 404:
                return []
            raise StoreError(str(e)) from e
        if not isinstance(data, list):
            raise StoreError(f"expected a list of expenses, got {type(data).__name__}")
        return [self._parse(row) for row in data]

    async def create(self, expense: Expense) -> Expense:
        payload = expense.to_wire()
        payload.pop("id", None)
        payload.pop("createdAt", None)
        data = await self._call("POST", self._collection, json=payload)
        return self._parse(data)

    async def update(self, expense_id: str, fields: UpdateFields) -> Expense:
        data = await self._call(
            "PUT", self._item_path(expense_id), expense_id, json=_update_payload(fields)
        )
        return self._parse(data)

    async def delete(self, expense_id: str) -> None:
        await self._call("DELETE", self._item_path(expense_id), expense_id)

    async def get_by_id(self, expense_id: str) -> Expense:
        data = await self._call("GET", self._item_path(expense_id), expense_id)
        return self._parse(data)


class InMemoryExpenseStore(ExpenseStore):
    """Process-local store with mock-API semantics (string ids, insertion order)."""

    def __init__(self, records: Optional[List[Expense]] = None):
        self._records: Dict[str, Expense] = {}
        self._ids = itertools.count(1)
        for record in records or []:
            self._insert(record)

    def _insert(self, expense: Expense) -> Expense:
        expense_id = expense.id
        while expense_id is None or (expense.id is None and expense_id in self._records):
            expense_id = str(next(self._ids))
        stored = expense.model_copy(
            update={
                "id": expense_id,
                "created_at": expense.created_at or datetime.now(timezone.utc),
            }
        )
        self._records[expense_id] = stored
        return stored

    def _get(self, expense_id: str) -> Expense:
        try:
            return self._records[expense_id]
        except KeyError:
            raise ExpenseNotFoundError(expense_id) from None

    async def list_by_owner(
        self, owner_id: str, page: int, page_size: int
    ) -> List[Expense]:
        owned = [e for e in self._records.values() if e.owner_id == owner_id]
        start = (page - 1) * page_size
        return owned[start : start + page_size]

    async def create(self, expense: Expense) -> Expense:
        stored = self._insert(expense.model_copy(update={"id": None, "created_at": None}))
        logger.debug("created expense %s", stored.id, extra={"owner_id": stored.owner_id})
        return stored

    async def update(self, expense_id: str, fields: UpdateFields) -> Expense:
        current = self._get(expense_id)
        merged = {**current.model_dump(by_alias=True), **_update_payload(fields)}
        merged["id"] = expense_id
        try:
            updated = Expense.model_validate(merged)
        except ValidationError as e:
            raise StoreError(f"invalid update for expense '{expense_id}': {e}") from e
        self._records[expense_id] = updated
        return updated

    async def delete(self, expense_id: str) -> None:
        self._get(expense_id)
        del self._records[expense_id]

    async def get_by_id(self, expense_id: str) -> Expense:
        return self._get(expense_id)

    def __len__(self) -> int:
        return len(self._records)


_STORE_REGISTRY = {
    "http": HttpExpenseStore,
    "memory": InMemoryExpenseStore,
}


def make_expense_store(kind: str, client: Optional[JsonClient] = None) -> ExpenseStore:
    cls = _STORE_REGISTRY.get(kind)
    if not cls:
        raise ValueError(f"Unknown expense store kind '{kind}'")
    if cls is HttpExpenseStore:
        if client is None:
            raise ValueError("the http expense store needs a JsonClient")
        return HttpExpenseStore(client)
    return cls()

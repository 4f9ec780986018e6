"""Shared fakes for the test suite: an in-process mock API and record builders."""
import itertools
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from expense_tracker.models.expense import Expense
from expense_tracker.services.expense_store import InMemoryExpenseStore

BASE_URL = "https://mock.test/api/v1"


class FakeMockApi:
    """In-process stand-in for the mockapi.io users/expenses collections."""

    def __init__(self) -> None:
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {
            "users": {},
            "expenses": {},
        }
        self._ids = itertools.count(1)
        self.requests: List[httpx.Request] = []
        # status codes returned (in order) before normal handling resumes
        self.fail_with: List[int] = []

    # seeding ---------------------------------------------------------
    def add(self, collection: str, **record: Any) -> Dict[str, Any]:
        record.setdefault("id", str(next(self._ids)))
        record.setdefault("createdAt", datetime.now(timezone.utc).isoformat())
        self.collections[collection][record["id"]] = record
        return record

    def add_user(self, **record: Any) -> Dict[str, Any]:
        record.setdefault("firstname", "Ada")
        record.setdefault("lastname", "Lovelace")
        record.setdefault("username", "ada")
        record.setdefault("budget", 0)
        return self.add("users", **record)

    def add_expenses(self, owner_id: str, count: int, amount: float = 10.0) -> None:
        for n in range(count):
            self.add(
                "expenses",
                title=f"Expense {n + 1}",
                amount=amount,
                category="Food",
                description="",
                ownerId=owner_id,
            )

    # transport -------------------------------------------------------
    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with:
            return httpx.Response(self.fail_with.pop(0), json={"error": "boom"})
        parts = request.url.path.removeprefix("/api/v1/").strip("/").split("/")
        name = parts[0]
        if name not in self.collections:
            return httpx.Response(404, json="Not found")
        items = self.collections[name]
        item_id: Optional[str] = parts[1] if len(parts) > 1 else None
        body = json.loads(request.content) if request.content else None

        if item_id is None:
            if request.method == "GET":
                return self._list(items, request.url.params)
            if request.method == "POST":
                body.pop("id", None)
                body["createdAt"] = datetime.now(timezone.utc).isoformat()
                return httpx.Response(201, json=self.add(name, **body))
            return httpx.Response(405)

        if item_id not in items:
            return httpx.Response(404, json="Not found")
        if request.method == "GET":
            return httpx.Response(200, json=items[item_id])
        if request.method == "PUT":
            items[item_id] = {**items[item_id], **body, "id": item_id}
            return httpx.Response(200, json=items[item_id])
        if request.method == "DELETE":
            return httpx.Response(200, json=items.pop(item_id))
        return httpx.Response(405)

    def _list(self, items: Dict[str, Dict[str, Any]], params: httpx.QueryParams) -> httpx.Response:
        rows = list(items.values())
        if "ownerId" in params:
            rows = [r for r in rows if r.get("ownerId") == params["ownerId"]]
        if "page" in params and "limit" in params:
            page, limit = int(params["page"]), int(params["limit"])
            rows = rows[(page - 1) * limit : page * limit]
        if not rows and "ownerId" in params:
            # mockapi.io answers an empty filter with 404
            return httpx.Response(404, json="Not found")
        return httpx.Response(200, json=rows)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def make_expense(owner_id: str = "u1", **fields: Any) -> Expense:
    data = {"title": "Coffee", "amount": 4.5, "category": "Food", "owner_id": owner_id}
    data.update(fields)
    return Expense.model_validate(data)


def seeded_store(owner_id: str, count: int, **fields: Any) -> InMemoryExpenseStore:
    return InMemoryExpenseStore(
        [make_expense(owner_id, title=f"Expense {n + 1}", **fields) for n in range(count)]
    )

import pytest

from expense_tracker.core.errors import ExpenseNotFoundError, StoreError
from expense_tracker.models.expense import ExpenseUpdate
from expense_tracker.services.expense_store import (
    HttpExpenseStore,
    InMemoryExpenseStore,
    make_expense_store,
)
from tests.base import make_expense

pytestmark = pytest.mark.anyio


async def test_http_list_sends_owner_page_and_limit(fake_api, json_client):
    fake_api.add_expenses("u1", 12)
    fake_api.add_expenses("u2", 3)
    store = HttpExpenseStore(json_client)

    page2 = await store.list_by_owner("u1", 2, 10)
    assert [e.title for e in page2] == ["Expense 11", "Expense 12"]
    assert all(e.owner_id == "u1" for e in page2)
    params = fake_api.requests[-1].url.params
    assert params["ownerId"] == "u1"
    assert params["page"] == "2"
    assert params["limit"] == "10"


async def test_http_list_treats_not_found_as_empty_page(fake_api, json_client):
    store = HttpExpenseStore(json_client)
    assert await store.list_by_owner("nobody", 1, 10) == []


async def test_http_list_raises_store_error_on_server_failure(fake_api, json_client):
    fake_api.fail_with = [503, 503, 503]
    store = HttpExpenseStore(json_client)
    with pytest.raises(StoreError):
        await store.list_by_owner("u1", 1, 10)


async def test_http_create_returns_record_with_assigned_fields(fake_api, json_client):
    store = HttpExpenseStore(json_client)
    created = await store.create(make_expense("u1", description="flat white"))

    assert created.id is not None
    assert created.created_at is not None
    assert created.amount == 4.5
    sent = fake_api.collections["expenses"][created.id]
    assert sent["ownerId"] == "u1"
    assert sent["description"] == "flat white"


async def test_http_update_and_get(fake_api, json_client):
    fake_api.add_expenses("u1", 1)
    store = HttpExpenseStore(json_client)

    updated = await store.update("1", ExpenseUpdate(title="Brunch"))
    assert updated.title == "Brunch"
    assert updated.amount == 10.0
    assert (await store.get_by_id("1")).title == "Brunch"


async def test_http_missing_ids_raise_not_found(fake_api, json_client):
    store = HttpExpenseStore(json_client)
    with pytest.raises(ExpenseNotFoundError):
        await store.get_by_id("404")
    with pytest.raises(ExpenseNotFoundError):
        await store.delete("404")
    with pytest.raises(ExpenseNotFoundError):
        await store.update("404", {"title": "x"})


async def test_http_delete(fake_api, json_client):
    fake_api.add_expenses("u1", 2)
    store = HttpExpenseStore(json_client)
    await store.delete("1")
    assert list(fake_api.collections["expenses"]) == ["2"]


async def test_http_numeric_ids_are_text(fake_api, json_client):
    fake_api.add("expenses", id=7, title="Tea", amount="2.5", category="Food", ownerId=3)
    fake_api.collections["expenses"]["7"] = fake_api.collections["expenses"].pop(7)
    store = HttpExpenseStore(json_client)
    expense = await store.get_by_id("7")
    assert expense.id == "7"
    assert expense.owner_id == "3"
    assert expense.amount == 2.5


async def test_http_page_with_malformed_record_fails_as_a_whole(fake_api, json_client):
    fake_api.add_expenses("u1", 2)
    fake_api.add("expenses", title="", amount=-1, category="Food", ownerId="u1")
    store = HttpExpenseStore(json_client)
    # dropping the bad row would shorten the page and end paging early
    with pytest.raises(StoreError, match="malformed expense record"):
        await store.list_by_owner("u1", 1, 10)


async def test_memory_store_pages_in_insertion_order():
    store = InMemoryExpenseStore()
    for n in range(5):
        await store.create(make_expense("u1", title=f"e{n}"))
    await store.create(make_expense("u2"))

    assert [e.title for e in await store.list_by_owner("u1", 1, 2)] == ["e0", "e1"]
    assert [e.title for e in await store.list_by_owner("u1", 3, 2)] == ["e4"]
    assert await store.list_by_owner("u1", 4, 2) == []
    assert len(store) == 6


async def test_memory_store_update_merges_and_validates():
    store = InMemoryExpenseStore([make_expense("u1", id="e1", description="old")])
    updated = await store.update("e1", {"amount": 8})
    assert updated.amount == 8
    assert updated.description == "old"
    with pytest.raises(StoreError):
        await store.update("e1", {"amount": -3})
    with pytest.raises(ExpenseNotFoundError):
        await store.get_by_id("nope")


async def test_memory_store_does_not_reuse_seeded_ids():
    store = InMemoryExpenseStore([make_expense("u1", id="1")])
    created = await store.create(make_expense("u1"))
    assert created.id == "2"


def test_make_expense_store_registry(json_client):
    assert isinstance(make_expense_store("memory"), InMemoryExpenseStore)
    assert isinstance(make_expense_store("http", json_client), HttpExpenseStore)
    with pytest.raises(ValueError):
        make_expense_store("http")
    with pytest.raises(ValueError):
        make_expense_store("sqlite")

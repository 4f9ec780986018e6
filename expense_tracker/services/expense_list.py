from __future__ import annotations

"""Paginated, optimistically updated view of one owner's expenses.

Design:
    - State lives in an immutable ExpenseListState; every change goes through
      expense_state.reduce so transitions are reproducible in tests.
    - Page loads are guarded by the loading flag: a load requested while
      another is in flight is a no-op. refresh() instead waits for the
      in-flight load and then reloads page 1.
    - create/update/delete are not serialized against each other or against
      loads. Each result is applied under the generation it was issued in, so
      answers arriving after an owner change are dropped.
    - End of data is inferred from a short page (len(page) < page_size). An
      exactly full last page reports has_more=True until the next (empty)
      page corrects it.
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Tuple, Union

from expense_tracker.core.errors import MissingOwnerError, StoreError
from expense_tracker.models.constants import DEFAULT_PAGE_SIZE
from expense_tracker.models.expense import Expense, ExpenseDraft, ExpenseUpdate
from expense_tracker.services.expense_state import (
    Action,
    ExpenseCreated,
    ExpenseDeleted,
    ExpenseListState,
    ExpenseUpdated,
    LoadSettled,
    LoadStarted,
    OwnerChanged,
    RefreshStarted,
    reduce,
)
from expense_tracker.services.expense_store import ExpenseStore

logger = logging.getLogger("expense_tracker.expenses")

OwnerCallback = Callable[[str], Awaitable[None]]


class IdentityProvider(Protocol):
    @property
    def owner_id(self) -> str: ...

    def subscribe(self, callback: OwnerCallback) -> Callable[[], None]: ...


class ExpenseListController:
    def __init__(
        self,
        store: ExpenseStore,
        page_size: int = DEFAULT_PAGE_SIZE,
        owner_id: str = "",
    ):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._store = store
        self._page_size = page_size
        # keyed to owner_id but nothing loaded yet; callers refresh() to fill it
        self._state = ExpenseListState(owner_id=owner_id)
        # (generation, task) of the page request currently in flight
        self._pending: Optional[Tuple[int, asyncio.Future]] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    # State ---------------------------------------------------------
    def _dispatch(self, action: Action) -> ExpenseListState:
        self._state = reduce(self._state, action)
        return self._state

    @property
    def state(self) -> ExpenseListState:
        return self._state

    @property
    def expenses(self) -> List[Expense]:
        return list(self._state.items)

    @property
    def owner_id(self) -> str:
        return self._state.owner_id

    @property
    def page(self) -> int:
        return self._state.page

    @property
    def has_more(self) -> bool:
        return self._state.has_more

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def page_size(self) -> int:
        return self._page_size

    def _log_extra(self) -> Dict[str, Any]:
        return {"owner_id": self._state.owner_id}

    # Ownership -----------------------------------------------------
    async def set_owner(self, owner_id: Optional[str]) -> None:
        """Reset for a new owner and, when there is one, load its first page."""
        owner_id = owner_id or ""
        if owner_id == self._state.owner_id:
            return
        self._dispatch(OwnerChanged(owner_id))
        logger.debug("owner changed", extra=self._log_extra())
        if owner_id:
            await self.refresh()

    async def bind(self, identity: IdentityProvider) -> None:
        """Follow the identity provider's owner id from now on."""
        self.unbind()
        self._unsubscribe = identity.subscribe(self.set_owner)
        await self.set_owner(identity.owner_id)

    def unbind(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    # Loading -------------------------------------------------------
    async def load_next_page(self) -> bool:
        state = self._state
        if not state.owner_id or state.loading or not state.has_more:
            return False
        return await self._load(replace=False)

    async def refresh(self) -> bool:
        while self._pending is not None and self._pending[0] == self._state.generation:
            # resolves once the in-flight load has applied its result
            await asyncio.shield(self._pending[1])
        self._dispatch(RefreshStarted(self._state.generation))
        if not self._state.owner_id:
            return False
        return await self._load(replace=True)

    async def _load(self, replace: bool) -> bool:
        state = self._dispatch(LoadStarted(self._state.generation))
        generation, owner_id = state.generation, state.owner_id
        page = 1 if replace else state.page
        settled: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending = (generation, settled)
        items: Optional[Tuple[Expense, ...]] = None
        try:
            items = tuple(
                await self._store.list_by_owner(owner_id, page, self._page_size)
            )
        except StoreError:
            logger.exception("failed to load expenses page %d", page, extra={"owner_id": owner_id})
        finally:
            before = self._state
            after = self._dispatch(
                LoadSettled(generation, page, self._page_size, items, replace)
            )
            if self._pending is not None and self._pending[1] is settled:
                self._pending = None
            settled.set_result(None)
        if after is before:
            logger.debug("discarded stale page %d", page, extra={"owner_id": owner_id})
            return False
        if items is None:
            return False
        logger.debug(
            "loaded page %d (%d items, has_more=%s)",
            page,
            len(items),
            after.has_more,
            extra={"owner_id": owner_id},
        )
        return True

    # Mutations -----------------------------------------------------
    async def create_expense(self, draft: Union[ExpenseDraft, Dict[str, Any]]) -> Expense:
        """Persist a new expense for the current owner and prepend it locally.

        Returns the store's record so callers can act on its amount (budget
        checks) without waiting for a refresh.
        """
        state = self._state
        if not state.owner_id:
            raise MissingOwnerError()
        if not isinstance(draft, ExpenseDraft):
            draft = ExpenseDraft.model_validate(draft)
        payload = Expense.model_validate(
            {**draft.model_dump(include=set(ExpenseDraft.model_fields)), "owner_id": state.owner_id}
        )
        created = await self._store.create(payload)
        self._dispatch(ExpenseCreated(state.generation, created))
        logger.debug("created expense %s", created.id, extra={"owner_id": state.owner_id})
        return created

    async def update_expense(
        self, expense_id: str, fields: Union[ExpenseUpdate, Dict[str, Any]]
    ) -> Expense:
        if not isinstance(fields, ExpenseUpdate):
            fields = ExpenseUpdate.model_validate(fields)
        generation = self._state.generation
        updated = await self._store.update(expense_id, fields)
        self._dispatch(ExpenseUpdated(generation, expense_id, updated))
        return updated

    async def delete_expense(self, expense_id: str) -> None:
        generation = self._state.generation
        await self._store.delete(expense_id)
        self._dispatch(ExpenseDeleted(generation, expense_id))

    async def get_expense_by_id(self, expense_id: str) -> Expense:
        return await self._store.get_by_id(expense_id)


__all__ = ["ExpenseListController", "IdentityProvider"]

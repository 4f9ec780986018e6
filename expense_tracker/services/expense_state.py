"""State transitions for the paginated expense list.

The controller never mutates its state in place: every change is an action
fed through `reduce`, which returns a new frozen `ExpenseListState`. Actions
that complete a network call carry the generation they were issued under;
when the owner changes the generation moves on and late answers for the
previous owner fall through unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple, Union

from expense_tracker.models.expense import Expense


@dataclass(frozen=True)
class ExpenseListState:
    owner_id: str = ""
    generation: int = 0
    items: Tuple[Expense, ...] = ()
    page: int = 1
    has_more: bool = True
    loading: bool = False


@dataclass(frozen=True)
class OwnerChanged:
    owner_id: str


@dataclass(frozen=True)
class RefreshStarted:
    generation: int


@dataclass(frozen=True)
class LoadStarted:
    generation: int


@dataclass(frozen=True)
class LoadSettled:
    """Outcome of a page request. `items` is None when the request failed."""

    generation: int
    page: int
    page_size: int
    items: Optional[Tuple[Expense, ...]]
    replace: bool = False


@dataclass(frozen=True)
class ExpenseCreated:
    generation: int
    expense: Expense


@dataclass(frozen=True)
class ExpenseUpdated:
    generation: int
    expense_id: str
    expense: Expense


@dataclass(frozen=True)
class ExpenseDeleted:
    generation: int
    expense_id: str


Action = Union[
    OwnerChanged,
    RefreshStarted,
    LoadStarted,
    LoadSettled,
    ExpenseCreated,
    ExpenseUpdated,
    ExpenseDeleted,
]


def is_stale(state: ExpenseListState, action: Action) -> bool:
    generation = getattr(action, "generation", None)
    return generation is not None and generation != state.generation


def reduce(state: ExpenseListState, action: Action) -> ExpenseListState:
    if isinstance(action, OwnerChanged):
        return ExpenseListState(
            owner_id=action.owner_id, generation=state.generation + 1
        )
    if is_stale(state, action):
        return state

    if isinstance(action, RefreshStarted):
        return replace(state, items=(), page=1, has_more=True)
    if isinstance(action, LoadStarted):
        return replace(state, loading=True)
    if isinstance(action, LoadSettled):
        if action.items is None:
            return replace(state, loading=False)
        items = action.items if action.replace else state.items + action.items
        return replace(
            state,
            items=items,
            page=action.page + 1,
            # a short page is the end-of-data signal
            has_more=len(action.items) == action.page_size,
            loading=False,
        )
    if isinstance(action, ExpenseCreated):
        return replace(state, items=(action.expense,) + state.items)
    if isinstance(action, ExpenseUpdated):
        changes = action.expense.model_dump(exclude_unset=True)
        return replace(
            state,
            items=tuple(
                e.model_copy(update=changes) if e.id == action.expense_id else e
                for e in state.items
            ),
        )
    if isinstance(action, ExpenseDeleted):
        return replace(
            state,
            items=tuple(e for e in state.items if e.id != action.expense_id),
        )
    raise TypeError(f"unknown action {action!r}")


__all__ = [
    "ExpenseListState",
    "OwnerChanged",
    "RefreshStarted",
    "LoadStarted",
    "LoadSettled",
    "ExpenseCreated",
    "ExpenseUpdated",
    "ExpenseDeleted",
    "reduce",
    "is_stale",
]

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from expense_tracker.core.config import Settings
from expense_tracker.models.expense import Expense, ExpenseDraft, ExpenseUpdate
from expense_tracker.services.analytics_utils import total_spent
from expense_tracker.services.budget_utils import check_budget
from expense_tracker.services.expense_list import ExpenseListController
from expense_tracker.services.session import Session

router = APIRouter(prefix="/expenses", tags=["expenses"])

# Dependencies -----------------------------------------------------


def get_controller(request: Request) -> ExpenseListController:
    return request.app.state.expenses


def get_session(request: Request) -> Session:
    return request.app.state.session


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


# Response Models ---------------------------------------------------
class ExpenseListOut(BaseModel):
    owner_id: str
    items: List[Expense]
    page: int
    has_more: bool
    loading: bool


class ExpenseCreateResponse(BaseModel):
    expense: Expense
    alert: Optional[Dict[str, Any]] = None


# Helpers ----------------------------------------------------------


def _list_out(controller: ExpenseListController) -> ExpenseListOut:
    state = controller.state
    return ExpenseListOut(
        owner_id=state.owner_id,
        items=list(state.items),
        page=state.page,
        has_more=state.has_more,
        loading=state.loading,
    )


# Routes -----------------------------------------------------------
@router.get("", response_model=ExpenseListOut, summary="Loaded expenses and paging state")
async def list_expenses(controller: ExpenseListController = Depends(get_controller)):
    return _list_out(controller)


@router.post(
    "/load-more", response_model=ExpenseListOut, summary="Fetch the next page"
)
async def load_more(controller: ExpenseListController = Depends(get_controller)):
    await controller.load_next_page()
    return _list_out(controller)


@router.post(
    "/refresh", response_model=ExpenseListOut, summary="Reload from the first page"
)
async def refresh(controller: ExpenseListController = Depends(get_controller)):
    await controller.refresh()
    return _list_out(controller)


@router.post(
    "",
    response_model=ExpenseCreateResponse,
    status_code=201,
    summary="Create an expense for the current user",
)
async def create_expense(
    payload: ExpenseDraft,
    controller: ExpenseListController = Depends(get_controller),
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
):
    spent_before = total_spent(controller.expenses)
    created = await controller.create_expense(payload)
    budget = session.user.budget if session.user else 0
    alert = check_budget(
        spent_before + created.amount, budget, settings.budget_warning_ratio
    )
    return ExpenseCreateResponse(expense=created, alert=alert)


@router.get("/{expense_id}", response_model=Expense, summary="Fetch one expense from the store")
async def get_expense(
    expense_id: str, controller: ExpenseListController = Depends(get_controller)
):
    return await controller.get_expense_by_id(expense_id)


@router.patch(
    "/{expense_id}", response_model=Expense, summary="Edit an expense (partial)"
)
async def patch_expense(
    expense_id: str,
    payload: ExpenseUpdate,
    controller: ExpenseListController = Depends(get_controller),
):
    return await controller.update_expense(expense_id, payload)


@router.delete("/{expense_id}", status_code=204, summary="Delete an expense")
async def delete_expense(
    expense_id: str, controller: ExpenseListController = Depends(get_controller)
):
    await controller.delete_expense(expense_id)
    return None

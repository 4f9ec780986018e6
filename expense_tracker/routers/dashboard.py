from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict

from expense_tracker.models.expense import Expense
from expense_tracker.models.user import UserOut
from expense_tracker.services.analytics_utils import build_dashboard
from expense_tracker.services.expense_list import ExpenseListController
from expense_tracker.services.session import Session

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_controller(request: Request) -> ExpenseListController:
    return request.app.state.expenses


def get_session(request: Request) -> Session:
    return request.app.state.session


class CategoryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    category: str
    total_amount: float
    count: int


class DashboardOut(BaseModel):
    user: Optional[UserOut] = None
    total_spent: float
    expense_count: int
    budget: Dict[str, Any]
    recent: List[Expense]
    categories: List[CategoryOut]


@router.get("", response_model=DashboardOut, summary="Spending overview for the loaded expenses")
async def dashboard(
    controller: ExpenseListController = Depends(get_controller),
    session: Session = Depends(get_session),
):
    user = session.user
    summary = build_dashboard(controller.expenses, user.budget if user else 0)
    return DashboardOut(
        user=user.public() if user else None,
        total_spent=summary.total_spent,
        expense_count=summary.expense_count,
        budget=summary.budget,
        recent=summary.recent,
        categories=[CategoryOut.model_validate(c) for c in summary.categories],
    )

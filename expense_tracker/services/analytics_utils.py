from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from expense_tracker.models.constants import RECENT_EXPENSES_LIMIT
from expense_tracker.models.expense import Expense
from expense_tracker.services.budget_utils import budget_status
from expense_tracker.services.money import round2

"""Dashboard aggregates over the locally loaded expenses.

Scopes implemented:
    - Total spent
    - Category breakdown (total + count, largest first)
    - Dashboard summary (budget status, count, recent entries)

Everything works on whatever pages the expense list has loaded so far; no
extra requests are made.
"""


@dataclass(frozen=True)
class CategorySpending:
    category: str
    total_amount: float
    count: int


@dataclass(frozen=True)
class DashboardSummary:
    total_spent: float
    expense_count: int
    budget: Dict[str, Any]
    recent: List[Expense] = field(default_factory=list)
    categories: List[CategorySpending] = field(default_factory=list)


def total_spent(expenses: Iterable[Expense]) -> float:
    return round2(sum(e.amount for e in expenses))


def aggregate_by_category(expenses: Iterable[Expense]) -> List[CategorySpending]:
    totals: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for e in expenses:
        totals[e.category] = totals.get(e.category, 0.0) + e.amount
        counts[e.category] = counts.get(e.category, 0) + 1
    rows = [
        CategorySpending(category=c, total_amount=round2(t), count=counts[c])
        for c, t in totals.items()
    ]
    # stable sort keeps first-seen order among equal totals
    return sorted(rows, key=lambda r: r.total_amount, reverse=True)


def build_dashboard(
    expenses: List[Expense], budget: float, recent_limit: int = RECENT_EXPENSES_LIMIT
) -> DashboardSummary:
    spent = total_spent(expenses)
    return DashboardSummary(
        total_spent=spent,
        expense_count=len(expenses),
        budget=budget_status(spent, budget),
        recent=expenses[:recent_limit],
        categories=aggregate_by_category(expenses),
    )

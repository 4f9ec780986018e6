"""Budget status and threshold notifications.

A single overall budget lives on the user profile. Spending is compared to it
in two steps: at or above the warning ratio (80% by default) a 'warn' alert
is raised, at or above the full budget a 'danger' alert. Callers that just
created an expense pass `previous total + created.amount` instead of waiting
for the list to be refreshed.

Alert schema (dict):
  type: 'budget'
  level: 'warn' | 'danger'
  title: 'Budget Warning' | 'Budget Exceeded'
  message: human readable string
"""

from __future__ import annotations
from typing import Any, Dict, Optional

from expense_tracker.models.constants import BUDGET_WARNING_THRESHOLD
from expense_tracker.services.money import format_money, percent, round2


def check_budget(
    total_spent: float, budget: float, warn_ratio: float = BUDGET_WARNING_THRESHOLD
) -> Optional[Dict[str, Any]]:
    if budget <= 0 or total_spent < budget * warn_ratio:
        return None
    if total_spent >= budget:
        return {
            "type": "budget",
            "level": "danger",
            "title": "Budget Exceeded",
            "message": (
                f"You have spent {format_money(total_spent)} and exceeded your "
                f"budget of {format_money(budget)}."
            ),
        }
    return {
        "type": "budget",
        "level": "warn",
        "title": "Budget Warning",
        "message": (
            f"You have spent {format_money(total_spent)} which is "
            f"{total_spent / budget * 100:.0f}% of your budget ({format_money(budget)})."
        ),
    }


def budget_status(total_spent: float, budget: float) -> Dict[str, Any]:
    has_budget = budget > 0
    remaining = round2(budget - total_spent) if has_budget else None
    return {
        "budget": round2(budget),
        "total_spent": round2(total_spent),
        "remaining": remaining,
        "remaining_display": format_money(remaining) if remaining is not None else "N/A",
        "percent_used": percent(total_spent, budget),
        "over_budget": has_budget and total_spent > budget,
    }


__all__ = ["check_budget", "budget_status"]

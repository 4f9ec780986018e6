"""Pydantic domain models for the Expense Tracker client."""

from .constants import (
    BUDGET_WARNING_THRESHOLD,
    DEFAULT_PAGE_SIZE,
    RECENT_EXPENSES_LIMIT,
)  # re-export
from .expense import Expense, ExpenseDraft, ExpenseUpdate
from .user import LoginIn, ProfileUpdate, RegistrationIn, User, UserOut

__all__ = [
    "BUDGET_WARNING_THRESHOLD",
    "DEFAULT_PAGE_SIZE",
    "RECENT_EXPENSES_LIMIT",
    "Expense",
    "ExpenseDraft",
    "ExpenseUpdate",
    "LoginIn",
    "ProfileUpdate",
    "RegistrationIn",
    "User",
    "UserOut",
]

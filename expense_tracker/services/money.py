"""Money / rounding helpers.

Centralized so totals, budget alerts and the dashboard use identical
rounding and display semantics.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP


def round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_money(value: float) -> str:
    """Dollar display used in notifications, e.g. 1234.5 -> '$1234.50'."""
    return f"${round2(value):.2f}"


def percent(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return round2(part / whole * 100)

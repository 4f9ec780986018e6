"""Domain constants shared by validation, pagination and budget helpers."""

import re
from typing import Pattern

DEFAULT_PAGE_SIZE: int = 10
# Share of the budget at which a warning notification fires
BUDGET_WARNING_THRESHOLD: float = 0.8
# Entries shown in the dashboard's "recent" section
RECENT_EXPENSES_LIMIT: int = 3

EMAIL_PATTERN: Pattern[str] = re.compile(r"\S+@\S+\.\S+")
MIN_PASSWORD_LENGTH: int = 6

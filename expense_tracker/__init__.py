"""Expense Tracker client: paginated expense list over the remote mock API."""

__version__ = "0.1.0"

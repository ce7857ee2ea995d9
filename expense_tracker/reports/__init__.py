"""Derived views package."""

from expense_tracker.reports.derivations import (
    budget_usage,
    expenses_by_category,
    goal_progress,
    month_keys,
    monthly_series,
    recent_transactions,
    sorted_transactions,
    summary,
)

__all__ = [
    "budget_usage",
    "expenses_by_category",
    "goal_progress",
    "month_keys",
    "monthly_series",
    "recent_transactions",
    "sorted_transactions",
    "summary",
]

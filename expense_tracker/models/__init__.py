"""
Data Models Package

This package contains all Pydantic models used in the Expense Tracker.
Everything stored, exported, imported or derived conforms to these schemas.
"""

from expense_tracker.models.finance import (
    DEFAULT_CATEGORY,
    FALLBACK_CATEGORY,
    ZERO,
    BudgetUsage,
    DomainState,
    Goal,
    MonthlyBucket,
    Summary,
    Theme,
    Transaction,
    TransactionKind,
    UserSettings,
    ValidationIssue,
    new_id,
)
from expense_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Finance models
    "DEFAULT_CATEGORY",
    "FALLBACK_CATEGORY",
    "ZERO",
    "BudgetUsage",
    "DomainState",
    "Goal",
    "MonthlyBucket",
    "Summary",
    "Theme",
    "Transaction",
    "TransactionKind",
    "UserSettings",
    "ValidationIssue",
    "new_id",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

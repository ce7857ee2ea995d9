"""
Core Data Models for Expense Tracker

These models define the schemas for everything kept in the durable record
and everything the derivation engine hands to the presentation layer.
They are designed to:
1. Enforce the field invariants at runtime (positive amounts, non-negative budgets)
2. Keep the persisted key names of the stored document ("type", "date", "budgetLimit")
3. Preserve unknown fields so older or newer documents survive a round trip
4. Serialize money as plain JSON numbers

DESIGN DECISION: Money is held as Decimal in memory so totals add up exactly,
but written out as a JSON number to keep the stored document shape unchanged.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)


Money = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

ZERO = Decimal("0")

DEFAULT_CATEGORY = "General"
FALLBACK_CATEGORY = "Other"


def new_id() -> str:
    """Fresh opaque identifier, unique for the life of the process."""
    return str(uuid4())


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class Theme(str, Enum):
    """Display theme."""
    DARK = "dark"
    LIGHT = "light"

    def toggled(self) -> "Theme":
        return Theme.LIGHT if self is Theme.DARK else Theme.DARK


# =============================================================================
# STORED RECORDS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense entry.

    Transactions are created once and never edited; a correction is a
    delete followed by a new entry.

    The category is kept exactly as stored. New entries get "General"
    when the user leaves it blank, but older documents may hold no category
    at all and the category breakdown folds those into "Other".
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="allow",
    )

    id: str = Field(
        default_factory=new_id,
        min_length=1,
        description="Opaque unique identifier"
    )
    description: str = Field(
        default="",
        description="What the money was for"
    )
    amount: Money = Field(
        ...,
        gt=0,
        description="Positive amount in the account currency"
    )
    kind: TransactionKind = Field(
        ...,
        alias="type",
        description="income or expense"
    )
    category: Optional[str] = Field(
        default=None,
        description="Free-text category"
    )
    transaction_date: Optional[date] = Field(
        default=None,
        alias="date",
        description="Calendar date, absent when the user left it empty"
    )
    recurring: bool = Field(
        default=False,
        description="Marked as a recurring payment"
    )

    @field_validator('transaction_date', mode='before')
    @classmethod
    def empty_date_is_absent(cls, v: Any) -> Any:
        """Forms submit an empty string for a missing date."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def month_key(self) -> Optional[str]:
        """Year-month bucket ("2024-03") or None when undated."""
        if self.transaction_date is None:
            return None
        return self.transaction_date.strftime("%Y-%m")


class Goal(BaseModel):
    """
    A savings goal.

    current may exceed target; progress is clamped when it is displayed,
    never when it is stored.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        extra="allow",
    )

    id: str = Field(
        default_factory=new_id,
        min_length=1,
    )
    name: str = Field(
        default="",
        description="Goal name"
    )
    target: Money = Field(
        ...,
        gt=0,
        description="Amount to reach"
    )
    current: Money = Field(
        default=ZERO,
        ge=0,
        description="Amount saved so far"
    )


class UserSettings(BaseModel):
    """User preferences stored alongside the data."""
    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
    )

    theme: Theme = Field(
        default=Theme.DARK,
    )
    budget_limit: Money = Field(
        default=ZERO,
        ge=0,
        alias="budgetLimit",
        description="Monthly spending limit, 0 means unset"
    )


class DomainState(BaseModel):
    """
    The complete user state, exactly as kept in the durable record.

    Collections are insertion ordered and keyed by id.
    """
    model_config = ConfigDict(extra="allow")

    transactions: list[Transaction] = Field(default_factory=list)
    goals: list[Goal] = Field(default_factory=list)
    settings: UserSettings = Field(default_factory=UserSettings)

    def find_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self.transactions if t.id == transaction_id), None)

    def find_goal(self, goal_id: str) -> Optional[Goal]:
        return next((g for g in self.goals if g.id == goal_id), None)

    def to_document(self) -> dict:
        """Plain JSON-compatible document using the stored key names."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class Summary(BaseModel):
    """Totals over every transaction."""

    income: Money = ZERO
    expense: Money = ZERO
    balance: Money = ZERO


class MonthlyBucket(BaseModel):
    """Income and expense totals for one calendar month."""

    month: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}$",
        description="Year-month key, e.g. 2024-03"
    )
    income: Money = ZERO
    expense: Money = ZERO


class BudgetUsage(BaseModel):
    """Spending in the reference month measured against the budget limit."""

    spent: Money = ZERO
    limit: Money = ZERO
    percent: Money = Field(
        default=ZERO,
        ge=0,
        le=100,
        description="Share of the limit used, clamped to 100"
    )
    exceeded: bool = False

    @property
    def is_set(self) -> bool:
        return self.limit > 0


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single problem found in user input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
    )

"""
User Input Validation

DESIGN DECISION: Everything typed into a form is validated here, before it
reaches the domain state. Validation:
- Parses raw form values (strings, numbers, dates) into typed values
- Collects every issue instead of stopping at the first one
- NEVER silently fixes an out-of-range number; it reports it

A blank numeric field counts as 0, the same as an empty number input,
so a blank amount is reported as "must be greater than 0" while a blank
goal progress or budget is accepted as 0.
"""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from expense_tracker.models.finance import (
    DEFAULT_CATEGORY,
    ZERO,
    Goal,
    Theme,
    Transaction,
    TransactionKind,
    ValidationIssue,
)


NumberInput = Union[str, int, float, Decimal, None]


class ValidationError(Exception):
    """User input violates a field invariant."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__(" ".join(issue.message for issue in issues))

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]

    def to_dicts(self) -> list[dict]:
        return [issue.model_dump() for issue in self.issues]


class InputValidator:
    """
    Validates and parses raw user input for every domain mutation.

    Each validate_* method returns parsed values or raises ValidationError
    carrying all issues found.
    """

    def _parse_number(
        self,
        value: NumberInput,
        field: str,
        issues: list[ValidationIssue],
    ) -> Optional[Decimal]:
        """Parse a form number. Returns None (and records an issue) if unparseable."""
        if value is None:
            return ZERO
        if isinstance(value, bool):
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{field} must be a number.",
            ))
            return None
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return ZERO
        try:
            number = Decimal(str(value))
        except (InvalidOperation, ValueError):
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{field} must be a number.",
            ))
            return None
        if not number.is_finite():
            issues.append(ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{field} must be a finite number.",
            ))
            return None
        return number

    def _parse_date(
        self,
        value: Union[str, date, None],
        issues: list[ValidationIssue],
    ) -> Optional[date]:
        if value is None or isinstance(value, date):
            return value
        value = value.strip()
        if not value:
            return None
        try:
            return date.fromisoformat(value)
        except ValueError:
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message=f"Date must be in YYYY-MM-DD format, got {value!r}.",
            ))
            return None

    def validate_transaction(
        self,
        description: str,
        amount: NumberInput,
        kind: Union[str, TransactionKind],
        category: Optional[str] = None,
        transaction_date: Union[str, date, None] = None,
        recurring: bool = False,
    ) -> Transaction:
        """Build a new Transaction (with a fresh id) from form input."""
        issues: list[ValidationIssue] = []

        parsed_amount = self._parse_number(amount, "amount", issues)
        if parsed_amount is not None and parsed_amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="out_of_range",
                message="Amount must be greater than 0.",
            ))

        try:
            parsed_kind = TransactionKind(kind)
        except ValueError:
            parsed_kind = None
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message=f"Type must be 'income' or 'expense', got {kind!r}.",
            ))

        parsed_date = self._parse_date(transaction_date, issues)

        if issues:
            raise ValidationError(issues)

        return Transaction(
            description=(description or "").strip(),
            amount=parsed_amount,
            kind=parsed_kind,
            category=(category or "").strip() or DEFAULT_CATEGORY,
            transaction_date=parsed_date,
            recurring=bool(recurring),
        )

    def validate_goal_amounts(
        self,
        target: NumberInput,
        current: NumberInput,
        target_message: str = "Goal target must be greater than 0.",
        current_message: str = "Goal current amount cannot be negative.",
    ) -> tuple[Decimal, Decimal]:
        """Validate a (target, current) pair; both are accepted or neither is."""
        issues: list[ValidationIssue] = []

        parsed_target = self._parse_number(target, "target", issues)
        if parsed_target is not None and parsed_target <= 0:
            issues.append(ValidationIssue(
                field="target",
                issue_type="out_of_range",
                message=target_message,
            ))

        parsed_current = self._parse_number(current, "current", issues)
        if parsed_current is not None and parsed_current < 0:
            issues.append(ValidationIssue(
                field="current",
                issue_type="out_of_range",
                message=current_message,
            ))

        if issues:
            raise ValidationError(issues)

        return parsed_target, parsed_current

    def validate_goal(
        self,
        name: str,
        target: NumberInput,
        current: NumberInput = None,
    ) -> Goal:
        """Build a new Goal (with a fresh id) from form input."""
        parsed_target, parsed_current = self.validate_goal_amounts(target, current)
        return Goal(
            name=(name or "").strip(),
            target=parsed_target,
            current=parsed_current,
        )

    def validate_budget_limit(self, value: NumberInput) -> Decimal:
        issues: list[ValidationIssue] = []
        parsed = self._parse_number(value, "budgetLimit", issues)
        if parsed is not None and parsed < 0:
            issues.append(ValidationIssue(
                field="budgetLimit",
                issue_type="out_of_range",
                message="Budget must be 0 or greater.",
            ))
        if issues:
            raise ValidationError(issues)
        return parsed

    def validate_theme(self, value: Union[str, Theme]) -> Theme:
        try:
            return Theme(value)
        except ValueError:
            raise ValidationError([ValidationIssue(
                field="theme",
                issue_type="invalid_value",
                message=f"Theme must be 'dark' or 'light', got {value!r}.",
            )])

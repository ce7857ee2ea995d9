"""
Derivation Engine

DESIGN DECISION: Every number the user sees is derived from the stored
transactions and goals on demand. Nothing here keeps state between calls,
so a derived view can never drift from the records it was computed from.

All functions are pure: the same state and reference date always give the
same result. Callers pass "today" explicitly.
"""

from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from expense_tracker.models.finance import (
    FALLBACK_CATEGORY,
    ZERO,
    BudgetUsage,
    DomainState,
    Goal,
    MonthlyBucket,
    Summary,
    Transaction,
    TransactionKind,
)


HUNDRED = Decimal("100")


def _total(transactions, kind: TransactionKind) -> Decimal:
    return sum((t.amount for t in transactions if t.kind == kind), ZERO)


def summary(state: DomainState) -> Summary:
    """Income, expense and balance over every transaction."""
    income = _total(state.transactions, TransactionKind.INCOME)
    expense = _total(state.transactions, TransactionKind.EXPENSE)
    return Summary(income=income, expense=expense, balance=income - expense)


def expenses_by_category(state: DomainState) -> dict[str, Decimal]:
    """
    Expense totals per category, in the order categories first appear.

    Entries without a category are grouped under "Other".
    """
    totals: dict[str, Decimal] = {}
    for transaction in state.transactions:
        if transaction.kind != TransactionKind.EXPENSE:
            continue
        key = transaction.category or FALLBACK_CATEGORY
        totals[key] = totals.get(key, ZERO) + transaction.amount
    return totals


def month_keys(months_back: int, reference_date: date) -> list[str]:
    """
    The months_back consecutive "YYYY-MM" keys ending at reference_date's month.

    Oldest first.
    """
    if months_back < 0:
        raise ValueError(f"months_back must not be negative, got {months_back}")
    reference_index = reference_date.year * 12 + reference_date.month - 1
    keys = []
    for offset in range(months_back - 1, -1, -1):
        year, month_index = divmod(reference_index - offset, 12)
        keys.append(f"{year:04d}-{month_index + 1:02d}")
    return keys


def monthly_series(
    state: DomainState,
    months_back: int,
    reference_date: date,
) -> list[MonthlyBucket]:
    """Zero-filled income/expense totals for each month in the trailing window."""
    buckets = {key: MonthlyBucket(month=key) for key in month_keys(months_back, reference_date)}
    for transaction in state.transactions:
        bucket = buckets.get(transaction.month_key)
        if bucket is None:
            continue
        if transaction.kind == TransactionKind.INCOME:
            bucket.income += transaction.amount
        else:
            bucket.expense += transaction.amount
    return list(buckets.values())


def _in_month(transaction: Transaction, reference_date: date) -> bool:
    d = transaction.transaction_date
    return d is not None and d.year == reference_date.year and d.month == reference_date.month


def budget_usage(state: DomainState, reference_date: date) -> BudgetUsage:
    """
    Expenses in reference_date's calendar month against the budget limit.

    A limit of 0 means no budget is set: percent is 0 and the budget is
    never exceeded.
    """
    limit = state.settings.budget_limit
    spent = sum(
        (
            t.amount for t in state.transactions
            if t.kind == TransactionKind.EXPENSE and _in_month(t, reference_date)
        ),
        ZERO,
    )
    if limit <= 0:
        return BudgetUsage(spent=spent, limit=limit, percent=ZERO, exceeded=False)
    return BudgetUsage(
        spent=spent,
        limit=limit,
        percent=min(spent / limit * HUNDRED, HUNDRED),
        exceeded=spent > limit,
    )


def goal_progress(goal: Goal) -> int:
    """Whole-number completion percentage, clamped to 100."""
    if goal.target <= 0:
        return 0
    percent = (goal.current / goal.target * HUNDRED).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return min(int(percent), 100)


def sorted_transactions(
    state: DomainState,
    recurring_only: bool = False,
) -> list[Transaction]:
    """
    Transactions newest first; undated entries sort as the oldest.

    Entries on the same date keep their insertion order.
    """
    entries = [t for t in state.transactions if t.recurring or not recurring_only]
    return sorted(
        entries,
        key=lambda t: t.transaction_date or date.min,
        reverse=True,
    )


def recent_transactions(state: DomainState, limit: int = 5) -> list[Transaction]:
    return sorted_transactions(state)[:limit]

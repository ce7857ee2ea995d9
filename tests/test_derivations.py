"""Tests for the derivation engine."""

from datetime import date
from decimal import Decimal

import pytest

from expense_tracker.models import DomainState, Goal, Transaction, UserSettings
from expense_tracker.reports import (
    budget_usage,
    expenses_by_category,
    goal_progress,
    month_keys,
    monthly_series,
    recent_transactions,
    sorted_transactions,
    summary,
)


def make_state(*entries, budget_limit=0) -> DomainState:
    transactions = []
    for i, (kind, amount, category, day) in enumerate(entries):
        transactions.append(Transaction.model_validate({
            "id": f"t-{i}",
            "description": f"entry {i}",
            "amount": amount,
            "type": kind,
            "category": category,
            "date": day,
        }))
    return DomainState(
        transactions=transactions,
        settings=UserSettings(budget_limit=Decimal(str(budget_limit))),
    )


class TestSummary:
    """Tests for income/expense/balance totals."""

    def test_empty_state_is_all_zero(self):
        totals = summary(DomainState())
        assert (totals.income, totals.expense, totals.balance) == (0, 0, 0)

    def test_single_expense(self):
        """Coffee example: one expense of 4.50."""
        state = make_state(("expense", "4.50", "Food", "2024-03-02"))
        totals = summary(state)
        assert totals.income == 0
        assert totals.expense == Decimal("4.50")
        assert totals.balance == Decimal("-4.50")
        assert expenses_by_category(state) == {"Food": Decimal("4.50")}

    def test_balance_moves_by_amount(self):
        """Test that adding income raises and adding expense lowers the balance."""
        state = make_state(("income", "1000", "Salary", "2024-03-01"))
        before = summary(state).balance
        state.transactions.append(Transaction.model_validate(
            {"amount": "120.25", "type": "expense", "category": "Rent"}
        ))
        assert summary(state).balance == before - Decimal("120.25")

    def test_decimal_totals_are_exact(self):
        state = make_state(("expense", "0.1", "A", ""), ("expense", "0.2", "A", ""))
        assert summary(state).expense == Decimal("0.3")


class TestExpensesByCategory:
    """Tests for the category breakdown."""

    def test_first_seen_order_and_income_excluded(self):
        state = make_state(
            ("expense", 5, "Travel", ""),
            ("income", 100, "Salary", ""),
            ("expense", 7, "Food", ""),
            ("expense", 3, "Travel", ""),
        )
        result = expenses_by_category(state)
        assert list(result) == ["Travel", "Food"]
        assert result["Travel"] == Decimal("8")

    def test_missing_category_folds_to_other(self):
        state = make_state(("expense", 5, None, ""), ("expense", 2, "", ""))
        assert expenses_by_category(state) == {"Other": Decimal("7")}


class TestMonthlySeries:
    """Tests for the trailing monthly window."""

    def test_three_month_window(self):
        """One February expense inside a January-March window."""
        state = make_state(("expense", 10, "Misc", "2024-02-10"))
        series = monthly_series(state, 3, date(2024, 3, 20))
        assert [(b.month, b.income, b.expense) for b in series] == [
            ("2024-01", 0, 0),
            ("2024-02", 0, 10),
            ("2024-03", 0, 0),
        ]

    def test_window_crosses_year_boundary(self):
        assert month_keys(3, date(2024, 1, 31)) == ["2023-11", "2023-12", "2024-01"]

    def test_exact_length_and_zero_window(self):
        assert len(monthly_series(DomainState(), 6, date(2024, 6, 1))) == 6
        assert monthly_series(DomainState(), 0, date(2024, 6, 1)) == []

    def test_out_of_window_and_undated_entries_ignored(self):
        state = make_state(
            ("income", 50, "Gift", "2023-12-31"),
            ("income", 20, "Gift", ""),
            ("income", 30, "Gift", "2024-03-01"),
        )
        series = monthly_series(state, 2, date(2024, 3, 5))
        assert [b.income for b in series] == [0, 30]

    def test_negative_window_rejected(self):
        with pytest.raises(ValueError):
            month_keys(-1, date(2024, 1, 1))


class TestBudgetUsage:
    """Tests for budget usage against the reference month."""

    def test_unset_budget_never_exceeded(self):
        state = make_state(("expense", 900, "Rent", "2024-03-01"))
        usage = budget_usage(state, date(2024, 3, 15))
        assert usage.spent == 900
        assert usage.percent == 0
        assert usage.exceeded is False
        assert usage.is_set is False

    def test_partial_usage(self):
        state = make_state(("expense", 25, "Food", "2024-03-03"), budget_limit=100)
        usage = budget_usage(state, date(2024, 3, 15))
        assert usage.percent == 25
        assert usage.exceeded is False

    def test_overspending_clamps_percent(self):
        state = make_state(
            ("expense", 100, "Rent", "2024-03-01"),
            ("expense", 50, "Food", "2024-03-20"),
            budget_limit=100,
        )
        usage = budget_usage(state, date(2024, 3, 31))
        assert usage.spent == 150
        assert usage.percent == 100
        assert usage.exceeded is True

    def test_only_same_month_and_year_expenses_count(self):
        state = make_state(
            ("expense", 10, "Food", "2024-03-01"),
            ("expense", 99, "Food", "2023-03-01"),
            ("expense", 99, "Food", "2024-02-29"),
            ("income", 99, "Pay", "2024-03-02"),
            ("expense", 99, "Food", ""),
            budget_limit=40,
        )
        assert budget_usage(state, date(2024, 3, 9)).spent == 10


class TestGoalProgress:
    """Tests for goal completion percentage."""

    def test_clamped_at_100(self):
        goal = Goal(name="Bike", target=Decimal("100"), current=Decimal("200"))
        assert goal_progress(goal) == 100

    def test_rounds_half_up(self):
        goal = Goal(name="Bike", target=Decimal("8"), current=Decimal("1"))
        assert goal_progress(goal) == 13

    def test_rounds_down_below_half(self):
        goal = Goal(name="Bike", target=Decimal("3"), current=Decimal("1"))
        assert goal_progress(goal) == 33

    def test_zero_target_short_circuits(self):
        goal = Goal.model_construct(name="Broken", target=Decimal("0"), current=Decimal("5"))
        assert goal_progress(goal) == 0


class TestOrdering:
    """Tests for display ordering and the recurring filter."""

    def test_newest_first_and_undated_last(self):
        state = make_state(
            ("expense", 1, "A", "2024-01-05"),
            ("expense", 2, "A", ""),
            ("expense", 3, "A", "2024-03-01"),
            ("expense", 4, "A", "2024-01-05"),
        )
        ordered = [t.id for t in sorted_transactions(state)]
        assert ordered == ["t-2", "t-0", "t-3", "t-1"]

    def test_recurring_only(self):
        state = make_state(("expense", 1, "A", "2024-01-05"), ("expense", 2, "A", "2024-01-06"))
        state.transactions[0].recurring = True
        assert [t.id for t in sorted_transactions(state, recurring_only=True)] == ["t-0"]

    def test_recent_limit(self):
        state = make_state(*[("income", 1, "A", f"2024-01-{d:02d}") for d in range(1, 9)])
        recent = recent_transactions(state, 5)
        assert len(recent) == 5
        assert recent[0].transaction_date == date(2024, 1, 8)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

"""
Tests for the Domain State Manager

Every test runs against an in-memory record store so persistence can be
checked by reading the record back or by building a second manager.
"""

import json
from decimal import Decimal

import pytest

from expense_tracker.audit import AuditLogger
from expense_tracker.manager import StateManager, create_tracker
from expense_tracker.models import AuditEventType, Theme
from expense_tracker.reports import summary
from expense_tracker.services.storage import InMemoryRecordStore, StateCodec, StorageWriteError
from expense_tracker.transfer import ImportFormatError
from expense_tracker.validation import ValidationError


KEY = "state"


class FailingRecordStore(InMemoryRecordStore):
    """Record store whose writes can be switched off."""

    def __init__(self):
        super().__init__()
        self.fail_writes = False

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageWriteError("disk full")
        super().set(key, value)


def make_manager(store=None, audit_sink=None):
    store = store if store is not None else InMemoryRecordStore()
    audit_logger = AuditLogger(audit_sink) if audit_sink else None
    manager = StateManager(StateCodec(store, KEY, audit_logger), audit_logger=audit_logger)
    return store, manager


def reloaded(store) -> StateManager:
    return make_manager(store)[1]


class TestTransactions:
    """Tests for adding, deleting and clearing transactions."""

    def test_add_expense_updates_summary_and_record(self):
        """Coffee example: fresh state, one expense of 4.50."""
        store, manager = make_manager()
        t = manager.add_transaction("Coffee", "4.50", "expense", "Food", "2024-03-02")

        totals = summary(manager.state)
        assert (totals.income, totals.expense, totals.balance) == (0, Decimal("4.50"), Decimal("-4.50"))

        fresh = reloaded(store)
        assert [x.id for x in fresh.state.transactions] == [t.id]
        assert fresh.state.transactions[0].description == "Coffee"

    def test_balance_shifts_by_amount(self):
        _, manager = make_manager()
        manager.add_transaction("Pay", "100", "income")
        before = summary(manager.state).balance
        manager.add_transaction("Rent", "30", "expense")
        assert summary(manager.state).balance == before - 30
        manager.add_transaction("Bonus", "5", "income")
        assert summary(manager.state).balance == before - 30 + 5

    @pytest.mark.parametrize("amount", ["0", "-3", "abc", ""])
    def test_invalid_amount_changes_nothing(self, amount):
        """Test that a rejected transaction is neither applied nor written."""
        store, manager = make_manager()
        with pytest.raises(ValidationError):
            manager.add_transaction("x", amount, "expense")
        assert manager.state.transactions == []
        assert store.write_count == 0

    def test_blank_category_becomes_general(self):
        _, manager = make_manager()
        t = manager.add_transaction("x", 1, "expense", "")
        assert t.category == "General"

    def test_ids_are_unique(self):
        _, manager = make_manager()
        ids = {manager.add_transaction("x", 1, "income").id for _ in range(20)}
        assert len(ids) == 20

    def test_delete_existing(self):
        store, manager = make_manager()
        keep = manager.add_transaction("keep", 1, "income")
        drop = manager.add_transaction("drop", 2, "income")
        assert manager.delete_transaction(drop.id) is True
        assert [t.id for t in reloaded(store).state.transactions] == [keep.id]

    def test_delete_unknown_id_is_a_noop(self):
        _, manager = make_manager()
        manager.add_transaction("keep", 1, "income")
        before = manager.state.to_document()
        assert manager.delete_transaction("missing") is False
        assert manager.state.to_document() == before

    def test_clear_all_keeps_goals_and_settings(self):
        store, manager = make_manager()
        manager.add_transaction("a", 1, "income")
        manager.add_transaction("b", 2, "expense")
        goal = manager.add_goal("Trip", 500)
        manager.set_budget_limit(300)

        assert manager.clear_all_transactions() == 2
        fresh = reloaded(store).state
        assert fresh.transactions == []
        assert [g.id for g in fresh.goals] == [goal.id]
        assert fresh.settings.budget_limit == 300

    def test_clear_all_when_empty_writes_nothing(self):
        store, manager = make_manager()
        assert manager.clear_all_transactions() == 0
        assert store.write_count == 0


class TestGoals:
    """Tests for goal operations."""

    def test_add_goal(self):
        store, manager = make_manager()
        goal = manager.add_goal("Trip", "500", "20")
        assert goal.target == 500
        assert goal.current == 20
        assert reloaded(store).state.find_goal(goal.id).name == "Trip"

    def test_add_goal_rejects_zero_target(self):
        store, manager = make_manager()
        with pytest.raises(ValidationError):
            manager.add_goal("Trip", "0")
        assert manager.state.goals == []
        assert store.write_count == 0

    def test_edit_goal_updates_both_values(self):
        _, manager = make_manager()
        goal = manager.add_goal("Trip", 500, 0)
        updated = manager.edit_goal(goal.id, "800", "900")
        assert updated.id == goal.id
        assert (updated.target, updated.current) == (800, 900)
        assert manager.state.find_goal(goal.id).current == 900

    def test_edit_goal_is_atomic(self):
        """Test that a valid target is not applied when current is invalid."""
        _, manager = make_manager()
        goal = manager.add_goal("Trip", 500, 10)
        with pytest.raises(ValidationError) as exc_info:
            manager.edit_goal(goal.id, "800", "-1")
        assert str(exc_info.value) == "Invalid current amount."
        unchanged = manager.state.find_goal(goal.id)
        assert (unchanged.target, unchanged.current) == (500, 10)

    def test_edit_unknown_goal(self):
        _, manager = make_manager()
        with pytest.raises(ValidationError) as exc_info:
            manager.edit_goal("missing", 1, 1)
        assert exc_info.value.issues[0].issue_type == "not_found"

    def test_delete_goal(self):
        _, manager = make_manager()
        goal = manager.add_goal("Trip", 500)
        assert manager.delete_goal("missing") is False
        assert manager.delete_goal(goal.id) is True
        assert manager.state.goals == []


class TestSettings:
    """Tests for budget and theme."""

    def test_budget_limit(self):
        store, manager = make_manager()
        assert manager.set_budget_limit("250.5") == Decimal("250.5")
        assert reloaded(store).state.settings.budget_limit == Decimal("250.5")

    def test_negative_budget_rejected(self):
        _, manager = make_manager()
        with pytest.raises(ValidationError):
            manager.set_budget_limit(-1)
        assert manager.state.settings.budget_limit == 0

    def test_toggle_theme_persists(self):
        store, manager = make_manager()
        assert manager.state.settings.theme == Theme.DARK
        assert manager.toggle_theme() == Theme.LIGHT
        assert reloaded(store).state.settings.theme == Theme.LIGHT
        assert manager.toggle_theme() == Theme.DARK

    def test_invalid_theme_rejected(self):
        _, manager = make_manager()
        with pytest.raises(ValidationError):
            manager.set_theme("purple")


class TestPersistenceFailures:
    """Tests for load errors and failed writes."""

    def test_failed_write_rolls_back(self):
        """Test that the session stays on its last-known-good state."""
        store = FailingRecordStore()
        _, manager = make_manager(store)
        manager.add_transaction("first", 1, "income")
        store.fail_writes = True

        with pytest.raises(StorageWriteError):
            manager.add_transaction("second", 2, "income")
        with pytest.raises(StorageWriteError):
            manager.clear_all_transactions()

        assert [t.description for t in manager.state.transactions] == ["first"]

    def test_unreadable_record_starts_from_defaults(self):
        store = InMemoryRecordStore({KEY: "{broken"})
        _, manager = make_manager(store)
        assert manager.state.transactions == []
        assert manager.load_error is not None
        assert store.get(KEY) == "{broken"

        manager.add_transaction("x", 1, "income")
        assert json.loads(store.get(KEY))["transactions"][0]["description"] == "x"

    def test_reload_reads_the_record_again(self):
        store, manager = make_manager()
        other = reloaded(store)
        other.add_goal("Trip", 10)
        assert manager.state.goals == []
        assert len(manager.reload().goals) == 1


class TestImportExport:
    """Tests for snapshot import and export through the manager."""

    def test_import_replaces_everything(self):
        store, manager = make_manager()
        manager.add_transaction("old", 1, "income")
        manager.set_budget_limit(99)

        manager.import_snapshot(json.dumps({
            "transactions": [{"id": "new", "amount": 7, "type": "expense"}],
            "goals": [],
            "settings": {"theme": "light"},
        }))

        fresh = reloaded(store).state
        assert [t.id for t in fresh.transactions] == ["new"]
        assert fresh.settings.theme == Theme.LIGHT
        assert fresh.settings.budget_limit == 99

    def test_malformed_import_leaves_state_and_record(self):
        store, manager = make_manager()
        manager.add_transaction("keep", 1, "income")
        before = manager.state.to_document()
        writes = store.write_count

        with pytest.raises(ImportFormatError):
            manager.import_snapshot(b"not json")

        assert manager.state.to_document() == before
        assert store.write_count == writes

    def test_export_then_import_round_trips(self):
        _, source = make_manager()
        source.add_transaction("Coffee", "4.50", "expense", "Food", "2024-03-02")
        source.add_goal("Trip", 500, 20)
        source.set_budget_limit(150)

        _, target = make_manager()
        target.import_snapshot(source.export_snapshot())
        assert target.state.to_document() == source.state.to_document()


class TestAuditTrail:
    """Tests that mutations emit audit events."""

    def test_events_for_mutations_and_rejections(self):
        events = []
        _, manager = make_manager(audit_sink=events.append)
        manager.add_transaction("x", 1, "income")
        with pytest.raises(ValidationError):
            manager.add_transaction("x", 0, "income")
        manager.toggle_theme()

        types = [e.event_type for e in events]
        assert types == [
            AuditEventType.STATE_LOADED,
            AuditEventType.TRANSACTION_ADDED,
            AuditEventType.VALIDATION_FAILED,
            AuditEventType.THEME_CHANGED,
        ]


class TestCreateTracker:
    """Tests for the factory."""

    def test_in_memory_tracker(self):
        manager = create_tracker(use_file_storage=False)
        assert manager.state.transactions == []
        manager.add_transaction("x", 1, "income")
        assert len(manager.state.transactions) == 1

    def test_file_tracker_uses_configured_directory(self, tmp_path, monkeypatch):
        from expense_tracker.config import get_settings

        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_DATA_DIR", str(tmp_path))
        get_settings.cache_clear()
        try:
            manager = create_tracker()
            manager.add_goal("Trip", 10)
            assert (tmp_path / "expense-tracker-state-v1.json").exists()
        finally:
            get_settings.cache_clear()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

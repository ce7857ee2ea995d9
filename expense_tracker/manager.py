"""
Domain State Manager for Expense Tracker

This module owns the in-memory domain state and defines every operation
that changes it.

DESIGN DECISION: Each mutation runs as one uninterrupted step:
1. Validate the raw input (ValidationError, nothing changes)
2. Build the new state next to the current one
3. Persist it through the codec
4. Swap it in and return

Because the new state is only swapped in after the write succeeded, a
failing write leaves the session on its last-known-good state, and a reload
right after any successful call sees the change.
"""

from datetime import date
from decimal import Decimal
from typing import Optional, Union

from expense_tracker.audit import AuditLogger, AuditSink, configure_log_level
from expense_tracker.config import get_settings
from expense_tracker.models.audit import AuditEventBuilder, AuditEventType
from expense_tracker.models.finance import (
    DomainState,
    Goal,
    Theme,
    Transaction,
    TransactionKind,
    ValidationIssue,
)
from expense_tracker.services.storage import (
    FileRecordStore,
    InMemoryRecordStore,
    StateCodec,
    StorageReadError,
)
from expense_tracker.transfer import ImportFormatError, export_snapshot, import_snapshot
from expense_tracker.validation import InputValidator, ValidationError
from expense_tracker.validation.validator import NumberInput


class StateManager:
    """
    Owns the DomainState and applies user intents to it.

    Read the current state through .state and hand it to the derivation
    functions in expense_tracker.reports; never mutate it directly.
    """

    def __init__(
        self,
        codec: StateCodec,
        validator: Optional[InputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        state: Optional[DomainState] = None,
    ):
        self._codec = codec
        self._validator = validator or InputValidator()
        self._audit_logger = audit_logger
        self._state = state if state is not None else codec.load()

    @property
    def state(self) -> DomainState:
        return self._state

    @property
    def load_error(self) -> Optional[StorageReadError]:
        """Error from the last load, if the stored record was unreadable."""
        return self._codec.last_error

    def _audit(self, event) -> None:
        if self._audit_logger:
            self._audit_logger.log(event)

    def _rejected(self, operation: str, error: ValidationError) -> ValidationError:
        self._audit(AuditEventBuilder.validation_failed(operation, error.to_dicts()))
        return error

    def _commit(self, new_state: DomainState) -> None:
        """Persist new_state, then make it current."""
        self._codec.save(new_state)
        self._state = new_state

    def reload(self) -> DomainState:
        """Discard the in-memory state and read the durable record again."""
        self._state = self._codec.load()
        return self._state

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def add_transaction(
        self,
        description: str,
        amount: NumberInput,
        kind: Union[str, TransactionKind],
        category: Optional[str] = None,
        transaction_date: Union[str, date, None] = None,
        recurring: bool = False,
    ) -> Transaction:
        """
        Record a new transaction.

        Raises:
            ValidationError: If amount is not a positive number or kind is unknown
        """
        try:
            transaction = self._validator.validate_transaction(
                description, amount, kind, category, transaction_date, recurring
            )
        except ValidationError as e:
            raise self._rejected("add_transaction", e)

        self._commit(self._state.model_copy(
            update={"transactions": [*self._state.transactions, transaction]}
        ))
        self._audit(AuditEventBuilder.transaction_added(
            transaction.id, transaction.kind.value, str(transaction.amount)
        ))
        return transaction

    def delete_transaction(self, transaction_id: str) -> bool:
        """Remove a transaction. An unknown id is not an error."""
        remaining = [t for t in self._state.transactions if t.id != transaction_id]
        found = len(remaining) != len(self._state.transactions)
        self._commit(self._state.model_copy(update={"transactions": remaining}))
        self._audit(AuditEventBuilder.transaction_deleted(transaction_id, found))
        return found

    def clear_all_transactions(self) -> int:
        """
        Remove every transaction, keeping goals and settings.

        Returns the number removed; nothing is written when there was none.
        """
        count = len(self._state.transactions)
        if not count:
            return 0
        self._commit(self._state.model_copy(update={"transactions": []}))
        self._audit(AuditEventBuilder.transactions_cleared(count))
        return count

    # =========================================================================
    # GOALS
    # =========================================================================

    def add_goal(self, name: str, target: NumberInput, current: NumberInput = None) -> Goal:
        """
        Raises:
            ValidationError: If target <= 0 or current < 0
        """
        try:
            goal = self._validator.validate_goal(name, target, current)
        except ValidationError as e:
            raise self._rejected("add_goal", e)

        self._commit(self._state.model_copy(update={"goals": [*self._state.goals, goal]}))
        self._audit(AuditEventBuilder.goal_changed(
            AuditEventType.GOAL_ADDED, goal.id, {"target": str(goal.target)}
        ))
        return goal

    def edit_goal(self, goal_id: str, new_target: NumberInput, new_current: NumberInput) -> Goal:
        """
        Update target and current together; either both change or neither does.

        Raises:
            ValidationError: If the goal does not exist or either value is out of range
        """
        if self._state.find_goal(goal_id) is None:
            raise self._rejected("edit_goal", ValidationError([ValidationIssue(
                field="id",
                issue_type="not_found",
                message=f"Goal {goal_id} not found.",
            )]))
        try:
            target, current = self._validator.validate_goal_amounts(
                new_target,
                new_current,
                target_message="Invalid target amount.",
                current_message="Invalid current amount.",
            )
        except ValidationError as e:
            raise self._rejected("edit_goal", e)

        updated: Optional[Goal] = None
        goals = []
        for goal in self._state.goals:
            if goal.id == goal_id:
                goal = updated = goal.model_copy(update={"target": target, "current": current})
            goals.append(goal)

        self._commit(self._state.model_copy(update={"goals": goals}))
        self._audit(AuditEventBuilder.goal_changed(
            AuditEventType.GOAL_UPDATED,
            goal_id,
            {"target": str(target), "current": str(current)},
        ))
        return updated

    def delete_goal(self, goal_id: str) -> bool:
        """Remove a goal. An unknown id is not an error."""
        remaining = [g for g in self._state.goals if g.id != goal_id]
        found = len(remaining) != len(self._state.goals)
        self._commit(self._state.model_copy(update={"goals": remaining}))
        self._audit(AuditEventBuilder.goal_changed(
            AuditEventType.GOAL_DELETED, goal_id, {"found": found}
        ))
        return found

    # =========================================================================
    # SETTINGS
    # =========================================================================

    def _update_settings(self, **changes) -> None:
        settings = self._state.settings.model_copy(update=changes)
        self._commit(self._state.model_copy(update={"settings": settings}))

    def set_budget_limit(self, value: NumberInput) -> Decimal:
        """
        Set the monthly budget; 0 unsets it.

        Raises:
            ValidationError: If value is negative or not a number
        """
        try:
            limit = self._validator.validate_budget_limit(value)
        except ValidationError as e:
            raise self._rejected("set_budget_limit", e)

        self._update_settings(budget_limit=limit)
        self._audit(AuditEventBuilder.setting_changed(
            AuditEventType.BUDGET_UPDATED, "budgetLimit", str(limit)
        ))
        return limit

    def set_theme(self, theme: Union[str, Theme]) -> Theme:
        try:
            parsed = self._validator.validate_theme(theme)
        except ValidationError as e:
            raise self._rejected("set_theme", e)

        self._update_settings(theme=parsed)
        self._audit(AuditEventBuilder.setting_changed(
            AuditEventType.THEME_CHANGED, "theme", parsed.value
        ))
        return parsed

    def toggle_theme(self) -> Theme:
        return self.set_theme(self._state.settings.theme.toggled())

    # =========================================================================
    # IMPORT / EXPORT
    # =========================================================================

    def export_snapshot(self) -> bytes:
        data = export_snapshot(self._state)
        self._audit(AuditEventBuilder.snapshot_exported(
            len(self._state.transactions), len(self._state.goals)
        ))
        return data

    def import_snapshot(self, raw: Union[bytes, str]) -> DomainState:
        """
        Replace the whole state with an exported document.

        Raises:
            ImportFormatError: If raw is not a state document; nothing changes
        """
        try:
            new_state = import_snapshot(raw, base_settings=self._state.settings)
        except ImportFormatError as e:
            self._audit(AuditEventBuilder.import_failed(str(e)))
            raise

        self._commit(new_state)
        self._audit(AuditEventBuilder.snapshot_imported(
            len(new_state.transactions), len(new_state.goals)
        ))
        return new_state


def create_tracker(
    use_file_storage: bool = True,
    audit_sink: Optional[AuditSink] = None,
) -> StateManager:
    """
    Factory function to create a ready-to-use StateManager.

    Args:
        use_file_storage: Keep the durable record on disk under the configured
                          data directory. Set to False to keep it in memory.
        audit_sink: Optional receiver for every audit event.
    """
    settings = get_settings()
    configure_log_level(settings.app.effective_log_level)

    audit_logger = AuditLogger(audit_sink)
    if use_file_storage:
        store = FileRecordStore(settings.storage.data_dir)
    else:
        store = InMemoryRecordStore()

    codec = StateCodec(store, settings.storage.state_key, audit_logger)
    return StateManager(codec, audit_logger=audit_logger)

"""
Audit Models for Expense Tracker

Every mutation of the user's data and every offline-cache lifecycle step is
recorded as an audit event. This provides:
1. Traceability of what changed the stored data and when
2. Debugging information when a stored record turns out to be unreadable
3. A trail of import/export operations

DESIGN DECISION: Audit events are emitted, never edited.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Durable record
    STATE_LOADED = "state_loaded"
    STATE_LOAD_FAILED = "state_load_failed"
    STATE_SAVE_FAILED = "state_save_failed"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTIONS_CLEARED = "transactions_cleared"

    # Goals
    GOAL_ADDED = "goal_added"
    GOAL_UPDATED = "goal_updated"
    GOAL_DELETED = "goal_deleted"

    # Settings
    BUDGET_UPDATED = "budget_updated"
    THEME_CHANGED = "theme_changed"

    # Input
    VALIDATION_FAILED = "validation_failed"

    # Import/export
    SNAPSHOT_EXPORTED = "snapshot_exported"
    SNAPSHOT_IMPORTED = "snapshot_imported"
    IMPORT_FAILED = "import_failed"

    # Offline asset cache
    ASSET_CACHE_INSTALLED = "asset_cache_installed"
    ASSET_INSTALL_FAILED = "asset_install_failed"
    ASSET_CACHE_ACTIVATED = "asset_cache_activated"
    ASSET_SHELL_FALLBACK = "asset_shell_fallback"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Entity ids are opaque strings, matching the ids of stored records.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'goal', 'cache')"
    )
    entity_id: Optional[str] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(transaction_id, "expense", "4.50")
        event = AuditEventBuilder.snapshot_imported(3, 1)
    """

    @staticmethod
    def state_loaded(transactions: int, goals: int, found: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            entity_type="state",
            description=(
                f"State loaded: {transactions} transactions, {goals} goals"
                if found else "No saved state, starting with defaults"
            ),
            details={
                "transactions": transactions,
                "goals": goals,
                "record_found": found,
            },
        )

    @staticmethod
    def state_load_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="state",
            entity_id=key,
            description="Saved state unreadable, using defaults",
            error_message=error_message,
        )

    @staticmethod
    def state_save_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="state",
            entity_id=key,
            description="Saving state failed, change rolled back",
            error_message=error_message,
        )

    @staticmethod
    def transaction_added(transaction_id: str, kind: str, amount: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction added: {kind} {amount}",
            details={
                "kind": kind,
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(transaction_id: str, found: bool) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description="Transaction removed" if found else "Transaction not found, nothing removed",
            details={"found": found},
            is_user_action=True,
        )

    @staticmethod
    def transactions_cleared(count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_CLEARED,
            entity_type="transaction",
            description=f"Cleared {count} transactions",
            details={"count": count},
            is_user_action=True,
        )

    @staticmethod
    def goal_changed(event_type: AuditEventType, goal_id: str, details: Optional[dict] = None) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type="goal",
            entity_id=goal_id,
            description=event_type.value.replace("_", " ").capitalize(),
            details=details or {},
            is_user_action=True,
        )

    @staticmethod
    def setting_changed(event_type: AuditEventType, name: str, value: str) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type="settings",
            description=f"Setting {name} changed to {value}",
            details={name: value},
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(operation: str, issues: list[dict]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"{operation} rejected with {len(issues)} issues",
            details={
                "operation": operation,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def snapshot_exported(transactions: int, goals: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_EXPORTED,
            entity_type="snapshot",
            description="Data exported",
            details={"transactions": transactions, "goals": goals},
            is_user_action=True,
        )

    @staticmethod
    def snapshot_imported(transactions: int, goals: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_IMPORTED,
            entity_type="snapshot",
            description=f"Data imported: {transactions} transactions, {goals} goals",
            details={"transactions": transactions, "goals": goals},
            is_user_action=True,
        )

    @staticmethod
    def import_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="snapshot",
            description="Import rejected, existing data kept",
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def asset_cache_installed(cache_name: str, asset_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ASSET_CACHE_INSTALLED,
            entity_type="cache",
            entity_id=cache_name,
            description=f"Cached {asset_count} assets under {cache_name}",
            details={"asset_count": asset_count},
        )

    @staticmethod
    def asset_install_failed(cache_name: str, failed: list[str], error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ASSET_INSTALL_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="cache",
            entity_id=cache_name,
            description=f"Install of {cache_name} failed, previous cache kept",
            details={"failed_assets": failed},
            error_message=error_message,
        )

    @staticmethod
    def asset_cache_activated(cache_name: str, deleted: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ASSET_CACHE_ACTIVATED,
            entity_type="cache",
            entity_id=cache_name,
            description=f"Activated {cache_name}, removed {len(deleted)} stale caches",
            details={"deleted": deleted},
        )

    @staticmethod
    def asset_shell_fallback(url: str, navigation: bool, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ASSET_SHELL_FALLBACK,
            severity=AuditSeverity.WARNING,
            entity_type="asset",
            entity_id=url,
            description="Network and cache missed, served shell document",
            details={"navigation": navigation},
            error_message=error_message,
        )

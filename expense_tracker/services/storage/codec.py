"""
Durable Store Codec

Turns the domain state into the single durable record and back.

DESIGN DECISION: The stored document is never trusted wholesale.
Each top-level field is validated on its own:
- "transactions" / "goals" that are not arrays are treated as empty
- individual entries that break an invariant are skipped and logged
- "settings" is shallow-merged over the defaults, so a missing or invalid
  sub-field keeps its default
- unknown fields are carried along untouched

A record that is not JSON at all (or not a JSON object) is reported and the
defaults are used for the session. The record itself is left as it is; it
is only overwritten by the next successful mutation.
"""

import json
from typing import Any, Optional, Type, TypeVar

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from expense_tracker.audit import AuditLogger
from expense_tracker.models.audit import AuditEventBuilder
from expense_tracker.models.finance import DomainState, Goal, Transaction, UserSettings
from expense_tracker.services.storage.interface import (
    RecordStoreInterface,
    StorageReadError,
    StorageWriteError,
)


logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

KNOWN_FIELDS = ("transactions", "goals", "settings")


def _has_id(item: dict) -> bool:
    value = item.get("id")
    return isinstance(value, str) and bool(value.strip())


def _parse_entries(raw: Any, model: Type[RecordT], field: str) -> list[RecordT]:
    """
    Validate array entries one by one.

    Entries without a string id are dropped along with the invalid and the
    duplicated; ids are never invented here, so two loads of the same record
    always agree.
    """
    if not isinstance(raw, list):
        if raw is not None:
            logger.warning("state_field_not_array", field=field, found=type(raw).__name__)
        return []

    entries: list[RecordT] = []
    seen_ids: set[str] = set()
    for index, item in enumerate(raw):
        if not isinstance(item, dict) or not _has_id(item):
            logger.warning("state_entry_without_id", field=field, index=index)
            continue
        try:
            entry = model.model_validate(item)
        except PydanticValidationError as e:
            logger.warning(
                "state_entry_skipped",
                field=field,
                index=index,
                errors=e.error_count(),
            )
            continue
        if entry.id in seen_ids:
            logger.warning("state_entry_duplicate_id", field=field, index=index, id=entry.id)
            continue
        seen_ids.add(entry.id)
        entries.append(entry)
    return entries


def merge_settings(base: UserSettings, raw: Any) -> UserSettings:
    """
    Shallow-merge a stored settings object over base settings.

    Sub-fields that fail validation keep their value from base.
    """
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning("state_settings_not_object", found=type(raw).__name__)
        return base.model_copy()

    base_values = base.model_dump(by_alias=True)
    merged = {**base_values, **raw}
    try:
        return UserSettings.model_validate(merged)
    except PydanticValidationError as e:
        invalid = {error["loc"][0] for error in e.errors() if error["loc"]}
        logger.warning("state_settings_fields_reset", fields=sorted(map(str, invalid)))
        repaired = {
            key: base_values[key] if key in invalid else value
            for key, value in merged.items()
            if key not in invalid or key in base_values
        }
        return UserSettings.model_validate(repaired)


def state_from_document(
    document: dict,
    base_settings: Optional[UserSettings] = None,
) -> DomainState:
    """Build a DomainState from a parsed document with per-field tolerance."""
    extras = {key: value for key, value in document.items() if key not in KNOWN_FIELDS}
    return DomainState(
        transactions=_parse_entries(document.get("transactions"), Transaction, "transactions"),
        goals=_parse_entries(document.get("goals"), Goal, "goals"),
        settings=merge_settings(base_settings or UserSettings(), document.get("settings")),
        **extras,
    )


class StateCodec:
    """
    Reads and writes the domain state as one durable record.

    load() never raises for bad data: it falls back to defaults and keeps
    the error on last_error so the caller can tell the user.
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        key: str,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._key = key
        self._audit_logger = audit_logger
        self.last_error: Optional[StorageReadError] = None

    @property
    def key(self) -> str:
        return self._key

    def read(self) -> Optional[DomainState]:
        """
        Read and parse the record.

        Returns:
            The stored state, or None if no record exists

        Raises:
            StorageReadError: If the record is not a JSON object
        """
        raw = self._store.get(self._key)
        if raw is None:
            return None
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageReadError(f"Saved state is not valid JSON: {e}")
        if not isinstance(document, dict):
            raise StorageReadError(
                f"Saved state must be a JSON object, got {type(document).__name__}"
            )
        return state_from_document(document)

    def load(self) -> DomainState:
        """Load the stored state, or defaults if it is absent or unreadable."""
        self.last_error = None
        try:
            state = self.read()
        except StorageReadError as e:
            self.last_error = e
            if self._audit_logger:
                self._audit_logger.log(AuditEventBuilder.state_load_failed(self._key, str(e)))
            return DomainState()

        found = state is not None
        state = state or DomainState()
        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.state_loaded(
                transactions=len(state.transactions),
                goals=len(state.goals),
                found=found,
            ))
        return state

    def encode(self, state: DomainState) -> str:
        return state.model_dump_json(by_alias=True)

    def save(self, state: DomainState) -> None:
        """
        Overwrite the record with the full state.

        Raises:
            StorageWriteError: If the store could not write it
        """
        try:
            self._store.set(self._key, self.encode(state))
        except StorageWriteError as e:
            if self._audit_logger:
                self._audit_logger.log(AuditEventBuilder.state_save_failed(self._key, str(e)))
            raise
        logger.debug("state_saved", key=self._key)

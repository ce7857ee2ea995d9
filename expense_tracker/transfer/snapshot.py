"""
Import/Export Bridge

Exports the full state as a pretty-printed JSON document the user can
download, and turns an uploaded document back into a state.

Import is a full replace, never a merge with existing records. Parsing here
only builds the new state; the manager swaps it in and persists it, so a
rejected file leaves both the in-memory state and the durable record alone.
"""

import json
from typing import Optional, Union

from expense_tracker.models.finance import DomainState, UserSettings, ValidationIssue
from expense_tracker.services.storage.codec import state_from_document
from expense_tracker.validation import ValidationError


class ImportFormatError(ValidationError):
    """Supplied import content is not a well-formed state document."""

    def __init__(self, message: str):
        super().__init__([ValidationIssue(
            field="file",
            issue_type="invalid_format",
            message=message,
        )])


def export_snapshot(state: DomainState) -> bytes:
    """Full state as human-readable UTF-8 JSON."""
    return state.model_dump_json(by_alias=True, indent=2).encode("utf-8")


def import_snapshot(
    raw: Union[bytes, str],
    base_settings: Optional[UserSettings] = None,
) -> DomainState:
    """
    Parse an exported document into a new state.

    Args:
        raw: File contents
        base_settings: Settings the imported settings are merged over
                       (the current settings when importing into a session)

    Raises:
        ImportFormatError: If raw is not a UTF-8 JSON object
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ImportFormatError(f"File is not UTF-8 text: {e}")
    try:
        document = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"File is not valid JSON: {e.msg}")
    if not isinstance(document, dict):
        raise ImportFormatError("Invalid data structure: expected a JSON object.")
    return state_from_document(document, base_settings=base_settings)

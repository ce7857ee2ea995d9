"""Import/export package."""

from expense_tracker.transfer.snapshot import ImportFormatError, export_snapshot, import_snapshot

__all__ = ["ImportFormatError", "export_snapshot", "import_snapshot"]

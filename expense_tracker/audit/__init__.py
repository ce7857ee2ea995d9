"""Audit logging package."""

from expense_tracker.audit.logger import AuditLogger, AuditSink, configure_log_level

__all__ = ["AuditLogger", "AuditSink", "configure_log_level"]

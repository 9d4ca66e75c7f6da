"""Audit logging package."""

from expense_tracker.audit.logger import AuditLogger, configure_log_level

__all__ = ["AuditLogger", "configure_log_level"]

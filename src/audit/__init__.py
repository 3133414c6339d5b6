"""Audit logging package."""

from src.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]

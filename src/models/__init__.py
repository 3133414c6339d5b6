"""
Data Models Package

This package contains all Pydantic models used in the Collection Agent Ledger.
Every record stored in the ledger must conform to these schemas.
"""

from src.models.ledger import (
    AgentProfile,
    AppSettings,
    Collection,
    ConfirmationMethod,
    Customer,
    Deposit,
    ImportSummary,
    LedgerRecord,
    LedgerStats,
    utc_now,
)
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "AgentProfile",
    "AppSettings",
    "Collection",
    "ConfirmationMethod",
    "Customer",
    "Deposit",
    "ImportSummary",
    "LedgerRecord",
    "LedgerStats",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]

"""
Audit Models for Collection Agent Ledger

Every ledger mutation produces an audit event. Events are written to the
structured log, which gives:
1. Traceability of who-changed-what in a session
2. Debugging information when persistence fails
3. A record of imports and confirmations sent

Audit events are append-only and never persisted into the ledger itself.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Customers
    CUSTOMER_ADDED = "customer_added"
    CUSTOMER_UPDATED = "customer_updated"
    CUSTOMER_DELETED = "customer_deleted"

    # Collections
    COLLECTION_ADDED = "collection_added"
    COLLECTION_UPDATED = "collection_updated"
    COLLECTION_DELETED = "collection_deleted"

    # Deposits
    DEPOSIT_ADDED = "deposit_added"
    DEPOSIT_UPDATED = "deposit_updated"
    DEPOSIT_DELETED = "deposit_deleted"

    # Singletons
    PROFILE_UPDATED = "profile_updated"
    SETTINGS_UPDATED = "settings_updated"

    # Bulk and outbound
    CUSTOMERS_IMPORTED = "customers_imported"
    CONFIRMATION_SENT = "confirmation_sent"

    # Failures
    VALIDATION_REJECTED = "validation_rejected"
    SAVE_FAILED = "save_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of the audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'customer', 'collection', 'deposit')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Opaque id of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )
    error_message: Optional[str] = None

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
        }


_ENTITY_EVENTS = {
    ("customer", "added"): AuditEventType.CUSTOMER_ADDED,
    ("customer", "updated"): AuditEventType.CUSTOMER_UPDATED,
    ("customer", "deleted"): AuditEventType.CUSTOMER_DELETED,
    ("collection", "added"): AuditEventType.COLLECTION_ADDED,
    ("collection", "updated"): AuditEventType.COLLECTION_UPDATED,
    ("collection", "deleted"): AuditEventType.COLLECTION_DELETED,
    ("deposit", "added"): AuditEventType.DEPOSIT_ADDED,
    ("deposit", "updated"): AuditEventType.DEPOSIT_UPDATED,
    ("deposit", "deleted"): AuditEventType.DEPOSIT_DELETED,
}


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.entity_changed("customer", "added", customer.id)
        audit_logger.log(event)
    """

    @staticmethod
    def entity_changed(
        entity_type: str,
        action: str,
        entity_id: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        """Customer, collection or deposit added/updated/deleted."""
        event_type = _ENTITY_EVENTS[(entity_type, action)]
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} {action}",
            details=details or {},
        )

    @staticmethod
    def singleton_updated(name: str, fields: list[str]) -> AuditEvent:
        """Agent profile or app settings overwritten."""
        event_type = (
            AuditEventType.PROFILE_UPDATED
            if name == "agent_profile"
            else AuditEventType.SETTINGS_UPDATED
        )
        return AuditEvent(
            event_type=event_type,
            entity_type=name,
            description=f"{name.replace('_', ' ').capitalize()} updated",
            details={"fields": fields},
        )

    @staticmethod
    def customers_imported(added: int, skipped: int) -> AuditEvent:
        """Bulk CSV import finished."""
        return AuditEvent(
            event_type=AuditEventType.CUSTOMERS_IMPORTED,
            entity_type="customer",
            description=f"Imported {added} customers, skipped {skipped}",
            details={"added": added, "skipped": skipped},
        )

    @staticmethod
    def confirmation_sent(
        method: str,
        collection_id: Optional[str],
        customer_id: Optional[str],
    ) -> AuditEvent:
        """Simulated customer confirmation."""
        return AuditEvent(
            event_type=AuditEventType.CONFIRMATION_SENT,
            entity_type="collection",
            entity_id=collection_id,
            description=f"Confirmation sent via {method}",
            details={"method": method, "customer_id": customer_id},
        )

    @staticmethod
    def validation_rejected(
        entity_type: str,
        reason: str,
        entity_id: Optional[str] = None,
    ) -> AuditEvent:
        """A mutation was refused before touching the ledger."""
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"Rejected {entity_type} change",
            error_message=reason,
        )

    @staticmethod
    def save_failed(failed_keys: list[str]) -> AuditEvent:
        """One or more storage keys could not be written."""
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            description="Ledger snapshot could not be fully persisted",
            details={"failed_keys": failed_keys},
            error_message="In-memory ledger is ahead of storage",
        )

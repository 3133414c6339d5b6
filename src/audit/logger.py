"""
Audit Logger

Every ledger mutation is logged as a structured audit event.
The audit logger:
- Is synchronous, like the store that calls it
- Never raises (a logging failure must not undo a ledger change)
- Routes events to the structured log at their severity
"""

import logging
from typing import Optional

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder


def configure_logging(log_level: str = "INFO", json_logs: bool = True) -> None:
    """
    Configure stdlib logging and structlog for the whole process.

    Call once at startup, before the first logger is used.
    """
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper(), logging.INFO),
    )
    logging.getLogger().setLevel(getattr(logging, log_level.upper(), logging.INFO))

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Events go to the structured local log only; the ledger snapshot is
    never polluted with audit data.
    """

    def __init__(self, logger_name: str = "ledger.audit"):
        self._logger = structlog.get_logger(logger_name)
        self._events: list[AuditEvent] = []
        self._keep_history = False

    def keep_history(self, enabled: bool = True) -> None:
        """Retain logged events in memory (used by tests and the UI's activity view)."""
        self._keep_history = enabled

    @property
    def history(self) -> list[AuditEvent]:
        return list(self._events)

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was emitted.
        """
        if self._keep_history:
            self._events.append(event)

        log_dict = event.to_log_dict()
        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except (ValueError, TypeError, OSError) as e:
            # Handler or renderer failure; the ledger change already happened
            logging.getLogger(__name__).error("audit_log_failed: %s", e)
            return False
        return True

    def log_entity_changed(
        self,
        entity_type: str,
        action: str,
        entity_id: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an add/update/delete of a customer, collection or deposit."""
        self.log(AuditEventBuilder.entity_changed(entity_type, action, entity_id, details))

    def log_singleton_updated(self, name: str, fields: list[str]) -> None:
        """Log an agent profile or app settings update."""
        self.log(AuditEventBuilder.singleton_updated(name, fields))

    def log_customers_imported(self, added: int, skipped: int) -> None:
        """Log a completed CSV import."""
        self.log(AuditEventBuilder.customers_imported(added, skipped))

    def log_confirmation_sent(
        self,
        method: str,
        collection_id: Optional[str] = None,
        customer_id: Optional[str] = None,
    ) -> None:
        """Log a (simulated) customer confirmation."""
        self.log(AuditEventBuilder.confirmation_sent(method, collection_id, customer_id))

    def log_validation_rejected(
        self,
        entity_type: str,
        reason: str,
        entity_id: Optional[str] = None,
    ) -> None:
        """Log a refused mutation."""
        self.log(AuditEventBuilder.validation_rejected(entity_type, reason, entity_id))

    def log_save_failed(self, failed_keys: list[str]) -> None:
        """Log a snapshot that did not fully reach storage."""
        self.log(AuditEventBuilder.save_failed(failed_keys))

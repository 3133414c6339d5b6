"""
Collection Confirmation (simulated)

After a collection the agent can send the customer a confirmation over
WhatsApp or SMS. No message actually leaves the machine: the confirmation
is composed, logged and reported as sent.
"""

from typing import Optional

import structlog
from pydantic import BaseModel, Field

from src.audit import AuditLogger
from src.models.ledger import AppSettings, Collection, ConfirmationMethod, Customer
from src.reporting.dashboard import format_currency

logger = structlog.get_logger(__name__)


class ConfirmationResult(BaseModel):
    """Outcome of a confirmation request."""

    success: bool
    method: ConfirmationMethod
    sent: bool = Field(
        default=True,
        description="False when an automatic confirmation was switched off"
    )
    message: str = ""


class ConfirmationService:
    """Composes and 'sends' confirmations through the configured channel."""

    def __init__(
        self,
        audit_logger: Optional[AuditLogger] = None,
        locale: str = "en-IN",
    ):
        self._audit = audit_logger or AuditLogger()
        self._locale = locale

    def compose(
        self,
        settings: AppSettings,
        collection: Collection,
        customer: Optional[Customer] = None,
    ) -> str:
        """Text the customer would receive."""
        amount = format_currency(collection.total, settings.currency, self._locale)
        who = customer.name if customer and customer.name else "customer"
        return (
            f"Dear {who}, we have received {amount}. "
            f"Receipt no. {collection.receipt_number}. Thank you."
        )

    def send(
        self,
        settings: AppSettings,
        collection: Collection,
        customer: Optional[Customer] = None,
        automatic: bool = False,
    ) -> ConfirmationResult:
        """
        Send a confirmation for a collection.

        Automatic sends respect auto_confirmation_enabled; manual sends
        always go out.
        """
        method = settings.confirmation_method
        if automatic and not settings.auto_confirmation_enabled:
            return ConfirmationResult(success=True, method=method, sent=False)

        message = self.compose(settings, collection, customer)
        logger.info(
            "confirmation_simulated",
            method=method.value,
            phone=customer.phone if customer else None,
            text=message,
        )
        self._audit.log_confirmation_sent(
            method.value,
            collection_id=collection.id,
            customer_id=customer.id if customer else collection.customer_id,
        )
        return ConfirmationResult(success=True, method=method, message=message)

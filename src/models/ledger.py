"""
Core Data Models for Collection Agent Ledger

These models define the strict schemas for every record the ledger holds.
They are designed to:
1. Reject malformed records at the store boundary, not at render time
2. Serialize to the same camelCase JSON documents the browser tool wrote
3. Keep money as Decimal end to end

DESIGN DECISION: Python attributes are snake_case; persisted documents and
CSV headers use the camelCase aliases (shortCode, accountNumber, createdAt).
Both spellings are accepted on input.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class ConfirmationMethod(str, Enum):
    """Channel used when sending a collection confirmation to a customer."""
    WHATSAPP = "whatsapp"
    SMS = "sms"


# =============================================================================
# BASE RECORD
# =============================================================================

class LedgerRecord(BaseModel):
    """
    Base class for everything the ledger persists.

    Unknown keys found in stored documents are dropped on load. Records are
    frozen; the store replaces them whole.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
        frozen=True,
    )

    def to_document(self) -> dict[str, Any]:
        """Convert to the JSON-ready camelCase document used for storage."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def field_for_key(cls, key: str) -> Optional[str]:
        """
        Resolve a caller-supplied key (attribute name or camelCase alias)
        to the attribute name. Returns None for unknown keys.
        """
        if key in cls.model_fields:
            return key
        for name, info in cls.model_fields.items():
            if info.alias == key:
                return name
        return None


def _none_to_zero(v: Any) -> Any:
    if v is None or (isinstance(v, str) and not v.strip()):
        return Decimal("0")
    return v


# =============================================================================
# SINGLETONS
# =============================================================================

class AgentProfile(LedgerRecord):
    """
    The agent running the collection business.

    Exactly one exists. It is created with these defaults on first run
    and only ever overwritten, never deleted.
    """

    name: str = Field(
        default="Post Agent",
        max_length=200,
        description="Agent's display name"
    )
    agency_number: str = Field(
        default="PA-12345",
        max_length=50,
        description="Agency registration number"
    )
    validity_date: date = Field(
        default_factory=date.today,
        description="Date until which the agency is valid"
    )
    branch_address: str = Field(
        default="Main Post Office, Cityville",
        max_length=500,
        description="Branch the agent deposits into"
    )
    mobile_number: str = Field(
        default="1234567890",
        max_length=20,
        description="Agent's contact number"
    )


class AppSettings(LedgerRecord):
    """
    Ledger-level preferences, persisted with the rest of the ledger.

    allow_modifications gates edit/delete actions in the UI.
    max_lot_amount is advisory only.
    """

    allow_modifications: bool = Field(
        default=True,
        description="Whether records may be edited or deleted from the UI"
    )
    currency: str = Field(
        default="INR",
        description="ISO 4217 currency code"
    )
    max_lot_amount: Decimal = Field(
        default=Decimal("20000"),
        ge=0,
        description="Advisory per-transaction ceiling"
    )
    auto_confirmation_enabled: bool = Field(
        default=True,
        description="Send a confirmation automatically after each collection"
    )
    confirmation_method: ConfirmationMethod = Field(
        default=ConfirmationMethod.WHATSAPP,
        description="Channel for confirmations"
    )

    @field_validator('currency')
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Currency must look like an ISO code."""
        code = v.upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError(f"Currency must be a 3-letter ISO code, got: {v!r}")
        return code


# =============================================================================
# COLLECTION-TYPED ENTITIES
# =============================================================================

class Customer(LedgerRecord):
    """
    A customer the agent collects from.

    id and created_at are assigned by the store and never change.
    short_code is the human-facing identifier and is unique across customers.
    """

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque unique identifier"
    )
    short_code: str = Field(
        ...,
        min_length=1,
        max_length=20,
        description="Unique business-facing numeric code"
    )
    name: str = Field(
        default="",
        max_length=200,
    )
    phone: str = Field(
        default="",
        max_length=30,
    )
    address: str = Field(
        default="",
        max_length=500,
    )
    account_number: str = Field(
        default="",
        max_length=50,
        description="Customer's account number with the agency"
    )
    email: Optional[str] = Field(
        default=None,
        max_length=200,
    )
    created_at: datetime = Field(
        ...,
        description="When the customer was added"
    )


class Collection(LedgerRecord):
    """
    Cash collected from a customer.

    customer_id is not checked against existing customers; a collection
    outlives the customer it refers to.
    """

    id: str = Field(
        ...,
        min_length=1,
    )
    customer_id: str = Field(
        default="",
        description="Id of the customer this was collected from"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Collected amount"
    )
    penalty: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Late penalty collected on top of the amount"
    )
    receipt_number: str = Field(
        default="",
        description="YYYYMMDD followed by a zero-padded daily sequence"
    )
    created_at: datetime = Field(
        ...,
        description="When the cash was collected (may be backdated)"
    )

    @field_validator('amount', 'penalty', mode='before')
    @classmethod
    def missing_money_is_zero(cls, v: Any) -> Any:
        """Treat null or blank amounts as zero."""
        return _none_to_zero(v)

    @property
    def total(self) -> Decimal:
        """Amount plus penalty."""
        return self.amount + self.penalty


class Deposit(LedgerRecord):
    """Collected cash deposited at the bank."""

    id: str = Field(
        ...,
        min_length=1,
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Deposited amount"
    )
    created_at: datetime = Field(
        ...,
        description="When the deposit was made (may be backdated)"
    )

    @field_validator('amount', mode='before')
    @classmethod
    def missing_money_is_zero(cls, v: Any) -> Any:
        """Treat null or blank amounts as zero."""
        return _none_to_zero(v)


# =============================================================================
# DERIVED RESULTS
# =============================================================================

class LedgerStats(BaseModel):
    """Dashboard totals computed from the current ledger."""

    total_collections: Decimal = Field(
        default=Decimal("0"),
        description="Sum of amount + penalty over all collections"
    )
    total_deposits: Decimal = Field(
        default=Decimal("0"),
        description="Sum of amount over all deposits"
    )
    balance: Decimal = Field(
        default=Decimal("0"),
        description="Cash in hand: collections minus deposits"
    )


class ImportSummary(BaseModel):
    """Outcome of a bulk customer import."""

    added: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        """Rows processed."""
        return self.added + self.skipped

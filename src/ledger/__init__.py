"""Ledger state package."""

from src.ledger.identifiers import (
    generate_id,
    is_valid_short_code,
    next_receipt_number,
    next_short_code,
    parse_short_code,
    receipt_date_stamp,
    same_short_code,
)
from src.ledger.store import (
    DuplicateShortCodeError,
    InvalidShortCodeError,
    LedgerError,
    LedgerStore,
    LedgerValidationError,
    UnknownFieldError,
)

__all__ = [
    # Identifiers
    "generate_id",
    "is_valid_short_code",
    "next_receipt_number",
    "next_short_code",
    "parse_short_code",
    "receipt_date_stamp",
    "same_short_code",
    # Store
    "LedgerStore",
    # Exceptions
    "DuplicateShortCodeError",
    "InvalidShortCodeError",
    "LedgerError",
    "LedgerValidationError",
    "UnknownFieldError",
]

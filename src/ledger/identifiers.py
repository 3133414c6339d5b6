"""
Identifier Generation

Three kinds of identifiers exist in the ledger:

1. Opaque record ids - unique tokens for every customer, collection and
   deposit. Callers must not parse them.
2. Customer short codes - small sequential numbers the agent actually uses
   ("customer 42"). Next code = highest numeric code + 1.
3. Receipt numbers - YYYYMMDD + zero-padded daily sequence, e.g. 20240101003.

Short codes and receipt sequences are recomputed from a scan of the
existing records on every call; nothing is persisted. Deleting the record
holding the highest number lets that number be handed out again.
"""

import re
from collections.abc import Iterable
from datetime import date, datetime, timezone
from typing import Optional
from uuid import uuid4

from src.models.ledger import Collection, Customer

RECEIPT_DATE_FORMAT = "%Y%m%d"
RECEIPT_SEQUENCE_WIDTH = 3

# Canonical non-negative decimal: "0", "7", "42"; not "007", "1a", "-3"
_CANONICAL_NUMBER = re.compile(r"0|[1-9][0-9]*")
# Digits only; input short codes also need a value >= 1 ("02" is allowed)
_DIGITS = re.compile(r"[0-9]+")


def generate_id() -> str:
    """Return a new opaque record id."""
    return uuid4().hex


def parse_short_code(code: Optional[str]) -> Optional[int]:
    """
    Numeric value of a canonical short code.

    Returns None for blank codes, codes with non-digit characters and
    codes with leading zeros.
    """
    if not code or not _CANONICAL_NUMBER.fullmatch(code):
        return None
    return int(code)


def is_valid_short_code(code: Optional[str]) -> bool:
    """True if code is all digits with a value of at least 1."""
    return bool(code) and bool(_DIGITS.fullmatch(code)) and int(code) >= 1


def same_short_code(a: Optional[str], b: Optional[str]) -> bool:
    """
    True if two short codes name the same customer number.

    Digit-only codes compare by value, so "2" and "02" collide. Anything
    else compares as text.
    """
    if a and b and _DIGITS.fullmatch(a) and _DIGITS.fullmatch(b):
        return int(a) == int(b)
    return a == b


def next_short_code(customers: Iterable[Customer]) -> str:
    """
    Next free short code: highest canonical numeric short code + 1.

    Returns "1" when no customer has a canonical numeric short code.
    """
    highest: Optional[int] = None
    for customer in customers:
        value = parse_short_code(customer.short_code)
        if value is not None and (highest is None or value > highest):
            highest = value
    return "1" if highest is None else str(highest + 1)


def receipt_date_stamp(on: Optional[date] = None) -> str:
    """YYYYMMDD stamp for a calendar date (UTC today by default)."""
    if on is None:
        on = datetime.now(timezone.utc).date()
    elif isinstance(on, datetime):
        on = (on.astimezone(timezone.utc) if on.tzinfo else on).date()
    return on.strftime(RECEIPT_DATE_FORMAT)


def next_receipt_number(
    collections: Iterable[Collection],
    on: Optional[date] = None,
) -> str:
    """
    Next receipt number for a calendar day.

    Only receipts starting with that day's stamp and longer than the stamp
    count; the digits after the stamp are the sequence. Sequences past 999
    simply widen (YYYYMMDD1000).
    """
    stamp = receipt_date_stamp(on)
    highest = 0
    for collection in collections:
        receipt = collection.receipt_number or ""
        if not receipt.startswith(stamp) or len(receipt) <= len(stamp):
            continue
        sequence = receipt[len(stamp):]
        if _DIGITS.fullmatch(sequence):
            highest = max(highest, int(sequence))
    return f"{stamp}{highest + 1:0{RECEIPT_SEQUENCE_WIDTH}d}"

"""
Customer CSV Import / Export

Export writes the fixed column set below, one row per customer.
Import reads the same shape, tolerating missing and extra columns:
- a blank or invalid short code is replaced with the next free one
- a row whose short code is already taken is skipped
- a row that fails validation is skipped
A bad row never aborts the rest of the batch.
"""

from collections.abc import Iterable

import structlog
from pydantic import ValidationError

from src.csvio.codec import decode_csv, encode_csv
from src.ledger.identifiers import is_valid_short_code
from src.ledger.store import LedgerStore, LedgerValidationError
from src.models.ledger import Customer, ImportSummary

logger = structlog.get_logger(__name__)

CUSTOMER_CSV_HEADERS = ["shortCode", "name", "phone", "address", "accountNumber", "email"]


def export_customers_csv(customers: Iterable[Customer]) -> str:
    """Customers as CSV text."""
    rows = []
    for customer in customers:
        document = customer.to_document()
        rows.append({h: document.get(h) or "" for h in CUSTOMER_CSV_HEADERS})
    return encode_csv(CUSTOMER_CSV_HEADERS, rows)


def import_customers_csv(store: LedgerStore, text: str) -> ImportSummary:
    """
    Add every importable row to the store.

    Returns how many rows were added and how many were skipped.
    """
    added = 0
    skipped = 0

    for line_number, record in enumerate(decode_csv(text), start=2):
        short_code = (record.get("shortCode") or "").strip()
        if not is_valid_short_code(short_code):
            short_code = store.next_short_code()

        if store.get_customer_by_short_code(short_code) is not None:
            logger.info("import_row_skipped", line=line_number, reason="duplicate_short_code", short_code=short_code)
            skipped += 1
            continue

        email = (record.get("email") or "").strip()
        try:
            store.add_customer({
                "short_code": short_code,
                "name": record.get("name") or "",
                "phone": record.get("phone") or "",
                "address": record.get("address") or "",
                "account_number": record.get("accountNumber") or "",
                "email": email or None,
            })
        except (LedgerValidationError, ValidationError) as e:
            logger.warning("import_row_skipped", line=line_number, reason="invalid", error=str(e))
            skipped += 1
            continue
        added += 1

    store.audit_logger.log_customers_imported(added, skipped)
    return ImportSummary(added=added, skipped=skipped)

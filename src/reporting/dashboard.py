"""
Dashboard Reporting

Pure, read-only functions over the ledger's current state: money
formatting, dashboard totals, due reminders and the customer list view.
Nothing here mutates the store.
"""

from collections.abc import Callable, Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

from src.ledger.store import LedgerStore
from src.models.ledger import AppSettings, Customer, LedgerStats

Amount = Union[Decimal, int, float, str, None]

# Predicate deciding whether a customer should appear in due reminders
DuePredicate = Callable[[Customer], bool]

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "AUD": "A$",
    "CAD": "CA$",
    "SGD": "SGD ",
    "AED": "AED ",
    "LKR": "LKR ",
    "NPR": "NPR ",
    "BDT": "BDT ",
}

# Currencies without minor units
ZERO_DECIMAL_CURRENCIES = frozenset({"JPY", "KRW", "VND"})


def _to_decimal(amount: Amount) -> Decimal:
    if amount is None or amount == "":
        return Decimal("0")
    if isinstance(amount, float):
        amount = str(amount)
    try:
        value = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError):
        return Decimal("0")
    return value if value.is_finite() else Decimal("0")


def _group_digits(digits: str, indian: bool) -> str:
    """Insert thousands separators: 1,234,567 or Indian-style 12,34,567."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    size = 2 if indian else 3
    groups = []
    while head:
        groups.insert(0, head[-size:])
        head = head[:-size]
    return ",".join(groups + [tail])


def format_currency(amount: Amount, currency: str = "INR", locale: str = "en-IN") -> str:
    """
    Render an amount as money in the given currency.

    Missing or unparseable amounts render as zero. Locales ending in
    "-IN" use lakh/crore digit grouping.
    """
    code = (currency or "INR").upper()
    places = 0 if code in ZERO_DECIMAL_CURRENCIES else 2
    value = _to_decimal(amount).quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)

    sign = "-" if value < 0 else ""
    integral, _, fraction = f"{abs(value):.{places}f}".partition(".")
    grouped = _group_digits(integral, indian=locale.upper().endswith("-IN"))
    number = f"{grouped}.{fraction}" if fraction else grouped

    symbol = CURRENCY_SYMBOLS.get(code, f"{code} ")
    return f"{sign}{symbol}{number}"


def dashboard_stats(store: LedgerStore) -> LedgerStats:
    """Totals shown on the dashboard cards."""
    return store.compute_stats()


def never_due(customer: Customer) -> bool:
    """Default due policy: nobody is due."""
    return False


def due_reminders(
    customers: Iterable[Customer],
    is_due: Optional[DuePredicate] = None,
) -> list[Customer]:
    """Customers the given policy considers due, in input order."""
    predicate = is_due or never_due
    return [c for c in customers if predicate(c)]


def _short_code_sort_key(customer: Customer) -> int:
    code = customer.short_code or ""
    return int(code) if code.isascii() and code.isdigit() else 0


def filter_customers(customers: Iterable[Customer], term: str = "") -> list[Customer]:
    """
    Customers ordered by numeric short code, optionally filtered.

    The filter is a case-insensitive substring match over short code,
    name, phone and account number.
    """
    ordered = sorted(customers, key=_short_code_sort_key)
    needle = (term or "").strip().lower()
    if not needle:
        return ordered
    return [
        c for c in ordered
        if needle in c.short_code.lower()
        or needle in c.name.lower()
        or needle in c.phone.lower()
        or needle in c.account_number.lower()
    ]


def exceeds_lot_limit(amount: Amount, settings: AppSettings) -> bool:
    """True if amount is above the advisory max lot amount."""
    return _to_decimal(amount) > settings.max_lot_amount

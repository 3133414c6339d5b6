"""Reporting package."""

from src.reporting.dashboard import (
    DuePredicate,
    dashboard_stats,
    due_reminders,
    exceeds_lot_limit,
    filter_customers,
    format_currency,
    never_due,
)

__all__ = [
    "DuePredicate",
    "dashboard_stats",
    "due_reminders",
    "exceeds_lot_limit",
    "filter_customers",
    "format_currency",
    "never_due",
]

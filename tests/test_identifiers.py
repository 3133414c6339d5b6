"""Tests for id, short code and receipt number generation."""

import pytest
from datetime import date, datetime, timedelta, timezone

from src.ledger.identifiers import (
    generate_id,
    is_valid_short_code,
    next_receipt_number,
    next_short_code,
    parse_short_code,
    receipt_date_stamp,
    same_short_code,
)
from src.models.ledger import Collection, Customer

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def make_customers(*codes):
    return [
        Customer(id=f"c{i}", short_code=code, created_at=NOW)
        for i, code in enumerate(codes)
    ]


def make_collections(*receipts):
    return [
        Collection(id=f"k{i}", amount=1, receipt_number=receipt, created_at=NOW)
        for i, receipt in enumerate(receipts)
    ]


class TestGenerateId:
    """Tests for opaque ids."""

    def test_ids_are_unique(self):
        """Test that generated ids do not collide."""
        ids = {generate_id() for _ in range(1000)}
        assert len(ids) == 1000

    def test_id_is_non_empty_string(self):
        """Test id type."""
        assert isinstance(generate_id(), str)
        assert generate_id()


class TestShortCodes:
    """Tests for customer short codes."""

    def test_next_after_highest(self):
        """Test next code is max + 1 regardless of order."""
        assert next_short_code(make_customers("3", "1", "7")) == "8"

    def test_first_code_is_one(self):
        """Test empty customer list."""
        assert next_short_code([]) == "1"

    def test_non_canonical_codes_are_ignored(self):
        """Test codes with letters or leading zeros do not count."""
        assert next_short_code(make_customers("abc", "02")) == "1"

    def test_mixed_codes(self):
        """Test that only canonical numbers drive the sequence."""
        assert next_short_code(make_customers("9", "010", "x12", "10")) == "11"

    def test_zero_counts(self):
        """Test "0" is a canonical number."""
        assert next_short_code(make_customers("0")) == "1"

    @pytest.mark.parametrize("a,b,expected", [
        ("2", "2", True),
        ("2", "02", True),
        ("007", "7", True),
        ("2", "3", False),
        ("X1", "X1", True),
        ("X1", "x1", False),
        ("", "0", False),
    ])
    def test_same_short_code(self, a, b, expected):
        """Test digit codes compare by value, others by text."""
        assert same_short_code(a, b) is expected

    def test_deleted_highest_is_reused(self):
        """Test the sequence is recomputed from what exists."""
        customers = make_customers("1", "2", "3")
        assert next_short_code(customers[:2]) == "3"

    @pytest.mark.parametrize("code,expected", [
        ("1", 1),
        ("42", 42),
        ("0", 0),
        ("02", None),
        ("1a", None),
        ("-3", None),
        ("", None),
        (None, None),
        ("5\n", None),
    ])
    def test_parse_short_code(self, code, expected):
        """Test canonical number parsing."""
        assert parse_short_code(code) == expected

    @pytest.mark.parametrize("code,expected", [
        ("1", True),
        ("02", True),
        ("100", True),
        ("0", False),
        ("00", False),
        ("", False),
        ("1a", False),
        ("-1", False),
        ("1.5", False),
    ])
    def test_is_valid_short_code(self, code, expected):
        """Test input short code validation (number starting from 1)."""
        assert is_valid_short_code(code) is expected


class TestReceiptNumbers:
    """Tests for date-bucketed receipt numbers."""

    def test_date_stamp(self):
        """Test YYYYMMDD formatting."""
        assert receipt_date_stamp(date(2024, 1, 5)) == "20240105"

    def test_date_stamp_uses_utc_day(self):
        """Test that aware datetimes are bucketed by their UTC date."""
        ist = timezone(timedelta(hours=5, minutes=30))
        assert receipt_date_stamp(datetime(2024, 1, 1, 2, 0, tzinfo=ist)) == "20231231"

    def test_date_stamp_defaults_to_today(self):
        """Test default day."""
        assert receipt_date_stamp() == datetime.now(timezone.utc).strftime("%Y%m%d")

    def test_next_in_sequence(self):
        """Test other days are ignored and the sequence continues."""
        day = date(2025, 6, 1)
        collections = make_collections("20240101001", "20250601001", "20250601002")
        assert next_receipt_number(collections, day) == "20250601003"

    def test_first_of_day(self):
        """Test sequence restarts each day."""
        collections = make_collections("20240101001", "20240101002")
        assert next_receipt_number(collections, date(2025, 6, 1)) == "20250601001"

    def test_today_by_default(self):
        """Test default day is today."""
        today = receipt_date_stamp()
        collections = make_collections("20240101001", f"{today}001", f"{today}002")
        assert next_receipt_number(collections) == f"{today}003"

    def test_no_collections(self):
        """Test empty ledger."""
        assert next_receipt_number([], date(2025, 6, 1)) == "20250601001"

    def test_bare_stamp_and_garbage_are_ignored(self):
        """Test receipts without a numeric sequence do not count."""
        collections = make_collections("20250601", "20250601abc", "", "20250601004")
        assert next_receipt_number(collections, date(2025, 6, 1)) == "20250601005"

    def test_sequence_widens_past_999(self):
        """Test the thousandth receipt of a day."""
        collections = make_collections("20250601999")
        assert next_receipt_number(collections, date(2025, 6, 1)) == "202506011000"

    def test_uses_highest_not_count(self):
        """Test gaps in the sequence are not filled."""
        collections = make_collections("20250601001", "20250601009")
        assert next_receipt_number(collections, date(2025, 6, 1)) == "20250601010"

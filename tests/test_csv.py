"""Tests for CSV encoding and customer import/export."""

import pytest

from src.audit import AuditLogger
from src.csvio import (
    CUSTOMER_CSV_HEADERS,
    decode_csv,
    encode_csv,
    export_customers_csv,
    import_customers_csv,
)
from src.ledger import LedgerStore
from src.models.audit import AuditEventType
from src.services.storage import InMemoryKeyValueStore


@pytest.fixture
def store():
    audit_logger = AuditLogger()
    audit_logger.keep_history()
    return LedgerStore(InMemoryKeyValueStore(), audit_logger=audit_logger)


class TestEncode:
    """Tests for encode_csv."""

    def test_quotes_every_field(self):
        """Test exact output with a None value."""
        assert encode_csv(["a", "b"], [{"a": "1", "b": None}]) == '"a","b"\n"1",""'

    def test_header_only(self):
        """Test no rows."""
        assert encode_csv(["a", "b"], []) == '"a","b"'

    def test_doubles_embedded_quotes(self):
        """Test quote escaping."""
        assert encode_csv(["a"], [{"a": 'B "C"'}]) == '"a"\n"B ""C"""'

    def test_only_named_columns(self):
        """Test extra keys are not written and missing keys are empty."""
        assert encode_csv(["a", "b"], [{"a": 1, "z": 9}]) == '"a","b"\n"1",""'


class TestDecode:
    """Tests for decode_csv."""

    def test_round_trip_with_comma_and_quotes(self):
        """Test a field holding a comma and quotes survives."""
        text = encode_csv(["name"], [{"name": 'A,B "C"'}])
        assert decode_csv(text) == [{"name": 'A,B "C"'}]

    def test_newline_inside_quotes(self):
        """Test quoted newlines are part of the field."""
        text = encode_csv(["address", "phone"], [{"address": "Line 1\nLine 2", "phone": "98"}])
        assert decode_csv(text) == [{"address": "Line 1\nLine 2", "phone": "98"}]

    def test_unquoted_input(self):
        """Test plain spreadsheet output."""
        assert decode_csv("a,b\n1,2") == [{"a": "1", "b": "2"}]

    def test_crlf_and_blank_lines(self):
        """Test Windows line endings and empty lines."""
        text = "a,b\r\n1,2\r\n\r\n3,4\r\n"
        assert decode_csv(text) == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]

    def test_whitespace_only_line_is_blank(self):
        """Test a line of spaces is dropped."""
        assert decode_csv("a,b\n   \n1,2") == [{"a": "1", "b": "2"}]

    def test_short_rows_are_padded(self):
        """Test missing trailing cells."""
        assert decode_csv("a,b,c\n1") == [{"a": "1", "b": "", "c": ""}]

    def test_extra_cells_are_ignored(self):
        """Test cells beyond the header."""
        assert decode_csv("a\n1,2,3") == [{"a": "1"}]

    def test_unterminated_quote_does_not_raise(self):
        """Test an open quote runs to the end of the text."""
        records = decode_csv('a,b\n"1,2')
        assert len(records) == 1
        assert records[0]["a"].startswith("1,2")
        assert records[0]["b"] == ""

    def test_headers_are_stripped_and_bom_removed(self):
        """Test spreadsheet exports with a byte order mark."""
        assert decode_csv("\ufeffshortCode , name\n1,Asha") == [{"shortCode": "1", "name": "Asha"}]

    @pytest.mark.parametrize("text", ["", "\n\n", None])
    def test_empty_input(self, text):
        """Test nothing to decode."""
        assert decode_csv(text) == []

    def test_empty_value_in_single_column(self):
        """Test a quoted empty cell is a row, not a blank line."""
        rows = [{"email": None}, {"email": "a@b"}, {"email": ""}]
        text = encode_csv(["email"], rows)
        assert decode_csv(text) == [{"email": ""}, {"email": "a@b"}, {"email": ""}]

    def test_blank_lines_around_empty_cell(self):
        """Test only lines with no text are dropped."""
        assert decode_csv("email\n\n\"\"\n  \nx") == [{"email": ""}, {"email": "x"}]

    def test_header_only_input(self):
        """Test header without rows."""
        assert decode_csv('"a","b"') == []


class TestCustomerExport:
    """Tests for export_customers_csv."""

    def test_export(self, store):
        """Test exact export shape."""
        store.add_customer({
            "short_code": "1",
            "name": "Asha",
            "phone": "98",
            "address": 'MG Road, "Shop 4"',
            "account_number": "A1",
        })
        lines = export_customers_csv(store.customers).split("\n")

        assert lines[0] == '"shortCode","name","phone","address","accountNumber","email"'
        assert lines[1] == '"1","Asha","98","MG Road, ""Shop 4""","A1",""'

    def test_export_empty(self):
        """Test header only."""
        assert export_customers_csv([]) == ",".join(f'"{h}"' for h in CUSTOMER_CSV_HEADERS)

    def test_export_then_import(self, store):
        """Test customers move between ledgers unchanged."""
        store.add_customer({"short_code": "4", "name": "Ravi", "phone": "97", "email": "r@x.in"})
        store.add_customer({"short_code": "9", "name": "Lata, K", "address": "Line 1\nLine 2"})

        other = LedgerStore(InMemoryKeyValueStore())
        summary = import_customers_csv(other, export_customers_csv(store.customers))

        assert summary.added == 2
        fields = {"short_code", "name", "phone", "address", "account_number", "email"}
        assert [c.model_dump(include=fields) for c in other.customers] == [
            c.model_dump(include=fields) for c in store.customers
        ]


class TestCustomerImport:
    """Tests for import_customers_csv."""

    def test_collision_is_skipped(self, store):
        """Test one duplicate and one new row."""
        store.add_customer({"short_code": "1", "name": "Existing"})
        text = "shortCode,name\n1,Duplicate\n2,New"

        summary = import_customers_csv(store, text)

        assert summary.added == 1
        assert summary.skipped == 1
        assert store.get_customer_by_short_code("1").name == "Existing"
        assert store.get_customer_by_short_code("2").name == "New"

    def test_blank_codes_are_numbered(self, store):
        """Test auto numbering across the batch."""
        summary = import_customers_csv(store, "shortCode,name\n,A\n,B\n,C")
        assert summary.added == 3
        assert [c.short_code for c in store.customers] == ["1", "2", "3"]

    def test_invalid_code_is_replaced(self, store):
        """Test non-numeric codes get the next free code."""
        store.add_customer({"short_code": "5"})
        import_customers_csv(store, "shortCode,name\nabc,A\n0,B")
        assert [c.short_code for c in store.customers] == ["5", "6", "7"]

    def test_missing_columns(self, store):
        """Test a file with only names."""
        summary = import_customers_csv(store, "name\nAsha")
        customer = store.customers[0]

        assert summary.added == 1
        assert customer.short_code == "1"
        assert customer.phone == ""
        assert customer.email is None

    def test_invalid_row_is_skipped(self, store):
        """Test a row failing validation does not stop the batch."""
        text = f"shortCode,name\n1,{'x' * 300}\n2,Fine"
        summary = import_customers_csv(store, text)

        assert summary.added == 1
        assert summary.skipped == 1
        assert [c.name for c in store.customers] == ["Fine"]

    def test_leading_zero_code_collides(self, store):
        """Test "02" is a duplicate of an existing "2"."""
        store.add_customer({"short_code": "2", "name": "Existing"})
        summary = import_customers_csv(store, "shortCode,name\n02,Other")

        assert summary.skipped == 1
        assert len(store.customers) == 1

    def test_camel_case_account_number(self, store):
        """Test accountNumber column mapping."""
        import_customers_csv(store, "shortCode,accountNumber\n3,RD-3")
        assert store.customers[0].account_number == "RD-3"

    def test_import_is_audited(self, store):
        """Test a summary event is logged."""
        import_customers_csv(store, "shortCode,name\n1,A")
        event = store.audit_logger.history[-1]
        assert event.event_type == AuditEventType.CUSTOMERS_IMPORTED
        assert event.details == {"added": 1, "skipped": 0}

    def test_empty_file(self, store):
        """Test nothing to import."""
        summary = import_customers_csv(store, "")
        assert summary.total == 0
        assert store.customers == []

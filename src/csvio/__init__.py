"""CSV import/export package."""

from src.csvio.codec import decode_csv, encode_csv
from src.csvio.customers import (
    CUSTOMER_CSV_HEADERS,
    export_customers_csv,
    import_customers_csv,
)

__all__ = [
    "CUSTOMER_CSV_HEADERS",
    "decode_csv",
    "encode_csv",
    "export_customers_csv",
    "import_customers_csv",
]

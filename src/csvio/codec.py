"""
CSV Codec

Tabular text in and out of the ledger.

Encoding quotes every field, doubles embedded quotes, separates fields with
commas and rows with "\\n", header row first. Decoding is the inverse and is
permissive: blank lines are dropped, short rows are padded with empty
strings, extra cells are ignored, and an unterminated quote simply runs to
the end of the text.
"""

import csv
import io
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def encode_csv(headers: Sequence[str], rows: Iterable[Mapping[str, Any]]) -> str:
    """
    Encode records as CSV text.

    Only the named columns are written, in header order. Missing and None
    values become empty fields. No trailing newline.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(row.get(h)) for h in headers])
    return buffer.getvalue()[:-1]


def decode_csv(text: str) -> list[dict[str, str]]:
    """
    Decode CSV text into one dict per data row, keyed by the header row.

    Rows split on "\\n" or "\\r\\n" outside quotes; newlines inside quoted
    fields are kept. A row is dropped only when its source text is blank,
    so a quoted empty cell ('""') is still a row. Returns [] for empty input.
    """
    source = io.StringIO(text or "", newline="")
    consumed: list[str] = []

    def lines() -> Iterator[str]:
        for line in source:
            consumed.append(line)
            yield line

    rows = []
    for row in csv.reader(lines(), strict=False):
        raw = "".join(consumed)
        consumed.clear()
        if raw.strip():
            rows.append(row)
    if not rows:
        return []

    headers = [h.strip() for h in rows[0]]
    if headers:
        headers[0] = headers[0].lstrip("\ufeff")

    records = []
    for row in rows[1:]:
        records.append({
            header: row[index] if index < len(row) else ""
            for index, header in enumerate(headers)
        })
    return records

"""CSV decoding for broker exports."""

import csv
import io
import logging
from typing import Union

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

ENCODINGS = ("utf-8-sig", "cp1252", "latin-1")


class CsvRecord(BaseModel):
    """One data row of a CSV file."""

    row: int = Field(..., ge=2, description="1-based file row (header is row 1)")
    data: dict[str, str] = Field(..., description="Header -> cell text")

    model_config = {"frozen": True}


class CsvTable(BaseModel):
    """A decoded CSV file."""

    header: list[str] = Field(default_factory=list, description="Column names")
    records: list[CsvRecord] = Field(default_factory=list, description="Usable rows")
    skipped: int = Field(default=0, ge=0, description="Rows with a column-count mismatch")

    model_config = {"frozen": True}


def decode(data: Union[bytes, str]) -> str:
    """Decode uploaded bytes, trying UTF-8 (with BOM) before legacy encodings."""
    if isinstance(data, str):
        return data
    for encoding in ENCODINGS:
        try:
            return data.decode(encoding)
        except UnicodeDecodeError:
            continue
    return data.decode("utf-8", errors="replace")


def _clean(cell: str) -> str:
    return cell.strip()


def read_csv(data: Union[bytes, str]) -> CsvTable:
    """Read a comma-delimited file whose first line is the header.

    Blank lines are ignored. Rows whose column count differs from the header
    are dropped and counted in ``skipped``.

    Args:
        data: Raw file bytes or already decoded text.

    Returns:
        CsvTable with the header and the usable rows.
    """
    reader = csv.reader(io.StringIO(decode(data)))
    header: list[str] = []
    records: list[CsvRecord] = []
    skipped = 0

    for row_number, cells in enumerate(reader, start=1):
        if not any(cell.strip() for cell in cells):
            continue
        if not header:
            header = [_clean(cell) for cell in cells]
            continue
        if len(cells) != len(header):
            logger.warning(
                "Row %d has %d columns, expected %d", row_number, len(cells), len(header)
            )
            skipped += 1
            continue
        records.append(
            CsvRecord(
                row=row_number,
                data={name: _clean(cell) for name, cell in zip(header, cells)},
            )
        )

    return CsvTable(header=header, records=records, skipped=skipped)

"""
Sheet Reader
============
Reads the donation sheet and keeps the rows whose form_name matches one
of the Airtable form slugs.

Required columns (any order): form_name, dollars_raised, num_of_donations
"""

import logging
import math
import re
from typing import Iterable, Optional, Protocol

from sync.errors import SheetReadError
from sync.models import SheetRow

logger = logging.getLogger(__name__)

FORM_NAME_COLUMN = 'form_name'
DOLLARS_RAISED_COLUMN = 'dollars_raised'
NUM_DONATIONS_COLUMN = 'num_of_donations'

_FLOAT_PREFIX = re.compile(r'^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?')
_INT_PREFIX = re.compile(r'^\s*[+-]?\d+')


class TableReader(Protocol):
    def get_values(self, sheet_name: str) -> Optional[list]: ...


def coerce_amount(value) -> float:
    """Parse a dollar amount the way a lenient spreadsheet would

    Numbers pass through; strings use their leading numeric part
    ("12.50 USD" -> 12.5). Anything unparseable or non-finite is 0.0.
    """
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        amount = float(value)
    elif isinstance(value, str):
        match = _FLOAT_PREFIX.match(value)
        if not match:
            return 0.0
        amount = float(match.group())
    else:
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def coerce_count(value) -> int:
    """Parse a donation count; fractions are truncated, junk is 0"""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        return int(value)
    if isinstance(value, str):
        match = _INT_PREFIX.match(value)
        return int(match.group()) if match else 0
    return 0


def _cell(row: list, index: int):
    return row[index] if index < len(row) else ''


class SheetReader:
    """Turns the raw sheet grid into qualifying SheetRows"""

    def __init__(self, table_reader: TableReader, progress_every: int = 50000):
        self.table_reader = table_reader
        self.progress_every = progress_every

    def _load_grid(self, sheet_name: str) -> list:
        values = self.table_reader.get_values(sheet_name)
        if values is None:
            raise SheetReadError(f"Sheet '{sheet_name}' not found")
        if len(values) <= 1:
            raise SheetReadError("No data found in sheet or only header row present")
        return values

    @staticmethod
    def _column_indices(headers: list) -> tuple:
        try:
            return (
                headers.index(FORM_NAME_COLUMN),
                headers.index(DOLLARS_RAISED_COLUMN),
                headers.index(NUM_DONATIONS_COLUMN),
            )
        except ValueError:
            raise SheetReadError("Could not find required columns in sheet headers") from None

    def read_matching_rows(self, sheet_name: str, candidate_keys: Iterable[str]) -> list:
        """Get rows for the candidate form slugs with a positive amount or count

        Returns:
            list[SheetRow]; empty if the sheet or its columns are missing
        """
        logger.info("Retrieving data from Google Sheets...")
        keys = frozenset(candidate_keys)
        logger.info(f"Will filter sheet data for {len(keys)} form slugs")

        try:
            values = self._load_grid(sheet_name)
            form_idx, raised_idx, donations_idx = self._column_indices(list(values[0]))
        except SheetReadError as e:
            logger.error(str(e))
            return []

        logger.info(f"Processing {len(values)} rows from sheet, filtering for {len(keys)} form slugs...")

        rows = []
        matched = 0
        for processed, row in enumerate(values[1:], start=1):
            form_name = _cell(row, form_idx)

            if isinstance(form_name, str) and form_name and form_name in keys:
                matched += 1
                amount = coerce_amount(_cell(row, raised_idx))
                count = coerce_count(_cell(row, donations_idx))

                if amount > 0 or count > 0:
                    rows.append(SheetRow(match_key=form_name, amount=amount, count=count))

            if processed % self.progress_every == 0:
                logger.info(f"Processed {processed} rows, found {matched} matches so far...")

        logger.info(f"Found {len(rows)} matching donation records in Google Sheet "
                    f"(from {len(values) - 1} total rows)")
        return rows

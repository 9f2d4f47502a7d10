"""
Google Sheets Client
====================
Client for the donation spreadsheet via gspread and a service account.

Used two ways:
- reading the donation sheet grid (TableReader for the sync)
- appending rows to the Logs sheet (log store)

Worksheets are looked up once and cached, so repeated log appends cost a
single API call each.
"""

import logging
import gspread
from gspread.utils import ValueInputOption, ValueRenderOption

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class GoogleSheetsClient:
    """Client for one Google spreadsheet"""

    def __init__(self, credentials_file: str, spreadsheet_id: str):
        self.credentials_file = credentials_file
        self.spreadsheet_id = spreadsheet_id
        # Opened lazily on first use
        self._spreadsheet = None
        self._worksheets = {}

    @property
    def spreadsheet(self):
        if self._spreadsheet is None:
            gc = gspread.service_account(filename=self.credentials_file, scopes=SCOPES)
            self._spreadsheet = gc.open_by_key(self.spreadsheet_id)
            logger.info(f"Opened spreadsheet {self.spreadsheet_id}")
        return self._spreadsheet

    def _worksheet(self, sheet_name: str):
        """Return the worksheet with this exact title, or None"""
        worksheet = self._worksheets.get(sheet_name)
        if worksheet is not None:
            return worksheet
        try:
            worksheet = self.spreadsheet.worksheet(sheet_name)
        except gspread.exceptions.WorksheetNotFound:
            return None
        self._worksheets[sheet_name] = worksheet
        return worksheet

    def get_values(self, sheet_name: str):
        """Read the full data range of a sheet

        Values are unformatted, so numeric cells come back as numbers.

        Returns:
            list of rows, or None if the sheet does not exist
        """
        worksheet = self._worksheet(sheet_name)
        if worksheet is None:
            return None
        return worksheet.get_values(value_render_option=ValueRenderOption.unformatted)

    def append_row(self, sheet_name: str, row: list, header: list = None) -> None:
        """Append one row, creating the sheet (with header) if needed

        Values are written RAW: text starting with '=' stays text.
        """
        worksheet = self._worksheet(sheet_name)
        if worksheet is None:
            worksheet = self.spreadsheet.add_worksheet(
                title=sheet_name,
                rows=1000,
                cols=max(len(header or row), 1)
            )
            if header:
                worksheet.append_row(header, value_input_option=ValueInputOption.raw)
                worksheet.freeze(rows=1)
            self._worksheets[sheet_name] = worksheet
        worksheet.append_row(row, value_input_option=ValueInputOption.raw)

"""
Log Store
=========
Logging setup: stdout for the host, plus an append-only "Logs" sheet in
the donation spreadsheet so staff can see what each sync did.

Log sheet rows: Timestamp | Type (INFO or ERROR) | Message
"""

import logging
import sys
import threading
from datetime import datetime

LOG_HEADER = ["Timestamp", "Type", "Message"]
LOG_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(message)s'


class SheetLogHandler(logging.Handler):
    """Appends each log record as a row in a worksheet"""

    def __init__(self, sheets_client, sheet_name: str = "Logs", level=logging.INFO):
        super().__init__(level)
        self.sheets_client = sheets_client
        self.sheet_name = sheet_name
        # The sheets client logs too; don't feed those records back in
        self._local = threading.local()

    @staticmethod
    def row_type(record: logging.LogRecord) -> str:
        return "ERROR" if record.levelno >= logging.ERROR else "INFO"

    def build_row(self, record: logging.LogRecord) -> list:
        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')
        return [timestamp, self.row_type(record), record.getMessage()]

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(self._local, "busy", False):
            return
        self._local.busy = True
        try:
            self.sheets_client.append_row(self.sheet_name, self.build_row(record), header=LOG_HEADER)
        except Exception:
            self.handleError(record)
        finally:
            self._local.busy = False


def setup_logging(sheets_client=None, sheet_name: str = "Logs", level=logging.INFO) -> None:
    """Configure root logging to stdout, and to the log sheet when given a client"""
    handlers = [logging.StreamHandler(sys.stdout)]
    if sheets_client is not None and sheet_name:
        handlers.append(SheetLogHandler(sheets_client, sheet_name))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=handlers
    )
    # Keep HTTP library chatter out of the log sheet
    logging.getLogger("urllib3").setLevel(logging.WARNING)

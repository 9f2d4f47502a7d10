"""
Sync Triggers
=============
The two ways a sync starts:

- manual: run now, no rate limiting (staff button, CLI)
- auto: timer-driven, skipped if the last auto sync was too recent

Usage:
    python triggers.py manual [--dry-run]
    python triggers.py auto
"""

import argparse
import logging
import threading

from clients.sheets import GoogleSheetsClient
from config import Config
from log_store import setup_logging
from sync.form_totals import run_form_totals_sync
from sync.rate_limit import JsonFileStore, RateLimiter

logger = logging.getLogger(__name__)

# Flask may serve requests on several threads; serialize check-and-record
_auto_sync_lock = threading.Lock()


def get_rate_limiter() -> RateLimiter:
    return RateLimiter(JsonFileStore(Config.STATE_FILE), Config.RATE_LIMIT_HOURS)


def manual_sync(dry_run: bool = False) -> list:
    """Sync now, bypassing the rate limit"""
    logger.info("Manual sync triggered by user")
    return run_form_totals_sync(dry_run=dry_run)


def scheduled_sync(rate_limiter: RateLimiter = None):
    """Timer entry point

    Returns:
        list of target results, or None if rate limited
    """
    logger.info("Hourly auto-sync triggered")
    rate_limiter = rate_limiter or get_rate_limiter()

    with _auto_sync_lock:
        if rate_limiter.should_skip():
            logger.info("Hourly auto-sync triggered, but skipping due to rate limiting")
            return None
        rate_limiter.record_sync_now()

    return run_form_totals_sync()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Sync form donation totals from Google Sheets to Airtable")
    parser.add_argument("mode", choices=["manual", "auto"], help="manual ignores the rate limit")
    parser.add_argument("--dry-run", action="store_true", help="log updates without sending them")
    args = parser.parse_args(argv)

    sheets = None
    if Config.GOOGLE_SERVICE_ACCOUNT_FILE and Config.SPREADSHEET_ID:
        sheets = GoogleSheetsClient(Config.GOOGLE_SERVICE_ACCOUNT_FILE, Config.SPREADSHEET_ID)
    setup_logging(sheets, Config.LOG_SHEET_NAME)

    if args.mode == "manual":
        manual_sync(dry_run=args.dry_run)
    else:
        if args.dry_run:
            logger.warning("--dry-run is ignored for auto syncs")
        scheduled_sync()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

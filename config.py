"""
Sync Configuration
==================
All settings and environment variables in one place.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load .env file if present
load_dotenv()

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetConfig:
    """One Airtable destination table"""

    base_id: str
    table_id: str

    @property
    def is_configured(self) -> bool:
        return bool(self.base_id and self.table_id)

    @property
    def label(self) -> str:
        return f"{self.base_id}/{self.table_id}"


class Config:
    """Application configuration"""

    # Flask
    SECRET_KEY = os.environ.get('SECRET_KEY', 'formsync-dev-key-change-in-production')
    DEBUG = os.environ.get('DEBUG', 'False').lower() == 'true'
    PORT = int(os.environ.get('PORT', 5000))

    # Airtable
    AIRTABLE_API_KEY = os.environ.get('AIRTABLE_API_KEY', '')
    AIRTABLE_BASE_URL = os.environ.get('AIRTABLE_BASE_URL', 'https://api.airtable.com/v0')
    # JSON list: [{"baseId": "app...", "tableId": "tbl..."}, ...]
    AIRTABLE_TARGETS = os.environ.get('AIRTABLE_TARGETS', '[]')

    # Airtable field names, with optional field IDs written alongside
    AIRTABLE_URL_FIELD = os.environ.get('AIRTABLE_URL_FIELD', 'ActBlue Page')
    AIRTABLE_URL_FIELD_ID = os.environ.get('AIRTABLE_URL_FIELD_ID', '')
    AIRTABLE_RAISED_FIELD = os.environ.get('AIRTABLE_RAISED_FIELD', 'Raised')
    AIRTABLE_RAISED_FIELD_ID = os.environ.get('AIRTABLE_RAISED_FIELD_ID', '')
    AIRTABLE_DONATIONS_FIELD = os.environ.get('AIRTABLE_DONATIONS_FIELD', 'Donations')
    AIRTABLE_DONATIONS_FIELD_ID = os.environ.get('AIRTABLE_DONATIONS_FIELD_ID', '')

    # Form slug = page URL minus this prefix
    FORM_URL_PREFIX = os.environ.get('FORM_URL_PREFIX', 'https://secure.actblue.com/donate/')

    # Google Sheets
    GOOGLE_SERVICE_ACCOUNT_FILE = os.environ.get('GOOGLE_SERVICE_ACCOUNT_FILE', '')
    SPREADSHEET_ID = os.environ.get('SPREADSHEET_ID', '')
    SHEET_NAME = os.environ.get('SHEET_NAME', 'raw_import')
    LOG_SHEET_NAME = os.environ.get('LOG_SHEET_NAME', 'Logs')

    # Sync behaviour
    RATE_LIMIT_HOURS = float(os.environ.get('RATE_LIMIT_HOURS', 0.25))  # 15 minutes
    STATE_FILE = os.environ.get('STATE_FILE', 'sync_state.json')
    UPDATE_DELAY_SECONDS = float(os.environ.get('UPDATE_DELAY_SECONDS', 0.2))

    # Shared secret sent by the scheduler on /sync/auto
    CRON_SECRET = os.environ.get('CRON_SECRET', '')

    # Google OAuth (staff login for manual sync)
    GOOGLE_CLIENT_ID = os.environ.get('GOOGLE_CLIENT_ID', '')
    GOOGLE_CLIENT_SECRET = os.environ.get('GOOGLE_CLIENT_SECRET', '')
    ALLOWED_DOMAIN = os.environ.get('ALLOWED_DOMAIN', 'example.org')

    @classmethod
    def validate(cls):
        """Check for required environment variables"""
        missing = []
        if not cls.AIRTABLE_API_KEY:
            missing.append("AIRTABLE_API_KEY")
        if not parse_targets(cls.AIRTABLE_TARGETS):
            missing.append("AIRTABLE_TARGETS")
        if not cls.GOOGLE_SERVICE_ACCOUNT_FILE:
            missing.append("GOOGLE_SERVICE_ACCOUNT_FILE")
        if not cls.SPREADSHEET_ID:
            missing.append("SPREADSHEET_ID")
        if not cls.GOOGLE_CLIENT_ID:
            missing.append("GOOGLE_CLIENT_ID")
        if not cls.GOOGLE_CLIENT_SECRET:
            missing.append("GOOGLE_CLIENT_SECRET")
        return missing


def parse_targets(raw: str) -> list:
    """Parse the AIRTABLE_TARGETS JSON list into TargetConfig objects

    Blank entries are kept so the sync can log and skip them.
    """
    if not raw or not raw.strip():
        return []

    try:
        items = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.error(f"AIRTABLE_TARGETS is not valid JSON: {e}")
        return []

    if not isinstance(items, list):
        logger.error("AIRTABLE_TARGETS must be a JSON list")
        return []

    targets = []
    for item in items:
        if not isinstance(item, dict):
            logger.warning(f"Ignoring malformed target entry: {item!r}")
            continue
        targets.append(TargetConfig(
            base_id=str(item.get('baseId') or '').strip(),
            table_id=str(item.get('tableId') or '').strip(),
        ))
    return targets


@dataclass(frozen=True)
class SyncSettings:
    """Explicit settings handed to the sync components.

    Built once from Config so the core never reads process-wide state.
    """

    api_key: str
    targets: list = field(default_factory=list)
    sheet_name: str = 'raw_import'
    url_prefix: str = 'https://secure.actblue.com/donate/'
    url_field: str = 'ActBlue Page'
    url_field_id: str = ''
    raised_field: str = 'Raised'
    raised_field_id: str = ''
    donations_field: str = 'Donations'
    donations_field_id: str = ''
    rate_limit_hours: float = 0.25
    update_delay_seconds: float = 0.2
    airtable_base_url: str = 'https://api.airtable.com/v0'

    @classmethod
    def from_config(cls, config=Config) -> 'SyncSettings':
        return cls(
            api_key=config.AIRTABLE_API_KEY,
            targets=parse_targets(config.AIRTABLE_TARGETS),
            sheet_name=config.SHEET_NAME,
            url_prefix=config.FORM_URL_PREFIX,
            url_field=config.AIRTABLE_URL_FIELD,
            url_field_id=config.AIRTABLE_URL_FIELD_ID,
            raised_field=config.AIRTABLE_RAISED_FIELD,
            raised_field_id=config.AIRTABLE_RAISED_FIELD_ID,
            donations_field=config.AIRTABLE_DONATIONS_FIELD,
            donations_field_id=config.AIRTABLE_DONATIONS_FIELD_ID,
            rate_limit_hours=config.RATE_LIMIT_HOURS,
            update_delay_seconds=config.UPDATE_DELAY_SECONDS,
            airtable_base_url=config.AIRTABLE_BASE_URL,
        )

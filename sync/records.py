"""
Record Source
=============
Pulls the form page URLs out of an Airtable table and turns them into
match keys (form slugs).

Matching: Airtable "ActBlue Page" URL minus the prefix → sheet form_name
"""

import logging
from clients.airtable import AirtableClient
from sync.errors import SourceFetchError
from sync.models import RemoteRecord

logger = logging.getLogger(__name__)


def extract_match_key(url, prefix: str) -> str:
    """Strip the first occurrence of prefix from url

    Returns '' when the url is empty, not a string, or lacks the prefix.
    """
    if not url or not isinstance(url, str) or not prefix:
        return ''
    if prefix not in url:
        return ''
    return url.replace(prefix, '', 1)


class RecordSource:
    """Reads RemoteRecords from one Airtable target"""

    def __init__(self, client: AirtableClient, url_prefix: str,
                 url_field: str, url_field_id: str = ''):
        self.client = client
        self.url_prefix = url_prefix
        self.url_field = url_field
        self.url_field_id = url_field_id

    def _url_for(self, fields: dict):
        # Field name first, then the field id in case the column was renamed
        value = fields.get(self.url_field)
        if not value and self.url_field_id:
            value = fields.get(self.url_field_id)
        return value

    def _load(self, target) -> list:
        result = self.client.list_records(target.base_id, target.table_id)
        if "error" in result:
            raise SourceFetchError(result["error"])
        return result["records"]

    def fetch_records(self, target) -> list:
        """Get records with a valid form slug from this target

        Returns:
            list[RemoteRecord]; empty on any fetch failure
        """
        logger.info(f"Fetching records from Airtable (base: {target.base_id}, table: {target.table_id})...")

        try:
            raw_records = self._load(target)
        except SourceFetchError as e:
            logger.error(f"Error fetching Airtable records: {e}")
            return []

        records = []
        for item in raw_records:
            if not isinstance(item, dict):
                continue
            record_id = item.get("id")
            url = self._url_for(item.get("fields") or {})
            match_key = extract_match_key(url, self.url_prefix)
            if record_id and match_key:
                records.append(RemoteRecord(id=record_id, source_url=url, match_key=match_key))

        logger.info(f"Found {len(records)} valid form slugs in Airtable")
        return records

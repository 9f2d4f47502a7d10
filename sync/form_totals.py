"""
Form Totals Sync
================
Syncs donation totals per form from the Google Sheet to Airtable.

Matching: Airtable page URL minus FORM_URL_PREFIX → sheet form_name

Per target:
1. Fetch records (and their form slugs) from Airtable
2. Read sheet rows for those slugs
3. Sum dollars_raised / num_of_donations per slug
4. PATCH Raised / Donations on each matching record

A target that fails or comes up empty is logged and skipped; the other
targets still run.
"""

import logging
from clients.airtable import AirtableClient
from clients.sheets import GoogleSheetsClient
from config import Config, SyncSettings
from sync.aggregate import aggregate, build_update_instructions
from sync.errors import ConfigurationError
from sync.models import TargetResult
from sync.records import RecordSource
from sync.sheet import SheetReader
from sync.updates import FieldRef, RecordSink, RequestPacer

logger = logging.getLogger(__name__)


class FormTotalsSync:
    """Sync form totals from the sheet into every configured Airtable target"""

    def __init__(self, settings: SyncSettings, source: RecordSource,
                 reader: SheetReader, sink: RecordSink):
        self.settings = settings
        self.source = source
        self.reader = reader
        self.sink = sink

    def _check_config(self) -> None:
        if not self.settings.api_key:
            raise ConfigurationError("Airtable API key not configured")
        if not self.settings.targets:
            raise ConfigurationError("No Airtable targets configured")

    def sync_target(self, target, dry_run: bool = False) -> TargetResult:
        """Run fetch → read → aggregate → push for one target"""
        result = TargetResult(target=target.label)

        if not target.is_configured:
            logger.info("Skipping target with blank Base/Table IDs")
            result.status = "skipped"
            return result

        # Step 1: Form slugs from Airtable
        records = self.source.fetch_records(target)
        result.records = len(records)
        if not records:
            logger.info(f"No records found in Airtable for base {target.base_id}, skipping")
            result.status = "no_records"
            return result

        # Step 2: Matching sheet rows
        rows = self.reader.read_matching_rows(
            self.settings.sheet_name,
            {record.match_key for record in records}
        )
        result.rows = len(rows)
        if not rows:
            logger.info("No matching data found in Google Sheet for this target, skipping")
            result.status = "no_rows"
            return result

        # Step 3: Aggregate and join
        logger.info("Processing and aggregating data...")
        instructions = build_update_instructions(records, aggregate(rows))
        result.updates = len(instructions)
        if not instructions:
            logger.info("No matches found between Airtable and Sheet data for this target, skipping")
            result.status = "no_matches"
            return result

        # Step 4: Update Airtable
        result.push = self.sink.push_updates(target, instructions, dry_run=dry_run)
        result.status = "updated"
        return result

    def sync(self, dry_run: bool = False) -> list:
        """Run the sync for every target

        Never raises; failures are logged.

        Returns:
            list[TargetResult], one per target attempted
        """
        results = []

        try:
            mode = "[DRY RUN] " if dry_run else ""
            logger.info(f"{mode}Starting multi-destination sync process...")
            self._check_config()

            for target in self.settings.targets:
                try:
                    results.append(self.sync_target(target, dry_run=dry_run))
                except Exception as e:
                    logger.error(f"Error syncing target {target.label}: {str(e)}", exc_info=True)
                    results.append(TargetResult(target=target.label, status="error", details=[str(e)]))

            logger.info("Sync completed for all configured targets")
        except ConfigurationError as e:
            logger.error(f"Sync skipped: {e}")
        except Exception as e:
            logger.error(f"Error in sync process: {str(e)}", exc_info=True)

        return results


def build_form_totals_sync(settings: SyncSettings = None, sheets: GoogleSheetsClient = None,
                           airtable: AirtableClient = None) -> FormTotalsSync:
    """Wire the sync from Config (or the given collaborators)"""
    settings = settings or SyncSettings.from_config()
    airtable = airtable or AirtableClient(settings.api_key, settings.airtable_base_url)
    sheets = sheets or GoogleSheetsClient(Config.GOOGLE_SERVICE_ACCOUNT_FILE, Config.SPREADSHEET_ID)

    return FormTotalsSync(
        settings,
        source=RecordSource(airtable, settings.url_prefix, settings.url_field, settings.url_field_id),
        reader=SheetReader(sheets),
        sink=RecordSink(
            airtable,
            raised_field=FieldRef(settings.raised_field, settings.raised_field_id),
            donations_field=FieldRef(settings.donations_field, settings.donations_field_id),
            pacer=RequestPacer(settings.update_delay_seconds),
        ),
    )


def run_form_totals_sync(dry_run: bool = False) -> list:
    """Convenience function to run the form totals sync

    Args:
        dry_run: Preview changes without applying them
    """
    sync = build_form_totals_sync()
    return sync.sync(dry_run=dry_run)

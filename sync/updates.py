"""
Record Updates
==============
Writes the aggregated totals back to Airtable, one PATCH per record.

Airtable Fields Updated:
- Raised: total dollars raised for the form
- Donations: total number of donations for the form

Each value is written under the field name and, when configured, the
field id as well, so a renamed column still receives the update.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable

from clients.airtable import AirtableClient
from sync.errors import SinkUpdateError
from sync.models import PushResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldRef:
    """A destination field addressed by name and optional id"""

    name: str
    field_id: str = ''

    def keys(self) -> list:
        return [k for k in (self.name, self.field_id) if k]


class RequestPacer:
    """Fixed delay between consecutive update requests"""

    def __init__(self, delay_seconds: float = 0.2, sleep: Callable[[float], None] = time.sleep):
        self.delay_seconds = delay_seconds
        self.sleep = sleep

    def before_request(self, index: int) -> None:
        if index > 0 and self.delay_seconds > 0:
            self.sleep(self.delay_seconds)


class RecordSink:
    """Pushes UpdateInstructions to one Airtable target"""

    def __init__(self, client: AirtableClient, raised_field: FieldRef,
                 donations_field: FieldRef, pacer: RequestPacer = None):
        self.client = client
        self.raised_field = raised_field
        self.donations_field = donations_field
        self.pacer = pacer or RequestPacer()

    def build_fields(self, instruction) -> dict:
        fields = {}
        for key in self.raised_field.keys():
            fields[key] = instruction.total_amount
        for key in self.donations_field.keys():
            fields[key] = instruction.total_count
        return fields

    def _update(self, target, instruction) -> None:
        result = self.client.update_record(
            target.base_id,
            target.table_id,
            instruction.remote_id,
            self.build_fields(instruction)
        )
        if "error" in result:
            raise SinkUpdateError(f"Error updating record {instruction.remote_id}: {result['error']}")
        if result["status"] != 200:
            raise SinkUpdateError(
                f"Failed to update record {instruction.remote_id}: Response code {result['status']}"
            )

    def push_updates(self, target, instructions: list, dry_run: bool = False) -> PushResult:
        """Send every instruction, continuing past failures

        Args:
            dry_run: If True, log the updates without calling Airtable
        """
        logger.info(f"Updating {len(instructions)} Airtable records in base {target.base_id}...")
        result = PushResult()

        if not dry_run and not self.client.api_key:
            logger.error("Airtable API key not configured")
            result.error_count = len(instructions)
            return result

        for index, instruction in enumerate(instructions):
            if dry_run:
                logger.info(f"[DRY RUN] Would update {instruction.remote_id}: "
                            f"{self.build_fields(instruction)}")
                result.success_count += 1
                continue

            self.pacer.before_request(index)

            try:
                self._update(target, instruction)
            except SinkUpdateError as e:
                result.error_count += 1
                logger.error(str(e))
                continue
            except Exception as e:
                result.error_count += 1
                logger.error(f"Error updating record {instruction.remote_id}: {str(e)}", exc_info=True)
                continue

            result.success_count += 1
            logger.info(f"Updated record {instruction.remote_id} with amount "
                        f"{instruction.total_amount} and {instruction.total_count} donations")

        mode = "[DRY RUN] " if dry_run else ""
        logger.info(f"{mode}Update complete: {result.success_count} successful, "
                    f"{result.error_count} failed")
        return result

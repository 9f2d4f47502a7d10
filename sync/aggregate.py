"""
Aggregation
===========
Sums amount and count per form slug, then joins the totals onto the
Airtable records that carry the same slug.
"""

import logging
from sync.models import Aggregate, UpdateInstruction

logger = logging.getLogger(__name__)


def aggregate(rows: list) -> dict:
    """Group rows by match key and sum them, in input order

    Returns:
        dict: {match_key: Aggregate}
    """
    totals = {}
    for row in rows:
        agg = totals.get(row.match_key)
        if agg is None:
            agg = totals[row.match_key] = Aggregate()
        agg.total_amount += row.amount
        agg.total_count += row.count
    return totals


def build_update_instructions(records: list, aggregates: dict) -> list:
    """One instruction per remote record whose slug has an aggregate

    Records keep their Airtable order. Slugs only present in the sheet
    are ignored.
    """
    instructions = []
    for record in records:
        agg = aggregates.get(record.match_key)
        if agg is None:
            continue
        instructions.append(UpdateInstruction(
            remote_id=record.id,
            total_amount=agg.total_amount,
            total_count=agg.total_count,
        ))

    logger.info(f"Matched and processed {len(instructions)} records")
    return instructions

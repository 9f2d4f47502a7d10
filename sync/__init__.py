"""
Sync Module
===========
One-way sync of donation totals from Google Sheets to Airtable.

Stages:
- records: form slugs from Airtable
- sheet: matching donation rows from the sheet
- aggregate: totals per form slug
- updates: PATCH totals back to Airtable
- form_totals: runs the stages for every target
- rate_limit: throttles automatic runs
"""

from sync.form_totals import FormTotalsSync, build_form_totals_sync, run_form_totals_sync
from sync.rate_limit import JsonFileStore, RateLimiter

__all__ = [
    'FormTotalsSync',
    'JsonFileStore',
    'RateLimiter',
    'build_form_totals_sync',
    'run_form_totals_sync',
]

"""
Sync API Clients
================
Clients for external services: Airtable, Google Sheets
"""

from .airtable import AirtableClient
from .sheets import GoogleSheetsClient

__all__ = ['AirtableClient', 'GoogleSheetsClient']

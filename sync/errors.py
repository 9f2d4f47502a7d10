"""Sync error types.

Each stage raises these internally and converts them to a logged,
degraded result at its own boundary. None of them escape a sync run.
"""


class SyncError(Exception):
    """Base class for sync failures"""


class ConfigurationError(SyncError):
    """Missing secret or unusable target configuration"""


class SourceFetchError(SyncError):
    """Reading records from Airtable failed"""


class SheetReadError(SyncError):
    """The donation sheet is missing, empty, or lacks required columns"""


class SinkUpdateError(SyncError):
    """A single Airtable record update failed"""

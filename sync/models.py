"""Data models passed between the sync stages."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class RemoteRecord:
    """An Airtable record that carries a form page URL."""

    id: str  # Airtable record id (rec...)
    source_url: str
    match_key: str  # form slug, never empty


@dataclass(frozen=True)
class SheetRow:
    """A qualifying sheet row: amount > 0 or count > 0."""

    match_key: str
    amount: float
    count: int


@dataclass
class Aggregate:
    total_amount: float = 0.0
    total_count: int = 0


@dataclass(frozen=True)
class UpdateInstruction:
    remote_id: str
    total_amount: float
    total_count: int


@dataclass
class PushResult:
    success_count: int = 0
    error_count: int = 0


@dataclass
class TargetResult:
    """Summary of one target's pass through the sync."""

    target: str
    status: str = "pending"  # skipped | no_records | no_rows | no_matches | updated | error
    records: int = 0
    rows: int = 0
    updates: int = 0
    push: Optional[PushResult] = None
    details: list = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "target": self.target,
            "status": self.status,
            "records": self.records,
            "rows": self.rows,
            "updates": self.updates,
            "updated": self.push.success_count if self.push else 0,
            "errors": self.push.error_count if self.push else 0,
            "details": list(self.details),
        }

"""Domain entity — one spreadsheet upload event."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4


@dataclass
class ImportBatch:
    """Records the stored source spreadsheet that spawned a set of units."""

    source_file_ref: str
    created_by: str
    notes: str = ""
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

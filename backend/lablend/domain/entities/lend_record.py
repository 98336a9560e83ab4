"""Domain entity — append-only audit entry for a borrow or return."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4


class LendAction(str, Enum):
    LEND = "lend"
    RETURN = "return"


@dataclass(frozen=True)
class LendRecord:
    """Immutable record of one lending transition.

    Records are never updated or deleted by the normal flow; the
    outstanding-holdings view is re-derived from them on demand.
    """

    user: str
    group_key: str
    action: LendAction
    asset_description: str = ""
    asset_unit: str | None = None
    id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

"""Domain entity — one physical, individually lendable item."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

_WHITESPACE_RUN = re.compile(r"\s+")


class AssetStatus(str, Enum):
    """Lending state of a unit — always derived from its holder."""

    AVAILABLE = "available"
    BORROWED = "borrowed"


def normalize_group_key(description: str) -> str:
    """Collapse whitespace runs and trim — the identity shared by fungible units.

    The same normaliser is used by the importer, by manual creation and by
    every group lookup, so keys always compare equal.
    """
    return _WHITESPACE_RUN.sub(" ", description).strip()


@dataclass
class AssetUnit:
    """Core domain entity for a single asset unit.

    ``current_holder`` is the only lending state; ``status`` is derived
    from it so the (holder, status) pair can never disagree.
    """

    asset_description: str
    group_key: str = ""
    id: str = field(default_factory=lambda: str(uuid4()))
    current_holder: str | None = None
    scrapped: bool = False
    asset_name: str = ""
    image_ref: str | None = None
    import_ref: str | None = None

    # Descriptive metadata — inert for lending
    is_fixed_assets: bool | None = None
    category: str | None = None
    serial_no: str | None = None
    location: str | None = None
    excel_user: str | None = None
    manufacturer: str | None = None
    value_cny: float | None = None
    commissioning_time: str | None = None
    metrology_validity_period: str | None = None
    metrology_requirement: str | None = None
    metrology_cost: float | None = None
    remarks: str | None = None

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        self.asset_description = self.asset_description.strip()
        if not self.group_key:
            self.group_key = normalize_group_key(self.asset_description)

    @property
    def status(self) -> AssetStatus:
        return AssetStatus.BORROWED if self.current_holder else AssetStatus.AVAILABLE

    @property
    def is_available(self) -> bool:
        return not self.scrapped and self.current_holder is None

    def is_held_by(self, user_id: str) -> bool:
        return not self.scrapped and self.current_holder == user_id

    def scrap(self) -> None:
        """Mark the unit as scrapped. Caller must ensure it is not held."""
        self.scrapped = True
        self.current_holder = None
        self.updated_at = datetime.now(timezone.utc)

    def rename(self, asset_name: str) -> None:
        self.asset_name = asset_name.strip()
        self.updated_at = datetime.now(timezone.utc)

    def descriptive_fields(self) -> dict[str, Any]:
        """Return the inert metadata fields as a plain dict."""
        return {
            "is_fixed_assets": self.is_fixed_assets,
            "category": self.category,
            "serial_no": self.serial_no,
            "location": self.location,
            "excel_user": self.excel_user,
            "manufacturer": self.manufacturer,
            "value_cny": self.value_cny,
            "commissioning_time": self.commissioning_time,
            "metrology_validity_period": self.metrology_validity_period,
            "metrology_requirement": self.metrology_requirement,
            "metrology_cost": self.metrology_cost,
            "remarks": self.remarks,
        }

"""Read-only aggregate views over asset units and lend records."""

from dataclasses import dataclass


@dataclass
class AssetGroupSummary:
    """Counts for one fungible group of non-scrapped units."""

    group_key: str
    description: str
    asset_name: str = ""
    image_ref: str | None = None
    total: int = 0
    available: int = 0
    borrowed: int = 0


@dataclass(frozen=True)
class OutstandingHolding:
    """A (user, group_key) pair whose lend/return balance is positive."""

    user: str
    group_key: str
    balance: int

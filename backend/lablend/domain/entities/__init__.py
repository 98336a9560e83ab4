from .asset_unit import AssetUnit, AssetStatus, normalize_group_key
from .lend_record import LendRecord, LendAction
from .import_batch import ImportBatch
from .user import User, UserRole
from .transition import TransitionResult, TransitionErrorKind
from .inventory import AssetGroupSummary, OutstandingHolding
from .import_result import (
    EmbeddedImage,
    ParsedRow,
    ReconciliationResult,
    ImportOutcome,
)

__all__ = [
    "AssetUnit",
    "AssetStatus",
    "normalize_group_key",
    "LendRecord",
    "LendAction",
    "ImportBatch",
    "User",
    "UserRole",
    "TransitionResult",
    "TransitionErrorKind",
    "AssetGroupSummary",
    "OutstandingHolding",
    "EmbeddedImage",
    "ParsedRow",
    "ReconciliationResult",
    "ImportOutcome",
]

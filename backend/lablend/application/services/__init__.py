from .lending_service import LendingService, compute_outstanding_holdings
from .inventory_service import InventoryService, summarize_groups
from .import_service import AssetImportService, RowSubmissionFailed
from .user_service import UserService

__all__ = [
    "LendingService",
    "compute_outstanding_holdings",
    "InventoryService",
    "summarize_groups",
    "AssetImportService",
    "RowSubmissionFailed",
    "UserService",
]

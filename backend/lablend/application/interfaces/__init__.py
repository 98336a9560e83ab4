from .asset_repository import AssetRepository
from .lend_record_repository import LendRecordRepository
from .import_batch_repository import ImportBatchRepository
from .user_repository import UserRepository
from .atomic_store import AtomicStore, LendingTransaction, TransactionAborted
from .image_fetcher import ImageFetcher, FetchedImage

__all__ = [
    "AssetRepository",
    "LendRecordRepository",
    "ImportBatchRepository",
    "UserRepository",
    "AtomicStore",
    "LendingTransaction",
    "TransactionAborted",
    "ImageFetcher",
    "FetchedImage",
]

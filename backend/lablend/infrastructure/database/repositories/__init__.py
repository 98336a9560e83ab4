from .asset_repository import SQLAlchemyAssetRepository
from .lend_record_repository import SQLAlchemyLendRecordRepository
from .import_batch_repository import SQLAlchemyImportBatchRepository
from .user_repository import SQLAlchemyUserRepository
from .atomic_store import SQLAlchemyAtomicStore, SQLAlchemyLendingTransaction

__all__ = [
    "SQLAlchemyAssetRepository",
    "SQLAlchemyLendRecordRepository",
    "SQLAlchemyImportBatchRepository",
    "SQLAlchemyUserRepository",
    "SQLAlchemyAtomicStore",
    "SQLAlchemyLendingTransaction",
]

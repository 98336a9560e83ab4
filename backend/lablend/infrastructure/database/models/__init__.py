from .user import UserModel
from .import_batch import ImportBatchModel
from .asset_unit import AssetUnitModel
from .lend_record import LendRecordModel

__all__ = [
    "UserModel",
    "ImportBatchModel",
    "AssetUnitModel",
    "LendRecordModel",
]

from .base import Base
from .session import (
    engine,
    async_session_factory,
    get_db_session,
    build_engine,
    build_session_factory,
)
from .models import AssetUnitModel, LendRecordModel, ImportBatchModel, UserModel

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "get_db_session",
    "build_engine",
    "build_session_factory",
    "AssetUnitModel",
    "LendRecordModel",
    "ImportBatchModel",
    "UserModel",
]

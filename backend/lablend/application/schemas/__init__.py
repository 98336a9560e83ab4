from .assets import (
    AssetUnitCreate,
    AssetGroupRename,
    AssetUnitResponse,
    AssetGroupResponse,
)
from .lending import (
    TransitionRequest,
    TransitionResponse,
    LendRecordResponse,
    OutstandingHoldingResponse,
)
from .imports import ImportResultResponse, ImportBatchResponse
from .users import UserCreate, UserRoleUpdate, UserActiveUpdate, UserResponse

__all__ = [
    "AssetUnitCreate",
    "AssetGroupRename",
    "AssetUnitResponse",
    "AssetGroupResponse",
    "TransitionRequest",
    "TransitionResponse",
    "LendRecordResponse",
    "OutstandingHoldingResponse",
    "ImportResultResponse",
    "ImportBatchResponse",
    "UserCreate",
    "UserRoleUpdate",
    "UserActiveUpdate",
    "UserResponse",
]

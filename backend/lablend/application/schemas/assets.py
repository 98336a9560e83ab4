"""Pydantic DTOs (Data Transfer Objects) for asset units and groups."""

from datetime import datetime

from pydantic import BaseModel, Field

from lablend.domain.entities import AssetStatus


class AssetUnitCreate(BaseModel):
    """Schema for creating a single unit. ``group_key`` is derived server-side."""

    asset_description: str = Field(
        ..., min_length=1, max_length=500, examples=["Digital oscilloscope 200 MHz"],
    )
    asset_name: str | None = Field(None, max_length=200)
    is_fixed_assets: bool | None = None
    category: str | None = Field(None, max_length=200)
    serial_no: str | None = Field(None, max_length=200)
    location: str | None = Field(None, max_length=200)
    excel_user: str | None = Field(None, max_length=200)
    manufacturer: str | None = Field(None, max_length=200)
    value_cny: float | None = None
    commissioning_time: str | None = None
    metrology_validity_period: str | None = None
    metrology_requirement: str | None = Field(None, max_length=2000)
    metrology_cost: float | None = None
    remarks: str | None = Field(None, max_length=4000)


class AssetGroupRename(BaseModel):
    asset_name: str = Field(..., min_length=1, max_length=200)


class AssetUnitResponse(BaseModel):
    """Schema returned to the client — field names are a stable contract."""

    id: str
    group_key: str
    asset_description: str
    asset_name: str
    status: AssetStatus
    current_holder: str | None
    scrapped: bool
    image_ref: str | None
    import_ref: str | None
    is_fixed_assets: bool | None
    category: str | None
    serial_no: str | None
    location: str | None
    excel_user: str | None
    manufacturer: str | None
    value_cny: float | None
    commissioning_time: str | None
    metrology_validity_period: str | None
    metrology_requirement: str | None
    metrology_cost: float | None
    remarks: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AssetGroupResponse(BaseModel):
    group_key: str
    description: str
    asset_name: str
    image_ref: str | None
    total: int
    available: int
    borrowed: int
    held_by_me: bool = False

    model_config = {"from_attributes": True}

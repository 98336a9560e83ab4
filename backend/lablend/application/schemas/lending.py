"""Pydantic DTOs for lend/return transitions and the lend record log."""

from datetime import datetime

from pydantic import BaseModel, Field

from lablend.domain.entities import LendAction


class TransitionRequest(BaseModel):
    """Body of ``POST /lend-records`` — the acting user comes from the request identity."""

    group_key: str = Field(..., max_length=300, examples=["Digital oscilloscope 200 MHz"])
    action: str = Field(..., examples=["lend", "return"])


class TransitionResponse(BaseModel):
    success: bool
    unit_id: str | None = None
    lend_record_id: str | None = None
    error_kind: str | None = None
    message: str = ""


class LendRecordResponse(BaseModel):
    id: str
    user: str
    group_key: str
    asset_description: str
    asset_unit: str | None
    action: LendAction
    occurred_at: datetime

    model_config = {"from_attributes": True}


class OutstandingHoldingResponse(BaseModel):
    user: str
    group_key: str
    balance: int

    model_config = {"from_attributes": True}

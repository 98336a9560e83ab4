"""Pydantic DTOs for spreadsheet imports."""

from datetime import datetime

from pydantic import BaseModel, Field


class ImportResultResponse(BaseModel):
    ok: bool = True
    sheet_name: str
    parsed_rows: int
    valid_units: int
    embedded_images_found: int
    embedded_images_mapped: int
    import_batch_id: str | None = None
    created_ids: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class ImportBatchResponse(BaseModel):
    id: str
    source_file_ref: str
    created_by: str
    notes: str
    created_at: datetime

    model_config = {"from_attributes": True}

"""Spreadsheet import endpoints."""

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status

from lablend.application.schemas.imports import ImportBatchResponse, ImportResultResponse
from lablend.application.services import AssetImportService
from lablend.config import get_settings
from lablend.domain.entities import User
from lablend.domain.exceptions import InvalidOperationError, MalformedArchiveError
from lablend.infrastructure.dependencies import get_import_service, require_admin

router = APIRouter(prefix="/imports", tags=["Imports"])


@router.post("", response_model=ImportResultResponse, status_code=status.HTTP_201_CREATED)
async def import_workbook(
    file: UploadFile = File(...),
    notes: str = Form(""),
    sheet_name: str | None = Form(None),
    current_user: User = Depends(require_admin),
    service: AssetImportService = Depends(get_import_service),
) -> ImportResultResponse:
    """Import asset units (with their embedded pictures) from an .xlsx upload.

    Rows that fail to persist are reported in ``warnings``; the rest are kept.
    """
    settings = get_settings()
    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds maximum size of {settings.max_upload_size_mb} MB",
        )

    try:
        outcome = await service.import_workbook(
            content,
            file.filename or "import.xlsx",
            created_by=current_user.id,
            notes=notes,
            sheet_name=sheet_name or None,
        )
    except MalformedArchiveError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidOperationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ImportResultResponse.model_validate(outcome, from_attributes=True)


@router.get("/batches", response_model=list[ImportBatchResponse])
async def list_import_batches(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    _: User = Depends(require_admin),
    service: AssetImportService = Depends(get_import_service),
) -> list[ImportBatchResponse]:
    batches = await service.list_batches(skip=skip, limit=limit)
    return [ImportBatchResponse.model_validate(b, from_attributes=True) for b in batches]

"""Asset inventory endpoints — units, groups and workbook export."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from lablend.application.schemas.assets import (
    AssetGroupRename,
    AssetGroupResponse,
    AssetUnitCreate,
    AssetUnitResponse,
)
from lablend.application.services import InventoryService
from lablend.domain.entities import User
from lablend.domain.exceptions import EntityNotFoundError, InvalidOperationError
from lablend.infrastructure.database.session import get_db_session
from lablend.infrastructure.dependencies import (
    get_current_user,
    get_inventory_service,
    require_admin,
)

router = APIRouter(prefix="/assets", tags=["Assets"])

_XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("", response_model=list[AssetUnitResponse])
async def list_units(
    group_key: str | None = Query(None, description="Filter by group key"),
    include_scrapped: bool = Query(False),
    _: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
) -> list[AssetUnitResponse]:
    units = await service.list_units(group_key=group_key, include_scrapped=include_scrapped)
    return [AssetUnitResponse.model_validate(u, from_attributes=True) for u in units]


@router.get("/groups", response_model=list[AssetGroupResponse])
async def list_groups(
    current_user: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
) -> list[AssetGroupResponse]:
    """Group aggregation; ``held_by_me`` is computed for the caller."""
    summaries = await service.summarize_groups()
    held = await service.held_group_keys(current_user.id)
    return [
        AssetGroupResponse.model_validate(s, from_attributes=True).model_copy(
            update={"held_by_me": s.group_key in held}
        )
        for s in summaries
    ]


@router.get("/export")
async def export_units(
    _: User = Depends(require_admin),
    service: InventoryService = Depends(get_inventory_service),
) -> Response:
    """Download every unit as an .xlsx workbook."""
    content = await service.export_workbook()
    return Response(
        content=content,
        media_type=_XLSX_MIME,
        headers={"Content-Disposition": 'attachment; filename="assets.xlsx"'},
    )


@router.get("/{unit_id}", response_model=AssetUnitResponse)
async def get_unit(
    unit_id: str,
    _: User = Depends(get_current_user),
    service: InventoryService = Depends(get_inventory_service),
) -> AssetUnitResponse:
    try:
        unit = await service.get_unit(unit_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return AssetUnitResponse.model_validate(unit, from_attributes=True)


@router.post("", response_model=AssetUnitResponse, status_code=status.HTTP_201_CREATED)
async def create_unit(
    data: AssetUnitCreate,
    _: User = Depends(require_admin),
    service: InventoryService = Depends(get_inventory_service),
) -> AssetUnitResponse:
    """Create one unit; its group key is derived from the description."""
    unit = await service.create_unit(data)
    return AssetUnitResponse.model_validate(unit, from_attributes=True)


@router.delete("/{unit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_unit(
    unit_id: str,
    _: User = Depends(require_admin),
    service: InventoryService = Depends(get_inventory_service),
    session: AsyncSession = Depends(get_db_session),
) -> None:
    """Delete an unheld unit; its picture is removed once the row is gone for good."""
    try:
        unit = await service.delete_unit(unit_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidOperationError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    await session.commit()
    await service.discard_image(unit)


@router.post("/{unit_id}/scrap", response_model=AssetUnitResponse)
async def scrap_unit(
    unit_id: str,
    _: User = Depends(require_admin),
    service: InventoryService = Depends(get_inventory_service),
) -> AssetUnitResponse:
    try:
        unit = await service.scrap_unit(unit_id)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except InvalidOperationError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return AssetUnitResponse.model_validate(unit, from_attributes=True)


@router.put("/groups/{group_key}/name", response_model=list[AssetUnitResponse])
async def rename_group(
    group_key: str,
    data: AssetGroupRename,
    _: User = Depends(require_admin),
    service: InventoryService = Depends(get_inventory_service),
) -> list[AssetUnitResponse]:
    """Set the display name of every unit in a group."""
    try:
        units = await service.rename_group(group_key, data.asset_name)
    except EntityNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return [AssetUnitResponse.model_validate(u, from_attributes=True) for u in units]

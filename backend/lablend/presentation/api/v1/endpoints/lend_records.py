"""Borrow/return transitions and the lend record log."""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from lablend.application.schemas.lending import (
    LendRecordResponse,
    OutstandingHoldingResponse,
    TransitionRequest,
    TransitionResponse,
)
from lablend.application.services import LendingService
from lablend.domain.entities import TransitionErrorKind, TransitionResult, User
from lablend.infrastructure.dependencies import (
    get_current_user,
    get_lending_service,
    get_request_user,
)

router = APIRouter(prefix="/lend-records", tags=["Lending"])

_FAILURE_STATUS = {
    TransitionErrorKind.INVALID_INPUT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    TransitionErrorKind.NO_AVAILABLE_UNIT: status.HTTP_409_CONFLICT,
    TransitionErrorKind.NO_HELD_UNIT: status.HTTP_409_CONFLICT,
}


def _to_response(result: TransitionResult) -> TransitionResponse:
    return TransitionResponse(
        success=result.success,
        unit_id=result.unit_id,
        lend_record_id=result.lend_record_id,
        error_kind=result.error_kind.value if result.error_kind else None,
        message=result.message,
    )


@router.post(
    "",
    response_model=TransitionResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": TransitionResponse, "description": "No available / held unit"},
        422: {"model": TransitionResponse, "description": "Invalid input"},
    },
)
async def create_transition(
    data: TransitionRequest,
    current_user: User = Depends(get_request_user),
    service: LendingService = Depends(get_lending_service),
):
    """Borrow (``lend``) or return one unit of a group for the calling user.

    Suspended users reach the engine too: it refuses their borrows but lets
    them return what they still hold.
    """
    result = await service.transition(data.group_key, current_user.id, data.action)
    body = _to_response(result)
    if result.success:
        return body
    return JSONResponse(
        status_code=_FAILURE_STATUS[result.error_kind],
        content=body.model_dump(),
    )


@router.get("", response_model=list[LendRecordResponse])
async def list_lend_records(
    user_id: str | None = Query(None, description="Filter by user (admins only)"),
    current_user: User = Depends(get_current_user),
    service: LendingService = Depends(get_lending_service),
) -> list[LendRecordResponse]:
    """Records newest first. Non-admins only ever see their own."""
    scope = user_id if current_user.is_admin else current_user.id
    records = await service.list_records(scope)
    return [LendRecordResponse.model_validate(r, from_attributes=True) for r in records]


@router.get("/outstanding", response_model=list[OutstandingHoldingResponse])
async def list_outstanding_holdings(
    user_id: str | None = Query(None, description="Filter by user (admins only)"),
    current_user: User = Depends(get_current_user),
    service: LendingService = Depends(get_lending_service),
) -> list[OutstandingHoldingResponse]:
    """Per (user, group) balances derived from the record log."""
    scope = user_id if current_user.is_admin else current_user.id
    holdings = await service.outstanding_holdings(scope)
    return [OutstandingHoldingResponse.model_validate(h, from_attributes=True) for h in holdings]

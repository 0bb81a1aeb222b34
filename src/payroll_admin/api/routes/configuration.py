"""Service bracket and absence threshold endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Query, status

from payroll_admin.api.dependencies import AdminOnly, AnyRole, DbSession
from payroll_admin.api.schemas import (
    AbsenceThresholdRequest,
    AbsenceThresholdResponse,
    ErrorResponse,
    ServiceBracketRequest,
    ServiceBracketResponse,
)
from payroll_admin.services.range_config_service import (
    AbsenceThresholdService,
    ServiceBracketService,
)

brackets_router = APIRouter(prefix="/service-brackets", tags=["service-brackets"])
thresholds_router = APIRouter(prefix="/absence-thresholds", tags=["absence-thresholds"])


# ============================================================================
# Service brackets
# ============================================================================


@brackets_router.get("", response_model=list[ServiceBracketResponse])
async def list_brackets(
    db: DbSession,
    _: AnyRole,
    active_only: bool = False,
) -> list[ServiceBracketResponse]:
    brackets = await ServiceBracketService(db).list_brackets(active_only=active_only)
    return [ServiceBracketResponse.model_validate(b) for b in brackets]


@brackets_router.get(
    "/match",
    response_model=ServiceBracketResponse | None,
)
async def match_bracket(
    db: DbSession,
    _: AnyRole,
    years: Annotated[int, Query(ge=0)],
) -> ServiceBracketResponse | None:
    """Active bracket covering ``years``, or null."""
    bracket = await ServiceBracketService(db).find_bracket_for_years(years)
    return ServiceBracketResponse.model_validate(bracket) if bracket else None


@brackets_router.get(
    "/{bracket_id}",
    response_model=ServiceBracketResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_bracket(db: DbSession, _: AnyRole, bracket_id: UUID) -> ServiceBracketResponse:
    bracket = await ServiceBracketService(db).get_bracket(bracket_id)
    return ServiceBracketResponse.model_validate(bracket)


@brackets_router.post(
    "",
    response_model=ServiceBracketResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def create_bracket(
    db: DbSession,
    _: AdminOnly,
    payload: ServiceBracketRequest,
) -> ServiceBracketResponse:
    """Create a bracket; overlapping an active bracket is rejected with 422."""
    bracket = await ServiceBracketService(db).create_bracket(**payload.model_dump())
    await db.commit()
    return ServiceBracketResponse.model_validate(bracket)


@brackets_router.put(
    "/{bracket_id}",
    response_model=ServiceBracketResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def update_bracket(
    db: DbSession,
    _: AdminOnly,
    bracket_id: UUID,
    payload: ServiceBracketRequest,
) -> ServiceBracketResponse:
    bracket = await ServiceBracketService(db).update_bracket(bracket_id, **payload.model_dump())
    await db.commit()
    return ServiceBracketResponse.model_validate(bracket)


@brackets_router.delete(
    "/{bracket_id}",
    response_model=ServiceBracketResponse,
    responses={404: {"model": ErrorResponse}},
)
async def deactivate_bracket(
    db: DbSession,
    _: AdminOnly,
    bracket_id: UUID,
) -> ServiceBracketResponse:
    """Deactivate a bracket. Rows are never physically removed."""
    bracket = await ServiceBracketService(db).deactivate_bracket(bracket_id)
    await db.commit()
    return ServiceBracketResponse.model_validate(bracket)


# ============================================================================
# Absence thresholds
# ============================================================================


@thresholds_router.get("", response_model=list[AbsenceThresholdResponse])
async def list_thresholds(
    db: DbSession,
    _: AnyRole,
    active_only: bool = False,
) -> list[AbsenceThresholdResponse]:
    thresholds = await AbsenceThresholdService(db).list_thresholds(active_only=active_only)
    return [AbsenceThresholdResponse.model_validate(t) for t in thresholds]


@thresholds_router.get(
    "/match",
    response_model=AbsenceThresholdResponse | None,
)
async def match_threshold(
    db: DbSession,
    _: AnyRole,
    absence_days: Annotated[int, Query(ge=0, le=31)],
) -> AbsenceThresholdResponse | None:
    threshold = await AbsenceThresholdService(db).find_threshold_for_days(absence_days)
    return AbsenceThresholdResponse.model_validate(threshold) if threshold else None


@thresholds_router.get(
    "/{threshold_id}",
    response_model=AbsenceThresholdResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_threshold(
    db: DbSession, _: AnyRole, threshold_id: UUID
) -> AbsenceThresholdResponse:
    threshold = await AbsenceThresholdService(db).get_threshold(threshold_id)
    return AbsenceThresholdResponse.model_validate(threshold)


@thresholds_router.post(
    "",
    response_model=AbsenceThresholdResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_threshold(
    db: DbSession,
    _: AdminOnly,
    payload: AbsenceThresholdRequest,
) -> AbsenceThresholdResponse:
    threshold = await AbsenceThresholdService(db).create_threshold(**payload.model_dump())
    await db.commit()
    return AbsenceThresholdResponse.model_validate(threshold)


@thresholds_router.put(
    "/{threshold_id}",
    response_model=AbsenceThresholdResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def update_threshold(
    db: DbSession,
    _: AdminOnly,
    threshold_id: UUID,
    payload: AbsenceThresholdRequest,
) -> AbsenceThresholdResponse:
    threshold = await AbsenceThresholdService(db).update_threshold(
        threshold_id, **payload.model_dump()
    )
    await db.commit()
    return AbsenceThresholdResponse.model_validate(threshold)


@thresholds_router.delete(
    "/{threshold_id}",
    response_model=AbsenceThresholdResponse,
    responses={404: {"model": ErrorResponse}},
)
async def deactivate_threshold(
    db: DbSession,
    _: AdminOnly,
    threshold_id: UUID,
) -> AbsenceThresholdResponse:
    threshold = await AbsenceThresholdService(db).deactivate_threshold(threshold_id)
    await db.commit()
    return AbsenceThresholdResponse.model_validate(threshold)

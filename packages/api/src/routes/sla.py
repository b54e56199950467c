# This project was developed with assistance from AI tools.
"""SLA milestone and countdown routes."""

from datetime import UTC, datetime

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.sla import CaseSlaResponse, Countdown, SlaOverviewResponse
from ..services import sla as sla_service

router = APIRouter()


@router.get("/cases/{case_id}", response_model=CaseSlaResponse)
async def case_sla(
    case_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CaseSlaResponse:
    """Milestones and next-deadline countdown for one visible case."""
    return await sla_service.case_sla(session, user, case_id)


@router.get(
    "/overview",
    response_model=SlaOverviewResponse,
    dependencies=[
        Depends(require_roles(UserRole.OPS, UserRole.RMT, UserRole.FOUNDER, UserRole.ADMIN))
    ],
)
async def sla_overview(session: AsyncSession = Depends(get_db)) -> SlaOverviewResponse:
    """Every open case's SLA state, most urgent first."""
    items = await sla_service.sla_overview(session)
    return SlaOverviewResponse(count=len(items), data=items)


@router.get("/countdown", response_model=Countdown)
async def countdown(
    _user: CurrentUser,
    target: datetime = Query(description="Deadline (ISO 8601). Naive values are read as UTC."),
) -> Countdown:
    return sla_service.compute_countdown(datetime.now(UTC), target)

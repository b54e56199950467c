# This project was developed with assistance from AI tools.
"""Careers page submission and admin review routes."""

from db import get_db
from db.enums import CareerApplicationStatus, UserRole
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import PagePagination
from ..schemas.career import (
    CareerApplicationCreate,
    CareerApplicationListResponse,
    CareerApplicationResponse,
    CareerApplicationStatsResponse,
    CareerApplicationSubmitted,
    CareerApplicationUpdate,
    StatusCount,
)
from ..services import career as career_service
from ..services.audit import total_pages

router = APIRouter()

_REVIEWERS = Depends(require_roles(UserRole.ADMIN, UserRole.FOUNDER))


@router.post(
    "/apply",
    response_model=CareerApplicationSubmitted,
    status_code=status.HTTP_201_CREATED,
)
async def apply(
    body: CareerApplicationCreate,
    session: AsyncSession = Depends(get_db),
) -> CareerApplicationSubmitted:
    """Public job application. No authentication."""
    application = await career_service.submit_application(session, body)
    return CareerApplicationSubmitted(id=application.id)


@router.get(
    "/applications",
    response_model=CareerApplicationListResponse,
    dependencies=[_REVIEWERS],
)
async def list_applications(
    session: AsyncSession = Depends(get_db),
    status: CareerApplicationStatus | None = None,
    role: str | None = None,
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=200),
) -> CareerApplicationListResponse:
    applications, total = await career_service.list_applications(
        session, status=status, role=role, search=search, page=page, limit=limit
    )
    return CareerApplicationListResponse(
        applications=[CareerApplicationResponse.model_validate(a) for a in applications],
        pagination=PagePagination(
            page=page,
            limit=limit,
            total=total,
            pages=total_pages(total, limit),
        ),
    )


@router.get(
    "/applications/stats",
    response_model=CareerApplicationStatsResponse,
    dependencies=[_REVIEWERS],
)
async def application_stats(
    session: AsyncSession = Depends(get_db),
) -> CareerApplicationStatsResponse:
    """Application counts per status."""
    counts, total = await career_service.application_stats(session)
    return CareerApplicationStatsResponse(
        stats=[StatusCount(status=s, count=n) for s, n in counts.items()],
        total=total,
    )


@router.get(
    "/applications/{application_id}",
    response_model=CareerApplicationResponse,
    dependencies=[_REVIEWERS],
)
async def get_application(
    application_id: int,
    session: AsyncSession = Depends(get_db),
) -> CareerApplicationResponse:
    application = await career_service.get_application(session, application_id)
    return CareerApplicationResponse.model_validate(application)


@router.patch(
    "/applications/{application_id}",
    response_model=CareerApplicationResponse,
    dependencies=[_REVIEWERS],
)
async def update_application(
    application_id: int,
    body: CareerApplicationUpdate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CareerApplicationResponse:
    """Change review status and/or admin notes."""
    application = await career_service.update_application(
        session, user, application_id, **body.model_dump(exclude_unset=True)
    )
    return CareerApplicationResponse.model_validate(application)


@router.delete(
    "/applications/{application_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[_REVIEWERS],
)
async def delete_application(
    application_id: int,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> None:
    await career_service.delete_application(session, user, application_id)

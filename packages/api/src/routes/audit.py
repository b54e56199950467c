# This project was developed with assistance from AI tools.
"""Audit trail query, statistics and export endpoints."""

from datetime import datetime

from db import get_db
from db.enums import AuditAction, AuditCategory, UserRole
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import PagePagination
from ..schemas.audit import (
    AuditLogItem,
    AuditLogListResponse,
    AuditStatsResponse,
)
from ..services import audit as audit_service
from ..services.audit import AuditFilters

router = APIRouter(
    dependencies=[Depends(require_roles(UserRole.ADMIN, UserRole.FOUNDER, UserRole.OPS))]
)


def _list_response(logs, total: int, page: int, limit: int) -> AuditLogListResponse:
    return AuditLogListResponse(
        logs=[AuditLogItem.model_validate(log) for log in logs],
        pagination=PagePagination(
            page=page,
            limit=limit,
            total=total,
            pages=audit_service.total_pages(total, limit),
        ),
    )


@router.get("/", response_model=AuditLogListResponse)
async def search_audit_logs(
    session: AsyncSession = Depends(get_db),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=500),
    user_id: str | None = None,
    action: AuditAction | None = None,
    category: AuditCategory | None = None,
    entity_type: str | None = None,
    entity_id: str | None = None,
    success: bool | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    search: str | None = Query(
        default=None, description="Matches description, user name, entity ref"
    ),
) -> AuditLogListResponse:
    filters = AuditFilters(
        user_id=user_id,
        action=action,
        category=category,
        entity_type=entity_type,
        entity_id=entity_id,
        success=success,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )
    logs, total = await audit_service.search_audit_logs(session, filters, page=page, limit=limit)
    return _list_response(logs, total, page, limit)


@router.get("/stats", response_model=AuditStatsResponse)
async def audit_stats(
    session: AsyncSession = Depends(get_db),
    days: int = Query(default=7, ge=1, le=365),
) -> AuditStatsResponse:
    """Activity totals for the trailing ``days`` window."""
    stats = await audit_service.audit_stats(session, days=days)
    return AuditStatsResponse(
        days=days,
        total_logs=stats["total_logs"],
        by_category=stats["by_category"],
        by_action=stats["by_action"],
        by_user=stats["by_user"],
        recent_failures=[AuditLogItem.model_validate(log) for log in stats["recent_failures"]],
        daily_activity=stats["daily_activity"],
    )


@router.get("/export")
async def export_audit_logs(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    fmt: str = Query(default="json", alias="format", pattern="^(json|csv)$"),
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    category: AuditCategory | None = None,
) -> Response:
    """Download audit entries as CSV or JSON, newest first."""
    content, media_type = await audit_service.export_audit_logs(
        session,
        fmt=fmt,
        start_date=start_date,
        end_date=end_date,
        category=category,
    )

    await audit_service.record(
        session,
        action=AuditAction.OTHER,
        category=AuditCategory.ADMIN,
        description=f"Exported audit log as {fmt}",
        user=user,
        details={
            "format": fmt,
            "start_date": start_date.isoformat() if start_date else None,
            "end_date": end_date.isoformat() if end_date else None,
            "category": category.value if category else None,
        },
    )

    stamp = datetime.now().strftime("%Y-%m-%d")
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="audit-logs-{stamp}.{fmt}"'},
    )


@router.get("/entity/{entity_type}/{entity_id}", response_model=AuditLogListResponse)
async def audit_logs_for_entity(
    entity_type: str,
    entity_id: str,
    session: AsyncSession = Depends(get_db),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=500),
) -> AuditLogListResponse:
    logs, total = await audit_service.audit_logs_for_entity(
        session, entity_type, entity_id, page=page, limit=limit
    )
    return _list_response(logs, total, page, limit)


@router.get("/user/{user_id}/timeline", response_model=AuditLogListResponse)
async def user_activity(
    user_id: str,
    session: AsyncSession = Depends(get_db),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=500),
) -> AuditLogListResponse:
    """Everything one user did, newest first."""
    logs, total = await audit_service.user_activity(session, user_id, page=page, limit=limit)
    return _list_response(logs, total, page, limit)


@router.get("/{log_id}", response_model=AuditLogItem)
async def get_audit_log(
    log_id: int,
    session: AsyncSession = Depends(get_db),
) -> AuditLogItem:
    log = await audit_service.get_audit_log(session, log_id)
    return AuditLogItem.model_validate(log)

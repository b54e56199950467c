# This project was developed with assistance from AI tools.
"""Audit log writer and query service.

``record`` is best-effort: it commits the entry in its own transaction after
the business operation has committed, and on any failure it rolls back only
the audit insert, logs the error and returns None. Callers can observe the
failure through the return value but are never forced to handle it.
"""

import csv
import io
import json
import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from db import AuditLog
from db.enums import AuditAction, AuditCategory
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import NotFoundError
from ..middleware.request_context import get_request_context
from ..schemas.auth import UserContext
from .search import icontains

logger = logging.getLogger(__name__)

CSV_HEADER = ["Timestamp", "User", "Role", "Action", "Category", "Description", "Entity", "Success"]


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------


async def record(
    session: AsyncSession,
    *,
    action: AuditAction,
    category: AuditCategory,
    description: str,
    user: UserContext | None = None,
    entity_type: str | None = None,
    entity_id: str | None = None,
    entity_ref: str | None = None,
    details: dict | None = None,
    previous_value=None,
    new_value=None,
    success: bool = True,
    error_message: str | None = None,
) -> int | None:
    """Append one audit entry. Never raises.

    Must be called after the triggering business operation has committed,
    so a rollback here cannot undo business state.

    Returns:
        The new entry's id, or None if the write failed.
    """
    ctx = get_request_context()
    entry = AuditLog(
        user_id=user.user_id if user else None,
        user_name=user.name if user else None,
        user_email=user.email if user else None,
        user_role=user.role.value if user else "system",
        action=action,
        category=category,
        entity_type=entity_type,
        entity_id=entity_id,
        entity_ref=entity_ref,
        description=description,
        details=details,
        previous_value=previous_value,
        new_value=new_value,
        ip_address=ctx.ip_address if ctx else None,
        user_agent=ctx.user_agent if ctx else None,
        request_path=ctx.path if ctx else None,
        request_method=ctx.method if ctx else None,
        request_id=ctx.request_id if ctx else None,
        success=success,
        error_message=error_message,
    )
    try:
        session.add(entry)
        await session.flush()
        entry_id = entry.id
        await session.commit()
        return entry_id
    except Exception:
        logger.exception(
            "Audit log write failed: action=%s entity=%s/%s",
            action.value,
            entity_type,
            entity_id,
        )
        try:
            await session.rollback()
        except Exception:
            logger.exception("Rollback after failed audit write also failed")
        return None


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


@dataclass
class AuditFilters:
    user_id: str | None = None
    action: AuditAction | None = None
    category: AuditCategory | None = None
    entity_type: str | None = None
    entity_id: str | None = None
    success: bool | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    search: str | None = None


def _apply_filters(stmt, filters: AuditFilters):
    if filters.user_id:
        stmt = stmt.where(AuditLog.user_id == filters.user_id)
    if filters.action:
        stmt = stmt.where(AuditLog.action == filters.action)
    if filters.category:
        stmt = stmt.where(AuditLog.category == filters.category)
    if filters.entity_type:
        stmt = stmt.where(AuditLog.entity_type == filters.entity_type)
    if filters.entity_id:
        stmt = stmt.where(AuditLog.entity_id == filters.entity_id)
    if filters.success is not None:
        stmt = stmt.where(AuditLog.success == filters.success)
    if filters.start_date:
        stmt = stmt.where(AuditLog.created_at >= filters.start_date)
    if filters.end_date:
        stmt = stmt.where(AuditLog.created_at <= filters.end_date)
    if filters.search:
        stmt = stmt.where(
            or_(
                icontains(AuditLog.description, filters.search),
                icontains(AuditLog.user_name, filters.search),
                icontains(AuditLog.entity_ref, filters.search),
            )
        )
    return stmt


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


async def _paged(session: AsyncSession, filters: AuditFilters, page: int, limit: int):
    count_stmt = _apply_filters(select(func.count(AuditLog.id)), filters)
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = (
        _apply_filters(select(AuditLog), filters)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    logs = list((await session.execute(stmt)).scalars().all())
    return logs, total


async def search_audit_logs(
    session: AsyncSession,
    filters: AuditFilters | None = None,
    *,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[AuditLog], int]:
    """Filtered, paginated audit entries, newest first."""
    return await _paged(session, filters or AuditFilters(), page, limit)


async def get_audit_log(session: AsyncSession, log_id: int) -> AuditLog:
    log = await session.get(AuditLog, log_id)
    if log is None:
        raise NotFoundError("Audit log not found")
    return log


async def audit_logs_for_entity(
    session: AsyncSession,
    entity_type: str,
    entity_id: str,
    *,
    page: int = 1,
    limit: int = 20,
) -> tuple[list[AuditLog], int]:
    return await _paged(
        session, AuditFilters(entity_type=entity_type, entity_id=entity_id), page, limit
    )


async def user_activity(
    session: AsyncSession,
    user_id: str,
    *,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[AuditLog], int]:
    return await _paged(session, AuditFilters(user_id=user_id), page, limit)


async def audit_stats(
    session: AsyncSession,
    *,
    days: int = 7,
    now: datetime | None = None,
) -> dict:
    """Activity totals over the trailing ``days`` window.

    Returns a dict with ``total_logs``, ``by_category``, ``by_action`` (top 10),
    ``by_user`` (top 10), ``recent_failures`` (10 newest) and
    ``daily_activity`` (one bucket per calendar day, ascending).
    """
    since = (now or datetime.now(UTC)) - timedelta(days=days)
    window = AuditLog.created_at >= since

    total = (
        await session.execute(select(func.count(AuditLog.id)).where(window))
    ).scalar() or 0

    count_col = func.count(AuditLog.id).label("count")

    by_category = (
        await session.execute(
            select(AuditLog.category, count_col)
            .where(window)
            .group_by(AuditLog.category)
            .order_by(count_col.desc())
        )
    ).all()

    by_action = (
        await session.execute(
            select(AuditLog.action, count_col)
            .where(window)
            .group_by(AuditLog.action)
            .order_by(count_col.desc())
            .limit(10)
        )
    ).all()

    by_user = (
        await session.execute(
            select(AuditLog.user_id, AuditLog.user_name, count_col)
            .where(window)
            .group_by(AuditLog.user_id, AuditLog.user_name)
            .order_by(count_col.desc())
            .limit(10)
        )
    ).all()

    recent_failures = (
        await session.execute(
            select(AuditLog)
            .where(window, AuditLog.success.is_(False))
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .limit(10)
        )
    ).scalars().all()

    day_col = func.date(AuditLog.created_at).label("day")
    daily = (
        await session.execute(
            select(day_col, func.count(AuditLog.id))
            .where(window)
            .group_by(day_col)
            .order_by(day_col)
        )
    ).all()

    return {
        "total_logs": total,
        "by_category": [{"category": c.value, "count": n} for c, n in by_category],
        "by_action": [{"action": a.value, "count": n} for a, n in by_action],
        "by_user": [
            {"user_id": uid, "user_name": name, "count": n} for uid, name, n in by_user
        ],
        "recent_failures": list(recent_failures),
        "daily_activity": [{"date": str(d), "count": n} for d, n in daily],
    }


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def _csv_row(log: AuditLog) -> list[str]:
    return [
        log.created_at.isoformat() if log.created_at else "",
        log.user_name or log.user_id or "System",
        log.user_role or "",
        log.action.value,
        log.category.value,
        log.description or "",
        log.entity_ref or log.entity_id or "",
        "true" if log.success else "false",
    ]


def _json_row(log: AuditLog) -> dict:
    return {
        "id": log.id,
        "created_at": log.created_at.isoformat() if log.created_at else None,
        "user_id": log.user_id,
        "user_name": log.user_name,
        "user_role": log.user_role,
        "action": log.action.value,
        "category": log.category.value,
        "entity_type": log.entity_type,
        "entity_id": log.entity_id,
        "entity_ref": log.entity_ref,
        "description": log.description,
        "details": log.details,
        "previous_value": log.previous_value,
        "new_value": log.new_value,
        "success": log.success,
        "error_message": log.error_message,
    }


async def export_audit_logs(
    session: AsyncSession,
    *,
    fmt: str = "json",
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    category: AuditCategory | None = None,
) -> tuple[str, str]:
    """Render audit entries as CSV or JSON, newest first.

    Returns:
        (content, media_type)
    """
    filters = AuditFilters(start_date=start_date, end_date=end_date, category=category)
    stmt = (
        _apply_filters(select(AuditLog), filters)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(settings.AUDIT_EXPORT_LIMIT)
    )
    logs = (await session.execute(stmt)).scalars().all()

    if fmt == "csv":
        buf = io.StringIO()
        buf.write(",".join(CSV_HEADER) + "\n")
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
        for log in logs:
            writer.writerow(_csv_row(log))
        return buf.getvalue(), "text/csv"

    return json.dumps([_json_row(log) for log in logs], default=str), "application/json"

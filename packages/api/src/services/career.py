# This project was developed with assistance from AI tools.
"""Career application store.

Submissions are public; everything else is an admin/founder review workflow.
"""

import logging
from datetime import UTC, datetime

from db import CareerApplication
from db.enums import AuditAction, AuditCategory, AuditEntityType, CareerApplicationStatus
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError
from ..schemas.auth import UserContext
from ..schemas.career import CareerApplicationCreate
from . import audit
from .search import icontains

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {"status", "admin_notes"}


async def submit_application(
    session: AsyncSession,
    payload: CareerApplicationCreate | dict,
) -> CareerApplication:
    """Store a public job application with status ``new``."""
    if not isinstance(payload, CareerApplicationCreate):
        try:
            payload = CareerApplicationCreate.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError(
                "name, email, phone, role and experience are required."
            ) from exc

    application = CareerApplication(
        **payload.model_dump(),
        status=CareerApplicationStatus.NEW,
    )
    session.add(application)
    await session.commit()
    logger.info("Career application %s received for role '%s'", application.id, application.role)
    return application


async def list_applications(
    session: AsyncSession,
    *,
    status: CareerApplicationStatus | None = None,
    role: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[CareerApplication], int]:
    """Newest-first applications, optionally filtered.

    Args:
        role: Case-insensitive substring match on the role applied for.
        search: Case-insensitive substring match across name, email, role and phone.
    """
    filters = []
    if status is not None:
        filters.append(CareerApplication.status == status)
    if role:
        filters.append(icontains(CareerApplication.role, role))
    if search:
        filters.append(
            or_(
                icontains(CareerApplication.name, search),
                icontains(CareerApplication.email, search),
                icontains(CareerApplication.role, search),
                icontains(CareerApplication.phone, search),
            )
        )

    total = (
        await session.execute(select(func.count(CareerApplication.id)).where(*filters))
    ).scalar() or 0

    stmt = (
        select(CareerApplication)
        .where(*filters)
        .order_by(CareerApplication.created_at.desc(), CareerApplication.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    applications = list((await session.execute(stmt)).scalars().all())
    return applications, total


async def application_stats(
    session: AsyncSession,
) -> tuple[dict[CareerApplicationStatus, int], int]:
    """Counts per status (statuses with no applications omitted) and the grand total."""
    rows = (
        await session.execute(
            select(CareerApplication.status, func.count(CareerApplication.id)).group_by(
                CareerApplication.status
            )
        )
    ).all()
    counts = {status: count for status, count in rows}
    return counts, sum(counts.values())


async def get_application(session: AsyncSession, application_id: int) -> CareerApplication:
    application = await session.get(CareerApplication, application_id)
    if application is None:
        raise NotFoundError("Application not found")
    return application


async def update_application(
    session: AsyncSession,
    reviewer: UserContext,
    application_id: int,
    **updates,
) -> CareerApplication:
    """Apply status / admin-notes changes.

    A status change stamps ``reviewed_by`` and ``reviewed_at``. Unknown keys
    are ignored.
    """
    application = await get_application(session, application_id)
    previous_status = application.status

    new_status = updates.get("status")
    if new_status is not None:
        application.status = CareerApplicationStatus(new_status)
        application.reviewed_by = reviewer.user_id
        application.reviewed_at = datetime.now(UTC)
    if "admin_notes" in updates:
        application.admin_notes = updates["admin_notes"]

    ignored = set(updates) - _UPDATABLE_FIELDS
    if ignored:
        logger.debug("Ignoring non-updatable career application fields: %s", sorted(ignored))

    await session.commit()
    app_id, app_role, app_name = application.id, application.role, application.name
    current_status = application.status

    await audit.record(
        session,
        action=AuditAction.USER_UPDATE,
        category=AuditCategory.ADMIN,
        description=f"Reviewed career application from {app_name} for {app_role}",
        user=reviewer,
        entity_type=AuditEntityType.CAREER_APPLICATION.value,
        entity_id=str(app_id),
        entity_ref=app_name,
        previous_value={"status": previous_status.value},
        new_value={"status": current_status.value},
    )
    return await get_application(session, app_id)


async def delete_application(
    session: AsyncSession,
    reviewer: UserContext,
    application_id: int,
) -> None:
    application = await get_application(session, application_id)
    app_id, app_name = application.id, application.name
    await session.delete(application)
    await session.commit()

    await audit.record(
        session,
        action=AuditAction.USER_DELETE,
        category=AuditCategory.ADMIN,
        description=f"Deleted career application from {app_name}",
        user=reviewer,
        entity_type=AuditEntityType.CAREER_APPLICATION.value,
        entity_id=str(app_id),
        entity_ref=app_name,
    )

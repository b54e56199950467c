# This project was developed with assistance from AI tools.
"""Case (CWCRF) service with role-based data scope filtering.

Every status change goes through ``apply_status_change``: it checks the
transition table, then issues a conditional UPDATE matching the status and
version the caller read. A zero row-count means another request changed the
case first, and the caller gets ``StaleCaseError`` instead of a duplicate
timeline entry. The audit entry is written only after the business commit.
"""

import logging
from datetime import UTC, datetime

from db import Case, CaseNumberSequence, CaseTimelineEntry
from db.enums import AuditAction, AuditCategory, AuditEntityType, CaseStatus
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.config import settings
from ..core.exceptions import NotFoundError, StaleCaseError, ValidationError
from ..schemas.auth import UserContext
from ..schemas.case import CaseCreate
from . import audit
from .lifecycle import check_transition
from .scope import apply_data_scope

logger = logging.getLogger(__name__)


def _case_query():
    return select(Case).options(selectinload(Case.timeline), selectinload(Case.quotations))


async def _load_case(session: AsyncSession, case_id: str) -> Case:
    """Re-read a case after a core UPDATE, replacing stale identity-map state."""
    stmt = _case_query().where(Case.id == case_id).execution_options(populate_existing=True)
    case = (await session.execute(stmt)).scalar_one_or_none()
    if case is None:
        raise NotFoundError("Case not found")
    return case


async def get_case(session: AsyncSession, user: UserContext, case_id: str) -> Case:
    """Return a single case if visible to the current user.

    Out-of-scope cases raise NotFoundError, the same as missing ones, so the
    existence of other parties' cases is not leaked.
    """
    stmt = _case_query().where(Case.id == case_id).execution_options(populate_existing=True)
    stmt = apply_data_scope(stmt, user.data_scope)
    case = (await session.execute(stmt)).scalar_one_or_none()
    if case is None:
        raise NotFoundError("Case not found")
    return case


async def list_cases(
    session: AsyncSession,
    user: UserContext,
    *,
    status: CaseStatus | None = None,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[Case], int]:
    """Cases visible to the current user, newest first."""
    count_stmt = apply_data_scope(select(func.count(Case.id)), user.data_scope)
    stmt = apply_data_scope(select(Case), user.data_scope)
    if status is not None:
        count_stmt = count_stmt.where(Case.status == status)
        stmt = stmt.where(Case.status == status)

    total = (await session.execute(count_stmt)).scalar() or 0
    stmt = (
        stmt.order_by(Case.created_at.desc(), Case.case_number.desc()).offset(offset).limit(limit)
    )
    cases = list((await session.execute(stmt)).scalars().all())
    return cases, total


async def list_cases_for_subcontractor(
    session: AsyncSession,
    subcontractor_id: str,
) -> list[Case]:
    """All cases owned by a sub-contractor, newest first."""
    stmt = (
        select(Case)
        .where(Case.subcontractor_id == subcontractor_id)
        .order_by(Case.created_at.desc(), Case.case_number.desc())
    )
    return list((await session.execute(stmt)).scalars().all())


async def _allocate_case_number(session: AsyncSession) -> str:
    seq = CaseNumberSequence()
    session.add(seq)
    await session.flush()
    return f"{settings.CASE_NUMBER_PREFIX}-{seq.id:06d}"


async def create_case(
    session: AsyncSession,
    user: UserContext,
    payload: CaseCreate | dict,
) -> Case:
    """Create a case in SUBMITTED with its first timeline entry.

    Raises:
        ValidationError: sub-records missing or malformed, or no owning
            sub-contractor could be determined.
    """
    if not isinstance(payload, CaseCreate):
        try:
            payload = CaseCreate.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError(_first_error(exc)) from exc

    if user.data_scope.subcontractor_id is not None:
        subcontractor_id = user.org_id
    else:
        subcontractor_id = payload.subcontractor_id
    if not subcontractor_id:
        raise ValidationError("subcontractor_id is required")

    case = Case(
        case_number=await _allocate_case_number(session),
        subcontractor_id=subcontractor_id,
        created_by=user.user_id,
        buyer_id=payload.buyer_details.buyer_id,
        status=CaseStatus.SUBMITTED,
        version=1,
        buyer_details=payload.buyer_details.model_dump(mode="json"),
        invoice_details=payload.invoice_details.model_dump(mode="json"),
        cwc_request=payload.cwc_request.model_dump(mode="json"),
        interest_preference=payload.interest_preference.model_dump(mode="json"),
    )
    session.add(case)
    await session.flush()
    session.add(
        CaseTimelineEntry(
            case_id=case.id,
            sequence=1,
            status=CaseStatus.SUBMITTED,
            actor_id=user.user_id,
            actor_role=user.role.value,
            notes="Case submitted",
        )
    )
    case_id, case_number = case.id, case.case_number  # capture before commit/rollback can expire
    await session.commit()
    logger.info("Case %s created by %s", case_number, user.user_id)

    await audit.record(
        session,
        action=AuditAction.CASE_CREATE,
        category=AuditCategory.CASE,
        description=f"Created case {case_number}",
        user=user,
        entity_type=AuditEntityType.CASE.value,
        entity_id=case_id,
        entity_ref=case_number,
        new_value={"status": CaseStatus.SUBMITTED.value},
    )
    return await _load_case(session, case_id)


def _first_error(exc: PydanticValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {err.get('msg')}" if loc else str(err.get("msg"))


# ---------------------------------------------------------------------------
# Status changes
# ---------------------------------------------------------------------------


async def _compare_and_set(session: AsyncSession, case: Case, **values) -> None:
    """Conditional UPDATE on (id, status, version). Raises StaleCaseError on a lost race."""
    stmt = (
        update(Case)
        .where(
            Case.id == case.id,
            Case.status == case.status,
            Case.version == case.version,
        )
        .values(version=Case.version + 1, updated_at=datetime.now(UTC), **values)
        .execution_options(synchronize_session=False)
    )
    case_number, expected_status, expected_version = case.case_number, case.status, case.version
    result = await session.execute(stmt)
    if result.rowcount != 1:
        await session.rollback()
        logger.warning(
            "Stale write rejected for case %s (expected status=%s version=%s)",
            case_number,
            expected_status.value,
            expected_version,
        )
        raise StaleCaseError(
            f"Case {case_number} was modified by another request. Reload and retry."
        )


async def _append_timeline(
    session: AsyncSession,
    case_id: str,
    status: CaseStatus,
    user: UserContext,
    notes: str | None,
) -> None:
    last = (
        await session.execute(
            select(func.max(CaseTimelineEntry.sequence)).where(CaseTimelineEntry.case_id == case_id)
        )
    ).scalar() or 0
    session.add(
        CaseTimelineEntry(
            case_id=case_id,
            sequence=last + 1,
            status=status,
            actor_id=user.user_id,
            actor_role=user.role.value,
            notes=notes,
        )
    )


async def apply_status_change(
    session: AsyncSession,
    case: Case,
    new_status: CaseStatus,
    user: UserContext,
    *,
    notes: str | None = None,
    system: bool = False,
    **values,
) -> None:
    """Validate and stage one status change plus its timeline entry.

    Does not commit. ``system=True`` is reserved for the quotation
    operations, which may enter system-managed statuses. Extra keyword
    arguments are written to the case row in the same UPDATE.
    """
    check_transition(case.status, new_status, system=system)
    await _compare_and_set(session, case, status=new_status, **values)
    await _append_timeline(session, case.id, new_status, user, notes)


async def transition(
    session: AsyncSession,
    user: UserContext,
    case_id: str,
    new_status: CaseStatus,
    *,
    notes: str | None = None,
    expected_status: CaseStatus | None = None,
) -> Case:
    """Move a case to ``new_status`` and append a timeline entry.

    Raises:
        NotFoundError: unknown or out-of-scope case.
        StaleCaseError: ``expected_status`` does not match, or a concurrent
            request changed the case first.
        InvalidTransitionError: target not reachable from the current status.
    """
    case = await get_case(session, user, case_id)
    previous = case.status
    case_number = case.case_number

    if expected_status is not None and expected_status != previous:
        raise StaleCaseError(
            f"Case {case_number} is '{previous.value}', not '{expected_status.value}'. "
            "Reload and retry."
        )

    await apply_status_change(session, case, new_status, user, notes=notes)
    await session.commit()
    logger.info(
        "Case %s: %s -> %s by %s", case_number, previous.value, new_status.value, user.user_id
    )

    closing = new_status in CaseStatus.terminal_statuses()
    await audit.record(
        session,
        action=AuditAction.CASE_CLOSE if closing else AuditAction.CASE_STATUS_CHANGE,
        category=AuditCategory.CASE,
        description=f"Case {case_number} moved from {previous.value} to {new_status.value}",
        user=user,
        entity_type=AuditEntityType.CASE.value,
        entity_id=case_id,
        entity_ref=case_number,
        details={"notes": notes} if notes else None,
        previous_value={"status": previous.value},
        new_value={"status": new_status.value},
    )
    return await _load_case(session, case_id)


async def cancel_case(
    session: AsyncSession,
    user: UserContext,
    case_id: str,
    *,
    reason: str | None = None,
) -> Case:
    """Owner withdrawal: transition to CANCELLED within the caller's scope."""
    return await transition(
        session,
        user,
        case_id,
        CaseStatus.CANCELLED,
        notes=reason or "Cancelled by sub-contractor",
    )

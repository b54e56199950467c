# This project was developed with assistance from AI tools.
"""SLA deadline, milestone and countdown computation.

Milestone targets are measured in days from case creation. Completion of a
milestone is derived from the case timeline: the first entry whose status is
at or beyond the milestone's completing stage on the forward path.

The countdown and milestone evaluators are pure functions of their inputs;
``now`` is always injectable so callers (and tests) get reproducible results.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from db import Case
from db.enums import CaseStatus
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..schemas.auth import UserContext
from ..schemas.sla import (
    CaseSlaResponse,
    Countdown,
    CountdownSeverity,
    Milestone,
    MilestoneStatus,
    MilestoneSummary,
    SlaOverviewItem,
    SlaStatus,
)
from .case import get_case
from .lifecycle import stage_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MilestoneDefinition:
    day: int
    name: str
    completes_at: CaseStatus


DEFAULT_MILESTONES: tuple[MilestoneDefinition, ...] = (
    MilestoneDefinition(3, "Initial Document Verification", CaseStatus.BUYER_APPROVED),
    MilestoneDefinition(7, "RMT Pre-screening Complete", CaseStatus.CWCAF_READY),
    MilestoneDefinition(10, "NBFC Approval Decision", CaseStatus.NBFC_SELECTED),
    MilestoneDefinition(14, "Deal Execution", CaseStatus.DISBURSED),
)

# Remaining-time thresholds, tightest first
_SEVERITY_THRESHOLDS: tuple[tuple[timedelta, CountdownSeverity], ...] = (
    (timedelta(hours=2), CountdownSeverity.CRITICAL),
    (timedelta(hours=4), CountdownSeverity.WARNING),
    (timedelta(hours=8), CountdownSeverity.ATTENTION),
)

_SEVERITY_ORDER = {
    CountdownSeverity.BREACHED: 0,
    CountdownSeverity.CRITICAL: 1,
    CountdownSeverity.WARNING: 2,
    CountdownSeverity.ATTENTION: 3,
    CountdownSeverity.ON_TRACK: 4,
}

_CLOSED = CaseStatus.closed_statuses()


def _ensure_tz(dt: datetime) -> datetime:
    """Ensure a datetime is timezone-aware (UTC)."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


# ---------------------------------------------------------------------------
# Pure computation
# ---------------------------------------------------------------------------


def countdown_severity(remaining: timedelta) -> CountdownSeverity:
    if remaining <= timedelta(0):
        return CountdownSeverity.BREACHED
    for threshold, severity in _SEVERITY_THRESHOLDS:
        if remaining < threshold:
            return severity
    return CountdownSeverity.ON_TRACK


def compute_countdown(now: datetime, target_date: datetime) -> Countdown:
    """Decompose the distance between ``now`` and ``target_date``.

    Sub-second precision is truncated so repeated calls within the same
    second return the same decomposition.
    """
    now = _ensure_tz(now)
    target_date = _ensure_tz(target_date)
    remaining = target_date - now
    breached = remaining <= timedelta(0)

    total = int(abs(remaining).total_seconds())
    days, rest = divmod(total, 86_400)
    hours, rest = divmod(rest, 3_600)
    minutes, seconds = divmod(rest, 60)

    return Countdown(
        target_date=target_date,
        days=days,
        hours=hours,
        minutes=minutes,
        seconds=seconds,
        remaining_seconds=-total if breached else total,
        is_breached=breached,
        severity=countdown_severity(remaining),
    )


def milestone_completion_time(
    timeline: list[tuple[CaseStatus, datetime]],
    completes_at: CaseStatus,
) -> datetime | None:
    """Timestamp of the first entry at or beyond ``completes_at`` on the forward path."""
    target_idx = stage_index(completes_at)
    for status, at in timeline:
        if stage_index(status) >= target_idx:
            return _ensure_tz(at)
    return None


def evaluate_milestone(
    definition: MilestoneDefinition,
    created_at: datetime,
    completed_at: datetime | None,
    now: datetime,
) -> Milestone:
    target_date = _ensure_tz(created_at) + timedelta(days=definition.day)
    now = _ensure_tz(now)

    if completed_at is not None:
        status = (
            MilestoneStatus.COMPLETED
            if _ensure_tz(completed_at) < target_date
            else MilestoneStatus.COMPLETED_LATE
        )
    elif now >= target_date:
        status = MilestoneStatus.OVERDUE
    else:
        status = MilestoneStatus.PENDING

    return Milestone(
        day=definition.day,
        name=definition.name,
        completes_at=definition.completes_at,
        target_date=target_date,
        status=status,
        completed_at=completed_at,
    )


def evaluate_milestones(
    created_at: datetime,
    timeline: list[tuple[CaseStatus, datetime]],
    now: datetime,
    definitions: tuple[MilestoneDefinition, ...] = DEFAULT_MILESTONES,
) -> tuple[list[Milestone], datetime]:
    """Evaluate every milestone for one case.

    For cases closed by rejection or cancellation, the clock stops at the
    closing timeline entry. Returns the milestones and the effective
    evaluation time.
    """
    now = _ensure_tz(now)
    ordered = sorted(timeline, key=lambda item: _ensure_tz(item[1]))
    for status, at in ordered:
        if status in _CLOSED:
            now = min(now, _ensure_tz(at))
            break

    milestones = [
        evaluate_milestone(
            d, created_at, milestone_completion_time(ordered, d.completes_at), now
        )
        for d in definitions
    ]
    return milestones, now


def summarize_milestones(milestones: list[Milestone]) -> MilestoneSummary:
    """Overall status: completed, breached (any overdue), warning (any late), else on-track."""
    total = len(milestones)
    done = sum(
        1
        for m in milestones
        if m.status in (MilestoneStatus.COMPLETED, MilestoneStatus.COMPLETED_LATE)
    )

    if total and done == total:
        status = SlaStatus.COMPLETED
    elif any(m.status == MilestoneStatus.OVERDUE for m in milestones):
        status = SlaStatus.BREACHED
    elif any(m.status == MilestoneStatus.COMPLETED_LATE for m in milestones):
        status = SlaStatus.WARNING
    else:
        status = SlaStatus.ON_TRACK

    return MilestoneSummary(
        status=status,
        completed=done,
        total=total,
        progress_percent=round(done * 100 / total) if total else 0,
    )


def next_milestone(milestones: list[Milestone]) -> Milestone | None:
    """Earliest milestone not yet completed (overdue ones included)."""
    for m in milestones:
        if m.status in (MilestoneStatus.PENDING, MilestoneStatus.OVERDUE):
            return m
    return None


# ---------------------------------------------------------------------------
# Case-level views
# ---------------------------------------------------------------------------


def _timeline_pairs(case: Case) -> list[tuple[CaseStatus, datetime]]:
    return [(entry.status, entry.created_at) for entry in case.timeline]


def build_case_sla(case: Case, now: datetime) -> CaseSlaResponse:
    milestones, evaluated_at = evaluate_milestones(case.created_at, _timeline_pairs(case), now)
    upcoming = next_milestone(milestones)
    return CaseSlaResponse(
        case_id=case.id,
        case_number=case.case_number,
        case_status=case.status,
        created_at=_ensure_tz(case.created_at),
        evaluated_at=evaluated_at,
        clock_stopped=evaluated_at < _ensure_tz(now),
        milestones=milestones,
        summary=summarize_milestones(milestones),
        next_milestone=upcoming,
        countdown=compute_countdown(evaluated_at, upcoming.target_date) if upcoming else None,
    )


async def case_sla(
    session: AsyncSession,
    user: UserContext,
    case_id: str,
    *,
    now: datetime | None = None,
) -> CaseSlaResponse:
    """Milestones, summary and next countdown for one case visible to ``user``."""
    case = await get_case(session, user, case_id)
    return build_case_sla(case, now or datetime.now(UTC))


async def sla_overview(
    session: AsyncSession,
    *,
    now: datetime | None = None,
) -> list[SlaOverviewItem]:
    """SLA state of every open case, most urgent first."""
    if now is None:
        now = datetime.now(UTC)

    stmt = (
        select(Case)
        .options(selectinload(Case.timeline))
        .where(Case.status.notin_(list(CaseStatus.terminal_statuses())))
    )
    cases = (await session.execute(stmt)).scalars().all()

    items: list[SlaOverviewItem] = []
    for case in cases:
        sla = build_case_sla(case, now)
        items.append(
            SlaOverviewItem(
                case_id=case.id,
                case_number=case.case_number,
                case_status=case.status,
                summary=sla.summary,
                next_milestone=sla.next_milestone.name if sla.next_milestone else None,
                countdown=sla.countdown,
            )
        )

    items.sort(key=_urgency_key)
    logger.debug("SLA overview computed for %d open cases", len(items))
    return items


def _urgency_key(item: SlaOverviewItem) -> tuple[int, int]:
    if item.countdown is None:
        return (len(_SEVERITY_ORDER), 0)
    return (_SEVERITY_ORDER[item.countdown.severity], item.countdown.remaining_seconds)

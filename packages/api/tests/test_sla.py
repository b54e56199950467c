# This project was developed with assistance from AI tools.
"""Tests for SLA milestones and countdowns."""

from datetime import UTC, datetime, timedelta

from db.enums import CaseStatus, UserRole

from src.schemas.sla import (
    CountdownSeverity,
    Milestone,
    MilestoneStatus,
    SlaStatus,
)
from src.services import case as case_service
from src.services import sla as sla_service
from src.services.sla import (
    compute_countdown,
    countdown_severity,
    evaluate_milestones,
    next_milestone,
    summarize_milestones,
)

from .factories import case_payload, make_user

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

# ---------------------------------------------------------------------------
# Countdown
# ---------------------------------------------------------------------------


def test_countdown_is_pure():
    now = T0
    target = T0 + timedelta(days=2, hours=5, minutes=7, seconds=9)
    first = compute_countdown(now, target)
    second = compute_countdown(now, target)
    assert first == second
    assert (first.days, first.hours, first.minutes, first.seconds) == (2, 5, 7, 9)
    assert first.is_breached is False
    assert first.severity == CountdownSeverity.ON_TRACK


def test_countdown_overdue_by_one_hour():
    """Day 3 milestone evaluated at T+3d+1h: overdue by exactly 0d 1h 0m 0s."""
    target = T0 + timedelta(days=3)
    cd = compute_countdown(T0 + timedelta(days=3, hours=1), target)
    assert cd.is_breached is True
    assert cd.severity == CountdownSeverity.BREACHED
    assert (cd.days, cd.hours, cd.minutes, cd.seconds) == (0, 1, 0, 0)
    assert cd.remaining_seconds == -3600


def test_countdown_truncates_sub_seconds():
    cd = compute_countdown(T0, T0 + timedelta(seconds=10, milliseconds=900))
    assert cd.seconds == 10


def test_countdown_accepts_naive_datetimes_as_utc():
    naive_target = datetime(2026, 3, 2, 10, 0)
    cd = compute_countdown(T0, naive_target)
    assert cd.remaining_seconds == 3600
    assert cd.target_date.tzinfo is not None


def test_severity_buckets():
    assert countdown_severity(timedelta(0)) == CountdownSeverity.BREACHED
    assert countdown_severity(timedelta(hours=1)) == CountdownSeverity.CRITICAL
    assert countdown_severity(timedelta(hours=3)) == CountdownSeverity.WARNING
    assert countdown_severity(timedelta(hours=6)) == CountdownSeverity.ATTENTION
    assert countdown_severity(timedelta(hours=8)) == CountdownSeverity.ON_TRACK


# ---------------------------------------------------------------------------
# Milestones
# ---------------------------------------------------------------------------


def _by_day(milestones: list[Milestone]) -> dict[int, Milestone]:
    return {m.day: m for m in milestones}


def test_day3_overdue_when_still_submitted():
    timeline = [(CaseStatus.SUBMITTED, T0)]
    milestones, evaluated_at = evaluate_milestones(T0, timeline, T0 + timedelta(days=3, hours=1))
    day3 = _by_day(milestones)[3]
    assert day3.status == MilestoneStatus.OVERDUE
    assert day3.target_date == T0 + timedelta(days=3)
    assert _by_day(milestones)[7].status == MilestoneStatus.PENDING
    assert evaluated_at == T0 + timedelta(days=3, hours=1)


def test_milestone_completed_on_time_and_late():
    timeline = [
        (CaseStatus.SUBMITTED, T0),
        (CaseStatus.BUYER_PENDING, T0 + timedelta(days=1)),
        (CaseStatus.BUYER_APPROVED, T0 + timedelta(days=2)),
        (CaseStatus.UNDER_RISK_REVIEW, T0 + timedelta(days=4)),
        (CaseStatus.CWCAF_READY, T0 + timedelta(days=8)),
    ]
    milestones, _ = evaluate_milestones(T0, timeline, T0 + timedelta(days=8, hours=1))
    by_day = _by_day(milestones)
    assert by_day[3].status == MilestoneStatus.COMPLETED
    assert by_day[3].completed_at == T0 + timedelta(days=2)
    assert by_day[7].status == MilestoneStatus.COMPLETED_LATE
    assert by_day[10].status == MilestoneStatus.PENDING

    summary = summarize_milestones(milestones)
    assert summary.status == SlaStatus.WARNING
    assert summary.completed == 2
    assert summary.progress_percent == 50
    assert next_milestone(milestones).day == 10


def test_skipped_stage_completes_earlier_milestone():
    """Reaching a later stage completes milestones whose stage it passed."""
    timeline = [(CaseStatus.SUBMITTED, T0), (CaseStatus.CWCAF_READY, T0 + timedelta(days=1))]
    milestones, _ = evaluate_milestones(T0, timeline, T0 + timedelta(days=1))
    by_day = _by_day(milestones)
    assert by_day[3].status == MilestoneStatus.COMPLETED
    assert by_day[7].status == MilestoneStatus.COMPLETED


def test_clock_stops_when_case_closed():
    cancelled_at = T0 + timedelta(days=1)
    timeline = [(CaseStatus.SUBMITTED, T0), (CaseStatus.CANCELLED, cancelled_at)]
    milestones, evaluated_at = evaluate_milestones(T0, timeline, T0 + timedelta(days=30))
    assert evaluated_at == cancelled_at
    assert all(m.status == MilestoneStatus.PENDING for m in milestones)
    assert summarize_milestones(milestones).status == SlaStatus.ON_TRACK


def test_summary_breached_and_completed():
    timeline = [(CaseStatus.SUBMITTED, T0)]
    milestones, _ = evaluate_milestones(T0, timeline, T0 + timedelta(days=15))
    assert summarize_milestones(milestones).status == SlaStatus.BREACHED

    done = [
        (CaseStatus.SUBMITTED, T0),
        (CaseStatus.DISBURSED, T0 + timedelta(days=2)),
    ]
    milestones, _ = evaluate_milestones(T0, done, T0 + timedelta(days=15))
    summary = summarize_milestones(milestones)
    assert summary.status == SlaStatus.COMPLETED
    assert summary.progress_percent == 100
    assert next_milestone(milestones) is None


# ---------------------------------------------------------------------------
# Case-level views (database)
# ---------------------------------------------------------------------------


async def test_case_sla_for_new_case(session):
    owner = make_user(UserRole.SUBCONTRACTOR)
    case = await case_service.create_case(session, owner, case_payload())
    created = case.created_at if case.created_at.tzinfo else case.created_at.replace(tzinfo=UTC)

    result = await sla_service.case_sla(
        session, owner, case.id, now=created + timedelta(days=3, hours=1)
    )
    assert result.case_number == case.case_number
    assert result.clock_stopped is False
    assert result.milestones[0].status == MilestoneStatus.OVERDUE
    assert result.summary.status == SlaStatus.BREACHED
    assert result.next_milestone.day == 3
    assert result.countdown.is_breached is True
    assert (result.countdown.days, result.countdown.hours, result.countdown.minutes) == (0, 1, 0)


async def test_sla_overview_orders_most_urgent_first(session):
    ops = make_user(UserRole.OPS)
    owner = make_user(UserRole.SUBCONTRACTOR)
    older = await case_service.create_case(session, owner, case_payload())
    newer = await case_service.create_case(session, owner, case_payload())
    closed = await case_service.create_case(session, owner, case_payload())
    await case_service.cancel_case(session, owner, closed.id, reason="Duplicate")

    # Older case advanced past Day 3; newer still waiting on Day 3
    await case_service.transition(session, ops, older.id, CaseStatus.BUYER_PENDING)
    await case_service.transition(session, ops, older.id, CaseStatus.BUYER_APPROVED)

    now = datetime.now(UTC) + timedelta(days=3, hours=1)
    items = await sla_service.sla_overview(session, now=now)

    assert [i.case_id for i in items] == [newer.id, older.id]
    assert items[0].countdown.severity == CountdownSeverity.BREACHED
    assert items[0].next_milestone == "Initial Document Verification"
    assert items[1].next_milestone == "RMT Pre-screening Complete"

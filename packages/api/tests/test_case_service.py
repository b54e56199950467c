# This project was developed with assistance from AI tools.
"""Service tests for case creation, transitions and data scope."""

from types import SimpleNamespace

import pytest
from db import Case, CaseTimelineEntry
from db.enums import CaseStatus, UserRole
from sqlalchemy import func, select, update

from src.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    StaleCaseError,
    ValidationError,
)
from src.services import case as case_service

from .factories import case_payload, make_user

OWNER = make_user(UserRole.SUBCONTRACTOR)
OPS = make_user(UserRole.OPS)


async def _timeline_len(session, case_id: str) -> int:
    return (
        await session.execute(
            select(func.count(CaseTimelineEntry.id)).where(CaseTimelineEntry.case_id == case_id)
        )
    ).scalar()


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


async def test_create_case_starts_submitted(session):
    case = await case_service.create_case(
        session, OWNER, case_payload(requested_amount="500000", requested_tenure=30)
    )
    assert case.status == CaseStatus.SUBMITTED
    assert case.version == 1
    assert case.subcontractor_id == "sc-100"
    assert case.case_number.startswith("CWCRF-")
    assert len(case.timeline) == 1
    assert case.timeline[0].status == CaseStatus.SUBMITTED
    assert case.timeline[0].sequence == 1
    assert case.cwc_request["requested_amount"] == "500000"
    assert case.cwc_request["requested_tenure"] == 30
    assert case.cwc_request["invoice_amount"] == "600000"


async def test_case_numbers_are_unique_and_increasing(session):
    first = await case_service.create_case(session, OWNER, case_payload())
    second = await case_service.create_case(session, OWNER, case_payload())
    assert first.case_number == "CWCRF-000001"
    assert second.case_number == "CWCRF-000002"


async def test_create_case_ignores_payload_owner_for_subcontractor(session):
    body = case_payload(subcontractor_id="someone-else")
    case = await case_service.create_case(session, OWNER, body)
    assert case.subcontractor_id == "sc-100"


async def test_admin_must_name_subcontractor(session):
    admin = make_user(UserRole.ADMIN)
    with pytest.raises(ValidationError, match="subcontractor_id is required"):
        await case_service.create_case(session, admin, case_payload())

    case = await case_service.create_case(session, admin, case_payload(subcontractor_id="sc-900"))
    assert case.subcontractor_id == "sc-900"


async def test_missing_sub_record_is_validation_error(session):
    body = case_payload()
    del body["invoice_details"]
    with pytest.raises(ValidationError, match="invoice_details"):
        await case_service.create_case(session, OWNER, body)


async def test_requested_amount_above_invoice_rejected(session):
    with pytest.raises(ValidationError, match="must not exceed invoice_amount"):
        await case_service.create_case(
            session, OWNER, case_payload(requested_amount="700000", invoice_amount="600000")
        )


async def test_max_acceptable_preference_needs_rate(session):
    body = case_payload()
    body["interest_preference"] = {"preference_type": "MAX_ACCEPTABLE"}
    with pytest.raises(ValidationError, match="max_acceptable_rate"):
        await case_service.create_case(session, OWNER, body)


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


async def test_each_transition_appends_one_timeline_entry(session):
    case = await case_service.create_case(session, OWNER, case_payload())
    path = [
        CaseStatus.BUYER_PENDING,
        CaseStatus.BUYER_APPROVED,
        CaseStatus.UNDER_RISK_REVIEW,
        CaseStatus.CWCAF_READY,
    ]
    for expected_len, status in enumerate(path, start=2):
        case = await case_service.transition(
            session, OPS, case.id, status, notes=f"to {status.value}"
        )
        assert case.status == status
        assert len(case.timeline) == expected_len
        assert case.timeline[-1].sequence == expected_len
        assert case.timeline[-1].actor_role == "ops"
    assert case.version == 5


@pytest.mark.parametrize(
    "closing",
    [CaseStatus.CANCELLED, CaseStatus.REJECTED],
)
async def test_terminal_case_refuses_further_transitions(session, closing):
    case = await case_service.create_case(session, OWNER, case_payload())
    case = await case_service.transition(session, OPS, case.id, closing)
    case_id = case.id
    before_version = case.version
    before_len = len(case.timeline)

    for target in (CaseStatus.BUYER_PENDING, CaseStatus.SUBMITTED, CaseStatus.CANCELLED):
        with pytest.raises(InvalidTransitionError):
            await case_service.transition(session, OPS, case_id, target)

    # The rejected write rolled back the session; reload by id
    reloaded = await case_service.get_case(session, OPS, case_id)
    assert reloaded.status == closing
    assert reloaded.version == before_version
    assert len(reloaded.timeline) == before_len


async def test_buyer_rejection_is_terminal(session):
    case = await case_service.create_case(session, OWNER, case_payload())
    await case_service.transition(session, OPS, case.id, CaseStatus.BUYER_PENDING)
    case = await case_service.transition(session, OPS, case.id, CaseStatus.BUYER_REJECTED)
    with pytest.raises(InvalidTransitionError):
        await case_service.transition(session, OPS, case.id, CaseStatus.BUYER_APPROVED)


async def test_illegal_transition_leaves_state_unchanged(session):
    case = await case_service.create_case(session, OWNER, case_payload())
    with pytest.raises(InvalidTransitionError):
        await case_service.transition(session, OPS, case.id, CaseStatus.DISBURSED)
    assert await _timeline_len(session, case.id) == 1


async def test_system_managed_status_not_reachable_by_transition(session):
    case = await case_service.create_case(session, OWNER, case_payload())
    for status in (
        CaseStatus.BUYER_PENDING,
        CaseStatus.BUYER_APPROVED,
        CaseStatus.UNDER_RISK_REVIEW,
        CaseStatus.CWCAF_READY,
        CaseStatus.SHARED_WITH_NBFC,
    ):
        await case_service.transition(session, OPS, case.id, status)
    with pytest.raises(InvalidTransitionError):
        await case_service.transition(session, OPS, case.id, CaseStatus.QUOTATIONS_RECEIVED)


async def test_expected_status_mismatch_is_stale(session):
    case = await case_service.create_case(session, OWNER, case_payload())
    case_id = case.id
    with pytest.raises(StaleCaseError):
        await case_service.transition(
            session,
            OPS,
            case_id,
            CaseStatus.BUYER_PENDING,
            expected_status=CaseStatus.BUYER_PENDING,
        )
    case = await case_service.transition(
        session, OPS, case_id, CaseStatus.BUYER_PENDING, expected_status=CaseStatus.SUBMITTED
    )
    assert case.status == CaseStatus.BUYER_PENDING


async def test_concurrent_writer_loses_compare_and_set(session):
    """A writer holding an outdated version is rejected without touching the timeline."""
    case = await case_service.create_case(session, OWNER, case_payload())
    case_id = case.id
    stale = SimpleNamespace(
        id=case.id, case_number=case.case_number, status=case.status, version=case.version
    )

    # Another request moves the case first
    await case_service.transition(session, OPS, case_id, CaseStatus.BUYER_PENDING)

    with pytest.raises(StaleCaseError, match="modified by another request"):
        await case_service.apply_status_change(session, stale, CaseStatus.CANCELLED, OWNER)

    # The rejected write rolled back the session; reload by id
    reloaded = await case_service.get_case(session, OPS, case_id)
    assert reloaded.status == CaseStatus.BUYER_PENDING
    assert len(reloaded.timeline) == 2


async def test_version_bump_by_other_writer_is_detected(session):
    case = await case_service.create_case(session, OWNER, case_payload())
    stale = SimpleNamespace(
        id=case.id, case_number=case.case_number, status=case.status, version=case.version
    )
    await session.execute(update(Case).where(Case.id == case.id).values(version=Case.version + 1))
    await session.commit()

    with pytest.raises(StaleCaseError):
        await case_service.apply_status_change(session, stale, CaseStatus.BUYER_PENDING, OPS)


async def test_cancel_case_by_owner(session):
    case = await case_service.create_case(session, OWNER, case_payload())
    case = await case_service.cancel_case(session, OWNER, case.id, reason="No longer needed")
    assert case.status == CaseStatus.CANCELLED
    assert case.timeline[-1].notes == "No longer needed"


async def test_cancel_case_by_other_subcontractor_not_found(session):
    case = await case_service.create_case(session, OWNER, case_payload())
    intruder = make_user(UserRole.SUBCONTRACTOR, user_id="sc-2-user", org_id="sc-200")
    with pytest.raises(NotFoundError):
        await case_service.cancel_case(session, intruder, case.id)


# ---------------------------------------------------------------------------
# Data scope
# ---------------------------------------------------------------------------


async def test_subcontractor_sees_only_own_cases(session):
    other = make_user(UserRole.SUBCONTRACTOR, user_id="sc-2-user", org_id="sc-200")
    mine = await case_service.create_case(session, OWNER, case_payload())
    theirs = await case_service.create_case(session, other, case_payload())

    cases, total = await case_service.list_cases(session, OWNER)
    assert total == 1
    assert [c.id for c in cases] == [mine.id]

    with pytest.raises(NotFoundError):
        await case_service.get_case(session, OWNER, theirs.id)


async def test_epc_sees_cases_for_its_company(session):
    await case_service.create_case(session, OWNER, case_payload(buyer_id="epc-200"))
    await case_service.create_case(session, OWNER, case_payload(buyer_id="epc-999"))

    cases, total = await case_service.list_cases(session, make_user(UserRole.EPC))
    assert total == 1
    assert cases[0].buyer_id == "epc-200"


async def test_nbfc_sees_only_shared_cases(session):
    nbfc = make_user(UserRole.NBFC)
    hidden = await case_service.create_case(session, OWNER, case_payload())
    shared = await case_service.create_case(session, OWNER, case_payload())
    for status in (
        CaseStatus.BUYER_PENDING,
        CaseStatus.BUYER_APPROVED,
        CaseStatus.UNDER_RISK_REVIEW,
        CaseStatus.CWCAF_READY,
        CaseStatus.SHARED_WITH_NBFC,
    ):
        await case_service.transition(session, OPS, shared.id, status)

    cases, total = await case_service.list_cases(session, nbfc)
    assert total == 1
    assert cases[0].id == shared.id
    with pytest.raises(NotFoundError):
        await case_service.get_case(session, nbfc, hidden.id)


async def test_sales_sees_nothing(session):
    await case_service.create_case(session, OWNER, case_payload())
    cases, total = await case_service.list_cases(session, make_user(UserRole.SALES))
    assert cases == []
    assert total == 0


async def test_list_cases_filters_and_paginates(session):
    created = [await case_service.create_case(session, OWNER, case_payload()) for _ in range(3)]
    await case_service.transition(session, OPS, created[0].id, CaseStatus.BUYER_PENDING)

    pending, total = await case_service.list_cases(session, OPS, status=CaseStatus.BUYER_PENDING)
    assert total == 1
    assert pending[0].id == created[0].id

    page, total = await case_service.list_cases(session, OPS, offset=0, limit=2)
    assert total == 3
    assert len(page) == 2
    # Newest first
    assert page[0].id == created[2].id


async def test_list_cases_for_subcontractor(session):
    await case_service.create_case(session, OWNER, case_payload())
    await case_service.create_case(session, OWNER, case_payload())
    assert len(await case_service.list_cases_for_subcontractor(session, "sc-100")) == 2
    assert await case_service.list_cases_for_subcontractor(session, "sc-unknown") == []

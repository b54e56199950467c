# This project was developed with assistance from AI tools.
"""CWCRF case lifecycle and NBFC quotation routes with RBAC enforcement."""

from db import Case, get_db
from db.enums import CaseStatus, UserRole
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.case import (
    CancelRequest,
    CaseCreate,
    CaseListResponse,
    CaseProgressResponse,
    CaseResponse,
    CaseSummary,
    TimelineEntryResponse,
    TransitionRequest,
)
from ..schemas.quotation import (
    QuotationCreate,
    QuotationListResponse,
    QuotationResponse,
    SelectQuotationRequest,
)
from ..services import case as case_service
from ..services import quotation as quotation_service
from ..services.lifecycle import allowed_next, is_terminal, progress_percent, stage_index

router = APIRouter()

_PIPELINE_ROLES = (UserRole.OPS, UserRole.RMT, UserRole.FOUNDER, UserRole.ADMIN)


def _build_case_response(case: Case) -> CaseResponse:
    """Build CaseResponse from a fully loaded case, adding the derived lifecycle view."""
    selected = case.selected_nbfc_id
    return CaseResponse(
        id=case.id,
        case_number=case.case_number,
        subcontractor_id=case.subcontractor_id,
        buyer_id=case.buyer_id,
        status=case.status,
        version=case.version,
        buyer_details=case.buyer_details,
        invoice_details=case.invoice_details,
        cwc_request=case.cwc_request,
        interest_preference=case.interest_preference,
        selected_nbfc_id=selected,
        selected_at=case.selected_at,
        final_interest_rate=case.final_interest_rate,
        final_tenure=case.final_tenure,
        created_at=case.created_at,
        updated_at=case.updated_at,
        timeline=[TimelineEntryResponse.model_validate(t) for t in case.timeline],
        quotations=[
            QuotationResponse.model_validate(q).model_copy(
                update={"is_selected": q.nbfc_id == selected}
            )
            for q in case.quotations
        ],
        stage_index=stage_index(case.status),
        progress_percent=progress_percent(case.status),
        is_terminal=is_terminal(case.status),
        allowed_next=allowed_next(case.status),
    )


@router.post(
    "/",
    response_model=CaseResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.SUBCONTRACTOR, UserRole.ADMIN))],
)
async def create_case(
    body: CaseCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CaseResponse:
    """Submit a CWCRF. The case starts in SUBMITTED."""
    case = await case_service.create_case(session, user, body)
    return _build_case_response(case)


@router.get(
    "/my",
    response_model=CaseListResponse,
    dependencies=[Depends(require_roles(UserRole.SUBCONTRACTOR))],
)
async def my_cases(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CaseListResponse:
    """Every case owned by the calling sub-contractor, newest first."""
    cases = await case_service.list_cases_for_subcontractor(session, user.org_id or "")
    return CaseListResponse(
        data=[CaseSummary.model_validate(c) for c in cases],
        pagination=Pagination(total=len(cases), offset=0, limit=len(cases), has_more=False),
    )


@router.get(
    "/",
    response_model=CaseListResponse,
    dependencies=[Depends(require_roles(*_PIPELINE_ROLES))],
)
async def list_cases(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    status: CaseStatus | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> CaseListResponse:
    """Ops queue: cases visible to the caller, optionally filtered by status."""
    cases, total = await case_service.list_cases(
        session, user, status=status, offset=offset, limit=limit
    )
    return CaseListResponse(
        data=[CaseSummary.model_validate(c) for c in cases],
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit < total),
        ),
    )


@router.get("/{case_id}", response_model=CaseResponse)
async def get_case(
    case_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CaseResponse:
    """Case detail with timeline and quotations. Out-of-scope cases return 404."""
    case = await case_service.get_case(session, user, case_id)
    return _build_case_response(case)


@router.get("/{case_id}/progress", response_model=CaseProgressResponse)
async def get_case_progress(
    case_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CaseProgressResponse:
    case = await case_service.get_case(session, user, case_id)
    return CaseProgressResponse(
        case_id=case.id,
        case_number=case.case_number,
        status=case.status,
        stage_index=stage_index(case.status),
        progress_percent=progress_percent(case.status),
        is_terminal=is_terminal(case.status),
        allowed_next=allowed_next(case.status),
        workflow=list(CaseStatus.workflow()),
    )


@router.post(
    "/{case_id}/transition",
    response_model=CaseResponse,
    dependencies=[
        Depends(
            require_roles(
                UserRole.OPS,
                UserRole.RMT,
                UserRole.EPC,
                UserRole.FOUNDER,
                UserRole.ADMIN,
            )
        )
    ],
)
async def transition_case(
    case_id: str,
    body: TransitionRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CaseResponse:
    """Move a case along the workflow. Illegal or stale transitions return 409."""
    case = await case_service.transition(
        session,
        user,
        case_id,
        body.status,
        notes=body.notes,
        expected_status=body.expected_status,
    )
    return _build_case_response(case)


@router.post(
    "/{case_id}/cancel",
    response_model=CaseResponse,
    dependencies=[Depends(require_roles(UserRole.SUBCONTRACTOR, UserRole.ADMIN))],
)
async def cancel_case(
    case_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
    body: CancelRequest | None = None,
) -> CaseResponse:
    case = await case_service.cancel_case(
        session, user, case_id, reason=body.reason if body else None
    )
    return _build_case_response(case)


# ---------------------------------------------------------------------------
# Quotations
# ---------------------------------------------------------------------------


@router.get(
    "/{case_id}/quotations",
    response_model=QuotationListResponse,
    dependencies=[
        Depends(
            require_roles(
                UserRole.SUBCONTRACTOR,
                UserRole.NBFC,
                UserRole.OPS,
                UserRole.FOUNDER,
                UserRole.ADMIN,
            )
        )
    ],
)
async def list_quotations(
    case_id: str,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> QuotationListResponse:
    selected, items = await quotation_service.list_quotations(session, user, case_id)
    return QuotationListResponse(
        case_id=case_id,
        selected_nbfc_id=selected,
        count=len(items),
        data=items,
    )


@router.post(
    "/{case_id}/quotations",
    response_model=QuotationResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_roles(UserRole.NBFC))],
)
async def submit_quotation(
    case_id: str,
    body: QuotationCreate,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> QuotationResponse:
    """Submit the calling NBFC's quotation. One per NBFC per case."""
    quotation = await quotation_service.submit_quotation(
        session,
        user,
        case_id,
        quotation_service.nbfc_identity(user),
        body,
    )
    return QuotationResponse.model_validate(quotation)


@router.post(
    "/{case_id}/select-nbfc",
    response_model=CaseResponse,
    dependencies=[Depends(require_roles(UserRole.SUBCONTRACTOR))],
)
async def select_nbfc(
    case_id: str,
    body: SelectQuotationRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> CaseResponse:
    """Lock in one quotation. A second selection returns 409."""
    case = await quotation_service.select_quotation(
        session, user, case_id, body.nbfc_id, notes=body.notes
    )
    return _build_case_response(case)

# This project was developed with assistance from AI tools.
"""NBFC quotation collection and exactly-once selection.

Quotations are accepted only while a case is SHARED_WITH_NBFC or
QUOTATIONS_RECEIVED. The first quotation moves the case to
QUOTATIONS_RECEIVED; selecting one moves it to NBFC_SELECTED and closes
bidding. Both paths bump the case version through the same conditional
UPDATE as ordinary transitions, so a quotation can never land after a
concurrent selection.
"""

import logging
from datetime import UTC, datetime

from db import NbfcQuotation
from db.enums import AuditAction, AuditCategory, AuditEntityType, CaseStatus, UserRole
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import (
    AlreadySelectedError,
    InvalidStateError,
    NotFoundError,
    StaleCaseError,
    ValidationError,
)
from ..schemas.auth import UserContext
from ..schemas.quotation import QuotationCreate, QuotationResponse
from . import audit
from .case import _compare_and_set, _load_case, apply_status_change, get_case

logger = logging.getLogger(__name__)

_BIDDING_STATUSES = frozenset({CaseStatus.SHARED_WITH_NBFC, CaseStatus.QUOTATIONS_RECEIVED})


def nbfc_identity(user: UserContext) -> str:
    """The NBFC an NBFC-role account quotes on behalf of."""
    return user.org_id or user.user_id


async def submit_quotation(
    session: AsyncSession,
    user: UserContext,
    case_id: str,
    nbfc_id: str,
    terms: QuotationCreate | dict,
) -> NbfcQuotation:
    """Append an NBFC's offer to a case.

    Raises:
        ValidationError: malformed terms.
        NotFoundError: unknown case, or a biddable case outside the caller's scope.
        InvalidStateError: case is not accepting quotations (checked before
            scope), or this NBFC already quoted on it.
    """
    if not isinstance(terms, QuotationCreate):
        try:
            terms = QuotationCreate.model_validate(terms)
        except PydanticValidationError as exc:
            raise ValidationError(str(exc.errors()[0].get("msg"))) from exc
    if not nbfc_id:
        raise ValidationError("nbfc_id is required")

    # Bidding state is checked before visibility: an NBFC asking to quote on a
    # closed or unshared case gets a state error, not a 404.
    case = await _load_case(session, case_id)
    case_number = case.case_number

    if case.selected_nbfc_id is not None or case.status not in _BIDDING_STATUSES:
        raise InvalidStateError(
            f"Case {case_number} is '{case.status.value}' and not accepting quotations."
        )
    if any(q.nbfc_id == nbfc_id for q in case.quotations):
        raise InvalidStateError(f"NBFC {nbfc_id} has already quoted on case {case_number}.")
    case = await get_case(session, user, case_id)

    first_quote = case.status == CaseStatus.SHARED_WITH_NBFC
    if first_quote:
        await apply_status_change(
            session,
            case,
            CaseStatus.QUOTATIONS_RECEIVED,
            user,
            notes=f"First quotation received from {terms.nbfc_name or nbfc_id}",
            system=True,
        )
    else:
        await _compare_and_set(session, case)

    quotation = NbfcQuotation(
        case_id=case_id,
        nbfc_id=nbfc_id,
        nbfc_name=terms.nbfc_name,
        offered_amount=terms.offered_amount,
        interest_rate=terms.interest_rate,
        tenure=terms.tenure,
        processing_fee=terms.processing_fee,
        terms=terms.terms,
        quoted_by=user.user_id,
    )
    session.add(quotation)
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise InvalidStateError(
            f"NBFC {nbfc_id} has already quoted on case {case_number}."
        ) from exc
    quotation_id = quotation.id
    logger.info("Quotation %s from %s on case %s", quotation_id, nbfc_id, case_number)

    await audit.record(
        session,
        action=AuditAction.NBFC_QUOTE_SUBMIT,
        category=AuditCategory.BID,
        description=(
            f"NBFC {terms.nbfc_name or nbfc_id} quoted {terms.offered_amount} "
            f"@ {terms.interest_rate}% on case {case_number}"
        ),
        user=user,
        entity_type=AuditEntityType.CASE.value,
        entity_id=case_id,
        entity_ref=case_number,
        details={"quotation_id": quotation_id, "nbfc_id": nbfc_id},
        new_value=terms.model_dump(mode="json"),
    )
    return await session.get(NbfcQuotation, quotation_id)


async def list_quotations(
    session: AsyncSession,
    user: UserContext,
    case_id: str,
) -> tuple[str | None, list[QuotationResponse]]:
    """Quotations in submission order, each flagged against the case's selection.

    NBFC callers see only their own organisation's quotation.

    Returns:
        (selected_nbfc_id, quotations)
    """
    case = await get_case(session, user, case_id)
    quotes = list(case.quotations)
    if user.role == UserRole.NBFC:
        own = nbfc_identity(user)
        quotes = [q for q in quotes if q.nbfc_id == own]

    items = [
        QuotationResponse.model_validate(q).model_copy(
            update={"is_selected": q.nbfc_id == case.selected_nbfc_id}
        )
        for q in quotes
    ]
    return case.selected_nbfc_id, items


async def select_quotation(
    session: AsyncSession,
    user: UserContext,
    case_id: str,
    nbfc_id: str,
    *,
    notes: str | None = None,
):
    """Lock in one NBFC's quotation. Exactly once per case.

    Raises:
        AlreadySelectedError: a quotation was already selected (including by
            a concurrent request that won the race).
        InvalidStateError: case is not in QUOTATIONS_RECEIVED.
        NotFoundError: case unknown/out of scope, or no quotation from ``nbfc_id``.
    """
    case = await get_case(session, user, case_id)
    case_number = case.case_number

    if case.selected_nbfc_id is not None:
        raise AlreadySelectedError(
            f"Case {case_number} already has NBFC {case.selected_nbfc_id} selected."
        )
    if case.status != CaseStatus.QUOTATIONS_RECEIVED:
        raise InvalidStateError(
            f"Case {case_number} is '{case.status.value}'; selection requires "
            f"'{CaseStatus.QUOTATIONS_RECEIVED.value}'."
        )

    quote = next((q for q in case.quotations if q.nbfc_id == nbfc_id), None)
    if quote is None:
        raise NotFoundError(f"No quotation from NBFC {nbfc_id} on case {case_number}.")
    rate, tenure = quote.interest_rate, quote.tenure

    try:
        await apply_status_change(
            session,
            case,
            CaseStatus.NBFC_SELECTED,
            user,
            notes=notes or f"Selected quotation from {quote.nbfc_name or nbfc_id}",
            system=True,
            selected_nbfc_id=nbfc_id,
            selected_at=datetime.now(UTC),
            final_interest_rate=rate,
            final_tenure=tenure,
        )
    except StaleCaseError:
        current = await _load_case(session, case_id)
        if current.selected_nbfc_id is not None:
            raise AlreadySelectedError(
                f"Case {case_number} already has NBFC {current.selected_nbfc_id} selected."
            ) from None
        raise
    await session.commit()
    logger.info("Case %s: NBFC %s selected by %s", case_number, nbfc_id, user.user_id)

    await audit.record(
        session,
        action=AuditAction.BID_ACCEPT,
        category=AuditCategory.BID,
        description=f"Selected NBFC {nbfc_id} for case {case_number}",
        user=user,
        entity_type=AuditEntityType.CASE.value,
        entity_id=case_id,
        entity_ref=case_number,
        previous_value={"status": CaseStatus.QUOTATIONS_RECEIVED.value},
        new_value={
            "status": CaseStatus.NBFC_SELECTED.value,
            "selected_nbfc_id": nbfc_id,
            "final_interest_rate": str(rate),
            "final_tenure": tenure,
        },
    )
    return await _load_case(session, case_id)

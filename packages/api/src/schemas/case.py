# This project was developed with assistance from AI tools.
"""Pydantic request/response schemas for CWCRF case endpoints."""

from datetime import date, datetime
from decimal import Decimal

from db.enums import (
    CaseStatus,
    InterestPreferenceType,
    RepaymentFrequency,
    UrgencyLevel,
)
from pydantic import BaseModel, ConfigDict, Field, model_validator

from . import Pagination
from .quotation import QuotationResponse

# ---------------------------------------------------------------------------
# Submission sub-records
# ---------------------------------------------------------------------------


class BuyerDetails(BaseModel):
    buyer_id: str | None = Field(default=None, max_length=255)
    buyer_name: str = Field(min_length=1, max_length=255)
    project_name: str = Field(min_length=1, max_length=255)
    project_location: str | None = Field(default=None, max_length=500)


class InvoiceDetails(BaseModel):
    invoice_number: str = Field(min_length=1, max_length=100)
    invoice_amount: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    invoice_date: date | None = None
    expected_payment_date: date | None = None
    work_description: str | None = None
    purchase_order_number: str | None = Field(default=None, max_length=100)
    gst_amount: Decimal | None = Field(default=None, ge=0, max_digits=14, decimal_places=2)
    net_invoice_amount: Decimal | None = Field(default=None, ge=0, max_digits=14, decimal_places=2)


class CwcRequest(BaseModel):
    requested_amount: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    requested_tenure: int = Field(gt=0, description="Requested tenure in days.")
    urgency_level: UrgencyLevel = UrgencyLevel.NORMAL
    reason_for_funding: str | None = None
    preferred_disbursement_date: date | None = None
    invoice_amount: Decimal | None = Field(
        default=None,
        description="Copied from the invoice on submission.",
    )


class InterestPreference(BaseModel):
    preference_type: InterestPreferenceType = InterestPreferenceType.RANGE
    min_rate: Decimal | None = Field(default=None, ge=0, le=100)
    max_rate: Decimal | None = Field(default=None, ge=0, le=100)
    max_acceptable_rate: Decimal | None = Field(default=None, ge=0, le=100)
    preferred_repayment_frequency: RepaymentFrequency = RepaymentFrequency.ONE_TIME
    processing_fee_acceptance: bool = True
    max_processing_fee_percent: Decimal | None = Field(default=None, ge=0, le=100)

    @model_validator(mode="after")
    def _check_rates(self) -> "InterestPreference":
        both_set = self.min_rate is not None and self.max_rate is not None
        if both_set and self.min_rate > self.max_rate:
            raise ValueError("min_rate must not exceed max_rate")
        if (
            self.preference_type == InterestPreferenceType.MAX_ACCEPTABLE
            and self.max_acceptable_rate is None
        ):
            raise ValueError("max_acceptable_rate is required for MAX_ACCEPTABLE preference")
        return self


class CaseCreate(BaseModel):
    """CWCRF submission payload."""

    buyer_details: BuyerDetails
    invoice_details: InvoiceDetails
    cwc_request: CwcRequest
    interest_preference: InterestPreference
    subcontractor_id: str | None = Field(
        default=None,
        description="Owning sub-contractor. Ignored for sub-contractor callers (taken from token).",
    )

    @model_validator(mode="after")
    def _check_amounts(self) -> "CaseCreate":
        if self.cwc_request.requested_amount > self.invoice_details.invoice_amount:
            raise ValueError("requested_amount must not exceed invoice_amount")
        self.cwc_request.invoice_amount = self.invoice_details.invoice_amount
        return self


# ---------------------------------------------------------------------------
# Lifecycle requests
# ---------------------------------------------------------------------------


class TransitionRequest(BaseModel):
    status: CaseStatus
    notes: str | None = Field(default=None, max_length=2000)
    expected_status: CaseStatus | None = Field(
        default=None,
        description="Status the caller last observed; mismatch yields 409.",
    )


class CancelRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=2000)


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class TimelineEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sequence: int
    status: CaseStatus
    actor_id: str | None = None
    actor_role: str | None = None
    notes: str | None = None
    created_at: datetime


class CaseSummary(BaseModel):
    """Case row for list views."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    case_number: str
    subcontractor_id: str
    buyer_id: str | None = None
    status: CaseStatus
    buyer_details: BuyerDetails
    cwc_request: CwcRequest
    selected_nbfc_id: str | None = None
    created_at: datetime
    updated_at: datetime


class CaseResponse(CaseSummary):
    version: int
    invoice_details: InvoiceDetails
    interest_preference: InterestPreference
    selected_at: datetime | None = None
    final_interest_rate: Decimal | None = None
    final_tenure: int | None = None
    timeline: list[TimelineEntryResponse] = []
    quotations: list[QuotationResponse] = []
    stage_index: int
    progress_percent: int
    is_terminal: bool
    allowed_next: list[CaseStatus] = []


class CaseListResponse(BaseModel):
    data: list[CaseSummary]
    pagination: Pagination


class CaseProgressResponse(BaseModel):
    case_id: str
    case_number: str
    status: CaseStatus
    stage_index: int
    progress_percent: int
    is_terminal: bool
    allowed_next: list[CaseStatus]
    workflow: list[CaseStatus]

# This project was developed with assistance from AI tools.
"""NBFC quotation (bid) schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class QuotationCreate(BaseModel):
    offered_amount: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    interest_rate: Decimal = Field(gt=0, le=100, description="Annual rate, percent.")
    tenure: int = Field(gt=0, description="Tenure in days.")
    processing_fee: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    terms: str | None = Field(default=None, max_length=4000)
    nbfc_name: str | None = Field(default=None, max_length=255)


class QuotationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nbfc_id: str
    nbfc_name: str | None = None
    offered_amount: Decimal
    interest_rate: Decimal
    tenure: int
    processing_fee: Decimal | None = None
    terms: str | None = None
    quoted_at: datetime
    is_selected: bool = False


class QuotationListResponse(BaseModel):
    case_id: str
    selected_nbfc_id: str | None = None
    count: int
    data: list[QuotationResponse]


class SelectQuotationRequest(BaseModel):
    nbfc_id: str = Field(min_length=1)
    notes: str | None = Field(default=None, max_length=2000)

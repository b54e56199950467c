# This project was developed with assistance from AI tools.
"""Career application schemas."""

from datetime import datetime

from db.enums import CareerApplicationStatus
from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import PagePagination


class CareerApplicationCreate(BaseModel):
    """Public submission from the careers page."""

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    phone: str = Field(min_length=1, max_length=50)
    role: str = Field(min_length=1, max_length=255)
    experience: str = Field(min_length=1, max_length=100)
    department: str | None = Field(default=None, max_length=255)
    current_company: str | None = Field(default=None, max_length=255)
    linkedin_url: str | None = Field(default=None, max_length=500)
    portfolio_url: str | None = Field(default=None, max_length=500)
    cover_letter: str | None = None
    resume_url: str | None = Field(default=None, max_length=500)

    @field_validator("name", "phone", "role", "experience", mode="before")
    @classmethod
    def _strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def _normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def _check_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError("email must contain '@'")
        return v


class CareerApplicationUpdate(BaseModel):
    status: CareerApplicationStatus | None = None
    admin_notes: str | None = None


class CareerApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str
    role: str
    department: str | None = None
    experience: str
    current_company: str | None = None
    linkedin_url: str | None = None
    portfolio_url: str | None = None
    cover_letter: str | None = None
    resume_url: str | None = None
    status: CareerApplicationStatus
    admin_notes: str | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class CareerApplicationSubmitted(BaseModel):
    id: int
    message: str = "Application submitted successfully! We'll be in touch."


class CareerApplicationListResponse(BaseModel):
    applications: list[CareerApplicationResponse]
    pagination: PagePagination


class StatusCount(BaseModel):
    status: CareerApplicationStatus
    count: int


class CareerApplicationStatsResponse(BaseModel):
    stats: list[StatusCount]
    total: int

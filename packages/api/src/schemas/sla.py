# This project was developed with assistance from AI tools.
"""SLA milestone and countdown schemas."""

import enum
from datetime import datetime

from db.enums import CaseStatus
from pydantic import BaseModel


class MilestoneStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    COMPLETED_LATE = "COMPLETED_LATE"
    OVERDUE = "OVERDUE"


class CountdownSeverity(str, enum.Enum):
    BREACHED = "breached"
    CRITICAL = "critical"
    WARNING = "warning"
    ATTENTION = "attention"
    ON_TRACK = "on-track"


class SlaStatus(str, enum.Enum):
    COMPLETED = "completed"
    BREACHED = "breached"
    WARNING = "warning"
    ON_TRACK = "on-track"


class Countdown(BaseModel):
    """Time remaining until (or elapsed since) a deadline.

    ``days``/``hours``/``minutes``/``seconds`` decompose the absolute
    distance; ``remaining_seconds`` is signed and negative once breached.
    """

    target_date: datetime
    days: int
    hours: int
    minutes: int
    seconds: int
    remaining_seconds: int
    is_breached: bool
    severity: CountdownSeverity


class Milestone(BaseModel):
    day: int
    name: str
    completes_at: CaseStatus
    target_date: datetime
    status: MilestoneStatus
    completed_at: datetime | None = None


class MilestoneSummary(BaseModel):
    status: SlaStatus
    completed: int
    total: int
    progress_percent: int


class CaseSlaResponse(BaseModel):
    case_id: str
    case_number: str
    case_status: CaseStatus
    created_at: datetime
    evaluated_at: datetime
    clock_stopped: bool
    milestones: list[Milestone]
    summary: MilestoneSummary
    next_milestone: Milestone | None = None
    countdown: Countdown | None = None


class SlaOverviewItem(BaseModel):
    case_id: str
    case_number: str
    case_status: CaseStatus
    summary: MilestoneSummary
    next_milestone: str | None = None
    countdown: Countdown | None = None


class SlaOverviewResponse(BaseModel):
    count: int
    data: list[SlaOverviewItem]

# This project was developed with assistance from AI tools.
"""Pydantic response schemas for audit log endpoints."""

from datetime import datetime

from db.enums import AuditAction, AuditCategory
from pydantic import BaseModel, ConfigDict

from . import PagePagination


class AuditLogItem(BaseModel):
    """Single audit entry in a query response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    created_at: datetime
    user_id: str | None = None
    user_name: str | None = None
    user_email: str | None = None
    user_role: str | None = None
    action: AuditAction
    category: AuditCategory
    entity_type: str | None = None
    entity_id: str | None = None
    entity_ref: str | None = None
    description: str
    details: dict | None = None
    previous_value: dict | list | str | int | float | bool | None = None
    new_value: dict | list | str | int | float | bool | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    request_path: str | None = None
    request_method: str | None = None
    request_id: str | None = None
    success: bool
    error_message: str | None = None


class AuditLogListResponse(BaseModel):
    logs: list[AuditLogItem]
    pagination: PagePagination


class CategoryCount(BaseModel):
    category: AuditCategory
    count: int


class ActionCount(BaseModel):
    action: AuditAction
    count: int


class UserCount(BaseModel):
    user_id: str | None = None
    user_name: str | None = None
    count: int


class DailyCount(BaseModel):
    date: str
    count: int


class AuditStatsResponse(BaseModel):
    days: int
    total_logs: int
    by_category: list[CategoryCount]
    by_action: list[ActionCount]
    by_user: list[UserCount]
    recent_failures: list[AuditLogItem]
    daily_activity: list[DailyCount]

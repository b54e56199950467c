# This project was developed with assistance from AI tools.
"""
Gryork -- domain models

Bill-discounting case (CWCRF) lifecycle models covering the case record,
its status timeline, NBFC quotations, the audit log and career applications.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import (
    AuditAction,
    AuditCategory,
    CareerApplicationStatus,
    CaseStatus,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_uuid() -> str:
    return str(uuid.uuid4())


class CaseNumberSequence(Base):
    """Monotonic allocator for human-readable case numbers. Rows are never deleted."""

    __tablename__ = "case_number_sequence"

    id = Column(Integer, primary_key=True, autoincrement=True)
    allocated_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )


class Case(Base):
    """Bill-discounting request (CWCRF) raised by a sub-contractor."""

    __tablename__ = "cases"
    __table_args__ = (
        Index("ix_cases_status_subcontractor", "status", "subcontractor_id"),
        Index("ix_cases_buyer_status", "buyer_id", "status"),
    )

    id = Column(String(36), primary_key=True, default=_new_uuid)
    case_number = Column(String(32), unique=True, nullable=False)
    subcontractor_id = Column(String(255), nullable=False, index=True)
    created_by = Column(String(255), nullable=False)
    buyer_id = Column(String(255), nullable=True)
    status = Column(
        Enum(CaseStatus, name="case_status", native_enum=False, length=32),
        nullable=False,
        default=CaseStatus.SUBMITTED,
    )
    version = Column(Integer, nullable=False, default=1)
    buyer_details = Column(JSON, nullable=False)
    invoice_details = Column(JSON, nullable=False)
    cwc_request = Column(JSON, nullable=False)
    interest_preference = Column(JSON, nullable=False)
    selected_nbfc_id = Column(String(255), nullable=True)
    selected_at = Column(DateTime(timezone=True), nullable=True)
    final_interest_rate = Column(Numeric(5, 2), nullable=True)
    final_tenure = Column(Integer, nullable=True)
    created_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
        nullable=False,
    )

    timeline = relationship(
        "CaseTimelineEntry",
        back_populates="case",
        cascade="all, delete-orphan",
        order_by="CaseTimelineEntry.sequence",
    )
    quotations = relationship(
        "NbfcQuotation",
        back_populates="case",
        cascade="all, delete-orphan",
        order_by="NbfcQuotation.id",
    )

    def __repr__(self):
        return f"<Case(id={self.id}, number='{self.case_number}', status='{self.status}')>"


class CaseTimelineEntry(Base):
    """Append-only status history. One row per transition; never updated."""

    __tablename__ = "case_timeline_entries"
    __table_args__ = (
        UniqueConstraint("case_id", "sequence", name="uq_case_timeline_sequence"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(
        String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    sequence = Column(Integer, nullable=False)
    status = Column(
        Enum(CaseStatus, name="case_status", native_enum=False, length=32),
        nullable=False,
    )
    actor_id = Column(String(255), nullable=True)
    actor_role = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    case = relationship("Case", back_populates="timeline")

    def __repr__(self):
        return (
            f"<CaseTimelineEntry(case_id={self.case_id}, seq={self.sequence}, "
            f"status='{self.status}')>"
        )


class NbfcQuotation(Base):
    """Offer submitted by an NBFC against a case. Immutable once written."""

    __tablename__ = "nbfc_quotations"
    __table_args__ = (
        UniqueConstraint("case_id", "nbfc_id", name="uq_quotation_case_nbfc"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(
        String(36), ForeignKey("cases.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    nbfc_id = Column(String(255), nullable=False, index=True)
    nbfc_name = Column(String(255), nullable=True)
    offered_amount = Column(Numeric(14, 2), nullable=False)
    interest_rate = Column(Numeric(5, 2), nullable=False)
    tenure = Column(Integer, nullable=False)
    processing_fee = Column(Numeric(12, 2), nullable=True)
    terms = Column(Text, nullable=True)
    quoted_by = Column(String(255), nullable=True)
    quoted_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    case = relationship("Case", back_populates="quotations")

    def __repr__(self):
        return f"<NbfcQuotation(case_id={self.case_id}, nbfc='{self.nbfc_id}')>"


class AuditLog(Base):
    """Append-only record of user actions across the platform."""

    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_user_created", "user_id", "created_at"),
        Index("ix_audit_logs_action_created", "action", "created_at"),
        Index("ix_audit_logs_category_created", "category", "created_at"),
        Index("ix_audit_logs_entity", "entity_type", "entity_id"),
        Index("ix_audit_logs_created_at", "created_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=True)
    user_name = Column(String(255), nullable=True)
    user_email = Column(String(255), nullable=True)
    user_role = Column(String(50), nullable=True)
    action = Column(
        Enum(AuditAction, name="audit_action", native_enum=False, length=40),
        nullable=False,
    )
    category = Column(
        Enum(AuditCategory, name="audit_category", native_enum=False, length=20),
        nullable=False,
    )
    entity_type = Column(String(50), nullable=True)
    entity_id = Column(String(255), nullable=True)
    entity_ref = Column(String(255), nullable=True)
    description = Column(Text, nullable=False)
    details = Column(JSON, nullable=True)
    previous_value = Column(JSON, nullable=True)
    new_value = Column(JSON, nullable=True)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    request_path = Column(String(512), nullable=True)
    request_method = Column(String(10), nullable=True)
    request_id = Column(String(64), nullable=True)
    success = Column(Boolean, nullable=False, default=True)
    error_message = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}')>"


class CareerApplication(Base):
    """Job application submitted from the public careers page."""

    __tablename__ = "career_applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    role = Column(String(255), nullable=False)
    department = Column(String(255), nullable=True)
    experience = Column(String(100), nullable=False)
    current_company = Column(String(255), nullable=True)
    linkedin_url = Column(String(500), nullable=True)
    portfolio_url = Column(String(500), nullable=True)
    cover_letter = Column(Text, nullable=True)
    resume_url = Column(String(500), nullable=True)
    status = Column(
        Enum(CareerApplicationStatus, name="career_application_status", native_enum=False),
        nullable=False,
        default=CareerApplicationStatus.NEW,
        index=True,
    )
    admin_notes = Column(Text, nullable=True)
    reviewed_by = Column(String(255), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return f"<CareerApplication(id={self.id}, role='{self.role}', status='{self.status}')>"

# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, SessionLocal, engine, get_db, get_db_service
from .enums import (
    AuditAction,
    AuditCategory,
    AuditEntityType,
    CareerApplicationStatus,
    CaseStatus,
    InterestPreferenceType,
    RepaymentFrequency,
    UrgencyLevel,
    UserRole,
)
from .models import (
    AuditLog,
    CareerApplication,
    Case,
    CaseNumberSequence,
    CaseTimelineEntry,
    NbfcQuotation,
)

__all__ = [
    "Base",
    "DatabaseService",
    "SessionLocal",
    "engine",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "AuditAction",
    "AuditCategory",
    "AuditEntityType",
    "CareerApplicationStatus",
    "CaseStatus",
    "InterestPreferenceType",
    "RepaymentFrequency",
    "UrgencyLevel",
    "UserRole",
    # Models
    "AuditLog",
    "CareerApplication",
    "Case",
    "CaseNumberSequence",
    "CaseTimelineEntry",
    "NbfcQuotation",
]

# This project was developed with assistance from AI tools.
"""
Domain enums for the bill-discounting case lifecycle.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class CaseStatus(str, enum.Enum):
    SUBMITTED = "SUBMITTED"
    BUYER_PENDING = "BUYER_PENDING"
    BUYER_APPROVED = "BUYER_APPROVED"
    UNDER_RISK_REVIEW = "UNDER_RISK_REVIEW"
    CWCAF_READY = "CWCAF_READY"
    SHARED_WITH_NBFC = "SHARED_WITH_NBFC"
    QUOTATIONS_RECEIVED = "QUOTATIONS_RECEIVED"
    NBFC_SELECTED = "NBFC_SELECTED"
    DOCUMENTATION_PENDING = "DOCUMENTATION_PENDING"
    DISBURSED = "DISBURSED"
    BUYER_REJECTED = "BUYER_REJECTED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"

    @classmethod
    def workflow(cls) -> tuple["CaseStatus", ...]:
        """Forward path a case follows under normal operation."""
        return (
            cls.SUBMITTED,
            cls.BUYER_PENDING,
            cls.BUYER_APPROVED,
            cls.UNDER_RISK_REVIEW,
            cls.CWCAF_READY,
            cls.SHARED_WITH_NBFC,
            cls.QUOTATIONS_RECEIVED,
            cls.NBFC_SELECTED,
            cls.DOCUMENTATION_PENDING,
            cls.DISBURSED,
        )

    @classmethod
    def terminal_statuses(cls) -> frozenset["CaseStatus"]:
        """Statuses where a case accepts no further transitions."""
        return frozenset({cls.DISBURSED, cls.BUYER_REJECTED, cls.REJECTED, cls.CANCELLED})

    @classmethod
    def closed_statuses(cls) -> frozenset["CaseStatus"]:
        """Terminal statuses reached by abandoning the case."""
        return frozenset({cls.BUYER_REJECTED, cls.REJECTED, cls.CANCELLED})

    @classmethod
    def system_managed(cls) -> frozenset["CaseStatus"]:
        """Statuses entered only by the quotation operations, never by direct transition."""
        return frozenset({cls.QUOTATIONS_RECEIVED, cls.NBFC_SELECTED})

    @classmethod
    def valid_transitions(cls) -> dict["CaseStatus", frozenset["CaseStatus"]]:
        """Allowed status transitions in the case lifecycle."""
        return {
            cls.SUBMITTED: frozenset({cls.BUYER_PENDING, cls.REJECTED, cls.CANCELLED}),
            cls.BUYER_PENDING: frozenset(
                {cls.BUYER_APPROVED, cls.BUYER_REJECTED, cls.CANCELLED}
            ),
            cls.BUYER_APPROVED: frozenset({cls.UNDER_RISK_REVIEW, cls.REJECTED, cls.CANCELLED}),
            cls.UNDER_RISK_REVIEW: frozenset({cls.CWCAF_READY, cls.REJECTED, cls.CANCELLED}),
            cls.CWCAF_READY: frozenset({cls.SHARED_WITH_NBFC, cls.REJECTED, cls.CANCELLED}),
            cls.SHARED_WITH_NBFC: frozenset(
                {cls.QUOTATIONS_RECEIVED, cls.REJECTED, cls.CANCELLED}
            ),
            cls.QUOTATIONS_RECEIVED: frozenset({cls.NBFC_SELECTED, cls.REJECTED, cls.CANCELLED}),
            cls.NBFC_SELECTED: frozenset(
                {cls.DOCUMENTATION_PENDING, cls.REJECTED, cls.CANCELLED}
            ),
            cls.DOCUMENTATION_PENDING: frozenset({cls.DISBURSED, cls.REJECTED, cls.CANCELLED}),
            cls.DISBURSED: frozenset(),
            cls.BUYER_REJECTED: frozenset(),
            cls.REJECTED: frozenset(),
            cls.CANCELLED: frozenset(),
        }


class UserRole(str, enum.Enum):
    SALES = "sales"
    EPC = "epc"
    SUBCONTRACTOR = "subcontractor"
    OPS = "ops"
    RMT = "rmt"
    NBFC = "nbfc"
    FOUNDER = "founder"
    ADMIN = "admin"


class UrgencyLevel(str, enum.Enum):
    NORMAL = "NORMAL"
    URGENT = "URGENT"
    CRITICAL = "CRITICAL"


class InterestPreferenceType(str, enum.Enum):
    RANGE = "RANGE"
    MAX_ACCEPTABLE = "MAX_ACCEPTABLE"


class RepaymentFrequency(str, enum.Enum):
    ONE_TIME = "ONE_TIME"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"


class CareerApplicationStatus(str, enum.Enum):
    NEW = "new"
    REVIEWED = "reviewed"
    INTERVIEW = "interview"
    REJECTED = "rejected"
    HIRED = "hired"


class AuditCategory(str, enum.Enum):
    AUTH = "AUTH"
    DOCUMENT = "DOCUMENT"
    COMPANY = "COMPANY"
    KYC = "KYC"
    BILL = "BILL"
    CASE = "CASE"
    BID = "BID"
    TRANSACTION = "TRANSACTION"
    NBFC = "NBFC"
    ADMIN = "ADMIN"
    RISK = "RISK"
    SLA = "SLA"
    SYSTEM = "SYSTEM"


class AuditAction(str, enum.Enum):
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"
    PASSWORD_RESET = "PASSWORD_RESET"
    DOCUMENT_UPLOAD = "DOCUMENT_UPLOAD"
    DOCUMENT_VIEW = "DOCUMENT_VIEW"
    DOCUMENT_VERIFY = "DOCUMENT_VERIFY"
    DOCUMENT_REJECT = "DOCUMENT_REJECT"
    COMPANY_CREATE = "COMPANY_CREATE"
    COMPANY_UPDATE = "COMPANY_UPDATE"
    COMPANY_VERIFY = "COMPANY_VERIFY"
    COMPANY_REJECT = "COMPANY_REJECT"
    KYC_REQUEST = "KYC_REQUEST"
    KYC_SUBMIT = "KYC_SUBMIT"
    KYC_VERIFY = "KYC_VERIFY"
    KYC_REJECT = "KYC_REJECT"
    KYC_COMPLETE = "KYC_COMPLETE"
    BILL_CREATE = "BILL_CREATE"
    BILL_SUBMIT = "BILL_SUBMIT"
    BILL_VERIFY = "BILL_VERIFY"
    BILL_REJECT = "BILL_REJECT"
    CASE_CREATE = "CASE_CREATE"
    CASE_UPDATE = "CASE_UPDATE"
    CASE_STATUS_CHANGE = "CASE_STATUS_CHANGE"
    CASE_CLOSE = "CASE_CLOSE"
    BID_CREATE = "BID_CREATE"
    BID_UPDATE = "BID_UPDATE"
    BID_ACCEPT = "BID_ACCEPT"
    BID_REJECT = "BID_REJECT"
    TRANSACTION_CREATE = "TRANSACTION_CREATE"
    TRANSACTION_UPDATE = "TRANSACTION_UPDATE"
    DISBURSEMENT = "DISBURSEMENT"
    REPAYMENT = "REPAYMENT"
    NBFC_INVITE = "NBFC_INVITE"
    NBFC_SHARE_CASE = "NBFC_SHARE_CASE"
    NBFC_QUOTE_SUBMIT = "NBFC_QUOTE_SUBMIT"
    USER_CREATE = "USER_CREATE"
    USER_UPDATE = "USER_UPDATE"
    USER_DELETE = "USER_DELETE"
    USER_ACTIVATE = "USER_ACTIVATE"
    USER_DEACTIVATE = "USER_DEACTIVATE"
    SETTINGS_UPDATE = "SETTINGS_UPDATE"
    ROLE_CHANGE = "ROLE_CHANGE"
    RISK_ASSESSMENT = "RISK_ASSESSMENT"
    APPROVAL_REQUEST = "APPROVAL_REQUEST"
    APPROVAL_GRANT = "APPROVAL_GRANT"
    APPROVAL_REJECT = "APPROVAL_REJECT"
    ESCALATION = "ESCALATION"
    SLA_CREATE = "SLA_CREATE"
    SLA_UPDATE = "SLA_UPDATE"
    SLA_COMPLETE = "SLA_COMPLETE"
    SLA_BREACH = "SLA_BREACH"
    OTHER = "OTHER"


class AuditEntityType(str, enum.Enum):
    USER = "User"
    COMPANY = "Company"
    SUBCONTRACTOR = "SubContractor"
    BILL = "Bill"
    CASE = "Case"
    BID = "Bid"
    DOCUMENT = "Document"
    TRANSACTION = "Transaction"
    NBFC = "Nbfc"
    CWCRF = "CwcRf"
    CAREER_APPLICATION = "CareerApplication"
    SLA = "Sla"
    SYSTEM = "System"

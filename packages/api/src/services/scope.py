# This project was developed with assistance from AI tools.
"""Shared data scope filtering for case queries.

Centralizes the DataScope -> SQL WHERE logic so that every service that
reads cases applies the same visibility rules.
"""

from db import Case
from db.enums import CaseStatus
from sqlalchemy import false

from ..schemas.auth import DataScope

_SHARED_STATUSES = frozenset(
    s
    for s in CaseStatus.workflow()
    if CaseStatus.workflow().index(s) >= CaseStatus.workflow().index(CaseStatus.SHARED_WITH_NBFC)
)


def apply_data_scope(stmt, scope: DataScope):
    """Apply case visibility filtering to a SQLAlchemy select on Case.

    A scope that grants nothing yields an always-false predicate rather
    than an unfiltered query.
    """
    if scope.full_pipeline:
        return stmt
    if scope.subcontractor_id is not None:
        return stmt.where(Case.subcontractor_id == scope.subcontractor_id)
    if scope.buyer_id is not None:
        return stmt.where(Case.buyer_id == scope.buyer_id)
    if scope.shared_with_nbfc:
        return stmt.where(Case.status.in_(sorted(_SHARED_STATUSES, key=lambda s: s.value)))
    return stmt.where(false())

# This project was developed with assistance from AI tools.
"""Pure auth utility functions with no FastAPI or HTTP dependencies.

Used by the middleware layer and by service tests that build a
UserContext directly. Keeping them separate from ``middleware/auth.py``
avoids pulling Starlette imports into code that runs outside a request.
"""

from db.enums import UserRole

from ..schemas.auth import DataScope

_FULL_PIPELINE_ROLES = frozenset(
    {UserRole.OPS, UserRole.RMT, UserRole.FOUNDER, UserRole.ADMIN}
)


def build_data_scope(role: UserRole, org_id: str | None) -> DataScope:
    """Build case visibility rules based on the user's role."""
    if role == UserRole.SUBCONTRACTOR:
        # Missing org_id must not widen the scope
        return DataScope(subcontractor_id=org_id or "")
    if role == UserRole.EPC:
        return DataScope(buyer_id=org_id or "")
    if role == UserRole.NBFC:
        return DataScope(shared_with_nbfc=True)
    if role in _FULL_PIPELINE_ROLES:
        return DataScope(full_pipeline=True)
    # sales or unknown -- no case visibility
    return DataScope()

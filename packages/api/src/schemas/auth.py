# This project was developed with assistance from AI tools.
"""Authentication and authorization schemas."""

from db.enums import UserRole
from pydantic import BaseModel, ConfigDict, Field, model_validator


class DataScope(BaseModel):
    """Case visibility rules injected by RBAC middleware."""

    subcontractor_id: str | None = None
    buyer_id: str | None = None
    shared_with_nbfc: bool = False
    full_pipeline: bool = False


class UserContext(BaseModel):
    """Injected by auth middleware into every authenticated request."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    role: UserRole
    email: str
    name: str
    org_id: str | None = None
    data_scope: DataScope = Field(default_factory=DataScope)


class TokenPayload(BaseModel):
    """Decoded bearer token claims."""

    model_config = ConfigDict(extra="ignore")

    sub: str = Field(min_length=1)
    role: str = ""
    email: str = ""
    name: str = ""
    org_id: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _legacy_subject(cls, data):
        if isinstance(data, dict) and not data.get("sub") and data.get("id"):
            return {**data, "sub": str(data["id"])}
        return data

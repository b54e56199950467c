# This project was developed with assistance from AI tools.
"""Tests for JWT authentication middleware."""

from datetime import UTC, datetime, timedelta

import jwt
import pytest
from db.enums import UserRole
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from src.core.config import settings
from src.middleware.auth import CurrentUser, _resolve_role, require_roles
from src.schemas.auth import TokenPayload


def _token(
    secret: str | None = None,
    expires_in: timedelta = timedelta(minutes=5),
    **claims,
) -> str:
    payload = {
        "sub": "user-1",
        "role": "subcontractor",
        "email": "user-1@example.com",
        "name": "Kiran Rao",
        "org_id": "sc-100",
        "exp": datetime.now(UTC) + expires_in,
    }
    payload.update(claims)
    payload = {k: v for k, v in payload.items() if v is not None}
    return jwt.encode(payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _me_app() -> FastAPI:
    app = FastAPI()

    @app.get("/me")
    async def me(user: CurrentUser):
        return {
            "user_id": user.user_id,
            "role": user.role.value,
            "name": user.name,
            "org_id": user.org_id,
            "scope": user.data_scope.model_dump(),
        }

    return app


# ---------------------------------------------------------------------------
# AUTH_DISABLED bypass
# ---------------------------------------------------------------------------


def test_auth_disabled_returns_dev_admin(monkeypatch):
    """When AUTH_DISABLED=true, any request gets a dev admin user."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    resp = TestClient(_me_app()).get("/me")
    assert resp.status_code == 200
    body = resp.json()
    assert body["user_id"] == "dev-user"
    assert body["role"] == "admin"


# ---------------------------------------------------------------------------
# Token validation
# ---------------------------------------------------------------------------


def test_valid_token_builds_user_context(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    resp = TestClient(_me_app()).get("/me", headers={"Authorization": f"Bearer {_token()}"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["user_id"] == "user-1"
    assert body["role"] == "subcontractor"
    assert body["name"] == "Kiran Rao"
    assert body["org_id"] == "sc-100"
    assert body["scope"]["subcontractor_id"] == "sc-100"
    assert body["scope"]["full_pipeline"] is False


def test_missing_token_returns_401(monkeypatch):
    """A request with no Authorization header should get 401."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    resp = TestClient(_me_app()).get("/me")
    assert resp.status_code == 401
    assert "Missing authentication token" in resp.json()["detail"]


def test_expired_token_returns_401(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    token = _token(expires_in=timedelta(minutes=-1))
    resp = TestClient(_me_app()).get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Token has expired"


def test_wrong_signature_returns_401(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    token = _token(secret="some-other-service-secret-of-adequate-length")
    resp = TestClient(_me_app()).get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


def test_legacy_id_claim_is_subject(monkeypatch):
    """Tokens minted by the Node auth service carry ``id`` instead of ``sub``."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    token = _token(sub=None, id="64f1c0ffee", role="NBFC", org_id="nbfc-a")
    resp = TestClient(_me_app()).get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["user_id"] == "64f1c0ffee"
    assert resp.json()["scope"]["shared_with_nbfc"] is True


def test_token_without_subject_returns_401(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    token = _token(sub=None)
    resp = TestClient(_me_app()).get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token claims"


def test_unknown_role_returns_403(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", False)

    token = _token(role="guest")
    resp = TestClient(_me_app()).get("/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 403
    assert "No recognized role assigned" in resp.json()["detail"]


# ---------------------------------------------------------------------------
# Role resolution
# ---------------------------------------------------------------------------


def test_resolve_role_is_case_insensitive():
    assert _resolve_role(TokenPayload(sub="user-1", role="NBFC")) == UserRole.NBFC


def test_resolve_role_no_known_role_raises_value_error():
    """_resolve_role raises ValueError when the role claim is not a platform role."""
    with pytest.raises(ValueError, match="No recognized role assigned"):
        _resolve_role(TokenPayload(sub="user-1", role=""))


# ---------------------------------------------------------------------------
# require_roles dependency
# ---------------------------------------------------------------------------


def test_require_roles_rejects_wrong_role(monkeypatch):
    """require_roles returns 403 when user's role is not in allowed set."""
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    @app.get("/nbfc-only", dependencies=[Depends(require_roles(UserRole.NBFC))])
    async def nbfc_only(user: CurrentUser):
        return {"ok": True}

    # dev-user is admin, not nbfc
    resp = TestClient(app).get("/nbfc-only")
    assert resp.status_code == 403
    assert "Insufficient permissions" in resp.json()["detail"]


def test_require_roles_allows_listed_role(monkeypatch):
    monkeypatch.setattr(settings, "AUTH_DISABLED", True)

    app = FastAPI()

    admin_or_founder_only = Depends(require_roles(UserRole.ADMIN, UserRole.FOUNDER))

    @app.get("/admin-or-founder", dependencies=[admin_or_founder_only])
    async def admin_or_founder(user: CurrentUser):
        return {"ok": True}

    resp = TestClient(app).get("/admin-or-founder")
    assert resp.status_code == 200

# This project was developed with assistance from AI tools.
"""
Bearer-token authentication and role checks.

Tokens are HS256 JWTs issued by the Gryork auth service with the shared
``JWT_SECRET``. The subject comes from ``sub`` (or the legacy ``id`` claim
the Node services still mint); ``role`` must name a platform role and
``org_id`` ties the account to its sub-contractor, EPC or NBFC.

Set AUTH_DISABLED=true to bypass validation (tests / local dev).
"""

import logging
from typing import Annotated

import jwt
import pydantic
from db.enums import UserRole
from fastapi import Depends, HTTPException, Request, status

from ..core.auth import build_data_scope
from ..core.config import settings
from ..schemas.auth import DataScope, TokenPayload, UserContext
from .request_context import get_request_context

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "Bearer "


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if header.startswith(_BEARER_PREFIX):
        return header[len(_BEARER_PREFIX) :].strip() or None
    return None


def _decode_token(token: str) -> TokenPayload:
    """Verify signature and expiry, then parse the claims."""
    claims = jwt.decode(
        token,
        settings.JWT_SECRET,
        algorithms=[settings.JWT_ALGORITHM],
        options={"require": ["exp"]},
    )
    return TokenPayload.model_validate(claims)


def _resolve_role(token_payload: TokenPayload) -> UserRole:
    """Map the token's role claim onto a known UserRole."""
    try:
        return UserRole(token_payload.role.strip().lower())
    except ValueError:
        raise ValueError("No recognized role assigned") from None


_DISABLED_USER = UserContext(
    user_id="dev-user",
    role=UserRole.ADMIN,
    email="dev@gryork.local",
    name="Dev User",
    data_scope=DataScope(full_pipeline=True),
)


async def get_current_user(request: Request) -> UserContext:
    """FastAPI dependency: the authenticated caller.

    401 for a missing, expired, forged or malformed token; 403 when the
    token is valid but carries no platform role.
    """
    if settings.AUTH_DISABLED:
        return _DISABLED_USER

    token = _bearer_token(request)
    if token is None:
        raise _unauthorized("Missing authentication token")

    try:
        payload = _decode_token(token)
    except jwt.ExpiredSignatureError as exc:
        raise _unauthorized("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise _unauthorized("Invalid token") from exc
    except pydantic.ValidationError as exc:
        raise _unauthorized("Invalid token claims") from exc

    try:
        role = _resolve_role(payload)
    except ValueError as exc:
        logger.warning("Token for %s has unrecognized role %r", payload.sub, payload.role)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

    return UserContext(
        user_id=payload.sub,
        role=role,
        email=payload.email,
        name=payload.name or payload.email or payload.sub,
        org_id=payload.org_id,
        data_scope=build_data_scope(role, payload.org_id),
    )


CurrentUser = Annotated[UserContext, Depends(get_current_user)]


def require_roles(*allowed_roles: UserRole):
    """Route dependency allowing only ``allowed_roles``; others get 403."""
    allowed = frozenset(allowed_roles)

    async def _check(user: CurrentUser) -> UserContext:
        if user.role not in allowed:
            logger.warning(
                "RBAC denied: user=%s role=%s path=%s allowed=%s",
                user.user_id,
                user.role.value,
                _request_path(),
                sorted(r.value for r in allowed),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return _check


def _request_path() -> str | None:
    ctx = get_request_context()
    return ctx.path if ctx else None


# This project was developed with assistance from AI tools.
"""RFC 7807 Problem Details error bodies returned by every endpoint."""

from pydantic import BaseModel, Field

PROBLEM_TYPE_PREFIX = "/problems/"


class FieldError(BaseModel):
    """One rejected input field from request validation."""

    loc: list[str | int]
    msg: str
    type: str


class ErrorResponse(BaseModel):
    """Problem Details body.

    ``type`` is ``about:blank`` for plain HTTP errors and
    ``/problems/<slug>`` for domain failures (``invalid-transition``,
    ``stale-case``, ``already-selected`` ...), so clients can branch on it
    without parsing ``detail``.
    """

    type: str = "about:blank"
    title: str
    status: int
    detail: str = ""
    request_id: str = Field(default="", description="Echo of the X-Request-Id correlation header.")
    instance: str = Field(default="", description="Request path that produced the problem.")
    errors: list[FieldError] | None = None

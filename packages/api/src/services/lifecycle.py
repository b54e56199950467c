# This project was developed with assistance from AI tools.
"""Case lifecycle rules as pure functions of a status value.

No database or framework imports: the same functions back the
transition guard in ``services.case`` and the progress view returned
to the portals.
"""

from db.enums import CaseStatus

from ..core.exceptions import InvalidTransitionError

_WORKFLOW = CaseStatus.workflow()
_TRANSITIONS = CaseStatus.valid_transitions()
_TERMINAL = CaseStatus.terminal_statuses()
_SYSTEM_MANAGED = CaseStatus.system_managed()


def is_terminal(status: CaseStatus) -> bool:
    return status in _TERMINAL


def stage_index(status: CaseStatus) -> int:
    """Position on the forward path, or -1 for rejection/cancellation states."""
    try:
        return _WORKFLOW.index(status)
    except ValueError:
        return -1


def progress_percent(status: CaseStatus) -> int:
    """0 at SUBMITTED, 100 at DISBURSED; side-branch states report 0."""
    idx = stage_index(status)
    if idx < 0:
        return 0
    return round(idx * 100 / (len(_WORKFLOW) - 1))


def allowed_next(status: CaseStatus) -> list[CaseStatus]:
    """Statuses a caller may request via a direct transition, in workflow order."""
    allowed = _TRANSITIONS.get(status, frozenset()) - _SYSTEM_MANAGED
    return sorted(allowed, key=_sort_key)


def _sort_key(status: CaseStatus) -> tuple[int, str]:
    idx = stage_index(status)
    return (idx if idx >= 0 else len(_WORKFLOW), status.value)


def check_transition(
    current: CaseStatus,
    target: CaseStatus,
    *,
    system: bool = False,
) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is permitted.

    Args:
        system: True when called from the quotation operations, which are
            the only callers allowed to enter system-managed statuses.
    """
    allowed = _TRANSITIONS.get(current, frozenset())
    if not system:
        allowed = allowed - _SYSTEM_MANAGED

    if target not in allowed:
        if allowed:
            options = str([s.value for s in sorted(allowed, key=_sort_key)])
        else:
            options = "none (terminal status)"
        raise InvalidTransitionError(
            f"Cannot transition from '{current.value}' to '{target.value}'. Allowed: {options}."
        )

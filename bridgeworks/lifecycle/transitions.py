"""
Transition table for the request lifecycle.

    submitted → under-review → {accepted, declined}
    accepted → planned → in-development → released

declined and released are terminal.  Only product and admin users drive
the workflow; sales users never get a proposable transition.
"""

from __future__ import annotations

from bridgeworks.models.enums import RequestStatus, UserRole
from bridgeworks.models.schemas import TransitionOption

WORKFLOW_ROLES: frozenset[UserRole] = frozenset({UserRole.PRODUCT, UserRole.ADMIN})

TRANSITIONS: dict[RequestStatus, tuple[TransitionOption, ...]] = {
    RequestStatus.SUBMITTED: (
        TransitionOption(status=RequestStatus.UNDER_REVIEW, label="Move to Review"),
    ),
    RequestStatus.UNDER_REVIEW: (
        TransitionOption(status=RequestStatus.ACCEPTED, label="Accept Request"),
        TransitionOption(status=RequestStatus.DECLINED, label="Decline Request"),
    ),
    RequestStatus.ACCEPTED: (
        TransitionOption(status=RequestStatus.PLANNED, label="Move to Planning"),
    ),
    RequestStatus.PLANNED: (
        TransitionOption(status=RequestStatus.IN_DEVELOPMENT, label="Start Development"),
    ),
    RequestStatus.IN_DEVELOPMENT: (
        TransitionOption(status=RequestStatus.RELEASED, label="Mark as Released"),
    ),
    RequestStatus.DECLINED: (),
    RequestStatus.RELEASED: (),
}


def propose_transition(
    current_status: "RequestStatus | str",
    role: "UserRole | str",
) -> frozenset[TransitionOption]:
    """Statuses the given role may move a request to from ``current_status``."""
    status = RequestStatus(current_status)
    if UserRole(role) not in WORKFLOW_ROLES:
        return frozenset()
    return frozenset(TRANSITIONS[status])


def is_transition_allowed(
    current_status: "RequestStatus | str",
    new_status: "RequestStatus | str",
    role: "UserRole | str",
) -> bool:
    target = RequestStatus(new_status)
    return any(option.status == target for option in propose_transition(current_status, role))

"""
Lifecycle State Machine — validates a status change and builds its records.

These functions never touch storage: they take a request snapshot and
return the updated copy plus the StatusUpdate to append.  The caller
(RequestService) owns persistence and per-request locking.  Every check
runs before anything is built, so a failure leaves no partial state.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from bridgeworks.errors import AuthenticationError, AuthorizationError, ValidationError
from bridgeworks.lifecycle.transitions import is_transition_allowed
from bridgeworks.models.enums import RequestCategory, RequestStatus
from bridgeworks.models.schemas import (
    FeatureRequest,
    RequestDraft,
    StatusUpdate,
    User,
    utc_now,
)

logger = logging.getLogger(__name__)

REQUIRED_DRAFT_FIELDS = ("title", "description", "business_impact", "customer_name")


def new_request_id() -> str:
    return f"REQ-{uuid.uuid4().hex[:8].upper()}"


def new_status_update_id() -> str:
    return f"SU-{uuid.uuid4().hex[:8].upper()}"


def require_text(value: Optional[str], field: str) -> str:
    """Return the stripped value or raise ValidationError if blank."""
    if value is None or not value.strip():
        raise ValidationError(field, "must not be empty")
    return value.strip()


def parse_status(value: "RequestStatus | str", field: str = "new_status") -> RequestStatus:
    try:
        return RequestStatus(value)
    except ValueError:
        raise ValidationError(field, f"unknown status '{value}'") from None


def create_request(
    draft: RequestDraft,
    requester: Optional[User],
    now: Optional[datetime] = None,
) -> tuple[FeatureRequest, StatusUpdate]:
    """
    Build a new request in ``submitted`` plus its initial StatusUpdate.

    Raises:
        AuthenticationError: no requester.
        ValidationError: a required draft field is blank.
    """
    if requester is None:
        raise AuthenticationError("create a request")
    for field in REQUIRED_DRAFT_FIELDS:
        require_text(getattr(draft, field), field)

    now = now or utc_now()
    request = FeatureRequest(
        id=new_request_id(),
        title=draft.title.strip(),
        description=draft.description.strip(),
        business_impact=draft.business_impact.strip(),
        customer_name=draft.customer_name.strip(),
        category=RequestCategory.resolve(draft.category),
        current_status=RequestStatus.SUBMITTED,
        requested_timeline=draft.requested_timeline or None,
        use_case=draft.use_case or None,
        crm_link=draft.crm_link or None,
        creation_date=now,
        last_updated_date=now,
        requested_by=requester,
    )
    update = StatusUpdate(
        id=new_status_update_id(),
        request_id=request.id,
        new_status=RequestStatus.SUBMITTED,
        updated_by=requester,
        update_date=now,
        comment=f"Initial submission: {request.title}",
    )
    return request, update


def apply_transition(
    request: FeatureRequest,
    new_status: "RequestStatus | str",
    comment: Optional[str],
    actor: Optional[User],
    now: Optional[datetime] = None,
) -> tuple[FeatureRequest, StatusUpdate]:
    """
    Move ``request`` to ``new_status`` on behalf of ``actor``.

    The target must be one of the options proposed for the request's
    current status and the actor's role; terminal states propose nothing.

    Raises:
        AuthenticationError: no actor.
        ValidationError: blank comment or unknown status.
        AuthorizationError: target not reachable for this role from here.
    """
    if actor is None:
        raise AuthenticationError("update a request status")
    text = require_text(comment, "comment")
    target = parse_status(new_status)
    current = request.current_status

    if not is_transition_allowed(current, target, actor.role):
        logger.warning(
            f"[{request.id}] Rejected {current.value} → {target.value} "
            f"for {actor.name} ({actor.role.value})"
        )
        raise AuthorizationError(current.value, target.value, actor.role.value)

    now = now or utc_now()
    if now < request.last_updated_date:
        now = request.last_updated_date

    updated = request.model_copy(update={"current_status": target, "last_updated_date": now})
    update = StatusUpdate(
        id=new_status_update_id(),
        request_id=request.id,
        new_status=target,
        updated_by=actor,
        update_date=now,
        comment=text,
    )
    logger.info(f"[{request.id}] {current.value} → {target.value} by {actor.name}")
    return updated, update

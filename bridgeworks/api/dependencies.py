"""
Request-scoped dependencies: the acting user and the services on app.state.

The acting user is read from headers (prefix configurable, default
``X-User-``):  X-User-Id, X-User-Name, X-User-Role, X-User-Email.
No X-User-Id → no actor; mutating routes then answer 401.
"""

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request

from bridgeworks.config import get_settings
from bridgeworks.models.enums import UserRole
from bridgeworks.models.schemas import User
from bridgeworks.services import ReportingService, RequestService


def get_request_service(request: Request) -> RequestService:
    return request.app.state.request_service


def get_reporting_service(request: Request) -> ReportingService:
    return request.app.state.reporting_service


def get_current_actor(request: Request) -> Optional[User]:
    prefix = get_settings().actor_header_prefix
    user_id = request.headers.get(f"{prefix}Id", "").strip()
    if not user_id:
        return None

    raw_role = request.headers.get(f"{prefix}Role", "").strip().lower()
    try:
        role = UserRole(raw_role)
    except ValueError:
        raise HTTPException(status_code=401, detail=f"Unknown role '{raw_role}'") from None

    return User(
        id=user_id,
        name=request.headers.get(f"{prefix}Name", "").strip() or user_id,
        role=role,
        email=request.headers.get(f"{prefix}Email", "").strip(),
    )

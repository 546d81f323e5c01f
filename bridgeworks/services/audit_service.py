"""
Audit Service — records and queries the status-change trail.
"""

from __future__ import annotations

import logging

from bridgeworks.models.schemas import StatusUpdate
from bridgeworks.persistence.request_repository import RequestStore

logger = logging.getLogger(__name__)


class AuditService:
    """
    Append-only trail of StatusUpdate records kept in the request store.
    Records are never mutated or deleted.
    """

    def __init__(self, store: RequestStore):
        self.store = store

    def record(self, update: StatusUpdate) -> StatusUpdate:
        """Append a status update and return it."""
        self.store.append_status_update(update)
        logger.debug(
            f"[AUDIT] {update.request_id} → {update.new_status.value} "
            f"by {update.updated_by.name}: {update.comment}"
        )
        return update

    def get_trail(self, request_id: str) -> list[StatusUpdate]:
        """All updates for a request, oldest first (ties keep append order)."""
        return sorted(self.store.status_updates_for(request_id), key=lambda u: u.update_date)

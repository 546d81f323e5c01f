"""
Request Repository — the store behind the lifecycle service.

Holds requests (mutable, replaced wholesale on update) and the two
append-only collections of StatusUpdate and Note records.  Uses in-memory
dicts; anything implementing ``RequestStore`` can be injected instead.

Each record is atomic on its own.  Multi-step read-validate-write
sequences must hold ``lock_for(request_id)``, which exists only once the
request has been added.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol

from bridgeworks.models.schemas import FeatureRequest, Note, StatusUpdate

logger = logging.getLogger(__name__)


class RequestStore(Protocol):
    def find(self, request_id: str) -> Optional[FeatureRequest]: ...
    def add(self, request: FeatureRequest) -> None: ...
    def update(self, request: FeatureRequest) -> None: ...
    def list_requests(self) -> list[FeatureRequest]: ...
    def append_status_update(self, update: StatusUpdate) -> None: ...
    def status_updates_for(self, request_id: str) -> list[StatusUpdate]: ...
    def append_note(self, note: Note) -> None: ...
    def notes_for(self, request_id: str) -> list[Note]: ...
    def lock_for(self, request_id: str) -> Optional[threading.Lock]: ...


class InMemoryRequestRepository:
    """
    Thread-safe in-memory store.  Returned requests are copies, so callers
    must go through ``update()`` to change stored state.
    """

    def __init__(self):
        self._requests: dict[str, FeatureRequest] = {}
        self._status_updates: list[StatusUpdate] = []
        self._notes: list[Note] = []
        self._guard = threading.Lock()
        self._request_locks: dict[str, threading.Lock] = {}

    # ── Requests ─────────────────────────────────────────

    def find(self, request_id: str) -> Optional[FeatureRequest]:
        with self._guard:
            request = self._requests.get(request_id)
            return request.model_copy(deep=True) if request else None

    def add(self, request: FeatureRequest) -> None:
        with self._guard:
            if request.id in self._requests:
                raise KeyError(f"Request {request.id} already exists")
            self._requests[request.id] = request.model_copy(deep=True)
            self._request_locks[request.id] = threading.Lock()
        logger.debug(f"Stored request {request.id}")

    def update(self, request: FeatureRequest) -> None:
        with self._guard:
            if request.id not in self._requests:
                raise KeyError(f"Request {request.id} does not exist")
            self._requests[request.id] = request.model_copy(deep=True)

    def list_requests(self) -> list[FeatureRequest]:
        with self._guard:
            return [r.model_copy(deep=True) for r in self._requests.values()]

    # ── Append-only collections ──────────────────────────

    def append_status_update(self, update: StatusUpdate) -> None:
        with self._guard:
            self._status_updates.append(update)

    def status_updates_for(self, request_id: str) -> list[StatusUpdate]:
        """Updates for one request in append order."""
        with self._guard:
            return [u for u in self._status_updates if u.request_id == request_id]

    def append_note(self, note: Note) -> None:
        with self._guard:
            self._notes.append(note)

    def notes_for(self, request_id: str) -> list[Note]:
        with self._guard:
            return [n for n in self._notes if n.request_id == request_id]

    # ── Locking ──────────────────────────────────────────

    def lock_for(self, request_id: str) -> Optional[threading.Lock]:
        """The single mutex serializing mutations of one request, None if unknown."""
        with self._guard:
            return self._request_locks.get(request_id)

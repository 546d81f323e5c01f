"""
Request Service — the operations the UI layer calls.

    create_request(draft, requester)                        → FeatureRequest
    apply_status_transition(request_id, status, comment, actor) → StatusUpdate
    add_note(request_id, content, type, author)             → Note
    update_opportunity(request_id, value, stage, close_date, actor)
    predict_revenue(request) / refresh_prediction(request_id)
    suggest_features(category, title)

Mutations of an existing request run under the store's per-request lock:
find → validate → update → append.  Two racing transitions on one request
are therefore serialized; the loser re-validates against the winner's status.
"""

from __future__ import annotations

import logging
import math
import threading
import uuid
from datetime import date, datetime
from typing import Any, Callable, Optional

from bridgeworks.errors import AuthenticationError, NotFoundError, ValidationError
from bridgeworks.lifecycle import state_machine
from bridgeworks.lifecycle.transitions import propose_transition
from bridgeworks.models.enums import NoteType, RequestCategory, RequestStatus
from bridgeworks.models.schemas import (
    CRMOpportunity,
    FeatureRequest,
    FeatureSuggestionBundle,
    Note,
    RequestDraft,
    RevenuePrediction,
    StatusUpdate,
    TransitionOption,
    User,
    utc_now,
)
from bridgeworks.persistence.request_repository import InMemoryRequestRepository, RequestStore
from bridgeworks.scoring.notes import score_note
from bridgeworks.scoring.revenue import RevenuePredictor
from bridgeworks.scoring.suggestions import FeatureSuggester
from bridgeworks.services.audit_service import AuditService

logger = logging.getLogger(__name__)


class RequestService:
    """Coordinates the state machine, the scoring engines and the store."""

    def __init__(
        self,
        store: Optional[RequestStore] = None,
        predictor: Optional[RevenuePredictor] = None,
        suggester: Optional[FeatureSuggester] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store if store is not None else InMemoryRequestRepository()
        self.predictor = predictor or RevenuePredictor()
        self.suggester = suggester or FeatureSuggester()
        self.clock = clock or utc_now
        self.audit = AuditService(self.store)

    # ── Create ───────────────────────────────────────────

    def create_request(self, draft: RequestDraft, requester: Optional[User]) -> FeatureRequest:
        """Submit a new request, seed its audit trail and cache a prediction."""
        request, initial_update = state_machine.create_request(draft, requester, now=self.clock())
        request.revenue_prediction = self.predictor.predict_for_request(request)

        self.store.add(request)
        self.audit.record(initial_update)
        logger.info(f"[{request.id}] Created '{request.title}' for {request.customer_name}")
        return request

    def _lock(self, request_id: str) -> threading.Lock:
        lock = self.store.lock_for(request_id)
        if lock is None:
            raise NotFoundError(request_id)
        return lock

    # ── Queries ──────────────────────────────────────────

    def get_request(self, request_id: str) -> FeatureRequest:
        request = self.store.find(request_id)
        if request is None:
            raise NotFoundError(request_id)
        return request

    def list_requests(
        self,
        search: Optional[str] = None,
        status: "RequestStatus | str | None" = None,
    ) -> list[FeatureRequest]:
        """Requests matching a title/customer search and status, newest activity first."""
        wanted = state_machine.parse_status(status, "status") if status else None
        needle = (search or "").strip().lower()

        results = [
            r for r in self.store.list_requests()
            if (wanted is None or r.current_status == wanted)
            and (not needle or needle in r.title.lower() or needle in r.customer_name.lower())
        ]
        results.sort(key=lambda r: r.last_updated_date, reverse=True)
        return results

    def get_status_history(self, request_id: str) -> list[StatusUpdate]:
        self.get_request(request_id)
        return self.audit.get_trail(request_id)

    def get_notes(self, request_id: str) -> list[Note]:
        self.get_request(request_id)
        return sorted(self.store.notes_for(request_id), key=lambda n: n.creation_date)

    def available_transitions(self, request_id: str, actor: Optional[User]) -> list[TransitionOption]:
        request = self.get_request(request_id)
        if actor is None:
            return []
        options = propose_transition(request.current_status, actor.role)
        return sorted(options, key=lambda o: o.label)

    # ── Lifecycle ────────────────────────────────────────

    def apply_status_transition(
        self,
        request_id: str,
        new_status: "RequestStatus | str",
        comment: Optional[str],
        actor: Optional[User],
    ) -> StatusUpdate:
        """
        Move a request to ``new_status``.

        Raises:
            AuthenticationError, ValidationError, AuthorizationError, NotFoundError
        """
        if actor is None:
            raise AuthenticationError("update a request status")

        with self._lock(request_id):
            request = self.get_request(request_id)
            updated, update = state_machine.apply_transition(
                request, new_status, comment, actor, now=self.clock()
            )
            self.store.update(updated)
            self.audit.record(update)
        return update

    # ── Notes ────────────────────────────────────────────

    def add_note(
        self,
        request_id: str,
        content: Optional[str],
        note_type: "NoteType | str",
        author: Optional[User],
    ) -> Note:
        """Attach a note; transcripts are scored on the way in."""
        if author is None:
            raise AuthenticationError("add a note")
        state_machine.require_text(content, "content")
        text = content
        try:
            kind = NoteType(note_type)
        except ValueError:
            raise ValidationError("type", f"unknown note type '{note_type}'") from None

        with self._lock(request_id):
            self.get_request(request_id)
            scores = score_note(text, kind)
            note = Note(
                id=f"NOTE-{uuid.uuid4().hex[:8].upper()}",
                request_id=request_id,
                content=text,
                type=kind,
                created_by=author,
                creation_date=self.clock(),
                sentiment_score=scores.sentiment_score if scores else None,
                deal_quality_score=scores.deal_quality_score if scores else None,
            )
            self.store.append_note(note)

        logger.info(f"[{request_id}] {kind.value} added by {author.name}")
        return note

    # ── CRM opportunity ──────────────────────────────────

    def update_opportunity(
        self,
        request_id: str,
        value: Any,
        stage: Optional[str],
        close_date: Any,
        actor: Optional[User],
    ) -> FeatureRequest:
        """Replace the request's CRM opportunity with the supplied details."""
        if actor is None:
            raise AuthenticationError("update opportunity details")
        amount = _parse_amount(value)
        stage_text = state_machine.require_text(stage, "stage")
        closes_on = _parse_date(close_date)

        with self._lock(request_id):
            request = self.get_request(request_id)
            now = max(self.clock(), request.last_updated_date)
            existing = request.opportunity
            request.opportunity = CRMOpportunity(
                id=existing.id if existing else f"OPP-{uuid.uuid4().hex[:8].upper()}",
                name=existing.name if existing else f"{request.customer_name} - {request.title}",
                value=amount,
                stage=stage_text,
                close_date=closes_on,
                last_updated_date=now,
            )
            request.last_updated_date = now
            self.store.update(request)

        logger.info(f"[{request_id}] Opportunity updated: ${amount:,.2f} ({stage_text})")
        return request

    # ── Scoring ──────────────────────────────────────────

    def predict_revenue(self, request: FeatureRequest) -> RevenuePrediction:
        return self.predictor.predict_for_request(request)

    def refresh_prediction(self, request_id: str) -> RevenuePrediction:
        """Recompute and cache the prediction for a stored request."""
        with self._lock(request_id):
            request = self.get_request(request_id)
            prediction = self.predict_revenue(request)
            request.revenue_prediction = prediction
            self.store.update(request)
        return prediction

    def suggest_features(self, category: "RequestCategory | str | None", title: str) -> FeatureSuggestionBundle:
        return self.suggester.suggest(category, title)


# ── Input parsing (module-level) ─────────────────────────

def _parse_amount(value: Any) -> float:
    if isinstance(value, bool) or value is None:
        raise ValidationError("value", "must be a positive number")
    try:
        amount = float(str(value).replace(",", "").lstrip("$").strip())
    except ValueError:
        raise ValidationError("value", f"'{value}' is not a number") from None
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError("value", "must be a positive number")
    return amount


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not str(value).strip():
        raise ValidationError("close_date", "must not be empty")
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValidationError("close_date", f"'{value}' is not an ISO date") from None

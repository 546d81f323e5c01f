"""
Tests: RequestService end to end over the in-memory store.

Covers the full lifecycle chain, notes, CRM opportunity updates, cached
predictions, queries, and two transitions racing on the same request.

Run with:
    pytest bridgeworks/tests/test_request_service.py -v
"""

import random
import threading
from datetime import date, datetime, timedelta, timezone

import pytest

from bridgeworks.errors import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from bridgeworks.models.enums import NoteType, RequestCategory, RequestStatus, UserRole
from bridgeworks.models.schemas import RequestDraft, User
from bridgeworks.persistence import InMemoryRequestRepository
from bridgeworks.scoring import CatalogStore, FeatureSuggester, RevenuePredictor
from bridgeworks.services import RequestService

SALES = User(id="u-1", name="Sam Sales", role=UserRole.SALES)
PRODUCT = User(id="u-2", name="Pat Product", role=UserRole.PRODUCT)
ADMIN = User(id="u-3", name="Ada Admin", role=UserRole.ADMIN)


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def _service(clock=None, seed: int = 7) -> RequestService:
    catalogs = CatalogStore(catalog_path="")
    return RequestService(
        store=InMemoryRequestRepository(),
        predictor=RevenuePredictor(catalogs.get_revenue_catalog(), rng=random.Random(seed)),
        suggester=FeatureSuggester(catalogs.get_suggestion_catalog()),
        clock=clock,
    )


def _draft(**overrides) -> RequestDraft:
    fields = {
        "title": "Salesforce Sync",
        "description": "Two-way sync of accounts and contacts",
        "business_impact": "Enterprise deal worth $100K",
        "customer_name": "Acme Corp",
        "category": RequestCategory.API_INTEGRATION,
        "requested_timeline": "Q3 2025",
    }
    fields.update(overrides)
    return RequestDraft(**fields)


LIFECYCLE = [
    (RequestStatus.UNDER_REVIEW, "Picking this up"),
    (RequestStatus.ACCEPTED, "Strong revenue case"),
    (RequestStatus.PLANNED, "Scheduled for Q3"),
    (RequestStatus.IN_DEVELOPMENT, "Sprint 14"),
    (RequestStatus.RELEASED, "Shipped in 4.2"),
]


class TestCreateAndQuery:
    def test_create_caches_prediction_and_seeds_history(self):
        service = _service()
        request = service.create_request(_draft(), SALES)

        stored = service.get_request(request.id)
        assert stored.current_status == RequestStatus.SUBMITTED
        assert stored.revenue_prediction is not None
        assert stored.revenue_prediction.predicted_revenue >= 10_000

        history = service.get_status_history(request.id)
        assert len(history) == 1
        assert history[0].comment == "Initial submission: Salesforce Sync"

    def test_create_requires_login(self):
        with pytest.raises(AuthenticationError):
            _service().create_request(_draft(), None)

    def test_create_validation_leaves_store_empty(self):
        service = _service()
        with pytest.raises(ValidationError):
            service.create_request(_draft(customer_name=""), SALES)
        assert service.list_requests() == []

    def test_unknown_request(self):
        service = _service()
        with pytest.raises(NotFoundError):
            service.get_request("REQ-MISSING")
        with pytest.raises(NotFoundError):
            service.get_status_history("REQ-MISSING")

    def test_list_filters_and_orders(self):
        clock = FakeClock()
        service = _service(clock)
        first = service.create_request(_draft(title="Salesforce Sync"), SALES)
        clock.advance(hours=1)
        second = service.create_request(_draft(title="Audit Log Export", customer_name="Globex"), SALES)
        clock.advance(hours=1)
        service.apply_status_transition(first.id, "under-review", "Reviewing", PRODUCT)

        assert [r.id for r in service.list_requests()] == [first.id, second.id]
        assert [r.id for r in service.list_requests(search="globex")] == [second.id]
        assert [r.id for r in service.list_requests(status="submitted")] == [second.id]

    def test_list_rejects_unknown_status(self):
        with pytest.raises(ValidationError) as exc:
            _service().list_requests(status="shipped")
        assert exc.value.field == "status"

    def test_seeded_services_predict_alike(self):
        a = _service(seed=11).create_request(_draft(), SALES)
        b = _service(seed=11).create_request(_draft(), SALES)
        assert a.revenue_prediction == b.revenue_prediction

    def test_refresh_prediction_is_stored(self):
        service = _service()
        request = service.create_request(_draft(), SALES)
        refreshed = service.refresh_prediction(request.id)
        assert service.get_request(request.id).revenue_prediction == refreshed

    def test_stores_are_isolated(self):
        a, b = _service(), _service()
        request = a.create_request(_draft(), SALES)
        with pytest.raises(NotFoundError):
            b.get_request(request.id)


class TestLifecycle:
    def test_full_lifecycle_history(self):
        clock = FakeClock()
        service = _service(clock)
        request = service.create_request(_draft(), SALES)

        for status, comment in LIFECYCLE:
            clock.advance(days=1)
            service.apply_status_transition(request.id, status, comment, PRODUCT)

        history = service.get_status_history(request.id)
        assert [u.new_status for u in history] == [RequestStatus.SUBMITTED] + [s for s, _ in LIFECYCLE]
        assert [u.comment for u in history[1:]] == [c for _, c in LIFECYCLE]
        dates = [u.update_date for u in history]
        assert dates == sorted(dates)

        stored = service.get_request(request.id)
        assert stored.current_status == RequestStatus.RELEASED
        assert stored.last_updated_date == history[-1].update_date

    def test_history_ties_keep_append_order(self):
        service = _service(FakeClock())
        request = service.create_request(_draft(), SALES)
        service.apply_status_transition(request.id, "under-review", "a", ADMIN)
        service.apply_status_transition(request.id, "declined", "b", ADMIN)
        assert [u.comment for u in service.get_status_history(request.id)][1:] == ["a", "b"]

    def test_rejected_transition_changes_nothing(self):
        service = _service()
        request = service.create_request(_draft(), SALES)

        with pytest.raises(AuthorizationError):
            service.apply_status_transition(request.id, "accepted", "skip ahead", ADMIN)
        with pytest.raises(AuthorizationError):
            service.apply_status_transition(request.id, "under-review", "mine", SALES)

        assert service.get_request(request.id).current_status == RequestStatus.SUBMITTED
        assert len(service.get_status_history(request.id)) == 1

    def test_transition_requires_login(self):
        service = _service()
        request = service.create_request(_draft(), SALES)
        with pytest.raises(AuthenticationError):
            service.apply_status_transition(request.id, "under-review", "ok", None)

    def test_transition_on_unknown_request(self):
        with pytest.raises(NotFoundError):
            _service().apply_status_transition("REQ-MISSING", "under-review", "ok", PRODUCT)

    def test_available_transitions(self):
        service = _service()
        request = service.create_request(_draft(), SALES)
        service.apply_status_transition(request.id, "under-review", "ok", PRODUCT)

        assert service.available_transitions(request.id, SALES) == []
        assert service.available_transitions(request.id, None) == []
        labels = [o.label for o in service.available_transitions(request.id, PRODUCT)]
        assert labels == ["Accept Request", "Decline Request"]


class TestConcurrentTransitions:
    def test_racing_accept_and_decline(self):
        service = _service()
        request = service.create_request(_draft(), SALES)
        service.apply_status_transition(request.id, "under-review", "ok", PRODUCT)

        barrier = threading.Barrier(2)
        outcomes = []

        def attempt(status: str) -> None:
            barrier.wait()
            try:
                service.apply_status_transition(request.id, status, f"go {status}", PRODUCT)
                outcomes.append(("ok", status))
            except AuthorizationError:
                outcomes.append(("rejected", status))

        threads = [threading.Thread(target=attempt, args=(s,)) for s in ("accepted", "declined")]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        winners = [status for result, status in outcomes if result == "ok"]
        assert len(winners) == 1
        assert len(outcomes) == 2

        stored = service.get_request(request.id)
        history = service.get_status_history(request.id)
        assert len(history) == 3
        assert stored.current_status == history[-1].new_status == RequestStatus(winners[0])


class TestNotes:
    def test_transcript_is_scored(self):
        service = _service()
        request = service.create_request(_draft(), SALES)
        note = service.add_note(request.id, "x" * 400, "transcript", SALES)

        assert note.type == NoteType.TRANSCRIPT
        assert note.sentiment_score == 20
        assert note.deal_quality_score == 26
        assert service.get_notes(request.id) == [note]

    def test_plain_note_has_no_scores(self):
        service = _service()
        request = service.create_request(_draft(), SALES)
        note = service.add_note(request.id, "Customer called again", NoteType.NOTE, SALES)
        assert note.sentiment_score is None
        assert note.deal_quality_score is None

    def test_note_validation(self):
        service = _service()
        request = service.create_request(_draft(), SALES)
        with pytest.raises(AuthenticationError):
            service.add_note(request.id, "hello", "note", None)
        with pytest.raises(ValidationError):
            service.add_note(request.id, "   ", "note", SALES)
        with pytest.raises(ValidationError) as exc:
            service.add_note(request.id, "hello", "memo", SALES)
        assert exc.value.field == "type"
        with pytest.raises(NotFoundError):
            service.add_note("REQ-MISSING", "hello", "note", SALES)
        assert service.get_notes(request.id) == []


class TestOpportunity:
    def test_create_then_update_keeps_identity(self):
        clock = FakeClock()
        service = _service(clock)
        request = service.create_request(_draft(), SALES)

        clock.advance(days=2)
        first = service.update_opportunity(request.id, "$125,000", "Negotiation", "2025-09-30", SALES)
        assert first.opportunity.value == 125000.0
        assert first.opportunity.stage == "Negotiation"
        assert first.opportunity.close_date == date(2025, 9, 30)
        assert first.opportunity.name == "Acme Corp - Salesforce Sync"
        assert first.last_updated_date == clock.now

        clock.advance(days=1)
        second = service.update_opportunity(request.id, 150000, "Closed Won", date(2025, 10, 15), SALES)
        assert second.opportunity.id == first.opportunity.id
        assert service.get_request(request.id).opportunity.value == 150000.0

    @pytest.mark.parametrize("value, stage, close_date, field", [
        ("abc", "Negotiation", "2025-09-30", "value"),
        (0, "Negotiation", "2025-09-30", "value"),
        (-5, "Negotiation", "2025-09-30", "value"),
        (None, "Negotiation", "2025-09-30", "value"),
        (1000, "  ", "2025-09-30", "stage"),
        (1000, "Negotiation", "soon", "close_date"),
        (1000, "Negotiation", "", "close_date"),
        (1000, "Negotiation", "2025-09-30 garbage text", "close_date"),
    ])
    def test_invalid_details(self, value, stage, close_date, field):
        service = _service()
        request = service.create_request(_draft(), SALES)
        with pytest.raises(ValidationError) as exc:
            service.update_opportunity(request.id, value, stage, close_date, SALES)
        assert exc.value.field == field
        assert service.get_request(request.id).opportunity is None

    def test_close_date_accepts_full_iso_timestamp(self):
        service = _service()
        request = service.create_request(_draft(), SALES)
        updated = service.update_opportunity(request.id, 1000, "Open", "2025-09-30T12:30:00", SALES)
        assert updated.opportunity.close_date == date(2025, 9, 30)

    def test_opportunity_requires_login_and_request(self):
        service = _service()
        with pytest.raises(AuthenticationError):
            service.update_opportunity("REQ-MISSING", 1000, "Open", "2025-01-01", None)
        with pytest.raises(NotFoundError):
            service.update_opportunity("REQ-MISSING", 1000, "Open", "2025-01-01", SALES)


class TestRequestLocks:
    def test_unknown_ids_leave_no_locks_behind(self):
        service = _service()
        request = service.create_request(_draft(), SALES)

        for i in range(50):
            with pytest.raises(NotFoundError):
                service.apply_status_transition(f"REQ-BOGUS{i}", "under-review", "ok", PRODUCT)
            with pytest.raises(NotFoundError):
                service.add_note(f"REQ-BOGUS{i}", "hello", "note", SALES)
            with pytest.raises(NotFoundError):
                service.update_opportunity(f"REQ-BOGUS{i}", 1000, "Open", "2025-01-01", SALES)
            with pytest.raises(NotFoundError):
                service.refresh_prediction(f"REQ-BOGUS{i}")

        assert service.store.lock_for("REQ-BOGUS0") is None
        assert list(service.store._request_locks) == [request.id]

    def test_lock_exists_once_request_is_added(self):
        service = _service()
        request = service.create_request(_draft(), SALES)
        assert service.store.lock_for(request.id) is service.store.lock_for(request.id)


class TestSuggestions:
    def test_service_delegates_to_suggester(self):
        result = _service().suggest_features("reporting", "Pivot Tables")
        assert result.bundles[0].features[0] == "Pivot Tables"

"""
Tests: transition table and the lifecycle state machine.

Pure functions only, no store involved.

Run with:
    pytest bridgeworks/tests/test_lifecycle.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from bridgeworks.errors import AuthenticationError, AuthorizationError, ValidationError
from bridgeworks.lifecycle import apply_transition, create_request, propose_transition
from bridgeworks.lifecycle.transitions import TRANSITIONS, is_transition_allowed
from bridgeworks.models.enums import RequestCategory, RequestStatus, UserRole
from bridgeworks.models.schemas import RequestDraft, User

SALES = User(id="u-1", name="Sam Sales", role=UserRole.SALES)
PRODUCT = User(id="u-2", name="Pat Product", role=UserRole.PRODUCT)
ADMIN = User(id="u-3", name="Ada Admin", role=UserRole.ADMIN)

T0 = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def _draft(**overrides) -> RequestDraft:
    fields = {
        "title": "Salesforce Sync",
        "description": "Two-way sync of accounts",
        "business_impact": "Enterprise deal worth $100K",
        "customer_name": "Acme Corp",
        "category": RequestCategory.API_INTEGRATION,
        "requested_timeline": "ASAP",
    }
    fields.update(overrides)
    return RequestDraft(**fields)


def _request_in(status: RequestStatus):
    request, _ = create_request(_draft(), SALES, now=T0)
    return request.model_copy(update={"current_status": status})


class TestProposeTransition:
    def test_sales_gets_nothing(self):
        for status in RequestStatus:
            assert propose_transition(status, UserRole.SALES) == frozenset()

    def test_product_from_submitted(self):
        options = propose_transition("submitted", "product")
        assert {(o.status, o.label) for o in options} == {
            (RequestStatus.UNDER_REVIEW, "Move to Review")
        }

    def test_admin_from_under_review(self):
        options = propose_transition(RequestStatus.UNDER_REVIEW, UserRole.ADMIN)
        assert {(o.status, o.label) for o in options} == {
            (RequestStatus.ACCEPTED, "Accept Request"),
            (RequestStatus.DECLINED, "Decline Request"),
        }

    @pytest.mark.parametrize("status", [RequestStatus.DECLINED, RequestStatus.RELEASED])
    def test_terminal_states_propose_nothing(self, status):
        assert status.is_terminal
        for role in UserRole:
            assert propose_transition(status, role) == frozenset()

    def test_labels_along_the_happy_path(self):
        labels = [
            next(iter(TRANSITIONS[s])).label
            for s in (RequestStatus.ACCEPTED, RequestStatus.PLANNED, RequestStatus.IN_DEVELOPMENT)
        ]
        assert labels == ["Move to Planning", "Start Development", "Mark as Released"]

    def test_skipping_a_stage_is_not_allowed(self):
        assert not is_transition_allowed("submitted", "accepted", "admin")
        assert not is_transition_allowed("accepted", "released", "product")
        assert is_transition_allowed("planned", "in-development", "product")


class TestCreateRequest:
    def test_new_request_is_submitted(self):
        request, update = create_request(_draft(), SALES, now=T0)
        assert request.id.startswith("REQ-")
        assert request.current_status == RequestStatus.SUBMITTED
        assert request.creation_date == request.last_updated_date == T0
        assert request.requested_by == SALES
        assert update.request_id == request.id
        assert update.new_status == RequestStatus.SUBMITTED
        assert update.comment == "Initial submission: Salesforce Sync"
        assert update.update_date == T0

    def test_requires_requester(self):
        with pytest.raises(AuthenticationError):
            create_request(_draft(), None)

    @pytest.mark.parametrize("field", ["title", "description", "business_impact", "customer_name"])
    def test_blank_required_field(self, field):
        with pytest.raises(ValidationError) as exc:
            create_request(_draft(**{field: "   "}), SALES)
        assert exc.value.field == field

    def test_text_is_trimmed(self):
        request, _ = create_request(_draft(title="  Sync  "), SALES, now=T0)
        assert request.title == "Sync"

    def test_unknown_category_resolves_to_other(self):
        assert RequestCategory("Widgets") == RequestCategory.OTHER
        assert RequestCategory.resolve(None) == RequestCategory.OTHER
        assert RequestCategory("REPORTING") == RequestCategory.REPORTING

    @pytest.mark.parametrize("raw", [None, "", "Widgets"])
    def test_draft_category_defaults_to_other(self, raw):
        draft = _draft(category=raw)
        assert draft.category == RequestCategory.OTHER
        request, _ = create_request(draft, SALES, now=T0)
        assert request.category == RequestCategory.OTHER


class TestApplyTransition:
    def test_product_moves_to_review(self):
        request = _request_in(RequestStatus.SUBMITTED)
        later = T0 + timedelta(hours=2)
        updated, update = apply_transition(request, "under-review", "Looks promising", PRODUCT, now=later)

        assert updated.current_status == RequestStatus.UNDER_REVIEW
        assert updated.last_updated_date == later
        assert update.new_status == RequestStatus.UNDER_REVIEW
        assert update.updated_by == PRODUCT
        assert update.comment == "Looks promising"
        assert update.id.startswith("SU-")
        # input snapshot is untouched
        assert request.current_status == RequestStatus.SUBMITTED

    def test_sales_cannot_transition(self):
        request = _request_in(RequestStatus.SUBMITTED)
        with pytest.raises(AuthorizationError) as exc:
            apply_transition(request, "under-review", "please", SALES)
        assert exc.value.role == "sales"

    def test_released_is_terminal(self):
        request = _request_in(RequestStatus.RELEASED)
        for target in RequestStatus:
            with pytest.raises(AuthorizationError):
                apply_transition(request, target, "reopen", ADMIN)

    def test_declined_cannot_be_reopened(self):
        request = _request_in(RequestStatus.DECLINED)
        with pytest.raises(AuthorizationError):
            apply_transition(request, "under-review", "second look", ADMIN)

    def test_blank_comment_rejected_even_when_allowed(self):
        request = _request_in(RequestStatus.UNDER_REVIEW)
        with pytest.raises(ValidationError) as exc:
            apply_transition(request, "accepted", "  ", PRODUCT)
        assert exc.value.field == "comment"

    def test_blank_comment_checked_before_role(self):
        request = _request_in(RequestStatus.SUBMITTED)
        with pytest.raises(ValidationError):
            apply_transition(request, "under-review", "", SALES)

    def test_unknown_status(self):
        request = _request_in(RequestStatus.SUBMITTED)
        with pytest.raises(ValidationError) as exc:
            apply_transition(request, "shipped", "done", ADMIN)
        assert exc.value.field == "new_status"

    def test_missing_actor(self):
        request = _request_in(RequestStatus.SUBMITTED)
        with pytest.raises(AuthenticationError):
            apply_transition(request, "under-review", "ok", None)

    def test_timestamp_never_moves_backwards(self):
        request = _request_in(RequestStatus.SUBMITTED)
        earlier = T0 - timedelta(days=1)
        updated, update = apply_transition(request, "under-review", "ok", PRODUCT, now=earlier)
        assert updated.last_updated_date == T0
        assert update.update_date == T0

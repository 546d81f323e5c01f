"""
API routes — thin HTTP layer that delegates to RequestService.

Routes:
  GET  /health                               → API health check
  POST /api/requests                         → Submit a new request
  GET  /api/requests                         → List (search, status filters)
  GET  /api/requests/{id}                    → One request
  GET  /api/requests/{id}/transitions        → Status moves open to the caller
  POST /api/requests/{id}/status             → Apply a status transition
  GET  /api/requests/{id}/history            → Status trail, oldest first
  POST /api/requests/{id}/notes              → Add a note or transcript
  GET  /api/requests/{id}/notes              → Notes for a request
  PUT  /api/requests/{id}/opportunity        → Replace CRM opportunity details
  POST /api/requests/{id}/prediction         → Recompute the revenue prediction
  GET  /api/suggestions                      → Related features / bundles / timing
  GET  /api/reports/metrics                  → Dashboard metrics
  GET  /api/reports/roadmap                  → Quarter roadmap
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bridgeworks.api.dependencies import (
    get_current_actor,
    get_reporting_service,
    get_request_service,
)
from bridgeworks.models.enums import NoteType, RequestCategory
from bridgeworks.models.schemas import (
    FeatureRequest,
    FeatureSuggestionBundle,
    Metrics,
    Note,
    RequestDraft,
    RevenuePrediction,
    RoadmapBucket,
    StatusUpdate,
    TransitionOption,
    User,
)
from bridgeworks.services import ReportingService, RequestService

logger = logging.getLogger(__name__)

# ── Routers ──────────────────────────────────────────────
health_router = APIRouter()
requests_router = APIRouter()
suggestions_router = APIRouter()
reports_router = APIRouter()


# ── Request bodies ───────────────────────────────────────
class StatusChangeBody(BaseModel):
    status: str
    comment: str = ""


class NoteBody(BaseModel):
    content: str = ""
    type: str = NoteType.NOTE.value


class OpportunityBody(BaseModel):
    value: Any = None
    stage: str = ""
    close_date: Optional[str] = None


# ── Health ───────────────────────────────────────────────

@health_router.get("/health")
async def health_check():
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# ── Requests ─────────────────────────────────────────────

@requests_router.post("", response_model=FeatureRequest, status_code=201)
def create_request(
    draft: RequestDraft,
    actor: Optional[User] = Depends(get_current_actor),
    service: RequestService = Depends(get_request_service),
):
    return service.create_request(draft, actor)


@requests_router.get("", response_model=list[FeatureRequest])
def list_requests(
    search: Optional[str] = None,
    status: Optional[str] = None,
    service: RequestService = Depends(get_request_service),
):
    return service.list_requests(search=search, status=status)


@requests_router.get("/{request_id}", response_model=FeatureRequest)
def get_request(request_id: str, service: RequestService = Depends(get_request_service)):
    return service.get_request(request_id)


@requests_router.get("/{request_id}/transitions", response_model=list[TransitionOption])
def available_transitions(
    request_id: str,
    actor: Optional[User] = Depends(get_current_actor),
    service: RequestService = Depends(get_request_service),
):
    return service.available_transitions(request_id, actor)


@requests_router.post("/{request_id}/status", response_model=StatusUpdate)
def change_status(
    request_id: str,
    body: StatusChangeBody,
    actor: Optional[User] = Depends(get_current_actor),
    service: RequestService = Depends(get_request_service),
):
    return service.apply_status_transition(request_id, body.status, body.comment, actor)


@requests_router.get("/{request_id}/history", response_model=list[StatusUpdate])
def status_history(request_id: str, service: RequestService = Depends(get_request_service)):
    return service.get_status_history(request_id)


@requests_router.post("/{request_id}/notes", response_model=Note, status_code=201)
def add_note(
    request_id: str,
    body: NoteBody,
    actor: Optional[User] = Depends(get_current_actor),
    service: RequestService = Depends(get_request_service),
):
    return service.add_note(request_id, body.content, body.type, actor)


@requests_router.get("/{request_id}/notes", response_model=list[Note])
def list_notes(request_id: str, service: RequestService = Depends(get_request_service)):
    return service.get_notes(request_id)


@requests_router.put("/{request_id}/opportunity", response_model=FeatureRequest)
def update_opportunity(
    request_id: str,
    body: OpportunityBody,
    actor: Optional[User] = Depends(get_current_actor),
    service: RequestService = Depends(get_request_service),
):
    return service.update_opportunity(request_id, body.value, body.stage, body.close_date, actor)


@requests_router.post("/{request_id}/prediction", response_model=RevenuePrediction)
def refresh_prediction(request_id: str, service: RequestService = Depends(get_request_service)):
    return service.refresh_prediction(request_id)


# ── Suggestions ──────────────────────────────────────────

@suggestions_router.get("", response_model=FeatureSuggestionBundle)
def suggest_features(
    title: str,
    category: str = RequestCategory.OTHER.value,
    service: RequestService = Depends(get_request_service),
):
    return service.suggest_features(category, title)


# ── Reports ──────────────────────────────────────────────

@reports_router.get("/metrics", response_model=Metrics)
def metrics(reporting: ReportingService = Depends(get_reporting_service)):
    return reporting.metrics()


@reports_router.get("/roadmap", response_model=list[RoadmapBucket])
def roadmap(reporting: ReportingService = Depends(get_reporting_service)):
    return reporting.roadmap()

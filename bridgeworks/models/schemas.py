"""
Records owned by the lifecycle service and the payloads its engines return.

Ownership:
  - FeatureRequest exclusively owns its CRMOpportunity and cached RevenuePrediction.
  - StatusUpdate and Note point at their request by id only; they are
    append-only records held by the repository.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .enums import (
    Complexity,
    CustomerSize,
    ImpactLevel,
    NoteType,
    RequestCategory,
    RequestStatus,
    Urgency,
    UserRole,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ── Actors ───────────────────────────────────────────────


class User(BaseModel):
    """The acting user handed to the service by the auth collaborator."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    role: UserRole
    email: str = ""
    team_id: str = ""


# ── CRM ──────────────────────────────────────────────────


class CRMOpportunity(BaseModel):
    id: str
    name: str
    value: float
    stage: str
    close_date: date
    last_updated_date: datetime = Field(default_factory=utc_now)


# ── Revenue prediction ───────────────────────────────────


class PredictionFactors(BaseModel):
    """Snapshot of what drove a prediction (labels, not weights)."""
    category_baseline: float
    customer_size_impact: CustomerSize
    urgency_impact: Urgency
    complexity_impact: Complexity


class RevenuePrediction(BaseModel):
    predicted_revenue: int = Field(ge=10_000)
    probability_of_success: float = Field(ge=0.30, le=0.95)
    confidence_score: int = Field(ge=40, le=95)
    factors: PredictionFactors


# ── Requests ─────────────────────────────────────────────


class RequestDraft(BaseModel):
    """What a requester fills in on the new-request form."""
    title: str = ""
    description: str = ""
    business_impact: str = ""
    customer_name: str = ""
    category: RequestCategory = RequestCategory.OTHER
    requested_timeline: Optional[str] = None
    use_case: Optional[str] = None
    crm_link: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def _resolve_category(cls, value: object) -> RequestCategory:
        # null, blank and unknown values all land on OTHER
        return RequestCategory.resolve(value)  # type: ignore[arg-type]


class FeatureRequest(BaseModel):
    id: str
    title: str
    description: str
    business_impact: str
    customer_name: str
    category: RequestCategory = RequestCategory.OTHER
    current_status: RequestStatus = RequestStatus.SUBMITTED
    requested_timeline: Optional[str] = None
    use_case: Optional[str] = None
    crm_link: Optional[str] = None
    creation_date: datetime
    last_updated_date: datetime
    requested_by: User
    opportunity: Optional[CRMOpportunity] = None
    revenue_prediction: Optional[RevenuePrediction] = None

    @model_validator(mode="after")
    def _dates_are_ordered(self) -> "FeatureRequest":
        if self.last_updated_date < self.creation_date:
            raise ValueError("last_updated_date must not precede creation_date")
        return self


class StatusUpdate(BaseModel):
    """Immutable audit record of one status change."""
    model_config = ConfigDict(frozen=True)

    id: str
    request_id: str
    new_status: RequestStatus
    updated_by: User
    update_date: datetime
    comment: str = Field(min_length=1)


class Note(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    request_id: str
    content: str = Field(min_length=1)
    type: NoteType = NoteType.NOTE
    created_by: User
    creation_date: datetime
    sentiment_score: Optional[int] = Field(default=None, ge=0, le=100)
    deal_quality_score: Optional[int] = Field(default=None, ge=0, le=100)

    @model_validator(mode="after")
    def _scores_only_on_transcripts(self) -> "Note":
        has_scores = self.sentiment_score is not None and self.deal_quality_score is not None
        has_any = self.sentiment_score is not None or self.deal_quality_score is not None
        if self.type == NoteType.TRANSCRIPT and not has_scores:
            raise ValueError("transcript notes must carry both scores")
        if self.type == NoteType.NOTE and has_any:
            raise ValueError("plain notes never carry scores")
        return self


# ── Lifecycle ────────────────────────────────────────────


class TransitionOption(BaseModel):
    """A status the actor may move a request to, with its button label."""
    model_config = ConfigDict(frozen=True)

    status: RequestStatus
    label: str


# ── Feature suggestions ──────────────────────────────────


class RelatedFeature(BaseModel):
    title: str
    description: str
    category: RequestCategory
    impact: ImpactLevel


class FeatureBundle(BaseModel):
    name: str
    features: list[str]
    development_effort_days: int
    development_synergy: int = Field(ge=1, le=100)


class ReleaseTiming(BaseModel):
    recommended_date: str
    sales_impact: ImpactLevel
    reasoning: str


class FeatureSuggestionBundle(BaseModel):
    related_features: list[RelatedFeature] = Field(min_length=3, max_length=3)
    bundles: list[FeatureBundle] = Field(min_length=2, max_length=2)
    release_timings: list[ReleaseTiming] = Field(min_length=3, max_length=3)


# ── Reporting ────────────────────────────────────────────


class Metrics(BaseModel):
    total_requests: int = 0
    active_requests: int = 0
    accepted_requests: int = 0
    declined_requests: int = 0
    average_resolution_days: Optional[float] = None
    acceptance_rate: float = 0.0  # percent of all requests currently accepted
    requests_by_status: dict[str, int] = {}
    weekly_intake: dict[str, int] = {}  # "Week 0" (oldest) .. "Week 4" (current)


class RoadmapBucket(BaseModel):
    label: str
    items: list[FeatureRequest] = []

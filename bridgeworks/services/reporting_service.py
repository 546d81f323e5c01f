"""
Reporting Service — dashboard metrics and the quarter roadmap.
Read-only views over the request store.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Callable, Optional

from bridgeworks.models.enums import RequestStatus
from bridgeworks.models.schemas import FeatureRequest, Metrics, RoadmapBucket, utc_now
from bridgeworks.persistence.request_repository import RequestStore

logger = logging.getLogger(__name__)

RESOLVED_STATUSES = (RequestStatus.ACCEPTED, RequestStatus.DECLINED, RequestStatus.RELEASED)
ROADMAP_STATUSES = (RequestStatus.ACCEPTED, RequestStatus.PLANNED, RequestStatus.IN_DEVELOPMENT)
ROADMAP_QUARTERS = ("Q2", "Q3", "Q4")
FUTURE_BUCKET = "Future"

SECONDS_PER_DAY = 60 * 60 * 24
INTAKE_WINDOW_DAYS = 30
INTAKE_WEEKS = 5  # a 30-day window spans weeks 0..4


class ReportingService:

    def __init__(self, store: RequestStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or utc_now

    def metrics(self) -> Metrics:
        requests = self.store.list_requests()
        by_status = Counter(r.current_status.value for r in requests)

        resolved = [r for r in requests if r.current_status in RESOLVED_STATUSES]
        average_days = None
        if resolved:
            # Whole days per request, then averaged to one decimal
            total_days = sum(_whole_days_open(r) for r in resolved)
            average_days = round(total_days / len(resolved), 1)

        accepted = by_status.get(RequestStatus.ACCEPTED.value, 0)
        acceptance_rate = round(accepted / len(requests) * 100, 1) if requests else 0.0

        return Metrics(
            total_requests=len(requests),
            active_requests=sum(1 for r in requests if not r.current_status.is_terminal),
            accepted_requests=accepted,
            declined_requests=by_status.get(RequestStatus.DECLINED.value, 0),
            average_resolution_days=average_days,
            acceptance_rate=acceptance_rate,
            requests_by_status=dict(by_status),
            weekly_intake=self._weekly_intake(requests),
        )

    def roadmap(self) -> list[RoadmapBucket]:
        """Scheduled requests grouped by the quarter named in their timeline."""
        buckets = {label: RoadmapBucket(label=label) for label in (*ROADMAP_QUARTERS, FUTURE_BUCKET)}
        for request in self.store.list_requests():
            if request.current_status not in ROADMAP_STATUSES:
                continue
            timeline = (request.requested_timeline or "").lower()
            label = next((q for q in ROADMAP_QUARTERS if q.lower() in timeline), FUTURE_BUCKET)
            buckets[label].items.append(request)

        for bucket in buckets.values():
            bucket.items.sort(key=lambda r: r.creation_date)
        logger.debug(
            "Roadmap: " + ", ".join(f"{b.label}={len(b.items)}" for b in buckets.values())
        )
        return list(buckets.values())

    def _weekly_intake(self, requests: list[FeatureRequest]) -> dict[str, int]:
        """Requests created in the last 30 days, counted per week ("Week 4" is the latest)."""
        now = self.clock()
        window_start = now - timedelta(days=INTAKE_WINDOW_DAYS)
        intake = {f"Week {week}": 0 for week in range(INTAKE_WEEKS)}
        for request in requests:
            if request.creation_date < window_start or request.creation_date > now:
                continue
            days_ago = int((now - request.creation_date).total_seconds() // SECONDS_PER_DAY)
            intake[f"Week {INTAKE_WEEKS - 1 - days_ago // 7}"] += 1
        return intake


def _whole_days_open(request: FeatureRequest) -> int:
    elapsed = request.last_updated_date - request.creation_date
    return int(elapsed.total_seconds() // SECONDS_PER_DAY)

"""
Bridgeworks Feature Intelligence — Main Entry Point

Walk a sample request through its lifecycle (CLI):
    python -m bridgeworks.main

Run as an API server (for the frontend):
    python -m bridgeworks.main --serve
    # or: uvicorn bridgeworks.api:app --reload --port 8000

Or import and use programmatically:
    from bridgeworks.services import RequestService
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone

from bridgeworks.config import get_settings
from bridgeworks.models.enums import NoteType, RequestCategory, RequestStatus, UserRole
from bridgeworks.models.schemas import FeatureRequest, RequestDraft, User
from bridgeworks.services import ReportingService, RequestService
from bridgeworks.utils.logger import setup_logging

DEMO_SALES_REP = User(id="u1", name="Sam Sales", role=UserRole.SALES, email="sam@example.com")
DEMO_PRODUCT_MANAGER = User(id="u2", name="Pat Product", role=UserRole.PRODUCT, email="pat@example.com")

DEMO_PATH = (
    (RequestStatus.UNDER_REVIEW, "Picked up for triage"),
    (RequestStatus.ACCEPTED, "Strong revenue case"),
    (RequestStatus.PLANNED, "Scheduled for next quarter"),
    (RequestStatus.IN_DEVELOPMENT, "Work started"),
    (RequestStatus.RELEASED, "Shipped"),
)


def run() -> FeatureRequest:
    """Create a demo request, drive it to released and log a summary."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    logger.info("=" * 60)
    logger.info(f"  {settings.app_name.upper()}")
    logger.info(f"  Demo run | Started: {datetime.now(timezone.utc).isoformat()}")
    logger.info("=" * 60)

    service = RequestService()
    request = service.create_request(
        RequestDraft(
            title="Salesforce bi-directional sync",
            description="Keep opportunities in sync between both systems.",
            business_impact="Blocking a $100k enterprise renewal",
            customer_name="Acme Corp",
            category=RequestCategory.API_INTEGRATION,
            requested_timeline="ASAP",
        ),
        DEMO_SALES_REP,
    )
    service.add_note(
        request.id,
        "Customer walked us through their current manual export process in detail.",
        NoteType.TRANSCRIPT,
        DEMO_SALES_REP,
    )
    for status, comment in DEMO_PATH:
        service.apply_status_transition(request.id, status, comment, DEMO_PRODUCT_MANAGER)

    final = service.get_request(request.id)
    _print_summary(service, ReportingService(service.store, clock=service.clock), final)
    return final


def _print_summary(service: RequestService, reporting: ReportingService, request: FeatureRequest) -> None:
    """Log a human-readable summary of the demo request."""
    logger = logging.getLogger(__name__)
    prediction = request.revenue_prediction
    suggestions = service.suggest_features(request.category, request.title)
    metrics = reporting.metrics()

    logger.info("-" * 60)
    logger.info("  REQUEST SUMMARY")
    logger.info("-" * 60)
    logger.info(f"  Request ID:     {request.id}")
    logger.info(f"  Customer:       {request.customer_name}")
    logger.info(f"  Title:          {request.title}")
    logger.info(f"  Final Status:   {request.current_status.value}")
    if prediction:
        logger.info(f"  Predicted:      ${prediction.predicted_revenue:,}")
        logger.info(f"  P(success):     {prediction.probability_of_success:.0%}")
        logger.info(f"  Confidence:     {prediction.confidence_score}%")
    logger.info(f"  Bundles:        {', '.join(b.name for b in suggestions.bundles)}")
    logger.info(f"  Total Requests: {metrics.total_requests}")
    logger.info("-" * 60)

    history = service.get_status_history(request.id)
    logger.info(f"  Status Trail: {len(history)} entries")
    for update in history:
        logger.info(
            f"    {update.update_date.isoformat()} | "
            f"{update.new_status.value} | "
            f"{update.updated_by.name} | "
            f"{update.comment}"
        )


def serve(host: str | None = None, port: int | None = None) -> None:
    """Start the FastAPI server (for frontend communication)."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)
    host = host or settings.api_host
    port = port or settings.api_port
    logger.info(f"Starting API server on {host}:{port}")
    uvicorn.run("bridgeworks.api:app", host=host, port=port, reload=settings.debug)


if __name__ == "__main__":
    if "--serve" in sys.argv:
        serve()
    else:
        run()

"""
Revenue Prediction Engine.

Turns a request's category, business-impact text, requested timeline and
customer name into a predicted revenue figure, a probability of success and
a confidence score.  Closed-form heuristics over the RevenueCatalog tables;
nothing here is learned.

The predictor never raises: blank or missing inputs land in the most
conservative bucket (smb size, medium urgency, category-default complexity).
"""

from __future__ import annotations

import logging
from typing import Optional

from bridgeworks.config import get_settings
from bridgeworks.models.enums import Complexity, CustomerSize, RequestCategory, Urgency
from bridgeworks.models.schemas import FeatureRequest, PredictionFactors, RevenuePrediction
from bridgeworks.scoring.catalog import CatalogStore, RevenueCatalog
from bridgeworks.scoring.primitives import (
    RandomSource,
    clamp,
    gaussian_sample,
    make_random_source,
    round_half_up,
)

logger = logging.getLogger(__name__)

MIN_PREDICTED_REVENUE = 10_000
STD_DEV_DAMPING = 0.8  # factors explain part of the variance

PROBABILITY_FLOOR = 0.30
PROBABILITY_CEILING = 0.95
URGENT_PROBABILITY_FACTOR = 0.95
RELAXED_PROBABILITY_FACTOR = 1.05
COMPLEX_PROBABILITY_FACTOR = 0.90
SIMPLE_PROBABILITY_FACTOR = 1.02

BASE_CONFIDENCE = 70
GENERIC_CUSTOMER_PENALTY = 15
UNCATEGORIZED_PENALTY = 10
CONFIDENCE_FLOOR = 40
CONFIDENCE_CEILING = 95


class RevenuePredictor:
    """Heuristic revenue predictor bound to a catalog and a random source."""

    def __init__(
        self,
        catalog: Optional[RevenueCatalog] = None,
        rng: Optional[RandomSource] = None,
    ):
        self.catalog = catalog or CatalogStore().get_revenue_catalog()
        self.rng = rng if rng is not None else make_random_source(get_settings().prediction_seed)

    # ── Classification ───────────────────────────────────

    def detect_customer_size(self, business_impact: Optional[str]) -> CustomerSize:
        text = (business_impact or "").lower()
        if any(term in text for term in self.catalog.enterprise_terms):
            return CustomerSize.ENTERPRISE
        if any(term in text for term in self.catalog.mid_market_terms):
            return CustomerSize.MID_MARKET
        return CustomerSize.SMB

    def detect_urgency(self, requested_timeline: Optional[str]) -> Urgency:
        if not requested_timeline:
            return Urgency.MEDIUM
        text = requested_timeline.lower()
        if any(term in text for term in self.catalog.urgent_terms):
            return Urgency.HIGH
        if any(term in text for term in self.catalog.later_terms):
            return Urgency.LOW
        return Urgency.MEDIUM

    def estimate_complexity(self, category: RequestCategory) -> Complexity:
        return self.catalog.complexity_by_category.get(category.value, Complexity.LOW)

    # ── Prediction ───────────────────────────────────────

    def predict(
        self,
        category: "RequestCategory | str | None",
        business_impact: Optional[str],
        requested_timeline: Optional[str] = None,
        customer_name: Optional[str] = None,
    ) -> RevenuePrediction:
        resolved = RequestCategory.resolve(category)
        baseline = self.catalog.baseline_for(resolved)

        customer_size = self.detect_customer_size(business_impact)
        urgency = self.detect_urgency(requested_timeline)
        complexity = self.estimate_complexity(resolved)

        size_weight = self.catalog.customer_size_weights[customer_size]
        urgency_weight = self.catalog.urgency_weights[urgency]
        complexity_weight = self.catalog.complexity_weights[complexity]
        combined_factor = size_weight * urgency_weight * complexity_weight

        adjusted_mean = baseline.average_revenue * combined_factor
        adjusted_std_dev = baseline.std_deviation * combined_factor * STD_DEV_DAMPING
        sample = gaussian_sample(adjusted_mean, adjusted_std_dev, self.rng)
        predicted_revenue = max(MIN_PREDICTED_REVENUE, round_half_up(sample))

        probability = baseline.success_probability
        probability *= URGENT_PROBABILITY_FACTOR if urgency_weight > 1 else RELAXED_PROBABILITY_FACTOR
        probability *= COMPLEX_PROBABILITY_FACTOR if complexity_weight < 1 else SIMPLE_PROBABILITY_FACTOR
        probability = round(clamp(probability, PROBABILITY_FLOOR, PROBABILITY_CEILING), 2)

        confidence = self.confidence_for(resolved, customer_name)

        logger.debug(
            f"Predicted {resolved.value}: size={customer_size.value} urgency={urgency.value} "
            f"complexity={complexity.value} factor={combined_factor:.3f} "
            f"revenue={predicted_revenue} p={probability} confidence={confidence}"
        )

        return RevenuePrediction(
            predicted_revenue=predicted_revenue,
            probability_of_success=probability,
            confidence_score=confidence,
            factors=PredictionFactors(
                category_baseline=baseline.average_revenue,
                customer_size_impact=customer_size,
                urgency_impact=urgency,
                complexity_impact=complexity,
            ),
        )

    def confidence_for(self, category: RequestCategory, customer_name: Optional[str]) -> int:
        score = BASE_CONFIDENCE
        name = customer_name or ""
        if any(marker in name for marker in self.catalog.generic_customer_markers):
            score -= GENERIC_CUSTOMER_PENALTY
        if category == RequestCategory.OTHER:
            score -= UNCATEGORIZED_PENALTY
        return round_half_up(clamp(score, CONFIDENCE_FLOOR, CONFIDENCE_CEILING))

    def predict_for_request(self, request: FeatureRequest) -> RevenuePrediction:
        return self.predict(
            category=request.category,
            business_impact=request.business_impact,
            requested_timeline=request.requested_timeline,
            customer_name=request.customer_name,
        )

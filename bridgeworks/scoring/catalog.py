"""
Scoring Catalog — the content tables behind the scoring engines.

Revenue baselines, factor weights and the feature-suggestion catalog live
here as pydantic config models with built-in defaults.  An optional JSON
file (``settings.catalog_path``) may override fields of either section.
Table (dict) fields merge key by key onto the defaults, lists replace:

    {"revenue": {...RevenueCatalog fields...},
     "suggestions": {...SuggestionCatalog fields...}}

Engines only ever see the models, never the file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, model_validator

from bridgeworks.config import get_settings
from bridgeworks.models.enums import (
    Complexity,
    CustomerSize,
    ImpactLevel,
    RequestCategory,
    Urgency,
)
from bridgeworks.models.schemas import ReleaseTiming, RelatedFeature

logger = logging.getLogger(__name__)

TITLE_PLACEHOLDER = "{title}"
DEFAULT_BUCKET = "default"


# ── Revenue models ───────────────────────────────────────

class CategoryBaseline(BaseModel):
    """Historical performance for one request category."""
    average_revenue: float
    std_deviation: float
    success_probability: float


class RevenueCatalog(BaseModel):
    """Baselines per category plus the keyword → weight classification tables."""
    baselines: dict[str, CategoryBaseline] = {
        RequestCategory.API_INTEGRATION.value: CategoryBaseline(
            average_revenue=175000, std_deviation=65000, success_probability=0.82),
        RequestCategory.USER_INTERFACE.value: CategoryBaseline(
            average_revenue=120000, std_deviation=45000, success_probability=0.75),
        RequestCategory.REPORTING.value: CategoryBaseline(
            average_revenue=95000, std_deviation=30000, success_probability=0.88),
        RequestCategory.SECURITY.value: CategoryBaseline(
            average_revenue=210000, std_deviation=80000, success_probability=0.65),
        RequestCategory.PERFORMANCE.value: CategoryBaseline(
            average_revenue=145000, std_deviation=55000, success_probability=0.70),
        RequestCategory.COMPLIANCE.value: CategoryBaseline(
            average_revenue=185000, std_deviation=60000, success_probability=0.90),
        RequestCategory.OTHER.value: CategoryBaseline(
            average_revenue=85000, std_deviation=40000, success_probability=0.60),
    }

    customer_size_weights: dict[CustomerSize, float] = {
        CustomerSize.ENTERPRISE: 1.5,
        CustomerSize.MID_MARKET: 1.0,
        CustomerSize.SMB: 0.6,
    }
    urgency_weights: dict[Urgency, float] = {
        Urgency.HIGH: 1.3,
        Urgency.MEDIUM: 1.0,
        Urgency.LOW: 0.8,
    }
    # Harder features are discounted: high complexity → lowest multiplier.
    complexity_weights: dict[Complexity, float] = {
        Complexity.HIGH: 0.7,
        Complexity.MEDIUM: 1.0,
        Complexity.LOW: 1.2,
    }

    enterprise_terms: list[str] = ["enterprise", "$100k", "million"]
    mid_market_terms: list[str] = ["mid-market", "medium", "$50k"]
    urgent_terms: list[str] = ["asap", "urgent", "immediately"]
    later_terms: list[str] = ["q3", "q4", "next year"]
    complexity_by_category: dict[str, Complexity] = {
        RequestCategory.API_INTEGRATION.value: Complexity.HIGH,
        RequestCategory.SECURITY.value: Complexity.HIGH,
        RequestCategory.REPORTING.value: Complexity.MEDIUM,
        RequestCategory.COMPLIANCE.value: Complexity.MEDIUM,
    }
    # Case-sensitive markers of a generic, multi-customer ask
    generic_customer_markers: list[str] = ["Multiple", "Various"]

    @model_validator(mode="after")
    def _tables_are_complete(self) -> "RevenueCatalog":
        for name, table, keys in (
            ("customer_size_weights", self.customer_size_weights, CustomerSize),
            ("urgency_weights", self.urgency_weights, Urgency),
            ("complexity_weights", self.complexity_weights, Complexity),
        ):
            missing = [k.value for k in keys if k not in table]
            if missing:
                raise ValueError(f"{name} is missing weights for {missing}")
        if RequestCategory.OTHER.value not in self.baselines:
            raise ValueError("baselines must include an 'other' entry")
        return self

    def baseline_for(self, category: RequestCategory) -> CategoryBaseline:
        return self.baselines.get(category.value) or self.baselines[RequestCategory.OTHER.value]


# ── Suggestion models ────────────────────────────────────

class BundleTemplate(BaseModel):
    """A bundle whose feature list may contain ``{title}`` for the request itself."""
    name: str
    features: list[str]
    development_effort_days: int
    development_synergy: int


def _related(category: RequestCategory, *rows: tuple[str, str, ImpactLevel]) -> list[RelatedFeature]:
    return [
        RelatedFeature(title=title, description=description, category=category, impact=impact)
        for title, description, impact in rows
    ]


class SuggestionCatalog(BaseModel):
    """Related features and bundles per category, plus shared release timings."""
    related_features: dict[str, list[RelatedFeature]] = {
        RequestCategory.API_INTEGRATION.value: _related(
            RequestCategory.API_INTEGRATION,
            ("Webhook Event Notifications",
             "Send real-time updates to third-party systems when events occur", ImpactLevel.HIGH),
            ("API Rate Limiting Controls",
             "Allow customers to configure their own API usage limits", ImpactLevel.MEDIUM),
            ("OAuth 2.0 Integration",
             "Standardize authentication across all integrations", ImpactLevel.HIGH),
        ),
        RequestCategory.USER_INTERFACE.value: _related(
            RequestCategory.USER_INTERFACE,
            ("Customizable Dashboard Widgets",
             "Allow users to create their own dashboard layouts", ImpactLevel.HIGH),
            ("Bulk Action Controls",
             "Enable users to perform actions on multiple items at once", ImpactLevel.MEDIUM),
            ("Dark Mode Support",
             "Provide a dark color theme for the application", ImpactLevel.LOW),
        ),
        RequestCategory.REPORTING.value: _related(
            RequestCategory.REPORTING,
            ("Custom Report Builder",
             "Allow users to create their own report templates", ImpactLevel.HIGH),
            ("Scheduled Reports",
             "Automatically generate and email reports on a schedule", ImpactLevel.MEDIUM),
            ("Data Export Options",
             "Export reports to Excel, CSV, and PDF formats", ImpactLevel.MEDIUM),
        ),
        DEFAULT_BUCKET: _related(
            RequestCategory.OTHER,
            ("Enhanced Search Functionality",
             "Implement advanced search with filters and sorting", ImpactLevel.MEDIUM),
            ("Notification Preferences",
             "Let users customize which alerts they receive", ImpactLevel.LOW),
            ("Team Collaboration Tools",
             "Add commenting and sharing features to requests", ImpactLevel.HIGH),
        ),
    }

    bundles: dict[str, list[BundleTemplate]] = {
        RequestCategory.API_INTEGRATION.value: [
            BundleTemplate(
                name="API Platform Expansion",
                features=[TITLE_PLACEHOLDER, "Webhook Event Notifications", "API Documentation Portal"],
                development_effort_days=21, development_synergy=85),
            BundleTemplate(
                name="Integration Security Bundle",
                features=["OAuth 2.0 Integration", "API Rate Limiting", TITLE_PLACEHOLDER],
                development_effort_days=14, development_synergy=72),
        ],
        RequestCategory.USER_INTERFACE.value: [
            BundleTemplate(
                name="UI Modernization Bundle",
                features=[TITLE_PLACEHOLDER, "Dark Mode Support", "Responsive Mobile Views"],
                development_effort_days=18, development_synergy=78),
            BundleTemplate(
                name="User Productivity Pack",
                features=["Customizable Dashboard", TITLE_PLACEHOLDER, "Keyboard Shortcuts"],
                development_effort_days=15, development_synergy=68),
        ],
        RequestCategory.REPORTING.value: [
            BundleTemplate(
                name="Reporting Power User Bundle",
                features=[TITLE_PLACEHOLDER, "Custom Report Builder", "Advanced Filtering"],
                development_effort_days=25, development_synergy=80),
            BundleTemplate(
                name="Data Insights Package",
                features=["Scheduled Reports", TITLE_PLACEHOLDER, "Interactive Charts"],
                development_effort_days=20, development_synergy=75),
        ],
        DEFAULT_BUCKET: [
            BundleTemplate(
                name="User Experience Enhancements",
                features=[TITLE_PLACEHOLDER, "Enhanced Search", "Performance Optimizations"],
                development_effort_days=16, development_synergy=65),
            BundleTemplate(
                name="Collaboration Toolkit",
                features=["Team Sharing Features", TITLE_PLACEHOLDER, "Activity Timeline"],
                development_effort_days=22, development_synergy=70),
        ],
    }

    release_timings: list[ReleaseTiming] = [
        ReleaseTiming(
            recommended_date="Q3 2025",
            sales_impact=ImpactLevel.HIGH,
            reasoning="Aligns with typical enterprise budget planning cycle for next fiscal year",
        ),
        ReleaseTiming(
            recommended_date="Q2 2025",
            sales_impact=ImpactLevel.MEDIUM,
            reasoning="Could be bundled with summer product release ahead of industry conference",
        ),
        ReleaseTiming(
            recommended_date="Q4 2025",
            sales_impact=ImpactLevel.LOW,
            reasoning="End of year software updates often receive less attention due to holiday seasons",
        ),
    ]

    def related_for(self, category: RequestCategory) -> list[RelatedFeature]:
        return self.related_features.get(category.value) or self.related_features[DEFAULT_BUCKET]

    def bundles_for(self, category: RequestCategory) -> list[BundleTemplate]:
        return self.bundles.get(category.value) or self.bundles[DEFAULT_BUCKET]


# ── Store class ──────────────────────────────────────────

class CatalogStore:
    """
    Loads catalog sections from the configured JSON file, falling back to
    the built-in defaults.  Cached after first load.
    """

    def __init__(self, catalog_path: Optional[str] = None):
        if catalog_path is None:
            catalog_path = get_settings().catalog_path
        self.catalog_path = catalog_path
        self._raw: Optional[dict[str, Any]] = None
        self._cache: dict[str, BaseModel] = {}

    def _read_file(self) -> dict[str, Any]:
        if self._raw is not None:
            return self._raw
        self._raw = {}
        if not self.catalog_path:
            return self._raw
        path = Path(self.catalog_path)
        if not path.is_file():
            logger.warning(f"Catalog file {path} not found, using built-in defaults")
            return self._raw
        self._raw = json.loads(path.read_text(encoding="utf-8"))
        logger.info(f"Loaded scoring catalog overrides from {path}")
        return self._raw

    def _load(self, section: str, model_cls: type[BaseModel]) -> BaseModel:
        if section in self._cache:
            return self._cache[section]
        overrides = self._read_file().get(section)
        if not overrides:
            config = model_cls()
        else:
            # Table overrides are merged key by key onto the defaults
            merged = model_cls().model_dump(mode="json")
            for field, value in overrides.items():
                if isinstance(value, dict) and isinstance(merged.get(field), dict):
                    merged[field] = {**merged[field], **value}
                else:
                    merged[field] = value
            config = model_cls.model_validate(merged)
        self._cache[section] = config
        return config

    def get_revenue_catalog(self) -> RevenueCatalog:
        return self._load("revenue", RevenueCatalog)  # type: ignore[return-value]

    def get_suggestion_catalog(self) -> SuggestionCatalog:
        return self._load("suggestions", SuggestionCatalog)  # type: ignore[return-value]

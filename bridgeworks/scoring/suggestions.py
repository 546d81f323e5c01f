"""
Feature Suggestion Engine — deterministic catalog lookup.

For a category it returns three related features, two bundles (with the
request title spliced into each bundle's feature list) and three release
timing options.  Unmapped categories use the catalog's default bucket.
"""

from __future__ import annotations

from typing import Optional

from bridgeworks.models.enums import RequestCategory
from bridgeworks.models.schemas import FeatureBundle, FeatureSuggestionBundle
from bridgeworks.scoring.catalog import TITLE_PLACEHOLDER, CatalogStore, SuggestionCatalog


class FeatureSuggester:

    def __init__(self, catalog: Optional[SuggestionCatalog] = None):
        self.catalog = catalog or CatalogStore().get_suggestion_catalog()

    def suggest(self, category: "RequestCategory | str | None", title: str) -> FeatureSuggestionBundle:
        resolved = RequestCategory.resolve(category)
        bundles = [
            FeatureBundle(
                name=template.name,
                features=[title if f == TITLE_PLACEHOLDER else f for f in template.features],
                development_effort_days=template.development_effort_days,
                development_synergy=template.development_synergy,
            )
            for template in self.catalog.bundles_for(resolved)
        ]
        return FeatureSuggestionBundle(
            related_features=[f.model_copy() for f in self.catalog.related_for(resolved)],
            bundles=bundles,
            release_timings=[t.model_copy() for t in self.catalog.release_timings],
        )

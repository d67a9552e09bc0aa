"""
Resource Catalog — Enrichment Service
=====================================

What:  Turns a stored resource record into one of its two external shapes.
How:   Strips any derived keys the record might carry, then adds freshly
       computed values from the AggregationEngine.

    enrich_summary → record + averageRating               (never `feedback`)
    enrich_detail  → record + averageRating + feedback[]  (always `feedback`)

Side effects: none. Callers run it after their write has been stored.
"""

from typing import Any, Dict, Iterable, List, Mapping

from catalog.schemas import FeedbackOut, ResourceDetail, ResourceSummary
from catalog.services.aggregation import AggregationEngine

# Derived keys, in both spellings; a stored copy would be stale
_DERIVED_KEYS = frozenset({"average_rating", "averageRating", "feedback"})


def _base(resource: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in resource.items() if k not in _DERIVED_KEYS}


class EnrichmentService:
    def __init__(self, aggregation: AggregationEngine):
        self.aggregation = aggregation

    async def enrich_summary(self, resource: Mapping[str, Any]) -> ResourceSummary:
        average = await self.aggregation.average_rating(resource["id"])
        return ResourceSummary.model_validate({**_base(resource), "average_rating": average})

    async def enrich_summaries(self, resources: Iterable[Mapping[str, Any]]) -> List[ResourceSummary]:
        """List-view enrichment for many resources with one ratings scan."""
        resources = list(resources)
        averages = await self.aggregation.average_ratings(r["id"] for r in resources)
        return [
            ResourceSummary.model_validate({**_base(r), "average_rating": averages[str(r["id"])]})
            for r in resources
        ]

    async def enrich_detail(self, resource: Mapping[str, Any]) -> ResourceDetail:
        average = await self.aggregation.average_rating(resource["id"])
        feedback = await self.aggregation.feedback_for(resource["id"])
        return ResourceDetail.model_validate(
            {
                **_base(resource),
                "average_rating": average,
                "feedback": [FeedbackOut.model_validate(f) for f in feedback],
            }
        )

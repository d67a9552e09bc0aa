"""
Resource Catalog — Aggregation Engine
=====================================

What:  Derives per-resource statistics from the raw rating/feedback sets.
How:   Every call reads the store at call time. Nothing is cached or
       pre-aggregated: ratings and feedback can change between two reads.
Who:   EnrichmentService (read views) and CatalogService (list endpoints).

Rounding Policy:
    averageRating = mean of ratingValue, rounded half-up to
    `precision` decimal places (settings.rating_precision, default 2).
    The same function serves the list path and the detail path.

        ratings {2, 4, 5}  → 11 / 3 = 3.666…  → 3.67
        ratings {}         → 0
"""

import logging
from collections import defaultdict
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

from catalog.store import Collection, EntityStore, Record

logger = logging.getLogger(__name__)


def round_half_up(value: float, places: int) -> float:
    """Round like a person would: 2.675 → 2.68, not banker's rounding."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def mean_rating(values: Iterable[float], places: int = 2) -> float:
    """Arithmetic mean of rating values, 0 for an empty set."""
    numbers = [float(v) for v in values]
    if not numbers:
        return 0
    return round_half_up(sum(numbers) / len(numbers), places)


class AggregationEngine:
    """Read-only view over the ratings and feedback collections."""

    def __init__(self, store: EntityStore, precision: int = 2):
        self.store = store
        self.precision = precision

    async def ratings_for(self, resource_id: str) -> List[Record]:
        return await self.store.list(Collection.RATINGS, {"resource_id": str(resource_id)})

    async def feedback_for(self, resource_id: str) -> List[Record]:
        """Every feedback entry of the resource, in store order, unpaginated."""
        return await self.store.list(Collection.FEEDBACK, {"resource_id": str(resource_id)})

    async def average_rating(self, resource_id: str) -> float:
        ratings = await self.ratings_for(resource_id)
        return mean_rating((r["rating_value"] for r in ratings), self.precision)

    async def average_ratings(self, resource_ids: Optional[Iterable[str]] = None) -> Dict[str, float]:
        """
        Averages for many resources from a single scan of the ratings collection.

        Used by the list view. Resources without ratings map to 0; ids not
        asked for are left out when `resource_ids` is given.
        """
        grouped: Dict[str, List[float]] = defaultdict(list)
        for rating in await self.store.list(Collection.RATINGS):
            grouped[str(rating["resource_id"])].append(rating["rating_value"])

        wanted = [str(rid) for rid in resource_ids] if resource_ids is not None else list(grouped)
        averages = {rid: mean_rating(grouped.get(rid, ()), self.precision) for rid in wanted}
        logger.debug("Aggregated ratings for %d resources", len(averages))
        return averages

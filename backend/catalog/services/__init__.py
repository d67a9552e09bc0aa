from catalog.services.aggregation import AggregationEngine, mean_rating, round_half_up
from catalog.services.catalog_service import CatalogService
from catalog.services.enrichment import EnrichmentService

__all__ = [
    "AggregationEngine",
    "CatalogService",
    "EnrichmentService",
    "mean_rating",
    "round_half_up",
]

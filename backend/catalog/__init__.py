"""
Resource Catalog Service
========================

What: Catalog of learning resources with ratings and feedback.
Who:  Imported by uvicorn (`catalog.main:app`), Alembic and pytest.

Architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   CatalogService (operations)       │  ← validation, cascade rules
    ├─────────────────────────────────────┤
    │  Enrichment  ←  Aggregation         │  ← read-side composition
    ├─────────────────────────────────────┤
    │  EntityStore (memory / json / sql)  │  ← persistence, swappable
    └─────────────────────────────────────┘

Every layer below the routes works on plain dict records and can be tested
without HTTP.
"""

__version__ = "1.0.0"

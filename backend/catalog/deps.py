"""
FastAPI dependencies.

The store and the CatalogService are built once in the application lifespan
and kept on `app.state`; handlers receive them through these providers.
Tests can swap either with `app.dependency_overrides`.
"""

from fastapi import Request

from catalog.services import CatalogService
from catalog.store import EntityStore


def get_store(request: Request) -> EntityStore:
    return request.app.state.store


def get_catalog_service(request: Request) -> CatalogService:
    return request.app.state.catalog_service

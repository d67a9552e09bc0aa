"""
Resource Catalog — Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the error classes the API reports.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) turn them into
       structured JSON error responses with the matching HTTP status.
Who:   Raised by the store, the services and the routes.

Exception Hierarchy:
    CatalogError (base)          → 500 Internal Server Error
    ├── ValidationError          → 400 Bad Request (client can fix)
    ├── NotFoundError            → 404 Not Found
    └── StoreError               → 500 Internal Server Error (generic body)
"""

from typing import Any, Dict, Optional


class CatalogError(Exception):
    """
    Base exception for all catalog errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned for server errors)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CatalogError):
    """
    Raised when client input fails a catalog rule.

    When:    Missing/empty title, type or feedback text, rating value outside
             [1, 5] or not a number, empty partial update.
    HTTP:    400 Bad Request

    Example response:
        {
            "error": "validation_error",
            "message": "ratingValue must be a number between 1 and 5",
            "details": {"field": "ratingValue", "value": 6}
        }
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(CatalogError):
    """
    Raised when a referenced record does not exist.

    When:    Unknown resource id, or a (resource, feedback) pair that does
             not match. A feedback id owned by another resource is reported
             exactly like a missing one.
    HTTP:    404 Not Found

    Stores return None for missing records; the service layer converts
    None into this exception.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StoreError(CatalogError):
    """
    Raised when the underlying persistence fails.

    When:    Database unreachable, query failure, unreadable or malformed
             JSON data file, disk errors.
    HTTP:    500 Internal Server Error

    Security Note:
        The response body is always generic. Driver messages, file paths
        and SQL stay in the server log via `context`.
    """

    def __init__(
        self,
        message: str = "A storage error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

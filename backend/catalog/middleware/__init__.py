from catalog.middleware.logging import RequestLoggingMiddleware
from catalog.middleware.request_id import RequestIDMiddleware, request_id_var

__all__ = ["RequestIDMiddleware", "RequestLoggingMiddleware", "request_id_var"]

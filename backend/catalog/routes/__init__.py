from catalog.routes import health, resources

__all__ = ["health", "resources"]

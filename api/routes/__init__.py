"""Route modules for the API."""
from api.routes import health, requests

__all__ = ["health", "requests"]

"""
API module containing the HTTP routes.
"""

from .routes import router, get_resolver

__all__ = ["router", "get_resolver"]

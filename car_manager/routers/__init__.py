"""
Routers for the car manager: HTML pages, JSON API and health checks.
"""

from . import cars_api, health_router, pages

__all__ = ["cars_api", "health_router", "pages"]

"""
Shared dependencies for the application.

Provides dependency injection functions used across routers.
"""

from fastapi import Request
from fastapi.templating import Jinja2Templates

from .config import Settings
from .services.car_service import CarCollectionManager


async def get_car_manager(request: Request) -> CarCollectionManager:
    """
    Get the collection manager owned by the running application.

    Raises:
        RuntimeError: If the application was built without a manager
    """
    manager = getattr(request.app.state, "car_manager", None)
    if manager is None:
        raise RuntimeError("Car manager not initialized")
    return manager


async def get_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates

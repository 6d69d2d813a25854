"""
Health check and monitoring router.
"""

from fastapi import APIRouter, Depends

from .. import __version__
from ..config import Settings
from ..dependencies import get_car_manager, get_settings
from ..metrics import metrics_endpoint
from ..services.car_service import CarCollectionManager

router = APIRouter(tags=["Health"])


@router.get("/health", summary="Health check")
async def health_check(
    manager: CarCollectionManager = Depends(get_car_manager),
    settings: Settings = Depends(get_settings),
):
    """Report service status and the number of stored cars."""
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "version": __version__,
        "cars": len(manager),
    }


@router.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus metrics endpoint."""
    return await metrics_endpoint()

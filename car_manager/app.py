"""
Car Manager - Main FastAPI Application.

Builds the application: storage backend, repository, collection manager,
templates, routers and middleware. ``create_app`` is used by tests to get
an isolated instance; ``app`` is the instance served by uvicorn.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import AsyncGenerator, Callable, Optional, Union

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from . import __version__
from .config import Settings
from .config import settings as default_settings
from .exceptions import StorageWriteException
from .logging_config import get_logger, setup_logging
from .metrics import cars_stored, track_request_metrics, update_cars_stored
from .metrics_middleware import PrometheusMiddleware
from .middleware import (PerformanceMonitoringMiddleware,
                         RequestLoggingMiddleware, StaticFileCacheMiddleware)
from .models import ErrorResponse
from .repositories import (CarRepository, JsonFileStorage, KeyValueStorage,
                           MemoryStorage)
from .routers import cars_api, health_router, pages
from .services.car_service import CarCollectionManager
from .tracing import configure_opentelemetry, instrument_fastapi

logger = get_logger(__name__)

BASE_PATH = Path(__file__).resolve().parent


def format_price(value: Union[int, float]) -> str:
    """
    Format a price for display.

    Whole amounts are shown without decimals, others with two.

    Args:
        value: Price in dollars

    Returns:
        Formatted price string (e.g., "15000" or "9999.50")
    """
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def build_storage(settings: Settings) -> KeyValueStorage:
    """Create the storage backend selected by configuration."""
    if settings.STORAGE_BACKEND == "memory":
        return MemoryStorage()
    return JsonFileStorage(settings.STORAGE_PATH)


def build_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(BASE_PATH / "templates"))
    templates.env.filters["format_price"] = format_price
    return templates


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Logs configuration on startup and shutdown. The collection itself is
    loaded when the application is built and persisted on every change, so
    there is nothing to flush on shutdown.
    """
    settings: Settings = app.state.settings
    logger.info(
        "Starting Car Manager",
        version=__version__,
        storage_backend=settings.STORAGE_BACKEND,
        storage_path=settings.STORAGE_PATH,
        storage_key=settings.STORAGE_KEY,
        cars=len(app.state.car_manager),
    )

    yield

    logger.info("Car Manager stopped")


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[KeyValueStorage] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> FastAPI:
    """
    Build a fully wired application.

    Args:
        settings: Configuration, defaults to the environment-derived settings
        storage: Storage backend override, defaults to the configured backend
        clock: Source of the current date for the year rule

    Returns:
        Configured FastAPI application

    Raises:
        StorageCorruptedException: If stored data is malformed and
            STORAGE_CORRUPT_POLICY is "fail"
    """
    settings = settings or default_settings

    setup_logging(
        log_level=settings.LOG_LEVEL,
        service_name=settings.SERVICE_NAME,
        use_json=settings.LOG_JSON,
    )
    configure_opentelemetry(
        service_name=settings.SERVICE_NAME,
        service_version=__version__,
        otlp_endpoint=settings.OTLP_ENDPOINT,
        enable_tracing=settings.ENABLE_TRACING,
    )

    repository = CarRepository(
        storage or build_storage(settings),
        key=settings.STORAGE_KEY,
        corrupt_policy=settings.STORAGE_CORRUPT_POLICY,
    )
    manager = CarCollectionManager(repository, clock=clock)
    cars_stored.set(len(manager))
    manager.subscribe(update_cars_stored)

    app = FastAPI(
        title=settings.APP_NAME,
        description="Keep a personal list of cars",
        version=__version__,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.car_manager = manager
    app.state.templates = build_templates()

    # Middleware (order matters - first added is last executed)
    app.add_middleware(StaticFileCacheMiddleware)
    app.add_middleware(
        PerformanceMonitoringMiddleware,
        slow_request_threshold_ms=settings.SLOW_REQUEST_THRESHOLD_MS,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(PrometheusMiddleware, track_func=track_request_metrics)

    instrument_fastapi(app, enable_tracing=settings.ENABLE_TRACING)

    @app.exception_handler(StorageWriteException)
    async def storage_write_failed(request: Request, exc: StorageWriteException):
        logger.error(
            "Car collection could not be saved",
            key=exc.key,
            reason=exc.reason,
            path=request.url.path,
        )
        if not request.url.path.startswith("/api/"):
            return request.app.state.templates.TemplateResponse(
                request=request,
                name="error.html",
                context={
                    "app_name": settings.APP_NAME,
                    "error_title": "Changes could not be saved",
                    "error_message": "Your cars are unchanged. Please try again later.",
                },
                status_code=503,
            )
        return JSONResponse(
            status_code=503,
            content=ErrorResponse(detail=exc.message, error_code="storage_unavailable").model_dump(),
        )

    app.mount("/static", StaticFiles(directory=str(BASE_PATH / "static")), name="static")

    app.include_router(health_router.router)
    app.include_router(cars_api.router)
    app.include_router(pages.router)

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        app,
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    run()

"""
Car Manager Tests - Test Configuration.

Provides pytest fixtures for the storage backends, the collection manager
and an isolated application instance.
"""

import os
from datetime import datetime
from typing import Any, AsyncGenerator, Callable, Dict

# Keep the module-level application off the filesystem during tests
os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from car_manager.app import create_app  # noqa: E402
from car_manager.config import Settings  # noqa: E402
from car_manager.models import CarFields  # noqa: E402
from car_manager.repositories import CarRepository, MemoryStorage  # noqa: E402
from car_manager.services import CarCollectionManager  # noqa: E402

FIXED_NOW = datetime(2025, 6, 15, 12, 0, 0)


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Clock frozen in 2025 so the year rule has a stable upper bound."""
    return lambda: FIXED_NOW


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def repository(storage: MemoryStorage) -> CarRepository:
    return CarRepository(storage)


@pytest.fixture
def manager(repository: CarRepository, clock: Callable[[], datetime]) -> CarCollectionManager:
    return CarCollectionManager(repository, clock=clock)


@pytest.fixture
def golf() -> CarFields:
    return CarFields(brand="VW", model="Golf", year=2020, price=15000)


@pytest.fixture
def car_form() -> Dict[str, Any]:
    """Raw form submission as sent by the browser."""
    return {"brand": "Toyota", "model": "Corolla", "year": "2019", "price": "12000"}


@pytest.fixture
def test_settings() -> Settings:
    return Settings(STORAGE_BACKEND="memory", LOG_LEVEL="WARNING", DEBUG=True)


@pytest.fixture
def app(test_settings: Settings, storage: MemoryStorage, clock: Callable[[], datetime]):
    return create_app(settings=test_settings, storage=storage, clock=clock)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")


@pytest.fixture
def manager_in_app(app) -> CarCollectionManager:
    """The application's manager, seeded with two cars."""
    manager = app.state.car_manager
    manager.create(CarFields(brand="Toyota", model="Corolla", year=2019, price=12000))
    manager.create(CarFields(brand="Honda", model="Civic", year=2018, price=11000))
    return manager

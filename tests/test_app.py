"""
Car Manager Tests - HTML Pages.

Tests for the listing page, the create/edit form, deletion, the detail
page, live validation and the operational endpoints.
"""

import json
from typing import Any, Dict

import pytest

from car_manager.app import create_app, format_price
from car_manager.config import Settings
from car_manager.exceptions import StorageCorruptedException, StorageWriteException
from car_manager.repositories import MemoryStorage


@pytest.mark.asyncio
async def test_homepage_empty(client) -> None:
    response = await client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Car Manager" in response.text
    assert "Add a new car" in response.text
    assert "No cars found" in response.text


@pytest.mark.asyncio
async def test_homepage_lists_cars(client, manager_in_app) -> None:
    response = await client.get("/")

    assert response.status_code == 200
    assert "Toyota Corolla" in response.text
    assert "Honda Civic" in response.text
    assert "Price: $12000" in response.text
    assert "No cars found" not in response.text


@pytest.mark.asyncio
async def test_homepage_brand_filter(client, manager_in_app) -> None:
    response = await client.get("/?brand=TOY")

    assert "Toyota Corolla" in response.text
    assert "Honda Civic" not in response.text


@pytest.mark.asyncio
async def test_homepage_filter_without_matches(client, manager_in_app) -> None:
    response = await client.get("/?brand=bmw")
    assert "No cars found" in response.text


@pytest.mark.asyncio
async def test_new_form_opens(client) -> None:
    response = await client.get("/?form=new")

    assert 'action="/cars"' in response.text
    assert "Save Car" in response.text


@pytest.mark.asyncio
async def test_edit_form_prefilled(client, manager_in_app) -> None:
    car = manager_in_app.query("honda")[0]

    response = await client.get(f"/?edit={car.id}")

    assert f'action="/cars/{car.id}"' in response.text
    assert "Update Car" in response.text
    assert "Edit Car" in response.text
    assert 'value="Civic"' in response.text


@pytest.mark.asyncio
async def test_edit_unknown_id_keeps_form_closed(client) -> None:
    response = await client.get("/?edit=999")
    assert "Save Car" not in response.text
    assert "Update Car" not in response.text


@pytest.mark.asyncio
async def test_create_car(client, app, car_form: Dict[str, Any]) -> None:
    response = await client.post("/cars", data=car_form)

    assert response.status_code == 303
    assert response.headers["location"] == "/"

    cars = app.state.car_manager.cars
    assert len(cars) == 1
    assert cars[0].brand == "Toyota"
    assert cars[0].year == 2019


@pytest.mark.asyncio
async def test_create_keeps_brand_filter(client, car_form: Dict[str, Any]) -> None:
    response = await client.post("/cars", data={**car_form, "brand_filter": "toy"})
    assert response.headers["location"] == "/?brand=toy"


@pytest.mark.asyncio
async def test_create_invalid_price_rerenders_form(client, app, car_form) -> None:
    response = await client.post("/cars", data={**car_form, "price": "0"})

    assert response.status_code == 422
    assert 'alert("Price must be at least 1")' in response.text
    assert 'value="Corolla"' in response.text
    assert len(app.state.car_manager) == 0


@pytest.mark.asyncio
async def test_create_invalid_year(client, app, car_form) -> None:
    response = await client.post("/cars", data={**car_form, "year": "1899"})

    assert response.status_code == 422
    assert "Year must be between 1900 and 2025" in response.text
    assert len(app.state.car_manager) == 0


@pytest.mark.asyncio
async def test_create_missing_field(client, app, car_form) -> None:
    response = await client.post("/cars", data={**car_form, "brand": ""})

    assert response.status_code == 422
    assert "Brand is required" in response.text


@pytest.mark.asyncio
async def test_update_car(client, manager_in_app) -> None:
    car = manager_in_app.query("honda")[0]

    response = await client.post(
        f"/cars/{car.id}",
        data={"brand": "Honda", "model": "Accord", "year": "2021", "price": "21000"},
    )

    assert response.status_code == 303
    updated = manager_in_app.get(car.id)
    assert updated.model == "Accord"
    assert manager_in_app.cars[1].id == car.id


@pytest.mark.asyncio
async def test_update_invalid_keeps_editing_state(client, manager_in_app) -> None:
    car = manager_in_app.query("honda")[0]

    response = await client.post(
        f"/cars/{car.id}",
        data={"brand": "Honda", "model": "Accord", "year": "2021", "price": "0"},
    )

    assert response.status_code == 422
    assert f'action="/cars/{car.id}"' in response.text
    assert 'value="Accord"' in response.text
    assert manager_in_app.get(car.id).model == "Civic"


@pytest.mark.asyncio
async def test_update_unknown_id_is_noop(client, manager_in_app) -> None:
    before = manager_in_app.cars

    response = await client.post(
        "/cars/999",
        data={"brand": "Ghost", "model": "X", "year": "2020", "price": "10"},
    )

    assert response.status_code == 303
    assert manager_in_app.cars == before


@pytest.mark.asyncio
async def test_delete_confirmed(client, manager_in_app) -> None:
    car = manager_in_app.query("toyota")[0]

    response = await client.post(f"/cars/{car.id}/delete", data={"confirmed": "true"})

    assert response.status_code == 303
    assert manager_in_app.get(car.id) is None


@pytest.mark.asyncio
async def test_delete_without_confirmation_is_noop(client, manager_in_app) -> None:
    car = manager_in_app.query("toyota")[0]

    await client.post(f"/cars/{car.id}/delete", data={})

    assert manager_in_app.get(car.id) == car


@pytest.mark.asyncio
async def test_delete_button_asks_for_confirmation(client, manager_in_app) -> None:
    response = await client.get("/")
    assert "Are you sure you want to delete this car?" in response.text


@pytest.mark.asyncio
async def test_car_page(client, manager_in_app) -> None:
    car = manager_in_app.query("toyota")[0]

    response = await client.get(f"/cars/{car.id}")

    assert response.status_code == 200
    assert f"Car Details (ID: {car.id})" in response.text
    assert "Toyota" in response.text
    assert "Back to Home" in response.text


@pytest.mark.asyncio
@pytest.mark.parametrize("car_id", ["999", "abc", "%C2%B2", "-"])
async def test_car_page_not_found(client, car_id: str) -> None:
    response = await client.get(f"/cars/{car_id}")

    assert response.status_code == 404
    assert "Car not found!" in response.text


@pytest.mark.asyncio
async def test_live_validation_price_hint(client) -> None:
    response = await client.post("/cars/validate", data={"price": "0"})

    assert response.status_code == 200
    assert "Price must be at least 1" in response.text


@pytest.mark.asyncio
async def test_live_validation_year(client, car_form) -> None:
    response = await client.post("/cars/validate", data={**car_form, "year": "3000"})
    assert "Year must be between 1900 and 2025" in response.text


@pytest.mark.asyncio
async def test_live_validation_incomplete_form(client) -> None:
    response = await client.post("/cars/validate", data={"brand": "VW"})
    assert response.text.strip() == ""


@pytest.mark.asyncio
async def test_health_check(client, manager_in_app) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "car-manager"
    assert data["cars"] == 2


@pytest.mark.asyncio
async def test_metrics_endpoint(client) -> None:
    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "car_manager_cars_stored" in response.text


@pytest.mark.asyncio
async def test_request_id_propagated(client) -> None:
    response = await client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


@pytest.mark.asyncio
async def test_state_survives_restart(test_settings, clock, car_form) -> None:
    from httpx import ASGITransport, AsyncClient

    storage = MemoryStorage()
    first = create_app(settings=test_settings, storage=storage, clock=clock)
    async with AsyncClient(transport=ASGITransport(app=first), base_url="http://test") as c:
        await c.post("/cars", data=car_form)

    second = create_app(settings=test_settings, storage=storage, clock=clock)
    assert second.state.car_manager.cars == first.state.car_manager.cars
    assert json.loads(storage.get_item("carsList"))[0]["brand"] == "Toyota"


def test_corrupt_storage_fails_startup_with_fail_policy(clock) -> None:
    settings = Settings(STORAGE_BACKEND="memory", STORAGE_CORRUPT_POLICY="fail")
    storage = MemoryStorage({"carsList": "not json"})

    with pytest.raises(StorageCorruptedException):
        create_app(settings=settings, storage=storage, clock=clock)


def test_corrupt_storage_starts_empty_by_default(test_settings, clock) -> None:
    storage = MemoryStorage({"carsList": "not json"})
    app = create_app(settings=test_settings, storage=storage, clock=clock)
    assert len(app.state.car_manager) == 0


@pytest.mark.parametrize(
    "value,expected",
    [(15000, "15000"), (15000.0, "15000"), (9999.5, "9999.50"), (1, "1")],
)
def test_format_price(value, expected) -> None:
    assert format_price(value) == expected


@pytest.mark.asyncio
@pytest.mark.parametrize("price", ["nan", "inf"])
async def test_create_non_finite_price_rejected(client, app, car_form, price) -> None:
    response = await client.post("/cars", data={**car_form, "price": price})

    assert response.status_code == 422
    assert "Price must be a number" in response.text
    assert len(app.state.car_manager) == 0


async def _client_for(app):
    from httpx import ASGITransport, AsyncClient

    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def _seeded_storage(*cars: Dict[str, Any]) -> MemoryStorage:
    return MemoryStorage({"carsList": json.dumps(list(cars))})


@pytest.mark.asyncio
async def test_car_page_negative_id(test_settings, clock) -> None:
    storage = _seeded_storage({"id": -5, "brand": "Lada", "model": "Niva", "year": 1990, "price": 800})
    app = create_app(settings=test_settings, storage=storage, clock=clock)

    async with await _client_for(app) as client:
        response = await client.get("/cars/-5")

    assert response.status_code == 200
    assert "Car Details (ID: -5)" in response.text


@pytest.mark.asyncio
async def test_edit_form_for_id_zero_posts_update(test_settings, clock) -> None:
    storage = _seeded_storage({"id": 0, "brand": "Fiat", "model": "Panda", "year": 2005, "price": 900})
    app = create_app(settings=test_settings, storage=storage, clock=clock)

    async with await _client_for(app) as client:
        page = await client.get("/?edit=0")
        assert 'action="/cars/0"' in page.text
        assert "Update Car" in page.text

        response = await client.post(
            "/cars/0", data={"brand": "Fiat", "model": "Uno", "year": "2005", "price": "900"}
        )

    assert response.status_code == 303
    cars = app.state.car_manager.cars
    assert len(cars) == 1
    assert cars[0].id == 0
    assert cars[0].model == "Uno"


class _ReadOnlyStorage(MemoryStorage):
    def set_item(self, key, value):
        raise StorageWriteException(key, "read-only file system")


@pytest.mark.asyncio
async def test_failed_save_renders_html_error_page(test_settings, clock, car_form) -> None:
    app = create_app(settings=test_settings, storage=_ReadOnlyStorage(), clock=clock)

    async with await _client_for(app) as client:
        response = await client.post("/cars", data=car_form)

    assert response.status_code == 503
    assert "text/html" in response.headers["content-type"]
    assert "Changes could not be saved" in response.text
    assert len(app.state.car_manager) == 0


@pytest.mark.asyncio
async def test_failed_save_returns_json_error_for_api(test_settings, clock) -> None:
    app = create_app(settings=test_settings, storage=_ReadOnlyStorage(), clock=clock)

    async with await _client_for(app) as client:
        response = await client.post(
            "/api/cars", json={"brand": "VW", "model": "Golf", "year": 2020, "price": 15000}
        )

    assert response.status_code == 503
    assert response.json()["error_code"] == "storage_unavailable"

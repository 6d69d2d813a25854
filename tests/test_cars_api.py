"""
Car Manager Tests - JSON API.
"""

import pytest


@pytest.mark.asyncio
async def test_list_cars(client, manager_in_app) -> None:
    response = await client.get("/api/cars")

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [car["brand"] for car in data["cars"]] == ["Toyota", "Honda"]


@pytest.mark.asyncio
async def test_list_cars_filtered(client, manager_in_app) -> None:
    response = await client.get("/api/cars", params={"brand": "TOY"})

    data = response.json()
    assert data["total"] == 1
    assert data["brand_filter"] == "TOY"
    assert data["cars"][0]["brand"] == "Toyota"


@pytest.mark.asyncio
async def test_get_car(client, manager_in_app) -> None:
    car = manager_in_app.cars[0]

    response = await client.get(f"/api/cars/{car.id}")

    assert response.status_code == 200
    assert response.json()["id"] == car.id


@pytest.mark.asyncio
async def test_get_car_not_found(client) -> None:
    response = await client.get("/api/cars/404")

    assert response.status_code == 404
    assert response.json()["error_code"] == "car_not_found"


@pytest.mark.asyncio
async def test_create_car(client, app) -> None:
    response = await client.post(
        "/api/cars", json={"brand": "VW", "model": "Golf", "year": 2020, "price": 15000}
    )

    assert response.status_code == 201
    data = response.json()
    assert data["brand"] == "VW"
    assert data["id"] == app.state.car_manager.cars[0].id


@pytest.mark.asyncio
async def test_create_car_validation_error(client, app) -> None:
    response = await client.post(
        "/api/cars", json={"brand": "VW", "model": "Golf", "year": 2020, "price": 0}
    )

    assert response.status_code == 422
    data = response.json()
    assert data["detail"] == "Price must be at least 1"
    assert data["field"] == "price"
    assert len(app.state.car_manager) == 0


@pytest.mark.asyncio
async def test_create_car_empty_brand(client) -> None:
    response = await client.post(
        "/api/cars", json={"brand": " ", "model": "Golf", "year": 2020, "price": 10}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_car(client, manager_in_app) -> None:
    car = manager_in_app.cars[1]

    response = await client.put(
        f"/api/cars/{car.id}",
        json={"brand": "Honda", "model": "Accord", "year": 2022, "price": 25000},
    )

    assert response.status_code == 200
    assert response.json()["model"] == "Accord"
    assert manager_in_app.cars[1].model == "Accord"


@pytest.mark.asyncio
async def test_update_car_not_found(client, manager_in_app) -> None:
    response = await client.put(
        "/api/cars/999", json={"brand": "X", "model": "Y", "year": 2022, "price": 5}
    )

    assert response.status_code == 404
    assert len(manager_in_app) == 2


@pytest.mark.asyncio
async def test_update_car_invalid_year(client, manager_in_app) -> None:
    car = manager_in_app.cars[0]

    response = await client.put(
        f"/api/cars/{car.id}",
        json={"brand": "Toyota", "model": "Corolla", "year": 1850, "price": 5},
    )

    assert response.status_code == 422
    assert response.json()["field"] == "year"


@pytest.mark.asyncio
async def test_delete_requires_confirmation(client, manager_in_app) -> None:
    car = manager_in_app.cars[0]

    response = await client.delete(f"/api/cars/{car.id}")

    assert response.status_code == 409
    assert manager_in_app.get(car.id) == car


@pytest.mark.asyncio
async def test_delete_confirmed(client, manager_in_app) -> None:
    car = manager_in_app.cars[0]

    response = await client.delete(f"/api/cars/{car.id}", params={"confirm": "true"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert manager_in_app.get(car.id) is None


@pytest.mark.asyncio
async def test_delete_not_found(client) -> None:
    response = await client.delete("/api/cars/999", params={"confirm": "true"})
    assert response.status_code == 404

"""
JSON API for the car collection.

Mirrors the HTML pages for programmatic clients. Deletion requires an
explicit ``confirm=true`` flag in place of the browser confirmation dialog.
"""

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from ..dependencies import get_car_manager
from ..exceptions import CarNotFoundException, CarValidationException
from ..metrics import track_car_operation, track_validation_failure
from ..models import (CarFields, CarListResponse, CarRecord, ErrorResponse,
                      MessageResponse)
from ..services.car_service import CarCollectionManager

router = APIRouter(prefix="/api/cars", tags=["Cars"])


def _not_found(car_id: int) -> JSONResponse:
    exc = CarNotFoundException(car_id)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=ErrorResponse(detail=exc.message, error_code="car_not_found").model_dump(),
    )


def _invalid(exc: CarValidationException) -> JSONResponse:
    track_validation_failure(exc.field_name)
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(
            detail=exc.message, error_code="validation_error", field=exc.field_name
        ).model_dump(),
    )


@router.get("", response_model=CarListResponse, summary="List cars")
async def list_cars(
    brand: str = Query(default="", max_length=100, description="Case-insensitive brand filter"),
    manager: CarCollectionManager = Depends(get_car_manager),
) -> CarListResponse:
    """List cars in collection order, optionally filtered by brand."""
    cars = manager.query(brand)
    return CarListResponse(cars=list(cars), total=len(cars), brand_filter=brand)


@router.get(
    "/{car_id}",
    response_model=CarRecord,
    responses={404: {"model": ErrorResponse}},
    summary="Get car",
)
async def get_car(car_id: int, manager: CarCollectionManager = Depends(get_car_manager)):
    car = manager.get(car_id)
    if car is None:
        return _not_found(car_id)
    return car


@router.post(
    "",
    response_model=CarRecord,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
    summary="Create car",
)
async def create_car(
    fields: CarFields, manager: CarCollectionManager = Depends(get_car_manager)
):
    """Validate and append a new car."""
    try:
        car = manager.create(fields)
    except CarValidationException as e:
        track_car_operation("create", success=False)
        return _invalid(e)

    track_car_operation("create", success=True)
    return car


@router.put(
    "/{car_id}",
    response_model=CarRecord,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Update car",
)
async def update_car(
    car_id: int,
    fields: CarFields,
    manager: CarCollectionManager = Depends(get_car_manager),
):
    """Validate and replace a car in place."""
    try:
        car = manager.update(car_id, fields)
    except CarValidationException as e:
        track_car_operation("update", success=False)
        return _invalid(e)

    track_car_operation("update", success=car is not None)
    if car is None:
        return _not_found(car_id)
    return car


@router.delete(
    "/{car_id}",
    response_model=MessageResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Delete car",
)
async def delete_car(
    car_id: int,
    confirm: bool = Query(default=False, description="Must be true to delete"),
    manager: CarCollectionManager = Depends(get_car_manager),
):
    """Delete a car once the caller confirms."""
    deleted = manager.delete(car_id, confirm=lambda prompt: confirm)

    if not confirm:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=ErrorResponse(
                detail="Deletion must be confirmed with confirm=true",
                error_code="confirmation_required",
            ).model_dump(),
        )

    track_car_operation("delete", success=deleted)
    if not deleted:
        return _not_found(car_id)
    return MessageResponse(message=f"Car {car_id} deleted")

"""
HTML pages for the car manager.

Renders the card grid with its brand filter, the create/edit form and the
per-car detail page. Every mutation goes through the collection manager;
pages only render projections of the collection.
"""

from typing import Any, Dict, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from ..config import Settings
from ..dependencies import get_car_manager, get_settings, get_templates
from ..exceptions import CarValidationException
from ..logging_config import get_logger
from ..metrics import track_car_operation, track_validation_failure
from ..models import CarRecord
from ..services.car_service import CarCollectionManager
from ..validators import (DELETE_CONFIRMATION_PROMPT, MIN_PRICE, MIN_YEAR,
                          check_car_fields, check_price_input, parse_car_form)

logger = get_logger(__name__)

router = APIRouter(tags=["Pages"])

EMPTY_FORM = {"brand": "", "model": "", "year": "", "price": ""}


def _home_url(brand_filter: str = "") -> str:
    return f"/?{urlencode({'brand': brand_filter})}" if brand_filter else "/"


def _form_values(car: CarRecord) -> Dict[str, Any]:
    return {"brand": car.brand, "model": car.model, "year": car.year, "price": car.price}


def _render_home(
    request: Request,
    templates: Jinja2Templates,
    settings: Settings,
    manager: CarCollectionManager,
    brand_filter: str = "",
    show_form: bool = False,
    editing_id: Optional[int] = None,
    car: Optional[Dict[str, Any]] = None,
    error: Optional[str] = None,
    status_code: int = 200,
) -> HTMLResponse:
    cars = manager.query(brand_filter)
    return templates.TemplateResponse(
        request=request,
        name="index.html",
        context={
            "app_name": settings.APP_NAME,
            "cars": cars,
            "brand_filter": brand_filter,
            "show_form": show_form,
            "editing_id": editing_id,
            "car": car or dict(EMPTY_FORM),
            "error": error,
            "min_price": MIN_PRICE,
            "min_year": MIN_YEAR,
            "current_year": manager.current_year(),
            "delete_prompt": DELETE_CONFIRMATION_PROMPT,
        },
        status_code=status_code,
    )


@router.get("/", response_class=HTMLResponse, summary="Car list")
async def homepage(
    request: Request,
    brand: str = Query(default="", max_length=100, description="Brand filter"),
    form: Optional[str] = Query(default=None, description="'new' opens an empty form"),
    edit: Optional[int] = Query(default=None, description="ID of the car to edit"),
    manager: CarCollectionManager = Depends(get_car_manager),
    settings: Settings = Depends(get_settings),
    templates: Jinja2Templates = Depends(get_templates),
) -> HTMLResponse:
    """
    Render the car list with an optional open form.

    ``?edit={id}`` opens the form pre-filled with that car; an unknown id
    leaves the form closed.
    """
    editing = manager.get(edit) if edit is not None else None
    return _render_home(
        request,
        templates,
        settings,
        manager,
        brand_filter=brand,
        show_form=editing is not None or form == "new",
        editing_id=editing.id if editing is not None else None,
        car=_form_values(editing) if editing is not None else None,
    )


@router.post("/cars", response_class=HTMLResponse, summary="Create car")
async def create_car(
    request: Request,
    manager: CarCollectionManager = Depends(get_car_manager),
    settings: Settings = Depends(get_settings),
    templates: Jinja2Templates = Depends(get_templates),
):
    """Create a car from the submitted form, or re-render the form with the error."""
    form = await request.form()
    values = {name: str(form.get(name, "")) for name in EMPTY_FORM}
    brand_filter = str(form.get("brand_filter", ""))

    try:
        car = manager.create(parse_car_form(values))
    except CarValidationException as e:
        track_validation_failure(e.field_name)
        track_car_operation("create", success=False)
        return _render_home(
            request,
            templates,
            settings,
            manager,
            brand_filter=brand_filter,
            show_form=True,
            car=values,
            error=e.message,
            status_code=422,
        )

    track_car_operation("create", success=True)
    logger.debug("Redirecting after create", car_id=car.id)
    return RedirectResponse(_home_url(brand_filter), status_code=303)


@router.post("/cars/validate", response_class=HTMLResponse, summary="Live form check")
async def validate_car_form(
    request: Request,
    manager: CarCollectionManager = Depends(get_car_manager),
    templates: Jinja2Templates = Depends(get_templates),
) -> HTMLResponse:
    """
    Check the form while it is being edited (HTMX partial).

    The inline price hint is shown as soon as a price is typed; the full
    range rules are checked once every required field parses.
    """
    form = await request.form()
    values = {name: str(form.get(name, "")) for name in EMPTY_FORM}

    message = check_price_input(values["price"])
    if message is None:
        try:
            fields = parse_car_form(values)
        except CarValidationException:
            fields = None
        if fields is not None:
            error = check_car_fields(fields, manager.current_year())
            message = error.message if error else None

    return templates.TemplateResponse(
        request=request,
        name="components/form_feedback.html",
        context={"message": message},
    )


@router.post("/cars/{car_id}", response_class=HTMLResponse, summary="Update car")
async def update_car(
    request: Request,
    car_id: int,
    manager: CarCollectionManager = Depends(get_car_manager),
    settings: Settings = Depends(get_settings),
    templates: Jinja2Templates = Depends(get_templates),
):
    """Replace a car with the submitted form values."""
    form = await request.form()
    values = {name: str(form.get(name, "")) for name in EMPTY_FORM}
    brand_filter = str(form.get("brand_filter", ""))

    try:
        car = manager.update(car_id, parse_car_form(values))
    except CarValidationException as e:
        track_validation_failure(e.field_name)
        track_car_operation("update", success=False)
        return _render_home(
            request,
            templates,
            settings,
            manager,
            brand_filter=brand_filter,
            show_form=True,
            editing_id=car_id,
            car=values,
            error=e.message,
            status_code=422,
        )

    track_car_operation("update", success=car is not None)
    return RedirectResponse(_home_url(brand_filter), status_code=303)


@router.post("/cars/{car_id}/delete", summary="Delete car")
async def delete_car(
    request: Request,
    car_id: int,
    manager: CarCollectionManager = Depends(get_car_manager),
) -> RedirectResponse:
    """
    Delete a car.

    The browser asks for confirmation before submitting and sends
    ``confirmed=true``; a submission without it is treated as declined.
    """
    form = await request.form()
    confirmed = str(form.get("confirmed", "")).lower() == "true"
    brand_filter = str(form.get("brand_filter", ""))

    deleted = manager.delete(car_id, confirm=lambda prompt: confirmed)
    if confirmed:
        track_car_operation("delete", success=deleted)

    return RedirectResponse(_home_url(brand_filter), status_code=303)


@router.get("/cars/{car_id}", response_class=HTMLResponse, summary="Car details")
async def car_page(
    request: Request,
    car_id: str,
    manager: CarCollectionManager = Depends(get_car_manager),
    settings: Settings = Depends(get_settings),
    templates: Jinja2Templates = Depends(get_templates),
) -> HTMLResponse:
    """Render a single car, or the "not found" state."""
    try:
        car = manager.get(int(car_id))
    except ValueError:
        car = None
    if car is None:
        logger.info("Car page requested for unknown id", car_id=car_id)

    return templates.TemplateResponse(
        request=request,
        name="car.html",
        context={"app_name": settings.APP_NAME, "car": car},
        status_code=200 if car else 404,
    )

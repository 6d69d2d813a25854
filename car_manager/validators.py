"""
Input validation for car records.

This module holds the range rules shared by create and update, and the
conversion of raw form input into :class:`CarFields`. Rules are checked in
a fixed order (price first, then year) and the first failure wins.
"""

import math
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from .exceptions import CarValidationException
from .models import CarFields

MIN_PRICE = 1
MIN_YEAR = 1900

DELETE_CONFIRMATION_PROMPT = "Are you sure you want to delete this car?"

# Pydantic error types meaning "not a usable number"
NUMBER_ERROR_TYPES = ("int_parsing", "float_parsing", "int_from_float", "finite_number")

# Labels used when a raw form field is missing or malformed
FIELD_LABELS = {
    "brand": "Brand",
    "model": "Model",
    "year": "Year",
    "price": "Price",
}


def price_error() -> str:
    return f"Price must be at least {MIN_PRICE}"


def year_error(current_year: int) -> str:
    return f"Year must be between {MIN_YEAR} and {current_year}"


def check_car_fields(fields: CarFields, current_year: int) -> Optional[CarValidationException]:
    """
    Check the range rules against a set of car fields.

    Args:
        fields: Fields to check
        current_year: Upper bound for the year rule, read by the caller at
            validation time

    Returns:
        The first failing rule as an exception instance, or None if valid
    """
    if not math.isfinite(fields.price) or fields.price < MIN_PRICE:
        return CarValidationException("price", fields.price, price_error())
    if fields.year < MIN_YEAR or fields.year > current_year:
        return CarValidationException("year", fields.year, year_error(current_year))
    return None


def validate_car_fields(fields: CarFields, current_year: int) -> None:
    """
    Validate car fields, raising on the first failing rule.

    Raises:
        CarValidationException: If price or year is out of range
    """
    error = check_car_fields(fields, current_year)
    if error is not None:
        raise error


def parse_car_form(data: Mapping[str, Any]) -> CarFields:
    """
    Convert raw form input into car fields.

    Form values arrive as strings; empty strings are treated as missing
    so that "required" is enforced on the server as well as in the browser.

    Args:
        data: Mapping of field name to raw value

    Returns:
        Parsed car fields (range rules not yet applied)

    Raises:
        CarValidationException: If a field is missing or not a number
    """
    cleaned = {
        name: data[name]
        for name in FIELD_LABELS
        if name in data and not (isinstance(data[name], str) and not data[name].strip())
    }

    for name in ("brand", "year", "price"):
        if name not in cleaned:
            raise CarValidationException(
                name, data.get(name), f"{FIELD_LABELS[name]} is required"
            )

    try:
        return CarFields.model_validate(cleaned)
    except ValidationError as e:
        first = e.errors()[0]
        name = str(first["loc"][0]) if first["loc"] else "form"
        label = FIELD_LABELS.get(name, name)
        if first["type"] in NUMBER_ERROR_TYPES:
            reason = f"{label} must be a number"
        else:
            reason = f"{label}: {first['msg']}"
        raise CarValidationException(name, data.get(name), reason) from e


def check_price_input(raw: Optional[str]) -> Optional[str]:
    """
    Live check for the price input while the user is typing.

    Returns the minimum-price message when a non-empty numeric value is
    below the minimum, otherwise None.
    """
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if not math.isfinite(value) or value < MIN_PRICE:
        return price_error()
    return None

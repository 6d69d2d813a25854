"""Pydantic models for car records and request/response validation."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CarFields(BaseModel):
    """
    Editable fields of a car record.

    Range rules for year and price depend on the current date and are
    checked by :mod:`car_manager.validators`, not here.
    """

    model_config = ConfigDict(frozen=True)

    brand: str = Field(..., description="Manufacturer, e.g. 'Toyota'")
    model: str = Field(default="", description="Model name, e.g. 'Corolla'")
    year: int = Field(..., description="Model year")
    price: float = Field(..., allow_inf_nan=False, description="Price in dollars")

    @field_validator("brand")
    @classmethod
    def validate_brand(cls, v: str) -> str:
        """Strip whitespace and reject an empty brand."""
        v = v.strip()
        if not v:
            raise ValueError("Brand cannot be empty")
        return v

    @field_validator("model")
    @classmethod
    def strip_model(cls, v: str) -> str:
        return v.strip()


class CarRecord(CarFields):
    """A stored car. ``id`` is assigned once on creation and never changes."""

    id: int = Field(..., description="Unique record identity")

    @classmethod
    def from_fields(cls, car_id: int, fields: CarFields) -> "CarRecord":
        """Combine editable fields with an identity."""
        return cls(id=car_id, **fields.model_dump())

    def to_fields(self) -> CarFields:
        """The editable part of this record."""
        return CarFields(**self.model_dump(exclude={"id"}))


class CarListResponse(BaseModel):
    """Response model for the car list."""

    cars: list[CarRecord]
    total: int
    brand_filter: str = ""


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
    success: bool = True


class ErrorResponse(BaseModel):
    """Error response model."""

    detail: str
    error_code: Optional[str] = None
    field: Optional[str] = None

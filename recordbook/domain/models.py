"""
Record models for recordbook.

Each model is one fixed-schema record kind. Field declaration order is the
column order used by stores and the table renderer. Models are frozen: stores
replace a record wholesale on update instead of mutating it.
"""
from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, Field, field_validator

CENTS = Decimal("0.01")
# Largest value a NUMERIC(12, 2) price column holds.
MAX_PRICE = Decimal("9999999999.99")

_RECORD_CONFIG = {
    "frozen": True,
    "str_strip_whitespace": True,
    "extra": "forbid",
}


def _check_date(value: str) -> str:
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError as exc:
        raise ValueError("date must use the YYYY-MM-DD format") from exc
    return value


def _check_time(value: str) -> str:
    try:
        datetime.strptime(value, "%H:%M")
    except ValueError as exc:
        raise ValueError("time must use the 24-hour HH:MM format") from exc
    return value


def round_cents(value: Decimal) -> Decimal:
    """
    Round half-up to cents. Raises ValueError for values that are not
    finite or do not fit in MAX_PRICE once rounded.
    """
    if not value.is_finite() or abs(value) > MAX_PRICE + CENTS:
        raise ValueError(f"price must be at most {MAX_PRICE}")
    rounded = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    if abs(rounded) > MAX_PRICE:
        raise ValueError(f"price must be at most {MAX_PRICE}")
    return rounded


class Product(BaseModel):
    """
    A stocked item in the `products` collection, keyed on `name`.
    """

    name: str = Field(..., min_length=1, description="Unique product name.")
    category: str = Field(..., min_length=1, description="Free-form category label.")
    quantity: int = Field(..., ge=0, description="Units in stock.")
    price: Decimal = Field(..., ge=0, description="Unit price, two decimal places.")

    model_config = _RECORD_CONFIG

    @field_validator("price")
    @classmethod
    def round_price(cls, value: Decimal) -> Decimal:
        return round_cents(value)


class Resident(BaseModel):
    """
    A registered resident, keyed on `name`.
    """

    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    contact: str = Field(..., min_length=1)

    model_config = _RECORD_CONFIG


class Incident(BaseModel):
    """
    A reported incident. Incidents have no unique key.
    """

    type: str = Field(..., min_length=1, description="e.g. Crime, Accident.")
    location: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1, description="YYYY-MM-DD")
    time: str = Field(..., min_length=1, description="HH:MM")
    description: str = Field("", description="Optional free text.")

    model_config = _RECORD_CONFIG

    @field_validator("date")
    @classmethod
    def valid_date(cls, value: str) -> str:
        return _check_date(value)

    @field_validator("time")
    @classmethod
    def valid_time(cls, value: str) -> str:
        return _check_time(value)


class Announcement(BaseModel):
    """
    A posted announcement, keyed on `title`.
    """

    title: str = Field(..., min_length=1)
    date: str = Field(..., min_length=1, description="YYYY-MM-DD")
    content: str = Field(..., min_length=1)

    model_config = _RECORD_CONFIG

    @field_validator("date")
    @classmethod
    def valid_date(cls, value: str) -> str:
        return _check_date(value)


__all__ = ["Product", "Resident", "Incident", "Announcement", "CENTS", "MAX_PRICE", "round_cents"]

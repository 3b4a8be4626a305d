"""
Pydantic schemas for car inventory endpoints.
"""

from __future__ import annotations

import math
import re
from typing import Any

from pydantic import BaseModel, model_validator
from pydantic_core import PydanticCustomError

# year, price and car_id are Postgres `integer` columns.
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1

BODY_NOT_OBJECT = "Request body must be a JSON object."
FIELDS_REQUIRED = "make, model_name, year, and price are required."
NOT_NUMBERS = "Year and price must be numbers."
NOT_WHOLE_NUMBERS = "Year and price must be whole numbers."

REQUIRED_FIELDS = ("make", "model_name", "year", "price")

# Strings JavaScript's Number() turns into a number: ASCII digits only, no "_".
_DECIMAL_STRING = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_PREFIXED_STRING = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")


def _car_error(message: str) -> PydanticCustomError:
    return PydanticCustomError("invalid_car", message)


def parse_number(value: Any) -> int | float | None:
    """
    Return the number a JSON value stands for, or None when it is not one.
    Booleans, NaN and infinities are not numbers here.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if not isinstance(value, str):
        return None

    raw = value.strip()
    if _PREFIXED_STRING.fullmatch(raw):
        return int(raw, 0)
    if not _DECIMAL_STRING.fullmatch(raw):
        return None
    parsed = float(raw)
    return parsed if math.isfinite(parsed) else None


def to_column_int(number: int | float) -> int | None:
    if isinstance(number, float):
        if not number.is_integer():
            return None
        number = int(number)
    return number if INT_MIN <= number <= INT_MAX else None


class CreateCarRequest(BaseModel):
    """
    Body of POST /cars. Every rule raises with the exact client-facing message;
    the first failing rule wins, in the order below.
    """

    make: str
    model_name: str
    year: int
    price: int

    @model_validator(mode="before")
    @classmethod
    def _check_payload(cls, data: Any) -> Any:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise _car_error(BODY_NOT_OBJECT)

        # Falsy values (0, "", null) count as missing.
        if any(not data.get(name) for name in REQUIRED_FIELDS):
            raise _car_error(FIELDS_REQUIRED)
        for name in ("make", "model_name"):
            value = data[name]
            if not isinstance(value, str) or not value.strip():
                raise _car_error(FIELDS_REQUIRED)

        year = parse_number(data["year"])
        price = parse_number(data["price"])
        if year is None or price is None:
            raise _car_error(NOT_NUMBERS)

        year = to_column_int(year)
        price = to_column_int(price)
        if year is None or price is None:
            raise _car_error(NOT_WHOLE_NUMBERS)

        return {**data, "year": year, "price": price}


class CarResponse(BaseModel):
    car_id: int
    make: str
    model_name: str
    year: int
    price: int


class CreatedCarResponse(BaseModel):
    """
    Confirmation for POST /cars. Echoes make/model_name/year/price as the
    client sent them (a numeric string stays a string).
    """

    id: int
    make: str
    model_name: str
    year: int | float | str
    price: int | float | str

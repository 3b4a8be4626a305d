"""
Car inventory business logic.

Scope:
- validate create-car payloads before any database access
- parse path ids the way the original service's parseInt() did
- turn store failures into API errors (500 with the driver detail)
"""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import ValidationError

from core.errors import BackendError, BadRequestError, NotFoundError

from . import schemas
from .repository import CarRepository, CarStoreError

logger = logging.getLogger(__name__)

_DECIMAL_DIGITS = re.compile(r"[0-9]+")
_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


def validate_new_car(payload: Any) -> schemas.CreateCarRequest:
    try:
        return schemas.CreateCarRequest.model_validate(payload)
    except ValidationError as exc:
        raise BadRequestError(exc.errors()[0]["msg"]) from None


def parse_car_id(raw: str) -> int:
    """
    Read the leading integer of a path id: optional whitespace and sign, then
    ASCII decimal digits (or 0x-prefixed hex). Trailing text is ignored, so
    "12abc" and "1.5" give 12 and 1. Nothing to read is a client error.
    """
    text = (raw or "").lstrip()
    sign = 1
    if text[:1] in ("+", "-"):
        sign = -1 if text[0] == "-" else 1
        text = text[1:]

    if text[:2] in ("0x", "0X"):
        digits, base = _HEX_DIGITS.match(text, 2), 16
    else:
        digits, base = _DECIMAL_DIGITS.match(text), 10
    if digits is None:
        raise BadRequestError("Invalid car ID provided.")
    return sign * int(digits.group(), base)


async def list_cars(repo: CarRepository) -> list[schemas.CarResponse]:
    try:
        rows = await repo.list_cars()
    except CarStoreError as exc:
        logger.exception("list_cars_failed")
        raise BackendError("Failed to fetch cars", str(exc)) from exc

    return [
        schemas.CarResponse(
            car_id=int(row["car_id"]),
            make=str(row["make"]),
            model_name=str(row["model_name"]),
            year=int(row["year"]),
            price=int(row["price"]),
        )
        for row in rows
    ]


async def create_car(repo: CarRepository, payload: Any) -> schemas.CreatedCarResponse:
    car = validate_new_car(payload)
    try:
        car_id = await repo.create_car(
            make=car.make,
            model_name=car.model_name,
            year=car.year,
            price=car.price,
        )
    except CarStoreError as exc:
        logger.exception("create_car_failed make=%s model_name=%s", car.make, car.model_name)
        raise BackendError("Failed to add car", str(exc)) from exc

    logger.info("car_created car_id=%s make=%s model_name=%s", car_id, car.make, car.model_name)
    return schemas.CreatedCarResponse(
        id=car_id,
        make=car.make,
        model_name=car.model_name,
        year=payload["year"],
        price=payload["price"],
    )


async def delete_all_cars(repo: CarRepository) -> None:
    try:
        await repo.delete_all_cars()
    except CarStoreError as exc:
        logger.exception("delete_all_cars_failed")
        raise BackendError("Failed to delete all cars", str(exc)) from exc
    logger.info("inventory_cleared")


async def delete_car(repo: CarRepository, raw_car_id: str) -> None:
    car_id = parse_car_id(raw_car_id)
    not_found = NotFoundError(f"Car with ID {car_id} not found.")
    if not schemas.INT_MIN <= car_id <= schemas.INT_MAX:
        # Cannot exist in an integer column.
        raise not_found

    try:
        deleted = await repo.delete_car(car_id)
    except CarStoreError as exc:
        logger.exception("delete_car_failed car_id=%s", car_id)
        raise BackendError("Failed to delete car", str(exc)) from exc

    if not deleted:
        raise not_found
    logger.info("car_deleted car_id=%s", car_id)

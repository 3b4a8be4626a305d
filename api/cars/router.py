"""
Car inventory API endpoints.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Response, status

from core.db import Database, get_database

from . import schemas, service
from .repository import CarRepository

router = APIRouter()


def get_car_repository(database: Database = Depends(get_database)) -> CarRepository:
    return CarRepository(database)


@router.get("/cars", response_model=list[schemas.CarResponse])
async def list_cars(repo: CarRepository = Depends(get_car_repository)) -> list[schemas.CarResponse]:
    return await service.list_cars(repo)


@router.post(
    "/cars",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.CreatedCarResponse,
)
async def create_car(
    # Parsed loosely so missing/invalid fields come back as 400, not 422.
    payload: Any = Body(default=None),
    repo: CarRepository = Depends(get_car_repository),
) -> schemas.CreatedCarResponse:
    return await service.create_car(repo, payload)


# Registered before /cars/{car_id} so "all" is never taken as an id.
@router.delete("/cars/all", status_code=status.HTTP_204_NO_CONTENT)
async def delete_all_cars(repo: CarRepository = Depends(get_car_repository)) -> Response:
    await service.delete_all_cars(repo)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/cars/{car_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_car(car_id: str, repo: CarRepository = Depends(get_car_repository)) -> Response:
    await service.delete_car(repo, car_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

"""
Car inventory persistence.
This module is where all car-related SQL lives.

Tables (see sql/schema.sql):
- CarModels(model_id, make, model_name)
- CarInventory(car_id, model_id, year, price)

Every driver failure leaving this module is re-raised as `CarStoreError`, so
callers never need to know about asyncpg.
"""

from __future__ import annotations

from typing import Any

from core import db
from core.db import Database, Executor


class CarStoreError(RuntimeError):
    pass


class ModelResolutionError(CarStoreError):
    def __init__(self, make: str, model_name: str, cause: BaseException) -> None:
        super().__init__(
            f"Failed to get or create model ID for Make: {make}, Model: {model_name} {cause}"
        )
        self.make = make
        self.model_name = model_name


class CarRepository:
    def __init__(self, database: Database) -> None:
        self._db = database

    async def find_model_id(self, make: str, model_name: str, *, conn: Executor | None = None) -> int | None:
        # No uniqueness constraint on (make, model_name); the first row wins.
        row = await self._db.fetch_one(
            """
            SELECT model_id
            FROM CarModels
            WHERE make = $1
              AND model_name = $2
            LIMIT 1
            """,
            make,
            model_name,
            conn=conn,
        )
        return int(row["model_id"]) if row is not None else None

    async def insert_model(self, make: str, model_name: str, *, conn: Executor | None = None) -> int:
        row = await self._db.fetch_one(
            """
            INSERT INTO CarModels (make, model_name)
            VALUES ($1, $2)
            RETURNING model_id
            """,
            make,
            model_name,
            conn=conn,
        )
        if row is None:
            raise RuntimeError("Failed to insert car model.")
        return int(row["model_id"])

    async def get_or_create_model_id(self, make: str, model_name: str, *, conn: Executor | None = None) -> int:
        """
        Return the id of the (make, model_name) model, inserting it if absent.

        Lookup-then-insert is not atomic: two concurrent calls for the same new
        pair can both insert, leaving duplicate model rows.
        """
        try:
            model_id = await self.find_model_id(make, model_name, conn=conn)
            if model_id is not None:
                return model_id
            return await self.insert_model(make, model_name, conn=conn)
        except (*db.DB_ERRORS, RuntimeError) as exc:
            raise ModelResolutionError(make, model_name, exc) from exc

    async def list_cars(self) -> list[dict[str, Any]]:
        try:
            return await self._db.fetch_all(
                """
                SELECT
                  CarInventory.car_id,
                  CarModels.make,
                  CarModels.model_name,
                  CarInventory.year,
                  CarInventory.price
                FROM CarInventory
                INNER JOIN CarModels ON CarInventory.model_id = CarModels.model_id
                """
            )
        except db.DB_ERRORS as exc:
            raise CarStoreError(str(exc)) from exc

    async def create_car(self, *, make: str, model_name: str, year: int, price: int) -> int:
        """
        Resolve the model and insert the inventory row in one transaction, so a
        failed insert does not leave a fresh model row behind.
        """
        try:
            async with self._db.transaction() as conn:
                model_id = await self.get_or_create_model_id(make, model_name, conn=conn)
                row = await self._db.fetch_one(
                    """
                    INSERT INTO CarInventory (model_id, year, price)
                    VALUES ($1, $2, $3)
                    RETURNING car_id
                    """,
                    model_id,
                    year,
                    price,
                    conn=conn,
                )
        except db.DB_ERRORS as exc:
            raise CarStoreError(str(exc)) from exc
        if row is None:
            raise CarStoreError("Failed to insert car.")
        return int(row["car_id"])

    async def delete_all_cars(self) -> None:
        # Model rows are kept; RESTART IDENTITY matches the original TRUNCATE reseed.
        try:
            await self._db.execute("TRUNCATE TABLE CarInventory RESTART IDENTITY")
        except db.DB_ERRORS as exc:
            raise CarStoreError(str(exc)) from exc

    async def delete_car(self, car_id: int) -> bool:
        """
        Delete one inventory row. Returns False when no row had that id.
        """
        try:
            row = await self._db.fetch_one(
                """
                DELETE FROM CarInventory
                WHERE car_id = $1
                RETURNING car_id
                """,
                car_id,
            )
        except db.DB_ERRORS as exc:
            raise CarStoreError(str(exc)) from exc
        return row is not None

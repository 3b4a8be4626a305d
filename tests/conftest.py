from __future__ import annotations

import pytest
from fastapi import FastAPI

from cars.router import get_car_repository
from core.config import Settings
from main import create_app
from tests.fakes import FakeCarRepository


@pytest.fixture()
def settings() -> Settings:
    return Settings(db_user="cars", db_database="cars", _env_file=None)


@pytest.fixture()
def repo() -> FakeCarRepository:
    return FakeCarRepository()


@pytest.fixture()
def test_app(settings: Settings, repo: FakeCarRepository) -> FastAPI:
    # TestClient is used without a context manager, so the lifespan (and the
    # real pool) never starts.
    app = create_app(settings)
    app.dependency_overrides[get_car_repository] = lambda: repo
    return app

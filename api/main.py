import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from cars import router as cars_router
from core.config import ConfigError, Settings, load_settings
from core.db import Database
from core.errors import register_error_handlers

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def create_app(settings: Settings | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Any failure here aborts startup; there is no degraded mode.
        try:
            resolved = settings or load_settings()
        except ConfigError:
            logger.exception("Invalid configuration")
            raise

        database = Database(resolved)
        try:
            await database.connect()
        except Exception:
            logger.exception("Database connection failed")
            raise

        app.state.settings = resolved
        app.state.database = database
        try:
            yield
        finally:
            await database.close()

    app = FastAPI(title="Car Inventory API", lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(cars_router.router, tags=["cars"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()


def run() -> None:
    try:
        settings = load_settings()
    except ConfigError as exc:
        logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
        logger.error("%s", exc)
        raise SystemExit(1) from exc

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logger.info("Car inventory API listening on port %s", settings.port)
    # uvicorn exits non-zero when the lifespan startup fails.
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from rulebook.config import get_settings
from rulebook.infrastructure.database import reset_engine_cache
from rulebook.interfaces.api.routes import register_routes


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release the database engine when the application shuts down."""

    yield
    reset_engine_cache()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Rulebook", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()

from fastapi import FastAPI

from .validation import router as validation_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(validation_router)

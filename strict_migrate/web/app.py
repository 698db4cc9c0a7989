"""FastAPI application factory."""

from __future__ import annotations

from fastapi import FastAPI

from strict_migrate import __version__
from strict_migrate.web.api import router


def create_app() -> FastAPI:
    app = FastAPI(title="strict-migrate", version=__version__)
    app.include_router(router)
    return app

"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import config, health, market, territories
from .config import settings
from .services.territories import get_territory_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    service = app.dependency_overrides.get(get_territory_service, get_territory_service)()
    try:
        service.recover_hold_expirations()
    except Exception as exc:
        # Reads still filter expired holds, so startup continues without timers.
        logger.warning(f"Could not recover hold expirations: {exc}")
    yield
    service.shutdown()


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, root_path="", lifespan=lifespan)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
        )

    @app.exception_handler(RequestValidationError)
    async def malformed_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Raw inputs are left out: NaN or Infinity cannot be rendered as JSON.
        errors = [
            {"loc": error.get("loc"), "msg": error.get("msg"), "type": error.get("type")}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": {"error": "Malformed request", "errors": jsonable_encoder(errors)}},
        )

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(config.router, prefix=settings.api_prefix)
    app.include_router(territories.router, prefix=settings.api_prefix)
    app.include_router(market.router, prefix=settings.api_prefix)
    return app


app = create_app()

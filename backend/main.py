"""CircuitSage Backend — FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import Settings
from backend.middleware.rate_limit import RateLimitMiddleware
from backend.routes import calculations, constants, formulas, graph
from engine.errors import (
    CalculatorError,
    EvaluationError,
    NoValidPointsError,
    NotFoundError,
)
from engine.repository import Repository

logger = logging.getLogger(__name__)


def error_status(exc: CalculatorError) -> int:
    """HTTP status for a pipeline error: lookups 404, evaluator 500, the rest are client errors."""
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, EvaluationError):
        return 500
    if isinstance(exc, NoValidPointsError):
        return 422
    return 400


def _open_sql_repository(settings: Settings) -> Repository:
    from backend.database import init_db, make_engine, make_session_factory
    from backend.store import SQLRepository

    engine = make_engine(settings.database_url)
    init_db(engine)
    return SQLRepository(make_session_factory(engine))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    settings: Settings = app.state.settings
    if app.state.repository is None:
        app.state.repository = _open_sql_repository(settings)
        if settings.seed_data:
            app.state.repository.seed()
    yield


def create_app(settings: Optional[Settings] = None, repository: Optional[Repository] = None) -> FastAPI:
    """Build the API. A given ``repository`` is used as-is instead of the SQL store."""
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(
        title="CircuitSage API",
        description="Electronics formula calculator, constant catalog and grapher",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.repository = repository

    # CORS — allow frontend origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url] if settings.frontend_url else [],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        RateLimitMiddleware,
        requests_per_minute=settings.rate_limit_per_minute,
        compute_requests_per_minute=settings.compute_rate_limit_per_minute,
    )

    @app.exception_handler(CalculatorError)
    async def calculator_error_handler(request: Request, exc: CalculatorError):
        status = error_status(exc)
        if status >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status, content=exc.to_dict())

    # Register route modules
    app.include_router(formulas.router, prefix="/api", tags=["Formulas"])
    app.include_router(constants.router, prefix="/api", tags=["Constants"])
    app.include_router(calculations.router, prefix="/api", tags=["Calculations"])
    app.include_router(graph.router, prefix="/api", tags=["Graph"])

    @app.get("/api/health")
    async def health_check():
        return {"status": "healthy", "service": "circuitsage-backend"}

    return app


app = create_app()

"""
Main FastAPI application.

This file wires together all layers:
- Domain: Vehicle entity and error taxonomy
- Repositories: In-memory or SQL persistence
- Services: Registration workflows
- Routers: HTTP endpoints
"""

import time
from contextlib import asynccontextmanager
from typing import Optional, Tuple

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine

from .config import Settings, settings
from .database import create_db_engine, create_session_factory, init_db
from .dependencies import set_vehicle_service
from .logging_config import configure_logging
from .metrics import http_request_duration_seconds, http_requests_total, metrics_response
from .repositories.memory_repository import InMemoryVehicleRepository
from .repositories.sql_repository import SqlVehicleRepository
from .repositories.vehicle_repository import IVehicleRepository
from .routers import health_router, vehicle_router
from .services.vehicle_service import VehicleRegistrationService

configure_logging(settings.LOG_LEVEL, use_json=settings.LOG_JSON and not settings.DEBUG)

logger = structlog.get_logger(__name__)


def create_repository(
    config: Settings,
) -> Tuple[IVehicleRepository, Optional[Engine]]:
    """
    Build the vehicle repository selected by configuration.

    Args:
        config: Application settings

    Returns:
        Tuple of (repository, engine); engine is None for the memory backend
    """
    if config.STORAGE_BACKEND == "sql":
        engine = create_db_engine(config.DATABASE_URL, config.SLOW_QUERY_THRESHOLD_MS)
        init_db(engine)
        return SqlVehicleRepository(create_session_factory(engine)), engine

    return InMemoryVehicleRepository(), None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Starting vehicle registry", backend=settings.STORAGE_BACKEND)

    try:
        repository, engine = create_repository(settings)
    except Exception as e:
        logger.error("Failed to initialize repository", error=str(e))
        raise

    set_vehicle_service(VehicleRegistrationService(repository))
    logger.info("Vehicle registry started successfully")

    yield

    logger.info("Shutting down vehicle registry...")
    set_vehicle_service(None)
    if engine is not None:
        engine.dispose()
        logger.info("Database engine disposed")


app = FastAPI(
    title=settings.APP_NAME,
    description="Motor vehicle registration with unique plate, chassis and renavam",
    version=settings.VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request ID middleware
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID for tracing."""
    request_id = request.headers.get("X-Request-ID", f"req-{id(request)}")
    structlog.contextvars.bind_contextvars(request_id=request_id)
    try:
        response = await call_next(request)
    finally:
        structlog.contextvars.clear_contextvars()
    response.headers["X-Request-ID"] = request_id
    return response


# Metrics middleware
@app.middleware("http")
async def track_metrics(request: Request, call_next):
    """Track Prometheus metrics."""
    start_time = time.time()

    response = await call_next(request)

    # Label by route template so ids do not explode cardinality
    route = request.scope.get("route")
    endpoint = getattr(route, "path", request.url.path)
    duration = time.time() - start_time
    http_requests_total.labels(
        method=request.method, endpoint=endpoint, status=response.status_code
    ).inc()
    http_request_duration_seconds.labels(method=request.method, endpoint=endpoint).observe(
        duration
    )

    return response


app.include_router(vehicle_router.router)
app.include_router(health_router.router)


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return metrics_response()


@app.get("/")
async def root():
    """Root endpoint with service information."""
    return {
        "service": settings.APP_NAME,
        "version": settings.VERSION,
        "status": "operational",
        "docs": "/api/docs",
        "health": "/api/v1/health",
        "ready": "/api/v1/ready",
    }


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are field-validation failures: 400, not 422."""
    errors = [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]
    logger.info("Request validation failed", path=request.url.path, errors=len(errors))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": "validation_error",
            "message": "Invalid request data",
            "details": {"errors": jsonable_encoder(errors)},
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions."""
    logger.error(
        "Unhandled exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "internal_server_error",
            "message": "An unexpected error occurred",
            "request_id": request.headers.get("X-Request-ID"),
        },
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "vehicle_registry.app:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )

"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from order_intake.api.v1 import catalog, health, orders
from order_intake.config import settings
from order_intake.db import dispose_engine
from order_intake.logging import setup_logging
from order_intake.services.exceptions import NotFoundError, ValidationError

# Configure logging before anything else
setup_logging()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup/shutdown events."""
    logger.info(
        "Starting AX Order Intake API",
        debug=settings.debug,
        data_area=settings.data_area_id,
        allocation_strategy=settings.allocation_strategy,
        order_grouping=settings.order_grouping,
        response_mode=settings.response_mode,
    )

    yield

    logger.info("Shutting down AX Order Intake API")
    await dispose_engine()
    logger.info("Database connections disposed")


app = FastAPI(
    title="AX Order Intake API",
    description="Sales order intake writing into Dynamics AX",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Reject structurally invalid requests with 400 and the error body shape."""
    errors = [{"loc": list(error["loc"]), "msg": error["msg"]} for error in exc.errors()]
    logger.warning("Rejected invalid request", path=request.url.path, errors=errors)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request payload.", "detail": errors},
    )


@app.exception_handler(ValidationError)
async def service_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)})


# API routes
app.include_router(health.router, prefix="/api/v1", tags=["health"])
app.include_router(orders.router, prefix="/api/v1", tags=["orders"])
app.include_router(catalog.router, prefix="/api/v1", tags=["catalog"])

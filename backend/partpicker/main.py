"""PartPicker Backend -- FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from partpicker.api.router import api_router
from partpicker.config import settings
from partpicker.core.exceptions import PartPickerException
from partpicker.db.session import async_session_factory, engine
from partpicker.dependencies import get_background_persister
from partpicker.models import Base
from partpicker.scrapers.factory import get_adapter_factory
from partpicker.scrapers.register_adapters import register_all_adapters
from partpicker.scrapers.scheduler import MaintenanceScheduler
from partpicker.services.build_store import get_build_store
from partpicker.services.cache_service import get_cache_service
from partpicker.services.price_refresh import PriceRefreshService

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.DEBUG else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: Optional[MaintenanceScheduler] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown events."""
    global scheduler

    # Startup
    logger.info("Starting PartPicker API server...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables verified/created")
    except Exception as e:
        logger.error(f"Database init failed: {e}", exc_info=True)

    logger.info("Registering retailer adapters...")
    factory = register_all_adapters(get_adapter_factory())

    # Scheduler stays off in tests
    if settings.ENVIRONMENT != "test":
        scheduler = MaintenanceScheduler()
        scheduler.add_build_sweep_job(get_build_store(), settings.BUILD_SWEEP_INTERVAL_HOURS)
        if settings.PRICE_REFRESH_ENABLED:
            refresh_service = PriceRefreshService(async_session_factory, factory)
            scheduler.add_price_refresh_job(refresh_service.refresh_all, settings.PRICE_REFRESH_INTERVAL_HOURS)
        scheduler.start()
    else:
        logger.info("Scheduler disabled (test environment)")

    cache = get_cache_service()
    if cache is None:
        logger.info("Page cache disabled")
    elif await cache.health_check():
        logger.info("Redis cache connected successfully")
    else:
        logger.warning("Redis cache connection failed (will operate without caching)")

    yield

    # Shutdown
    logger.info("Shutting down PartPicker API server...")

    if scheduler:
        scheduler.stop()

    # Let in-flight listing writes finish
    await get_background_persister().drain()

    if cache is not None:
        await cache.close()

    await engine.dispose()


app = FastAPI(
    title="PartPicker API",
    description="PC component price comparison across Bangladeshi retailers",
    version="0.1.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.FRONTEND_URL,
        "http://localhost:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PartPickerException)
async def partpicker_exception_handler(request: Request, exc: PartPickerException):
    if exc.status_code >= 500:
        logger.error(f"Request failed: {request.url.path}: {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": "Internal server error", "message": exc.message},
        )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "message": str(exc)},
    )


app.include_router(api_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "PartPicker API",
        "version": "0.1.0",
        "docs": "/docs" if settings.DEBUG else None,
        "health": "/api/health",
    }

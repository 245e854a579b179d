"""Hotspots FastAPI Application.

Main entry point for the places discovery API server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hotspots import __version__
from hotspots.api import router
from hotspots.api.routes import close_services
from hotspots.config import get_settings
from hotspots.models import ErrorCode, HotspotsError

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%H:%M:%S",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Release shared clients on shutdown."""
    yield
    await close_services()


app = FastAPI(
    title="Hotspots API",
    description="Nearby places discovery, merge and cache for the map game",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)


# Error payloads are always {"error": ..., "code": ...}
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle malformed query parameters as a client error."""
    fields = {str(err.get("loc", ("",))[-1]) for err in exc.errors()}
    if fields & {"lat", "lng"}:
        message = "Missing or invalid lat/lng"
    else:
        message = "Invalid request parameters: " + ", ".join(sorted(fields))
    return JSONResponse(
        status_code=400,
        content={"error": message, "code": ErrorCode.VALIDATION_ERROR.value},
    )


@app.exception_handler(HotspotsError)
async def hotspots_exception_handler(request: Request, exc: HotspotsError):
    """Handle configuration and provider failures."""
    logger.error(f"{request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=500,
        content={"error": exc.message, "code": exc.code.value},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Anything not translated above."""
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"error": str(exc) or "Places API error", "code": ErrorCode.API_ERROR.value},
    )


app.include_router(router, prefix="/api")


@app.get("/health")
async def health_check():
    """Liveness probe."""
    return {"status": "healthy"}

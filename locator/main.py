"""FastAPI application routes, middleware, and metrics."""

import time
import uuid

from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from structlog.contextvars import bind_contextvars, clear_contextvars

from locator.geocoding.resolver import (
    log_failure,
    resolve_location,
    resolve_location_name,
)
from locator.health.health_check import geocode_api_health
from locator.logging_config import logger
from locator.models.health import HealthResponse
from locator.models.location import LocationDetails, LocationName

app = FastAPI()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "path", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "HTTP request duration in seconds", ["path"]
)
GEOCODE_FALLBACKS = Counter(
    "geocode_fallbacks_total", "Lookups answered with a coordinate fallback"
)


def record_failure(latitude: float, longitude: float, error: Exception) -> None:
    """Failure hook that logs the error and counts the fallback."""
    log_failure(latitude, longitude, error)
    GEOCODE_FALLBACKS.inc()


@app.middleware("http")
async def request_logging(request: Request, call_next):
    """Log request details, attach a request ID, and record metrics.

    Args:
        request: Incoming HTTP request.
        call_next: FastAPI handler for the next middleware/app.

    Returns:
        The response produced by the downstream handler.
    """
    request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
    bind_contextvars(request_id=request_id)
    start = time.perf_counter()
    response = None
    try:
        response = await call_next(request)
        response.headers["x-request-id"] = request_id
        return response
    finally:
        duration_s = time.perf_counter() - start
        status_code = getattr(response, "status_code", 500)
        logger.info(
            "HTTP_REQUEST",
            method=request.method,
            path=request.url.path,
            status_code=status_code,
            duration_ms=round(duration_s * 1000, 2),
        )
        REQUEST_COUNT.labels(
            method=request.method, path=request.url.path, status_code=status_code
        ).inc()
        REQUEST_LATENCY.labels(path=request.url.path).observe(duration_s)
        clear_contextvars()


@app.get("/")
async def root():
    """Return a basic liveness response."""
    return {"message": "Hello World"}


@app.get("/location")
async def get_location(lat: float, lon: float) -> LocationDetails:
    """Describe the place at the requested coordinates.

    Args:
        lat: Latitude from the query string.
        lon: Longitude from the query string.

    Returns:
        LocationDetails from the lookup service or a coordinate fallback.
    """
    return await resolve_location(lat, lon, on_failure=record_failure)


@app.get("/location/name")
async def get_location_name(lat: float, lon: float) -> LocationName:
    """Return the display name for the requested coordinates."""
    name = await resolve_location_name(lat, lon, on_failure=record_failure)
    return LocationName(name=name)


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Report API health and lookup service availability.

    Returns:
        A HealthResponse with the lookup service check outcome.
    """
    return HealthResponse(
        status="ok",
        geocode_api=await geocode_api_health(),
    )


@app.get("/metrics")
async def metrics():
    """Expose Prometheus metrics for scraping."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

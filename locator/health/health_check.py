"""Health check for the reverse geocoding lookup service."""

import httpx

from locator.geocoding.resolver import GEOCODE_API_URL, GEOCODE_TIMEOUT_S, REVERSE_PATH
from locator.logging_config import logger
from locator.models.health import LookupServiceHealth, ServiceStatus

CHECK_PARAMS = {"lat": 51.5, "lon": -0.12}
LOOKUP_URL = f"{GEOCODE_API_URL.rstrip('/')}{REVERSE_PATH}"


async def is_geocode_api_available() -> ServiceStatus:
    """Check the lookup service with a known coordinate.

    Returns:
        ServiceStatus.available if the service answers 2xx with a JSON object.
    """
    try:
        async with httpx.AsyncClient(timeout=GEOCODE_TIMEOUT_S) as client:
            response = await client.get(LOOKUP_URL, params=CHECK_PARAMS)
        if response.is_success and isinstance(response.json(), dict):
            return ServiceStatus.available
    except Exception as exc:
        logger.error("GEOCODE_API_UNAVAILABLE", error=str(exc))
        return ServiceStatus.not_available
    logger.error("GEOCODE_API_UNAVAILABLE", status=response.status_code)
    return ServiceStatus.not_available


async def geocode_api_health() -> LookupServiceHealth:
    return LookupServiceHealth(status=await is_geocode_api_available(), url=LOOKUP_URL)

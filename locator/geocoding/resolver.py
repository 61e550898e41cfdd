"""Reverse geocoding with a coordinate fallback when the lookup is unavailable."""

import math
import os
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Optional, Protocol

import httpx

from locator.logging_config import logger
from locator.models.location import (
    UNKNOWN_CITY,
    UNKNOWN_COUNTRY,
    UNKNOWN_LOCATION,
    Coordinate,
    LocationDetails,
)

GEOCODE_API_URL = os.getenv("GEOCODE_API_URL", "http://localhost:8000")
GEOCODE_TIMEOUT_S = float(os.getenv("GEOCODE_TIMEOUT_S", "5"))
REVERSE_PATH = "/api/geocode/reverse"
SIX_PLACES = Decimal("0.000001")
# wide enough to quantize any finite float
QUANTIZE_CONTEXT = Context(prec=400)


class GeocodingUnavailableError(Exception):
    """Raised when the lookup service cannot provide a usable answer."""
    pass


class FailureHook(Protocol):
    """Observer notified when a lookup falls back to coordinates."""

    def __call__(
        self, latitude: float, longitude: float, error: Exception
    ) -> None: ...


def log_failure(latitude: float, longitude: float, error: Exception) -> None:
    """Default failure hook: emit a structured log event."""
    logger.error(
        "GEOCODE_LOOKUP_FAILED",
        lat=latitude,
        lon=longitude,
        error=str(error),
    )


def format_coordinates(latitude: float, longitude: float) -> str:
    """Render a coordinate pair with six decimal places.

    Args:
        latitude: Latitude value.
        longitude: Longitude value.

    Returns:
        The values joined by a comma and a space, e.g. "12.345679, -98.765432".
    """
    return f"{_fixed(latitude)}, {_fixed(longitude)}"


def _fixed(value: float) -> str:
    if not math.isfinite(value):
        return str(value)
    if value == 0:
        value = 0.0
    quantized = Decimal(value).quantize(
        SIX_PLACES, rounding=ROUND_HALF_UP, context=QUANTIZE_CONTEXT
    )
    return format(quantized, "f")


def _plain(value: float) -> str:
    if value == 0:
        return "0"
    text = repr(value)
    return text[:-2] if text.endswith(".0") else text


def raw_address(latitude: float, longitude: float) -> str:
    """Describe unrounded coordinates, e.g. "Latitude: 12.5, Longitude: -3.25"."""
    return f"Latitude: {_plain(latitude)}, Longitude: {_plain(longitude)}"


def _text(payload: dict, field: str) -> Optional[str]:
    value = payload.get(field)
    if isinstance(value, str) and value:
        return value
    return None


class LocationResolver:
    """Resolve coordinates into place descriptions without ever failing.

    The resolver issues one request per call and absorbs every lookup error,
    answering with a placeholder built from the coordinates instead.
    """

    def __init__(
        self,
        base_url: str = GEOCODE_API_URL,
        *,
        timeout: float = GEOCODE_TIMEOUT_S,
        client: Optional[httpx.AsyncClient] = None,
        on_failure: FailureHook = log_failure,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.client = client
        self.on_failure = on_failure

    async def _get(self, point: Coordinate) -> httpx.Response:
        url = f"{self.base_url}{REVERSE_PATH}"
        params = {"lat": point.latitude, "lon": point.longitude}
        if self.client is not None:
            return await self.client.get(url, params=params, timeout=self.timeout)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await client.get(url, params=params)

    async def _fetch_payload(self, point: Coordinate) -> dict:
        """Fetch the lookup body for a point.

        Args:
            point: Coordinates to look up.

        Returns:
            The decoded JSON object.

        Raises:
            GeocodingUnavailableError: On any transport, status, or body error.
        """
        try:
            response = await self._get(point)
            logger.info(
                "GEOCODE_LOOKUP_RESPONSE",
                lat=point.latitude,
                lon=point.longitude,
                status=response.status_code,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise GeocodingUnavailableError(
                f"Lookup returned status {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            raise GeocodingUnavailableError(f"Lookup request failed: {exc}") from exc
        except ValueError as exc:
            raise GeocodingUnavailableError("Lookup returned invalid JSON") from exc
        except Exception as exc:
            raise GeocodingUnavailableError(f"Lookup could not be made: {exc}") from exc

        if not isinstance(payload, dict):
            raise GeocodingUnavailableError("Lookup returned a non-object body")
        return payload

    def _fallback(self, point: Coordinate) -> LocationDetails:
        label = format_coordinates(point.latitude, point.longitude)
        return LocationDetails(
            name=label,
            address=label,
            city=UNKNOWN_CITY,
            country=UNKNOWN_COUNTRY,
        )

    async def resolve_location(
        self, latitude: float, longitude: float
    ) -> LocationDetails:
        """Return place details for the coordinates.

        Fields missing from the lookup answer are filled with placeholders;
        a missing address becomes the unrounded coordinates.
        When the lookup fails the name and address both carry the formatted
        coordinates.

        Args:
            latitude: Latitude value.
            longitude: Longitude value.

        Returns:
            A fully populated LocationDetails.
        """
        point = Coordinate(latitude=latitude, longitude=longitude)
        try:
            payload = await self._fetch_payload(point)
        except GeocodingUnavailableError as exc:
            self.on_failure(point.latitude, point.longitude, exc)
            return self._fallback(point)

        return LocationDetails(
            name=_text(payload, "name") or UNKNOWN_LOCATION,
            address=_text(payload, "address")
            or raw_address(point.latitude, point.longitude),
            city=_text(payload, "city") or UNKNOWN_CITY,
            country=_text(payload, "country") or UNKNOWN_COUNTRY,
        )

    async def resolve_location_name(self, latitude: float, longitude: float) -> str:
        """Return only the display name, or the formatted coordinates."""
        point = Coordinate(latitude=latitude, longitude=longitude)
        try:
            payload = await self._fetch_payload(point)
        except GeocodingUnavailableError as exc:
            self.on_failure(point.latitude, point.longitude, exc)
            return format_coordinates(point.latitude, point.longitude)
        return _text(payload, "name") or format_coordinates(
            point.latitude, point.longitude
        )


async def resolve_location(
    latitude: float,
    longitude: float,
    on_failure: FailureHook = log_failure,
) -> LocationDetails:
    """Resolve coordinates with a resolver built from the environment."""
    return await LocationResolver(on_failure=on_failure).resolve_location(
        latitude, longitude
    )


async def resolve_location_name(
    latitude: float,
    longitude: float,
    on_failure: FailureHook = log_failure,
) -> str:
    """Resolve a display name with a resolver built from the environment."""
    return await LocationResolver(on_failure=on_failure).resolve_location_name(
        latitude, longitude
    )

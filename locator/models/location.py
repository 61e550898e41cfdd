"""Location models for reverse geocoding results."""

from pydantic import BaseModel, ConfigDict

UNKNOWN_LOCATION = "Unknown Location"
UNKNOWN_CITY = "Unknown City"
UNKNOWN_COUNTRY = "Unknown Country"


class Coordinate(BaseModel):
    """A latitude/longitude pair. Ranges are not checked."""

    latitude: float
    longitude: float


class LocationDetails(BaseModel):
    """Human-readable place description; every field is always populated."""

    model_config = ConfigDict(frozen=True)

    name: str
    address: str
    city: str
    country: str


class LocationName(BaseModel):
    """Display name payload returned by the name endpoint."""

    name: str

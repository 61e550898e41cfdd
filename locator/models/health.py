"""Health report for the reverse geocoding lookup service."""

from enum import Enum

from pydantic import BaseModel


class ServiceStatus(str, Enum):
    available = "available"
    not_available = "not_available"


class LookupServiceHealth(BaseModel):
    """Check outcome for the lookup endpoint the resolver calls."""

    status: ServiceStatus
    url: str


class HealthResponse(BaseModel):
    status: str
    geocode_api: LookupServiceHealth

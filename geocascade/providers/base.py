# Provider interfaces and dataclasses.
# geocascade/providers/base.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol


class GeocodeStatus(str, Enum):
    """Status reported by a single geocoder for one request."""
    SUCCESS = "Success"
    ZERO_RESULTS = "ZeroResults"
    ERROR = "Error"
    INVALID_REQUEST = "InvalidRequest"
    REQUEST_DENIED = "RequestDenied"
    TOO_MANY_REQUESTS = "TooManyRequests"


@dataclass(frozen=True)
class LatLng:
    lat: float
    lng: float


@dataclass(frozen=True)
class Bounds:
    southwest: LatLng
    northeast: LatLng


@dataclass(frozen=True)
class GeocodeRequest:
    """A single address lookup, built once and shared by every geocoder tried."""
    address: str
    address_key: str
    bounds_hint: Optional[Bounds] = None


@dataclass(frozen=True)
class ProviderLocation:
    """
    A candidate location returned by a geocoder.
    `payload` keeps provider-specific fields for debugging/provenance.
    """
    formatted_address: str
    location: LatLng
    bounds: Optional[Bounds] = None
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ProviderResult:
    status: GeocodeStatus
    locations: List[ProviderLocation] = field(default_factory=list)


class Geocoder(Protocol):
    geocoder_id: str

    async def geocode(self, request: GeocodeRequest) -> ProviderResult:
        """
        Returns a classified status. Locations are only populated on SUCCESS.
        Raises GeocoderUnavailableError when no status could be obtained at all.
        """
        ...

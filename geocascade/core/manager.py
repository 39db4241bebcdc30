from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Dict, List, Optional, Set, Tuple

from ..providers.base import Bounds, GeocodeRequest, GeocodeStatus, LatLng, ProviderLocation, ProviderResult
from .errors import SelectorError
from .keys import KeyComposer
from .selector import GeocoderSelector

logger = logging.getLogger(__name__)


class AddressLookupStatus(str, Enum):
    """Overall outcome of one address lookup across every geocoder tried."""
    GEOCODED = "Geocoded"
    ZERO_RESULTS = "ZeroResults"
    PERMANENT_GEOCODE_ERROR = "PermanentGeocodeError"
    TEMPORARY_GEOCODE_ERROR = "TemporaryGeocodeError"
    MULTIPLE_ISSUES = "MultipleIssues"
    NO_GEOCODERS_AVAILABLE = "NoGeocodersAvailable"


_PERMANENT = {GeocodeStatus.ERROR, GeocodeStatus.INVALID_REQUEST}
_TEMPORARY = {GeocodeStatus.REQUEST_DENIED, GeocodeStatus.TOO_MANY_REQUESTS}


@dataclass(frozen=True)
class GeocodeResponseLocation:
    formatted_address: str
    location: LatLng
    bounds: Optional[Bounds] = None


@dataclass
class GeocodeResponse:
    status: AddressLookupStatus
    geocoder_id: Optional[str] = None
    locations: List[GeocodeResponseLocation] = field(default_factory=list)
    # geocoder id -> status, in the order the geocoders were tried
    geocoders_tried: Dict[str, GeocodeStatus] = field(default_factory=dict)


def summarise_geocode_status(geocoders_tried: Dict[str, GeocodeStatus]) -> AddressLookupStatus:
    """
    Reduces the per-geocoder statuses of one lookup to a single outcome.
    Checks are ordered; the first match wins.
    """
    statuses = list(geocoders_tried.values())
    if not statuses:
        return AddressLookupStatus.NO_GEOCODERS_AVAILABLE
    if GeocodeStatus.SUCCESS in statuses:
        return AddressLookupStatus.GEOCODED
    if all(s == GeocodeStatus.ZERO_RESULTS for s in statuses):
        return AddressLookupStatus.ZERO_RESULTS
    if all(s in _PERMANENT for s in statuses):
        return AddressLookupStatus.PERMANENT_GEOCODE_ERROR
    if any(s in _TEMPORARY for s in statuses):
        return AddressLookupStatus.TEMPORARY_GEOCODE_ERROR
    return AddressLookupStatus.MULTIPLE_ISSUES


def _to_response_location(loc: ProviderLocation) -> GeocodeResponseLocation:
    return GeocodeResponseLocation(
        formatted_address=loc.formatted_address,
        location=loc.location,
        bounds=loc.bounds,
    )


class GeocodeManager:
    """
    Main entry point for looking up an address.
    Asks the selector for the next available geocoder and moves on to the next
    one whenever a geocoder's response is not usable.
    """

    def __init__(self, geocoder_selector: GeocoderSelector, key_composer: Optional[KeyComposer] = None):
        self.geocoder_selector = geocoder_selector
        self.key_composer = key_composer or KeyComposer()

    async def geocode_address(self, address: str, *, bounds_hint: Optional[Bounds] = None) -> GeocodeResponse:
        request = GeocodeRequest(
            address=address,
            address_key=self.key_composer.generate_source_key(address),
            bounds_hint=bounds_hint,
        )
        locations: List[GeocodeResponseLocation] = []
        succeeded_with: Optional[str] = None

        geocoders_tried: Dict[str, GeocodeStatus] = {}
        async for geocoder_id, result in self._attempts(request):
            if result.status == GeocodeStatus.SUCCESS:
                locations = [_to_response_location(loc) for loc in result.locations]
                succeeded_with = geocoder_id
            geocoders_tried[geocoder_id] = result.status

        response = GeocodeResponse(
            status=summarise_geocode_status(geocoders_tried),
            geocoder_id=succeeded_with,
            locations=locations,
            geocoders_tried=geocoders_tried,
        )
        logger.info(
            "address %r -> %s via %s (tried: %s)",
            request.address_key,
            response.status.value,
            response.geocoder_id,
            ", ".join(geocoders_tried) or "none",
        )
        return response

    async def _attempts(self, request: GeocodeRequest) -> AsyncIterator[Tuple[str, ProviderResult]]:
        """
        Yields (geocoder_id, result) for each geocoder tried, in selector order.
        Stops after the first success or once the selector has nothing left.
        """
        excluded: Set[str] = set()
        while True:
            geocoder = await self.geocoder_selector.select_next_geocoder(frozenset(excluded))
            if geocoder is None:
                return

            geocoder_id = geocoder.geocoder_id
            if geocoder_id in excluded:
                raise SelectorError(f"selector returned already tried geocoder {geocoder_id!r}")

            result = await geocoder.geocode(request)
            logger.debug("geocoder %s returned %s for %r", geocoder_id, result.status.value, request.address_key)

            excluded.add(geocoder_id)
            yield geocoder_id, result
            if result.status == GeocodeStatus.SUCCESS:
                return

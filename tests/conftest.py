"""Pytest configuration and shared fakes for the geocascade test-suite."""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Callable, Collection, List, Optional

import pytest

# Ensure the project root is on sys.path so that `import geocascade` works under pytest.
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from geocascade.providers.base import (  # noqa: E402
    GeocodeRequest,
    GeocodeStatus,
    LatLng,
    ProviderLocation,
    ProviderResult,
)


class FakeGeocoder:
    """Geocoder that returns a canned result and records every request."""

    def __init__(self, geocoder_id: str, result: ProviderResult, error: Optional[Exception] = None):
        self.geocoder_id = geocoder_id
        self.result = result
        self.error = error
        self.requests: List[GeocodeRequest] = []

    async def geocode(self, request: GeocodeRequest) -> ProviderResult:
        self.requests.append(request)
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.result


class RecordingSelector:
    """Priority selector that records the exclusion set passed on each call."""

    def __init__(self, geocoders: List[FakeGeocoder]):
        self.geocoders = geocoders
        self.calls: List[frozenset] = []

    async def select_next_geocoder(self, excluded: Collection[str]) -> Optional[FakeGeocoder]:
        self.calls.append(frozenset(excluded))
        for g in self.geocoders:
            if g.geocoder_id not in excluded:
                return g
        return None


def make_location(address: str = "1 Main St, Springfield", lat: float = 1.0, lng: float = 2.0) -> ProviderLocation:
    return ProviderLocation(
        formatted_address=address,
        location=LatLng(lat=lat, lng=lng),
        payload={"place_id": "internal-123"},
    )


@pytest.fixture
def geocoder() -> Callable[..., FakeGeocoder]:
    """Factory: geocoder("p1", GeocodeStatus.ZERO_RESULTS, locations=[...])."""

    def _make(geocoder_id: str, status: GeocodeStatus, locations=None, error: Optional[Exception] = None):
        return FakeGeocoder(geocoder_id, ProviderResult(status=status, locations=list(locations or [])), error)

    return _make


@pytest.fixture
def selector() -> Callable[[List[FakeGeocoder]], RecordingSelector]:
    return RecordingSelector


@pytest.fixture
def location() -> Callable[..., ProviderLocation]:
    return make_location

"""Tests for the geocoder fallback loop in GeocodeManager."""
from __future__ import annotations

import asyncio

import pytest

from geocascade.core.errors import GeocoderUnavailableError, SelectorError
from geocascade.core.manager import AddressLookupStatus, GeocodeManager, GeocodeResponseLocation
from geocascade.providers.base import Bounds, GeocodeStatus, LatLng


async def test_denied_then_success(geocoder, selector, location):
    """P1 denies, P2 succeeds: P2's single location is returned."""
    loc = location("221B Baker St, London", 51.5237, -0.1585)
    p1 = geocoder("p1", GeocodeStatus.REQUEST_DENIED)
    p2 = geocoder("p2", GeocodeStatus.SUCCESS, [loc])
    manager = GeocodeManager(selector([p1, p2]))

    resp = await manager.geocode_address("221B Baker Street")

    assert resp.status == AddressLookupStatus.GEOCODED
    assert resp.geocoder_id == "p2"
    assert resp.locations == [
        GeocodeResponseLocation(formatted_address="221B Baker St, London", location=LatLng(51.5237, -0.1585))
    ]
    assert resp.geocoders_tried == {"p1": GeocodeStatus.REQUEST_DENIED, "p2": GeocodeStatus.SUCCESS}


async def test_success_stops_trying_further_geocoders(geocoder, selector, location):
    p1 = geocoder("p1", GeocodeStatus.SUCCESS, [location()])
    p2 = geocoder("p2", GeocodeStatus.SUCCESS, [location()])
    sel = selector([p1, p2])

    resp = await GeocodeManager(sel).geocode_address("anywhere")

    assert resp.geocoder_id == "p1"
    assert p2.requests == []
    assert len(sel.calls) == 1


async def test_all_zero_results(geocoder, selector):
    p1 = geocoder("p1", GeocodeStatus.ZERO_RESULTS)
    p2 = geocoder("p2", GeocodeStatus.ZERO_RESULTS)
    sel = selector([p1, p2])

    resp = await GeocodeManager(sel).geocode_address("nowhere at all")

    assert resp.status == AddressLookupStatus.ZERO_RESULTS
    assert resp.locations == []
    assert resp.geocoder_id is None
    # third call found nothing left
    assert len(sel.calls) == 3


async def test_error_then_throttled_is_temporary(geocoder, selector):
    p1 = geocoder("p1", GeocodeStatus.ERROR)
    p2 = geocoder("p2", GeocodeStatus.TOO_MANY_REQUESTS)

    resp = await GeocodeManager(selector([p1, p2])).geocode_address("somewhere")

    assert resp.status == AddressLookupStatus.TEMPORARY_GEOCODE_ERROR
    assert resp.locations == []
    assert resp.geocoder_id is None


async def test_no_geocoders_available(selector):
    sel = selector([])

    resp = await GeocodeManager(sel).geocode_address("somewhere")

    assert resp.status == AddressLookupStatus.NO_GEOCODERS_AVAILABLE
    assert resp.locations == []
    assert resp.geocoder_id is None
    assert resp.geocoders_tried == {}
    assert sel.calls == [frozenset()]


async def test_exclusion_set_grows_with_each_attempt(geocoder, selector):
    geocoders = [geocoder(f"p{i}", GeocodeStatus.ZERO_RESULTS) for i in range(3)]
    sel = selector(geocoders)

    await GeocodeManager(sel).geocode_address("x")

    assert sel.calls == [
        frozenset(),
        frozenset({"p0"}),
        frozenset({"p0", "p1"}),
        frozenset({"p0", "p1", "p2"}),
    ]
    assert all(len(g.requests) == 1 for g in geocoders)


async def test_request_is_built_once_and_shared(geocoder, selector):
    p1 = geocoder("p1", GeocodeStatus.ZERO_RESULTS)
    p2 = geocoder("p2", GeocodeStatus.ERROR)
    hint = Bounds(southwest=LatLng(51.0, -1.0), northeast=LatLng(52.0, 0.5))

    await GeocodeManager(selector([p1, p2])).geocode_address("10 Downing St., London", bounds_hint=hint)

    req = p1.requests[0]
    assert p2.requests[0] is req
    assert req.address == "10 Downing St., London"
    assert req.address_key == "10_downing_st_london"
    assert req.bounds_hint == hint


async def test_empty_address_is_passed_through(geocoder, selector):
    p1 = geocoder("p1", GeocodeStatus.INVALID_REQUEST)

    resp = await GeocodeManager(selector([p1])).geocode_address("")

    assert p1.requests[0].address == ""
    assert p1.requests[0].address_key == ""
    assert resp.status == AddressLookupStatus.PERMANENT_GEOCODE_ERROR


async def test_provider_internal_fields_are_dropped(geocoder, selector, location):
    loc = location()
    assert loc.payload
    p1 = geocoder("p1", GeocodeStatus.SUCCESS, [loc])

    resp = await GeocodeManager(selector([p1])).geocode_address("x")

    assert not hasattr(resp.locations[0], "payload")


async def test_provider_fault_propagates(geocoder, selector):
    p1 = geocoder("p1", GeocodeStatus.ZERO_RESULTS)
    p2 = geocoder("p2", GeocodeStatus.ERROR, error=GeocoderUnavailableError("p2", "connection reset"))
    p3 = geocoder("p3", GeocodeStatus.SUCCESS)

    with pytest.raises(GeocoderUnavailableError):
        await GeocodeManager(selector([p1, p2, p3])).geocode_address("x")
    assert p3.requests == []


async def test_selector_fault_propagates():
    class BrokenSelector:
        async def select_next_geocoder(self, excluded):
            raise SelectorError("quota store unreachable")

    with pytest.raises(SelectorError):
        await GeocodeManager(BrokenSelector()).geocode_address("x")


async def test_selector_returning_tried_geocoder_is_rejected(geocoder):
    p1 = geocoder("p1", GeocodeStatus.ZERO_RESULTS)

    class StuckSelector:
        async def select_next_geocoder(self, excluded):
            return p1

    with pytest.raises(SelectorError):
        await GeocodeManager(StuckSelector()).geocode_address("x")
    assert len(p1.requests) == 1


async def test_cancellation_propagates(geocoder, selector):
    started = asyncio.Event()

    class HangingGeocoder:
        geocoder_id = "slow"

        async def geocode(self, request):
            started.set()
            await asyncio.sleep(3600)

    task = asyncio.create_task(GeocodeManager(selector([HangingGeocoder()])).geocode_address("x"))
    await started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task


async def test_concurrent_lookups_are_independent(geocoder, selector, location):
    p1 = geocoder("p1", GeocodeStatus.ZERO_RESULTS)
    p2 = geocoder("p2", GeocodeStatus.SUCCESS, [location()])
    manager = GeocodeManager(selector([p1, p2]))

    results = await asyncio.gather(*(manager.geocode_address(f"addr {i}") for i in range(5)))

    assert all(r.status == AddressLookupStatus.GEOCODED for r in results)
    assert all(list(r.geocoders_tried) == ["p1", "p2"] for r in results)
    assert len(p1.requests) == 5

# Google Geocoding API geocoder.
# geocascade/providers/google.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .base import Bounds, GeocodeRequest, GeocodeStatus, LatLng, ProviderLocation, ProviderResult
from .http import HttpGeocoder, status_for_http_error

GOOGLE_STATUS_MAP = {
    "OK": GeocodeStatus.SUCCESS,
    "ZERO_RESULTS": GeocodeStatus.ZERO_RESULTS,
    "OVER_QUERY_LIMIT": GeocodeStatus.TOO_MANY_REQUESTS,
    "OVER_DAILY_LIMIT": GeocodeStatus.TOO_MANY_REQUESTS,
    "REQUEST_DENIED": GeocodeStatus.REQUEST_DENIED,
    "INVALID_REQUEST": GeocodeStatus.INVALID_REQUEST,
}


def _safe_get(d: Dict[str, Any], path: List[str], default=None):
    cur: Any = d
    for key in path:
        if not isinstance(cur, dict) or key not in cur:
            return default
        cur = cur[key]
    return cur


def _latlng(d: Any) -> Optional[LatLng]:
    if not isinstance(d, dict) or d.get("lat") is None or d.get("lng") is None:
        return None
    try:
        return LatLng(lat=float(d["lat"]), lng=float(d["lng"]))
    except (TypeError, ValueError):
        return None


def _bounds(d: Any) -> Optional[Bounds]:
    if not isinstance(d, dict):
        return None
    sw = _latlng(d.get("southwest"))
    ne = _latlng(d.get("northeast"))
    if sw is None or ne is None:
        return None
    return Bounds(southwest=sw, northeast=ne)


def format_bounds(b: Bounds) -> str:
    return f"{b.southwest.lat},{b.southwest.lng}|{b.northeast.lat},{b.northeast.lng}"


@dataclass(frozen=True)
class GoogleGeocoderConfig:
    api_key: str
    # e.g. "en" or "en-GB"
    language: str = "en"
    # ccTLD region bias, e.g. "uk"
    region: Optional[str] = None
    timeout_s: float = 10.0
    max_retries: int = 2


class GoogleGeocoder(HttpGeocoder):
    """
    Google Geocoding API:
      - GET https://maps.googleapis.com/maps/api/geocode/json?address=...&key=...

    The body's `status` field is authoritative; the HTTP code only matters
    when the API answers with an error response.
    """

    geocoder_id = "google"
    BASE_URL = "https://maps.googleapis.com/maps/api/geocode/json"

    def __init__(self, cfg: GoogleGeocoderConfig, client: Optional[httpx.AsyncClient] = None):
        if not cfg.api_key:
            raise ValueError("GoogleGeocoderConfig.api_key is required")
        super().__init__(client, timeout_s=cfg.timeout_s, max_retries=cfg.max_retries)
        self.cfg = cfg

    def _params(self, request: GeocodeRequest) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "address": request.address,
            "key": self.cfg.api_key,
            "language": self.cfg.language,
        }
        if self.cfg.region:
            params["region"] = self.cfg.region
        if request.bounds_hint is not None:
            params["bounds"] = format_bounds(request.bounds_hint)
        return params

    async def geocode(self, request: GeocodeRequest) -> ProviderResult:
        resp = await self._get(self.BASE_URL, params=self._params(request))
        if resp.status_code >= 400:
            return ProviderResult(status=status_for_http_error(resp.status_code))

        data = self._decode_json(resp)
        if not isinstance(data, dict):
            return ProviderResult(status=GeocodeStatus.ERROR)

        status = GOOGLE_STATUS_MAP.get(str(data.get("status")), GeocodeStatus.ERROR)
        if status != GeocodeStatus.SUCCESS:
            return ProviderResult(status=status)

        results = data.get("results", []) or []
        if not isinstance(results, list):
            return ProviderResult(status=GeocodeStatus.ERROR)

        locations: List[ProviderLocation] = []
        for r in results:
            if not isinstance(r, dict):
                continue
            loc = _latlng(_safe_get(r, ["geometry", "location"]))
            if loc is None:
                continue
            locations.append(
                ProviderLocation(
                    formatted_address=r.get("formatted_address", "") or "",
                    location=loc,
                    bounds=_bounds(_safe_get(r, ["geometry", "viewport"])),
                    payload={
                        "place_id": r.get("place_id"),
                        "location_type": _safe_get(r, ["geometry", "location_type"]),
                        "types": r.get("types", []) or [],
                        "partial_match": bool(r.get("partial_match", False)),
                    },
                )
            )

        # "OK" with nothing usable in it is not a success
        if not locations:
            return ProviderResult(status=GeocodeStatus.ZERO_RESULTS)
        return ProviderResult(status=GeocodeStatus.SUCCESS, locations=locations)

"""Geocoder backed by the public OpenStreetMap Nominatim search API."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from .base import Bounds, GeocodeRequest, GeocodeStatus, LatLng, ProviderLocation, ProviderResult
from .http import HttpGeocoder, status_for_http_error


def _bounding_box(raw: Any) -> Optional[Bounds]:
    # Nominatim order: [south, north, west, east], as strings
    if not isinstance(raw, list) or len(raw) != 4:
        return None
    try:
        south, north, west, east = (float(v) for v in raw)
    except (TypeError, ValueError):
        return None
    return Bounds(southwest=LatLng(lat=south, lng=west), northeast=LatLng(lat=north, lng=east))


def format_viewbox(b: Bounds) -> str:
    # <x1>,<y1>,<x2>,<y2> = left,top,right,bottom
    return f"{b.southwest.lng},{b.northeast.lat},{b.northeast.lng},{b.southwest.lat}"


@dataclass(frozen=True)
class NominatimConfig:
    # Nominatim's usage policy requires an identifying User-Agent
    user_agent: str = "GeoCascade/0.1"
    base_url: str = "https://nominatim.openstreetmap.org"
    limit: int = 5
    timeout_s: float = 10.0
    max_retries: int = 2


class NominatimGeocoder(HttpGeocoder):
    geocoder_id = "nominatim"

    def __init__(self, cfg: Optional[NominatimConfig] = None, client: Optional[httpx.AsyncClient] = None):
        cfg = cfg or NominatimConfig()
        super().__init__(client, timeout_s=cfg.timeout_s, max_retries=cfg.max_retries)
        self.cfg = cfg

    def _params(self, request: GeocodeRequest) -> Dict[str, Any]:
        params: Dict[str, Any] = {"q": request.address, "format": "jsonv2", "limit": self.cfg.limit}
        if request.bounds_hint is not None:
            params["viewbox"] = format_viewbox(request.bounds_hint)
        return params

    async def geocode(self, request: GeocodeRequest) -> ProviderResult:
        """Return every match Nominatim reports, best match first."""
        resp = await self._get(
            f"{self.cfg.base_url.rstrip('/')}/search",
            params=self._params(request),
            headers={"User-Agent": self.cfg.user_agent},
        )
        if resp.status_code >= 400:
            return ProviderResult(status=status_for_http_error(resp.status_code))

        data = self._decode_json(resp)
        if not isinstance(data, list):
            return ProviderResult(status=GeocodeStatus.ERROR)

        locations: List[ProviderLocation] = []
        for r in data:
            try:
                loc = LatLng(lat=float(r["lat"]), lng=float(r["lon"]))
            except (KeyError, TypeError, ValueError):
                continue
            locations.append(
                ProviderLocation(
                    formatted_address=r.get("display_name", "") or "",
                    location=loc,
                    bounds=_bounding_box(r.get("boundingbox")),
                    payload={
                        "place_id": r.get("place_id"),
                        "osm_type": r.get("osm_type"),
                        "place_rank": r.get("place_rank"),
                    },
                )
            )

        if not locations:
            return ProviderResult(status=GeocodeStatus.ZERO_RESULTS)
        return ProviderResult(status=GeocodeStatus.SUCCESS, locations=locations)

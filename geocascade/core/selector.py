from __future__ import annotations

from typing import Collection, List, Optional, Protocol

from ..providers.base import Geocoder


class GeocoderSelector(Protocol):
    async def select_next_geocoder(self, excluded: Collection[str]) -> Optional[Geocoder]:
        """
        Returns the next geocoder to try, or None when every available geocoder
        is either excluded or unavailable. Must never return an excluded id.
        """
        ...


class PriorityGeocoderSelector:
    """
    Hands out geocoders in the order they were given, skipping ones that were
    already tried for the current lookup. Holds no per-lookup state, so one
    instance can serve concurrent lookups.
    """

    def __init__(self, geocoders: List[Geocoder]):
        ids = [g.geocoder_id for g in geocoders]
        if len(set(ids)) != len(ids):
            raise ValueError(f"duplicate geocoder ids: {ids}")
        self.geocoders = list(geocoders)

    async def select_next_geocoder(self, excluded: Collection[str]) -> Optional[Geocoder]:
        skip = set(excluded)
        for g in self.geocoders:
            if g.geocoder_id not in skip:
                return g
        return None

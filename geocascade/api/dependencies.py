from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncGenerator, List

from fastapi import FastAPI

from ..core.config import Settings, settings
from ..core.manager import GeocodeManager
from ..core.selector import PriorityGeocoderSelector
from ..providers.google import GoogleGeocoder, GoogleGeocoderConfig
from ..providers.http import HttpGeocoder
from ..providers.nominatim import NominatimConfig, NominatimGeocoder

logger = logging.getLogger(__name__)


def build_geocoders(cfg: Settings) -> List[HttpGeocoder]:
    """Instantiate geocoders in the configured priority order."""
    geocoders: List[HttpGeocoder] = []
    for geocoder_id in cfg.geocoder_ids():
        if geocoder_id == "google":
            if not cfg.google_geocoding_api_key:
                logger.warning("GOOGLE_GEOCODING_API_KEY is not set, skipping google geocoder")
                continue
            geocoders.append(
                GoogleGeocoder(GoogleGeocoderConfig(api_key=cfg.google_geocoding_api_key, timeout_s=cfg.http_timeout_s))
            )
        elif geocoder_id == "nominatim":
            geocoders.append(
                NominatimGeocoder(
                    NominatimConfig(
                        user_agent=cfg.nominatim_user_agent,
                        base_url=cfg.nominatim_base_url,
                        timeout_s=cfg.http_timeout_s,
                    )
                )
            )
        else:
            raise ValueError(f"unknown geocoder in GEOCODER_ORDER: {geocoder_id!r}")
    return geocoders


@lru_cache(maxsize=1)
def get_geocoders() -> List[HttpGeocoder]:
    return build_geocoders(settings)


@lru_cache(maxsize=1)
def get_geocode_manager() -> GeocodeManager:
    return GeocodeManager(PriorityGeocoderSelector(get_geocoders()))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    geocoders = get_geocoders()
    for g in geocoders:
        await g.__aenter__()
    try:
        yield
    finally:
        for g in geocoders:
            await g.aclose()

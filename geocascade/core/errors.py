from __future__ import annotations

from typing import Optional


class GeocascadeError(Exception):
    """Infrastructure failure that prevents a lookup from completing."""


class SelectorError(GeocascadeError):
    """The geocoder selector failed or broke its contract."""


class GeocoderUnavailableError(GeocascadeError):
    """A geocoder could not produce any status for a request."""

    def __init__(self, geocoder_id: str, message: str, cause: Optional[Exception] = None):
        self.geocoder_id = geocoder_id
        self.cause = cause
        super().__init__(f"{geocoder_id}: {message}")

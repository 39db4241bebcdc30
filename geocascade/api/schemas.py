from pydantic import BaseModel, Field
from typing import Optional, List, Dict

from ..core.manager import GeocodeResponse

class BoundsHint(BaseModel):
    south: float = Field(ge=-90, le=90)
    west: float = Field(ge=-180, le=180)
    north: float = Field(ge=-90, le=90)
    east: float = Field(ge=-180, le=180)

class GeocodeAddressRequest(BaseModel):
    address: str
    bounds_hint: Optional[BoundsHint] = None

class BoundsOut(BaseModel):
    south: float
    west: float
    north: float
    east: float

class LocationOut(BaseModel):
    formatted_address: str
    lat: float
    lng: float
    bounds: Optional[BoundsOut] = None

class GeocodeAddressResponse(BaseModel):
    status: str
    geocoder_id: Optional[str] = None
    locations: List[LocationOut] = []
    geocoders_tried: Dict[str, str] = {}

    @classmethod
    def from_response(cls, resp: GeocodeResponse) -> "GeocodeAddressResponse":
        locations = []
        for loc in resp.locations:
            bounds = None
            if loc.bounds is not None:
                bounds = BoundsOut(
                    south=loc.bounds.southwest.lat,
                    west=loc.bounds.southwest.lng,
                    north=loc.bounds.northeast.lat,
                    east=loc.bounds.northeast.lng,
                )
            locations.append(
                LocationOut(
                    formatted_address=loc.formatted_address,
                    lat=loc.location.lat,
                    lng=loc.location.lng,
                    bounds=bounds,
                )
            )
        return cls(
            status=resp.status.value,
            geocoder_id=resp.geocoder_id,
            locations=locations,
            geocoders_tried={k: v.value for k, v in resp.geocoders_tried.items()},
        )

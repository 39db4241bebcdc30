import logging

from fastapi import APIRouter, Depends, HTTPException
from .schemas import GeocodeAddressRequest, GeocodeAddressResponse
from .dependencies import get_geocode_manager
from ..core.auth import require_api_key
from ..core.errors import GeocascadeError
from ..core.manager import GeocodeManager
from ..providers.base import Bounds, LatLng

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/geocode", response_model=GeocodeAddressResponse, dependencies=[Depends(require_api_key)])
async def geocode(req: GeocodeAddressRequest, manager: GeocodeManager = Depends(get_geocode_manager)):
    hint = None
    if req.bounds_hint is not None:
        hint = Bounds(
            southwest=LatLng(lat=req.bounds_hint.south, lng=req.bounds_hint.west),
            northeast=LatLng(lat=req.bounds_hint.north, lng=req.bounds_hint.east),
        )
    try:
        resp = await manager.geocode_address(req.address, bounds_hint=hint)
    except GeocascadeError as exc:
        logger.error("geocode lookup failed: %s", exc, exc_info=True)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return GeocodeAddressResponse.from_response(resp)

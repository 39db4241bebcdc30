from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import AsyncExitStack
from pathlib import Path
from dotenv import load_dotenv


async def main(address: str):
    repo_root = Path(__file__).resolve().parents[2]
    load_dotenv(repo_root / ".env", override=False)

    # settings are read from the environment at import time
    from geocascade.api.dependencies import build_geocoders
    from geocascade.core.config import Settings
    from geocascade.core.manager import GeocodeManager
    from geocascade.core.selector import PriorityGeocoderSelector

    cfg = Settings()
    logging.basicConfig(level=cfg.log_level.upper())

    geocoders = build_geocoders(cfg)
    if not geocoders:
        raise ValueError("No geocoders configured. Check GEOCODER_ORDER in the repo root .env.")

    async with AsyncExitStack() as stack:
        for g in geocoders:
            await stack.enter_async_context(g)
        manager = GeocodeManager(PriorityGeocoderSelector(geocoders))
        resp = await manager.geocode_address(address)

    print(f"{resp.status.value} via {resp.geocoder_id} (tried: {dict((k, v.value) for k, v in resp.geocoders_tried.items())})")
    for loc in resp.locations:
        print(f"  {loc.formatted_address}: {loc.location.lat},{loc.location.lng}")

if __name__ == "__main__":
    asyncio.run(main(" ".join(sys.argv[1:]) or "10 Downing Street, London"))

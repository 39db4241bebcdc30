import logging

from fastapi import FastAPI
from .dependencies import lifespan
from .routes import router
from ..core.config import settings

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="GeoCascade API", version="0.1.0", lifespan=lifespan)
app.include_router(router, prefix="/v1")

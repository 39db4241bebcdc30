from pydantic import BaseModel
from typing import List
import os

class Settings(BaseModel):
    geocoder_order: str = os.getenv("GEOCODER_ORDER", "google,nominatim")
    google_geocoding_api_key: str = os.getenv("GOOGLE_GEOCODING_API_KEY", "")
    nominatim_user_agent: str = os.getenv("NOMINATIM_USER_AGENT", "GeoCascade/0.1")
    nominatim_base_url: str = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org")
    http_timeout_s: float = float(os.getenv("HTTP_TIMEOUT_S", "10"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    def geocoder_ids(self) -> List[str]:
        return [p.strip().lower() for p in self.geocoder_order.split(",") if p.strip()]

settings = Settings()

# core/config.py

import os
from dotenv import load_dotenv

from core.errors import ConfigurationError

# Must run before any setting below is read
load_dotenv()

# LLM
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")

# Amadeus (flights / hotels)
AMADEUS_BASE_URL = os.getenv("AMADEUS_BASE_URL", "https://test.api.amadeus.com")

# Open-Meteo (weather, no key)
OPEN_METEO_GEOCODING_URL = os.getenv(
    "OPEN_METEO_GEOCODING_URL", "https://geocoding-api.open-meteo.com/v1/search"
)
OPEN_METEO_FORECAST_URL = os.getenv(
    "OPEN_METEO_FORECAST_URL", "https://api.open-meteo.com/v1/forecast"
)

# Outbound HTTP
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "20"))

# Trip sessions / display fan-out
SESSION_TTL_SECONDS = int(os.getenv("SESSION_TTL_SECONDS", "3600"))
ENRICH_MAX_WORKERS = int(os.getenv("ENRICH_MAX_WORKERS", "6"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def _first_env(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


def gemini_api_key() -> str:
    """Read lazily so that a .env loaded after import still applies."""
    key = _first_env("GEMINI_API_KEY", "GOOGLE_API_KEY")
    if not key:
        raise ConfigurationError("Environment variable GEMINI_API_KEY is missing.")
    return key


def amadeus_credentials() -> tuple[str, str]:
    client_id = _first_env("AMADEUS_API_KEY", "AMADEUS_CLIENT_ID")
    client_secret = _first_env("AMADEUS_API_SECRET", "AMADEUS_CLIENT_SECRET")
    if not client_id or not client_secret:
        raise ConfigurationError(
            "Amadeus credentials are not configured "
            "(AMADEUS_API_KEY / AMADEUS_API_SECRET)."
        )
    return client_id, client_secret

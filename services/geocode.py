# services/geocode.py

import logging
from dataclasses import dataclass

import requests

from core import config
from core.errors import ResolutionError

log = logging.getLogger(__name__)


@dataclass
class Place:
    latitude: float
    longitude: float
    name: str


def city_to_coords(city_name: str) -> Place:
    """
    Resolve a city name to coordinates with the Open-Meteo geocoder.
    Only the first match is used.
    """
    params = {"name": city_name, "count": 1, "language": "en", "format": "json"}
    r = requests.get(config.OPEN_METEO_GEOCODING_URL, params=params, timeout=config.HTTP_TIMEOUT)
    if r.status_code >= 400:
        log.warning("Geocoding %r failed: %s %s", city_name, r.status_code, r.text)
        raise ResolutionError(f"Failed to geocode city {city_name!r}")
    try:
        results = r.json().get("results") or []
    except ValueError:
        results = []
    if not results:
        raise ResolutionError(f"Failed to geocode city {city_name!r}")

    first = results[0]
    try:
        place = Place(
            latitude=float(first["latitude"]),
            longitude=float(first["longitude"]),
            name=first.get("name") or city_name,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ResolutionError(f"Failed to geocode city {city_name!r}") from e
    log.debug("Geocoded %r to %s (%.3f, %.3f)", city_name, place.name, place.latitude, place.longitude)
    return place

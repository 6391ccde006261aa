"""
services/weather.py
-------------------
Daily forecasts from Open-Meteo, one advice string per day.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Callable, List, Optional, Tuple

import requests
from pydantic import BaseModel, ValidationError

from core import config
from core.errors import UpstreamError, VendorParseError
from core.models import ForecastDay
from services import geocode

log = logging.getLogger(__name__)

FORECAST_SERVICE = "Open-Meteo forecast"
_DAILY_FIELDS = "weathercode,temperature_2m_max,temperature_2m_min,precipitation_probability_max"

# Open-Meteo WMO code groups, checked in order; anything else is clear (0)
_CATEGORIES: List[Tuple[str, frozenset]] = [
    ("thunder", frozenset({95, 96, 99})),
    ("snow", frozenset({71, 73, 75, 77, 85, 86})),
    ("drizzle", frozenset({51, 53, 55, 56, 57})),
    ("rain", frozenset({61, 63, 65, 66, 67, 80, 81, 82})),
    ("fog", frozenset({45, 48})),
    ("cloudy", frozenset({1, 2, 3})),
]

HOT_C = 32
COLD_C = 5
RAIN_PROBABILITY = 40

# (predicate(category, t_max, precip_prob), advice), first match wins
_ADVICE: List[Tuple[Callable[[str, float, float], bool], str]] = [
    (lambda cat, t, p: cat == "thunder",
     "Severe weather possible. Consider indoor plans and monitor local alerts."),
    (lambda cat, t, p: cat == "snow",
     "Cold and snowy. Wear warm layers and waterproof footwear."),
    (lambda cat, t, p: cat in ("rain", "drizzle") or p >= RAIN_PROBABILITY,
     "Rain likely. Carry an umbrella or light rain jacket."),
    (lambda cat, t, p: t >= HOT_C,
     "Hot day. Stay hydrated, apply sunscreen, and plan shade breaks."),
    (lambda cat, t, p: t <= COLD_C,
     "Chilly day. Dress warmly with layers."),
    (lambda cat, t, p: cat == "fog",
     "Foggy conditions possible. Allow extra travel time and take caution."),
    (lambda cat, t, p: cat == "cloudy",
     "Partly cloudy. Comfortable for most outdoor activities."),
]
_DEFAULT_ADVICE = "Clear weather. Great day for outdoor plans!"


def weather_category(code: int) -> str:
    for name, codes in _CATEGORIES:
        if code in codes:
            return name
    return "clear"


def build_advice(code: int, t_max: float, precip_prob: float) -> str:
    cat = weather_category(code)
    for predicate, advice in _ADVICE:
        if predicate(cat, t_max, precip_prob):
            return advice
    return _DEFAULT_ADVICE


class _RawDaily(BaseModel):
    time: List[dt.date] = []
    weathercode: List[Optional[float]] = []
    temperature_2m_max: List[Optional[float]] = []
    temperature_2m_min: List[Optional[float]] = []
    precipitation_probability_max: List[Optional[float]] = []


class _RawForecast(BaseModel):
    daily: Optional[_RawDaily] = None


def _at(values: List[Optional[float]], i: int) -> float:
    if i < len(values) and values[i] is not None:
        return float(values[i])
    return 0.0


def fetch_forecast(city: str, start: dt.date, end: dt.date) -> Tuple[str, List[ForecastDay]]:
    """
    Return (resolved city name, one ForecastDay per date in [start, end]).
    Raises ResolutionError when the city cannot be geocoded.
    """
    place = geocode.city_to_coords(city)
    params = {
        "latitude": place.latitude,
        "longitude": place.longitude,
        "daily": _DAILY_FIELDS,
        "timezone": "auto",
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
    }
    r = requests.get(config.OPEN_METEO_FORECAST_URL, params=params, timeout=config.HTTP_TIMEOUT)
    if r.status_code >= 400:
        raise UpstreamError(FORECAST_SERVICE, r.status_code, r.text)

    try:
        daily = _RawForecast.model_validate(r.json()).daily
    except (ValueError, ValidationError) as e:
        raise VendorParseError("Open-Meteo", f"unexpected forecast shape: {e}") from e

    out: List[ForecastDay] = []
    if daily:
        for i, day in enumerate(daily.time):
            code = int(_at(daily.weathercode, i))
            t_max = _at(daily.temperature_2m_max, i)
            precip = _at(daily.precipitation_probability_max, i)
            out.append(
                ForecastDay(
                    date=day,
                    tip=build_advice(code, t_max, precip),
                    t_max=t_max,
                    t_min=_at(daily.temperature_2m_min, i),
                    precip_prob=precip,
                    code=code,
                )
            )
    return place.name, out

# tests/test_weather.py

import datetime
import os
from unittest.mock import patch

import pytest

from conftest import fake_response
from core.errors import ResolutionError, UpstreamError
from services import geocode
from services.weather import build_advice, fetch_forecast, weather_category

START = datetime.date(2026, 6, 1)
END = datetime.date(2026, 6, 3)

GEO = {"results": [{"latitude": 48.85, "longitude": 2.35, "name": "Paris"}]}
DAILY = {
    "daily": {
        "time": ["2026-06-01", "2026-06-02", "2026-06-03"],
        "weathercode": [95, 0, 3],
        "temperature_2m_max": [24.0, 20.0, None],
        "temperature_2m_min": [15.0, 11.0, 9.0],
        "precipitation_probability_max": [70, 0, 10],
    }
}


@pytest.mark.parametrize(
    "code, category",
    [(95, "thunder"), (99, "thunder"), (73, "snow"), (86, "snow"), (53, "drizzle"),
     (63, "rain"), (81, "rain"), (45, "fog"), (2, "cloudy"), (0, "clear"), (42, "clear")],
)
def test_weather_category(code, category):
    assert weather_category(code) == category


class TestBuildAdvice:
    def test_thunder(self):
        assert "Severe weather" in build_advice(95, 20, 0)

    def test_clear(self):
        assert "Clear weather" in build_advice(0, 20, 0)

    def test_snow_beats_rain_probability(self):
        assert build_advice(71, 0, 90).startswith("Cold and snowy")

    def test_high_precip_probability_means_rain(self):
        assert build_advice(1, 20, 40).startswith("Rain likely")
        assert build_advice(1, 20, 39).startswith("Partly cloudy")

    def test_rain_beats_heat(self):
        assert build_advice(61, 35, 0).startswith("Rain likely")

    def test_hot_and_cold(self):
        assert build_advice(0, 32, 0).startswith("Hot day")
        assert build_advice(0, 5, 0).startswith("Chilly day")

    def test_cold_beats_fog(self):
        assert build_advice(45, 3, 0).startswith("Chilly day")
        assert build_advice(45, 12, 0).startswith("Foggy")


class TestFetchForecast:
    def test_maps_daily_arrays(self):
        responses = [fake_response(payload=GEO), fake_response(payload=DAILY)]
        with patch("requests.get", side_effect=responses) as mock_get:
            city, days = fetch_forecast("paris", START, END)

        assert city == "Paris"
        assert [d.date for d in days] == [START, START + datetime.timedelta(days=1), END]
        assert "Severe weather" in days[0].tip
        assert days[1].tip.startswith("Clear weather")
        assert days[2].t_max == 0.0  # missing value defaults to 0
        params = mock_get.call_args.kwargs["params"]
        assert params["start_date"] == "2026-06-01"
        assert params["end_date"] == "2026-06-03"
        assert params["timezone"] == "auto"

    def test_unknown_city_is_resolution_error(self):
        with patch("services.geocode.requests.get", return_value=fake_response(payload={})):
            with pytest.raises(ResolutionError):
                fetch_forecast("Atlantis", START, END)

    def test_forecast_failure_keeps_vendor_text(self):
        responses = [fake_response(payload=GEO), fake_response(400, text="end_date out of range")]
        with patch("requests.get", side_effect=responses):
            with pytest.raises(UpstreamError) as exc:
                fetch_forecast("Paris", START, END)
        assert exc.value.status == 400
        assert exc.value.text == "end_date out of range"

    def test_geocoder_uses_first_match_only(self):
        payload = {"results": [GEO["results"][0], {"latitude": 0, "longitude": 0, "name": "Paris, TX"}]}
        with patch("services.geocode.requests.get", return_value=fake_response(payload=payload)):
            place = geocode.city_to_coords("Paris")
        assert place.name == "Paris"
        assert place.latitude == 48.85


@pytest.mark.skipif(not os.getenv("RUN_LIVE_TESTS"), reason="RUN_LIVE_TESTS absent : test sauté")
def test_fetch_forecast_live():
    """
    Hits Open-Meteo for real; only runs when RUN_LIVE_TESTS is set.
    """
    today = datetime.date.today()
    city, days = fetch_forecast("Barcelona", today, today)
    assert city
    assert all(hasattr(d, "tip") and hasattr(d, "t_max") for d in days)

import datetime
from unittest.mock import patch

from conftest import make_hotel
from core.errors import UpstreamError
from core.models import FlightPrice, FlightPricing, ForecastDay, TripContext
from services import enrichment
from services.flights import FlightSearchResult
from services.hotels import HotelSearchResult

START = datetime.date(2026, 6, 1)


def _forecast(dest, start, end):
    return dest, [ForecastDay(date=start, tip=f"{dest} tip", t_max=20, t_min=10, precip_prob=0, code=0)]


def _flight_result(*args, **kwargs):
    offer = FlightPricing(id="1", price=FlightPrice(total=640.0, currency="USD"), airlines=["AIR FRANCE"])
    return FlightSearchResult("NYC", "PAR", [offer], {"AF": "AIR FRANCE"})


class TestEnrichTrip:
    def test_partial_failure_still_joins(self, trip_request, itinerary):
        paris = make_hotel("Hotel Lutetia", START, 4, 200.0)

        def hotels(city, *args, **kwargs):
            if city == "Rome":
                raise UpstreamError("Amadeus", 500, "boom")
            return HotelSearchResult("PAR", [paris])

        ctx = TripContext(request=trip_request, itinerary=itinerary)
        with patch("services.enrichment.hsvc.fetch_hotels", side_effect=hotels) as mock_hotels, \
             patch("services.enrichment.fsvc.fetch_flights", side_effect=_flight_result) as mock_flights, \
             patch("services.enrichment.wsvc.fetch_forecast", side_effect=_forecast):
            view = enrichment.enrich_trip(ctx, max_workers=2)

        assert view.warnings == ["Hotels unavailable for Rome"]
        assert view.primary_hotel is paris
        assert view.flight.price.total == 640.0
        assert mock_hotels.call_args.kwargs["adults"] == 3
        assert mock_flights.call_args.kwargs["adults"] == 2
        assert mock_flights.call_args.kwargs["return_date"] == trip_request.end

        assert [c.destination for c in view.days] == ["Paris", "Paris", "Rome", "Rome", "Rome"]
        assert view.days[0].weather_tip == "Paris tip"
        # Rome falls back to the primary hotel
        assert view.days[2].hotel_name == "Hotel Lutetia"

    def test_no_origin_skips_flight(self, trip_request, itinerary):
        trip_request.origin = ""
        ctx = TripContext(request=trip_request, itinerary=itinerary)
        with patch("services.enrichment.hsvc.fetch_hotels", return_value=HotelSearchResult("PAR", [])), \
             patch("services.enrichment.fsvc.fetch_flights") as mock_flights, \
             patch("services.enrichment.wsvc.fetch_forecast", side_effect=_forecast):
            view = enrichment.enrich_trip(ctx)
        mock_flights.assert_not_called()
        assert view.flight is None
        assert view.primary_hotel is None
        assert all(c.nightly is None for c in view.days)

    def test_to_wire(self, trip_request, itinerary):
        ctx = TripContext(request=trip_request, itinerary=itinerary)
        with patch("services.enrichment.hsvc.fetch_hotels",
                   return_value=HotelSearchResult("PAR", [make_hotel("H", START, 4, 100.0)])), \
             patch("services.enrichment.fsvc.fetch_flights", side_effect=Exception("down")), \
             patch("services.enrichment.wsvc.fetch_forecast", side_effect=_forecast):
            wire = enrichment.enrich_trip(ctx).to_wire(ctx)

        assert wire["destination"] == "Paris"
        assert wire["flight"] is None
        assert wire["warnings"] == ["Flights unavailable"]
        assert [h["destination"] for h in wire["hotels"]] == ["Paris", "Rome"]
        assert wire["estimatedCosts"]["food"] == "$300 - $500"
        assert wire["days"][0]["date"] == "2026-06-01"

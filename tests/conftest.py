import datetime
from unittest.mock import MagicMock

import pytest

from core.models import HotelPricing, Itinerary, Money, NightlyRate, TripRequest
from services import amadeus


def _slot(name, with_transport=True):
    slot = {"activity": name, "description": f"{name}, at a relaxed pace."}
    if with_transport:
        slot["transportToNext"] = {
            "mode": "Metro",
            "details": "Line 1",
            "departureTime": "12:00 PM",
            "arrivalTime": "12:20 PM",
            "cost": "$2",
            "from": name,
            "to": "Next stop",
        }
    return slot


def make_day(n):
    return {
        "day": f"Day {n}",
        "title": f"Day {n} highlights",
        "emoji": "🗺️",
        "morning": _slot(f"Breakfast {n}"),
        "afternoon": _slot(f"Museum {n}"),
        "evening": _slot(f"Dinner {n}", with_transport=False),
    }


def fake_response(status=200, payload=None, text=""):
    r = MagicMock()
    r.status_code = status
    r.text = text
    if isinstance(payload, Exception):
        r.json.side_effect = payload
    else:
        r.json.return_value = payload if payload is not None else {}
    return r


@pytest.fixture(autouse=True)
def _fresh_token_cache():
    amadeus.reset_token_cache()
    yield
    amadeus.reset_token_cache()


@pytest.fixture
def itinerary_payload():
    return {
        "itinerary": [make_day(n) for n in range(1, 6)],
        "estimatedCosts": {
            "food": "$300 - $500",
            "accommodation": "$800 - $1200",
            "transportation": "$100 - $150",
        },
        "totalEstimatedCost": "$1200 - $1850",
    }


@pytest.fixture
def itinerary(itinerary_payload):
    return Itinerary.model_validate(itinerary_payload)


@pytest.fixture
def trip_request():
    return TripRequest(
        origin="New York",
        destinations=["Paris", "Rome"],
        start=datetime.date(2026, 6, 1),
        end=datetime.date(2026, 6, 5),
        budget="around $1500",
        travelers=2,
        children=1,
        travel_style=["Foodie", "Art & Culture"],
        dream_trip="Croissants in Paris, then pasta and ruins in Rome.",
        destination_days=[2, 3],
    )


def make_hotel(name, start, nights, price, currency="USD"):
    return HotelPricing(
        id=name[:8].upper(),
        name=name,
        address="1 Main Street",
        check_in_date=start,
        check_out_date=start + datetime.timedelta(days=nights),
        total=Money(amount=price * nights, currency=currency),
        nightly=[
            NightlyRate(date=start + datetime.timedelta(days=i), price=price, currency=currency)
            for i in range(nights)
        ],
    )

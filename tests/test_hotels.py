import datetime
from unittest.mock import patch

import pytest

from core.errors import ResolutionError
from services import hotels as hs

CHECK_IN = datetime.date(2026, 6, 1)
CHECK_OUT = datetime.date(2026, 6, 4)


def _offer_entry(hotel_id, totals, variations=None, currency="USD"):
    offers = []
    for t in totals:
        price = {"currency": currency, "total": t}
        if variations:
            price["variations"] = variations
        offers.append({"id": f"{hotel_id}-{t}", "price": price})
    return {
        "hotel": {
            "hotelId": hotel_id,
            "name": f"Hotel {hotel_id}",
            "rating": 4,
            "address": {"lines": ["1 Rue de Rivoli"], "cityName": "PARIS"},
        },
        "offers": offers,
    }


class TestNightlySchedule:
    def test_even_split_without_variations(self):
        nightly = hs.nightly_schedule(300.0, "USD", CHECK_IN, CHECK_OUT)
        assert [n.price for n in nightly] == [100.0, 100.0, 100.0]
        assert [n.date for n in nightly] == [
            CHECK_IN, datetime.date(2026, 6, 2), datetime.date(2026, 6, 3),
        ]

    def test_average_base(self):
        variations = hs._RawVariations(average={"base": "95.5"})
        nightly = hs.nightly_schedule(300.0, "EUR", CHECK_IN, CHECK_OUT, variations)
        assert [n.price for n in nightly] == [95.5] * 3
        assert all(n.currency == "EUR" for n in nightly)

    def test_change_buckets_are_end_exclusive(self):
        variations = hs._RawVariations(changes=[
            {"startDate": "2026-06-01", "endDate": "2026-06-03", "total": "240.00"},
            {"startDate": "2026-06-03", "total": "150.00"},
        ])
        nightly = hs.nightly_schedule(390.0, "USD", CHECK_IN, CHECK_OUT, variations)
        assert [n.price for n in nightly] == [120.0, 120.0, 150.0]

    def test_uncovered_night_gets_average_of_total(self):
        variations = hs._RawVariations(changes=[
            {"startDate": "2026-06-01", "endDate": "2026-06-02", "total": "80.00"},
        ])
        nightly = hs.nightly_schedule(300.0, "USD", CHECK_IN, CHECK_OUT, variations)
        assert [n.price for n in nightly] == [80.0, 100.0, 100.0]

    def test_same_day_stay_counts_one_night(self):
        nightly = hs.nightly_schedule(90.0, "USD", CHECK_IN, CHECK_IN)
        assert len(nightly) == 1
        assert nightly[0].price == 90.0


class TestFetchHotels:
    def test_batches_ids_and_sorts_by_total(self):
        ids = [f"H{i:03d}" for i in range(45)]
        offer_pages = [
            {"data": [_offer_entry("H001", ["450.00", "300.00"])]},
            {"data": [_offer_entry("H030", ["210.00"])]},
            {"data": []},
        ]

        def fake_get(path, **params):
            if path.endswith("/by-city"):
                return {"data": [{"hotelId": i} for i in ids]}
            return offer_pages.pop(0)

        with patch("services.hotels.amadeus.get", side_effect=fake_get) as mock_get:
            result = hs.fetch_hotels("PAR", CHECK_IN, CHECK_OUT, adults=3, currency="USD", rooms=2)

        offer_calls = [c for c in mock_get.call_args_list if "hotel-offers" in c.args[0]]
        assert [len(c.kwargs["hotelIds"].split(",")) for c in offer_calls] == [20, 20, 5]
        assert offer_calls[0].kwargs["roomQuantity"] == 2
        assert offer_calls[0].kwargs["view"] == "FULL"

        assert result.city_code == "PAR"
        assert [h.id for h in result.hotels] == ["H030", "H001"]
        cheapest_of_h001 = result.hotels[1]
        assert cheapest_of_h001.total.amount == 300.0
        assert cheapest_of_h001.rating == "4"
        assert cheapest_of_h001.address == "1 Rue de Rivoli"
        assert [n.price for n in cheapest_of_h001.nightly] == [100.0, 100.0, 100.0]

    def test_city_without_hotels_is_empty_success(self):
        with patch("services.hotels.amadeus.search_city_code", return_value="XYZ"), \
             patch("services.hotels.amadeus.get", return_value={"data": []}):
            result = hs.fetch_hotels("Nowhere Town", CHECK_IN, CHECK_OUT)
        assert result.city_code == "XYZ"
        assert result.hotels == []

    def test_unresolvable_city(self):
        with patch("services.hotels.amadeus.search_city_code", return_value=None):
            with pytest.raises(ResolutionError):
                hs.fetch_hotels("Qwertyuiop", CHECK_IN, CHECK_OUT)

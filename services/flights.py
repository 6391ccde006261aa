"""
services/flights.py
-------------------
Flight offers via Amadeus /v2/shopping/flight-offers.
- Free text origin/destination → IATA (3-letter codes pass through)
- Offers flattened to FlightPricing {id, price, airlines, itineraries}
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pydantic import BaseModel, ValidationError

from core.errors import VendorParseError
from core.models import (
    FlightEndpoint,
    FlightItinerary,
    FlightPrice,
    FlightPricing,
    FlightSegment,
)
from services import amadeus

log = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Vendor shapes
# ──────────────────────────────────────────────────────────────────────────────
class _RawPrice(BaseModel):
    grandTotal: Optional[str] = None
    total: Optional[str] = None
    currency: Optional[str] = None


class _RawSegment(BaseModel):
    departure: Optional[FlightEndpoint] = None
    arrival: Optional[FlightEndpoint] = None
    carrierCode: Optional[str] = None
    number: Optional[str] = None
    duration: Optional[str] = None


class _RawItinerary(BaseModel):
    duration: Optional[str] = None
    segments: List[_RawSegment] = []


class _RawOffer(BaseModel):
    id: Optional[str] = None
    price: _RawPrice = _RawPrice()
    itineraries: List[_RawItinerary] = []
    validatingAirlineCodes: List[str] = []


class _RawDictionaries(BaseModel):
    carriers: Dict[str, str] = {}


class _RawOffersResponse(BaseModel):
    data: List[_RawOffer] = []
    dictionaries: _RawDictionaries = _RawDictionaries()


@dataclass
class FlightSearchResult:
    origin_code: str
    destination_code: str
    flights: List[FlightPricing] = field(default_factory=list)
    carriers: Dict[str, str] = field(default_factory=dict)


# ──────────────────────────────────────────────────────────────────────────────
# Helpers
# ──────────────────────────────────────────────────────────────────────────────
def ensure_location_code(value: str) -> str:
    """IATA code for ``value``; unresolvable text falls back to its upper-cased form."""
    code = amadeus.as_iata(value)
    if code:
        return code
    return amadeus.search_city_code(value) or value.strip().upper()


def _to_pricing(offer: _RawOffer, carriers: Dict[str, str], currency: str) -> FlightPricing:
    amount = offer.price.grandTotal or offer.price.total or "0"
    try:
        total = round(float(amount), 2)
    except ValueError as e:
        raise VendorParseError("Amadeus", f"bad flight price {amount!r}") from e

    itineraries = [
        FlightItinerary(
            duration=it.duration,
            segments=[
                FlightSegment(
                    departure=s.departure,
                    arrival=s.arrival,
                    carrier_code=s.carrierCode,
                    carrier_name=carriers.get(s.carrierCode or "", s.carrierCode),
                    number=s.number,
                    duration=s.duration,
                )
                for s in it.segments
            ],
        )
        for it in offer.itineraries
    ]
    airlines = list(dict.fromkeys(carriers.get(c, c) for c in offer.validatingAirlineCodes))
    return FlightPricing(
        id=offer.id,
        price=FlightPrice(total=total, currency=offer.price.currency or currency),
        airlines=airlines,
        itineraries=itineraries,
    )


# ──────────────────────────────────────────────────────────────────────────────
# Public function
# ──────────────────────────────────────────────────────────────────────────────
def fetch_flights(
    origin: str,
    destination: str,
    departure_date: dt.date,
    return_date: Optional[dt.date] = None,
    adults: int = 1,
    children: int = 0,
    currency: str = "USD",
    max_results: int = 5,
    non_stop: bool = False,
) -> FlightSearchResult:
    origin_code = ensure_location_code(origin)
    destination_code = ensure_location_code(destination)

    raw = amadeus.get(
        "/v2/shopping/flight-offers",
        originLocationCode=origin_code,
        destinationLocationCode=destination_code,
        departureDate=departure_date.isoformat(),
        returnDate=return_date.isoformat() if return_date else None,
        adults=adults,
        children=children if children and children > 0 else None,
        currencyCode=currency,
        max=max_results,
        nonStop=str(non_stop).lower(),
    )
    try:
        parsed = _RawOffersResponse.model_validate(raw)
    except ValidationError as e:
        raise VendorParseError("Amadeus", f"unexpected flight-offers shape: {e}") from e

    carriers = parsed.dictionaries.carriers
    flights = [_to_pricing(o, carriers, currency) for o in parsed.data]
    log.debug("%d flight offers %s → %s", len(flights), origin_code, destination_code)
    return FlightSearchResult(
        origin_code=origin_code,
        destination_code=destination_code,
        flights=flights,
        carriers=carriers,
    )

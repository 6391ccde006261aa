"""
services/hotels.py
------------------
Hotel prices via Amadeus.
- City → city code → hotel IDs (/v1/reference-data/locations/hotels/by-city)
- Offers fetched by hotelIds in batches of 20 (URL length)
- Cheapest offer per hotel, nightly schedule, sorted by total ascending
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, ValidationError

from core.errors import ResolutionError, VendorParseError
from core.models import HotelPricing, Money, NightlyRate
from services import amadeus

log = logging.getLogger(__name__)

HOTEL_ID_BATCH = 20


# ──────────────────────────────────────────────────────────────────────────────
# Vendor shapes
# ──────────────────────────────────────────────────────────────────────────────
class _RawChange(BaseModel):
    startDate: Optional[dt.date] = None
    endDate: Optional[dt.date] = None
    total: Optional[str] = None
    base: Optional[str] = None


class _RawAverage(BaseModel):
    base: Optional[str] = None
    total: Optional[str] = None


class _RawVariations(BaseModel):
    average: Optional[_RawAverage] = None
    changes: List[_RawChange] = []


class _RawPrice(BaseModel):
    currency: Optional[str] = None
    total: Optional[str] = None
    base: Optional[str] = None
    variations: Optional[_RawVariations] = None


class _RawOffer(BaseModel):
    id: Optional[str] = None
    price: _RawPrice = _RawPrice()


class _RawAddress(BaseModel):
    lines: List[str] = []
    cityName: Optional[str] = None


class _RawHotel(BaseModel):
    hotelId: Optional[str] = None
    name: Optional[str] = None
    rating: Optional[str | int] = None
    address: Optional[_RawAddress] = None


class _RawHotelOffers(BaseModel):
    hotel: _RawHotel = _RawHotel()
    offers: List[_RawOffer] = []


class _RawOffersResponse(BaseModel):
    data: List[_RawHotelOffers] = []


@dataclass
class HotelSearchResult:
    city_code: str
    hotels: List[HotelPricing] = field(default_factory=list)


# ──────────────────────────────────────────────────────────────────────────────
# Nightly schedule
# ──────────────────────────────────────────────────────────────────────────────
def _money(value: Optional[str]) -> float:
    try:
        return float(value or 0)
    except ValueError as e:
        raise VendorParseError("Amadeus", f"bad hotel price {value!r}") from e


def night_count(check_in: dt.date, check_out: dt.date) -> int:
    return max(1, (check_out - check_in).days)


def _bucket_for(changes: List[_RawChange], day: dt.date) -> Optional[_RawChange]:
    for c in changes:
        if c.startDate is None:
            continue
        end = c.endDate or c.startDate + dt.timedelta(days=1)
        if c.startDate <= day < end:
            return c
    return None


def nightly_schedule(
    total: float,
    currency: str,
    check_in: dt.date,
    check_out: dt.date,
    variations: Optional[_RawVariations] = None,
) -> List[NightlyRate]:
    """
    Per-night prices, from the first shape available:
    explicit change buckets, an average nightly base, or total / nights.
    """
    nights = night_count(check_in, check_out)
    days = [check_in + dt.timedelta(days=i) for i in range(nights)]

    if variations and variations.changes:
        out = []
        for day in days:
            bucket = _bucket_for(variations.changes, day)
            if bucket is not None and bucket.total:
                end = bucket.endDate or bucket.startDate + dt.timedelta(days=1)
                price = _money(bucket.total) / max(1, (end - bucket.startDate).days)
            else:
                price = total / nights
            out.append(NightlyRate(date=day, price=round(price, 2), currency=currency))
        return out

    if variations and variations.average and variations.average.base:
        avg = round(_money(variations.average.base), 2)
        return [NightlyRate(date=day, price=avg, currency=currency) for day in days]

    per_night = round(total / nights, 2)
    return [NightlyRate(date=day, price=per_night, currency=currency) for day in days]


# ──────────────────────────────────────────────────────────────────────────────
# Amadeus calls
# ──────────────────────────────────────────────────────────────────────────────
def resolve_city_code(city: str) -> str:
    code = amadeus.as_iata(city) or amadeus.search_city_code(city)
    if not code:
        raise ResolutionError(
            "Unable to resolve city code from the provided city keyword."
        )
    return code


def list_hotel_ids(city_code: str) -> List[str]:
    data = amadeus.get("/v1/reference-data/locations/hotels/by-city", cityCode=city_code)
    ids = [h.get("hotelId") or h.get("id") for h in data.get("data") or []]
    return [i for i in ids if i]


def _fetch_offers(
    hotel_ids: List[str],
    check_in: dt.date,
    check_out: dt.date,
    adults: int,
    currency: str,
    rooms: int,
) -> List[_RawHotelOffers]:
    combined: List[_RawHotelOffers] = []
    for i in range(0, len(hotel_ids), HOTEL_ID_BATCH):
        batch = hotel_ids[i:i + HOTEL_ID_BATCH]
        raw = amadeus.get(
            "/v3/shopping/hotel-offers",
            hotelIds=",".join(batch),
            adults=adults,
            checkInDate=check_in.isoformat(),
            checkOutDate=check_out.isoformat(),
            currency=currency,
            roomQuantity=rooms,
            bestRateOnly="true",
            view="FULL",
        )
        try:
            combined.extend(_RawOffersResponse.model_validate(raw).data)
        except ValidationError as e:
            raise VendorParseError("Amadeus", f"unexpected hotel-offers shape: {e}") from e
    return combined


def _to_pricing(
    entry: _RawHotelOffers,
    check_in: dt.date,
    check_out: dt.date,
    currency: str,
) -> HotelPricing:
    cheapest: Optional[_RawOffer] = None
    cheapest_total = 0.0
    for offer in entry.offers:
        amount = _money(offer.price.total)
        if cheapest is None or amount < cheapest_total:
            cheapest, cheapest_total = offer, amount

    curr = (cheapest.price.currency if cheapest else None) or currency
    variations = cheapest.price.variations if cheapest else None
    hotel = entry.hotel
    address = ""
    if hotel.address:
        address = ", ".join(hotel.address.lines) or hotel.address.cityName or ""

    return HotelPricing(
        id=hotel.hotelId,
        name=hotel.name,
        rating=str(hotel.rating) if hotel.rating is not None else None,
        address=address,
        check_in_date=check_in,
        check_out_date=check_out,
        total=Money(amount=round(cheapest_total, 2), currency=curr),
        nightly=nightly_schedule(cheapest_total, curr, check_in, check_out, variations),
    )


# ──────────────────────────────────────────────────────────────────────────────
# Public function
# ──────────────────────────────────────────────────────────────────────────────
def fetch_hotels(
    city: str,
    check_in: dt.date,
    check_out: dt.date,
    adults: int = 2,
    currency: str = "USD",
    rooms: int = 1,
) -> HotelSearchResult:
    city_code = resolve_city_code(city)
    hotel_ids = list_hotel_ids(city_code)
    if not hotel_ids:
        return HotelSearchResult(city_code=city_code)

    entries = _fetch_offers(hotel_ids, check_in, check_out, adults, currency, rooms)
    hotels = [_to_pricing(e, check_in, check_out, currency) for e in entries]
    hotels.sort(key=lambda h: h.total.amount)
    log.debug("%d hotels priced in %s", len(hotels), city_code)
    return HotelSearchResult(city_code=city_code, hotels=hotels)

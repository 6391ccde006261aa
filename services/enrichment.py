# services/enrichment.py
"""
Live pricing and weather for a generated itinerary.

Hotels (one search per destination), one flight search and weather (one per
unique destination) run in parallel. A failed lookup is logged and left out;
it never aborts the others.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core import config
from core.allocation import join_days
from core.models import DayCard, FlightPricing, ForecastDay, HotelPricing, TripContext
from services import flights as fsvc, hotels as hsvc, weather as wsvc

log = logging.getLogger(__name__)


@dataclass
class TripView:
    destinations: List[str]
    days: List[DayCard]
    flight: Optional[FlightPricing] = None
    hotels: Dict[str, HotelPricing] = field(default_factory=dict)
    weather: Dict[str, List[ForecastDay]] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def primary_hotel(self) -> Optional[HotelPricing]:
        for dest in self.destinations:
            if dest in self.hotels:
                return self.hotels[dest]
        return None

    def to_wire(self, context: TripContext) -> dict:
        itin = context.itinerary
        return {
            "destination": context.request.primary_destination,
            "destinations": self.destinations,
            "flight": self.flight.to_wire() if self.flight else None,
            "hotels": [
                {"destination": d, "hotel": self.hotels[d].to_wire()}
                for d in self.destinations if d in self.hotels
            ],
            "estimatedCosts": itin.estimated_costs.to_wire() if itin.estimated_costs else None,
            "totalEstimatedCost": itin.total_estimated_cost,
            "days": [c.to_wire() for c in self.days],
            "warnings": self.warnings,
        }


def _cheapest_hotel(context: TripContext, destination: str) -> Optional[HotelPricing]:
    req = context.request
    result = hsvc.fetch_hotels(
        destination,
        req.start,
        req.end,
        adults=req.total_travelers,
        currency=req.currency,
        rooms=req.rooms,
    )
    return result.hotels[0] if result.hotels else None


def _best_flight(context: TripContext) -> Optional[FlightPricing]:
    req = context.request
    result = fsvc.fetch_flights(
        req.origin,
        req.primary_destination,
        req.start,
        return_date=req.end,
        adults=req.travelers,
        children=req.children,
        currency=req.currency,
    )
    return result.flights[0] if result.flights else None


def _forecast(context: TripContext, destination: str) -> List[ForecastDay]:
    _, days = wsvc.fetch_forecast(destination, context.request.start, context.request.end)
    return days


def enrich_trip(context: TripContext, max_workers: int = config.ENRICH_MAX_WORKERS) -> TripView:
    req = context.request
    destinations = [d for d in req.destinations if d]
    view = TripView(destinations=destinations, days=[])

    unique = list(dict.fromkeys(destinations))
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
        hotel_futures = {d: pool.submit(_cheapest_hotel, context, d) for d in unique}
        flight_future = pool.submit(_best_flight, context) if req.origin and destinations else None
        weather_futures = {d: pool.submit(_forecast, context, d) for d in unique}

        for dest, future in hotel_futures.items():
            try:
                hotel = future.result()
            except Exception as e:
                log.warning("Hotels fetch failed for %s: %s", dest, e)
                view.warnings.append(f"Hotels unavailable for {dest}")
                continue
            if hotel is not None:
                view.hotels[dest] = hotel

        if flight_future is not None:
            try:
                view.flight = flight_future.result()
            except Exception as e:
                log.warning("Flights fetch failed: %s", e)
                view.warnings.append("Flights unavailable")

        for dest, future in weather_futures.items():
            try:
                view.weather[dest] = future.result()
            except Exception as e:
                log.warning("Weather fetch failed for %s: %s", dest, e)
                view.warnings.append(f"Weather unavailable for {dest}")

    view.days = join_days(
        context.itinerary,
        destinations,
        day_allocation=req.destination_days,
        trip_start=req.start,
        weather_by_destination=view.weather,
        hotels_by_destination=view.hotels,
        primary_hotel=view.primary_hotel,
    )
    return view

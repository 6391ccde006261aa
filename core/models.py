# core/models.py

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Annotated, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


TRAVEL_STYLES = {
    "adventure": "Adventure & Outdoors",
    "relaxation": "Relaxation",
    "historical": "Historical Sites",
    "foodie": "Foodie",
    "nightlife": "Nightlife",
    "culture": "Art & Culture",
}


# ──────────────────────────────────────────────────────────────────────────────
# Trip intake
# ──────────────────────────────────────────────────────────────────────────────
@dataclass
class TripRequest:
    origin: str
    destinations: List[str]
    start: dt.date
    end: dt.date
    budget: str
    travelers: int                      # adults
    travel_style: List[str]
    dream_trip: str
    children: int = 0
    rooms: int = 1
    currency: str = "USD"
    destination_days: Optional[List[int]] = None

    @property
    def primary_destination(self) -> str:
        return self.destinations[0] if self.destinations else ""

    @property
    def total_travelers(self) -> int:
        return self.travelers + self.children


# ──────────────────────────────────────────────────────────────────────────────
# Wire models (camelCase on the wire, snake_case in Python)
# ──────────────────────────────────────────────────────────────────────────────
class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Transport(WireModel):
    mode: str
    details: Optional[str] = None
    departure_time: str
    arrival_time: str
    cost: str
    from_: str = Field(alias="from")
    to: str


class Activity(WireModel):
    activity: str
    description: str
    transport_to_next: Optional[Transport] = None


class DayPlan(WireModel):
    day: str
    title: str
    emoji: str
    morning: Activity
    afternoon: Activity
    evening: Activity
    weather_advice: Optional[str] = None


class EstimatedCosts(WireModel):
    food: str
    accommodation: str
    transportation: str


class Itinerary(WireModel):
    days: List[DayPlan] = Field(default_factory=list, alias="itinerary")
    estimated_costs: Optional[EstimatedCosts] = None
    total_estimated_cost: Optional[str] = None


class ForecastDay(WireModel):
    date: dt.date
    tip: str
    t_max: float
    t_min: float
    precip_prob: float
    code: int


class NightlyRate(WireModel):
    date: dt.date
    price: float
    currency: str


class Money(WireModel):
    amount: float
    currency: str


class HotelPricing(WireModel):
    id: Optional[str] = None
    name: Optional[str] = None
    rating: Optional[str] = None
    address: str = ""
    check_in_date: dt.date
    check_out_date: dt.date
    total: Money
    nightly: List[NightlyRate] = Field(default_factory=list)

    def rate_for(self, day: dt.date) -> Optional[NightlyRate]:
        return next((n for n in self.nightly if n.date == day), None)


class FlightEndpoint(WireModel):
    iata_code: Optional[str] = None
    terminal: Optional[str] = None
    at: Optional[str] = None


class FlightSegment(WireModel):
    departure: Optional[FlightEndpoint] = None
    arrival: Optional[FlightEndpoint] = None
    carrier_code: Optional[str] = None
    carrier_name: Optional[str] = None
    number: Optional[str] = None
    duration: Optional[str] = None


class FlightItinerary(WireModel):
    duration: Optional[str] = None
    segments: List[FlightSegment] = Field(default_factory=list)


class FlightPrice(WireModel):
    total: float
    currency: str


class FlightPricing(WireModel):
    id: Optional[str] = None
    price: FlightPrice
    airlines: List[str] = Field(default_factory=list)
    itineraries: List[FlightItinerary] = Field(default_factory=list)


# ──────────────────────────────────────────────────────────────────────────────
# Display stage
# ──────────────────────────────────────────────────────────────────────────────
class DayCard(WireModel):
    """One itinerary day joined with its destination's weather and nightly rate."""

    index: int
    date: Optional[dt.date] = None
    destination: Optional[str] = None
    plan: DayPlan
    weather_tip: Optional[str] = None
    hotel_name: Optional[str] = None
    nightly: Optional[NightlyRate] = None


@dataclass
class TripContext:
    """Everything the display stage needs, handed over from the intake stage."""

    request: TripRequest
    itinerary: Itinerary


# ──────────────────────────────────────────────────────────────────────────────
# Intake payload (generate endpoint and form)
# ──────────────────────────────────────────────────────────────────────────────
PlaceName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2)]


class TravelDates(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start: dt.date = Field(alias="from")
    end: dt.date = Field(alias="to")

    @field_validator("start", "end", mode="before")
    @classmethod
    def _date_part(cls, v):
        # browsers send full ISO timestamps
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        if isinstance(v, dt.datetime):
            return v.date()
        return v


class TripIntake(WireModel):
    origin: Optional[PlaceName] = None
    destination: Optional[PlaceName] = None
    destinations: Optional[List[PlaceName]] = None
    destination_days: Optional[List[Annotated[int, Field(ge=0)]]] = None
    travel_dates: TravelDates
    budget: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    travelers: Annotated[int, Field(ge=1)]
    children: Annotated[int, Field(ge=0)] = 0
    rooms: Annotated[int, Field(ge=1)] = 1
    currency: Annotated[str, StringConstraints(min_length=3, max_length=3)] = "USD"
    travel_style: Annotated[List[str], Field(min_length=1)]
    dream_trip: Annotated[str, StringConstraints(min_length=10, max_length=1000)]

    @model_validator(mode="after")
    def _check(self):
        if not (self.destinations or self.destination):
            raise ValueError("Please add at least one destination.")
        if self.travel_dates.end < self.travel_dates.start:
            raise ValueError("End date must be on or after start date.")
        return self

    def to_request(self) -> TripRequest:
        destinations = list(self.destinations or [self.destination])
        days = None
        if self.destination_days is not None:
            days = list(self.destination_days[: len(destinations)])
        return TripRequest(
            origin=self.origin or "",
            destinations=destinations,
            start=self.travel_dates.start,
            end=self.travel_dates.end,
            budget=self.budget,
            travelers=self.travelers,
            travel_style=list(self.travel_style),
            dream_trip=self.dream_trip,
            children=self.children,
            rooms=self.rooms,
            currency=self.currency.upper(),
            destination_days=days,
        )

# core/allocation.py
"""
Day → destination allocation and the per-day join used by the itinerary view.

Days are assigned from the traveller's allocation vector when it is usable
(one count per destination, positive sum); otherwise they are split evenly,
later destinations absorbing the remainder.
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Dict, List, Mapping, Optional, Sequence

from core.models import DayCard, ForecastDay, HotelPricing, Itinerary


def trip_day_count(start: dt.date, end: dt.date) -> int:
    """Inclusive number of calendar days between two dates (0 if reversed)."""
    return max(0, (end - start).days + 1)


def _as_count(value) -> float:
    try:
        count = float(value)
    except (TypeError, ValueError):
        return 0.0
    return count if math.isfinite(count) else 0.0


def usable_allocation(
    destination_count: int, day_allocation: Optional[Sequence] = None
) -> Optional[List[float]]:
    """Return the allocation as numbers when it can drive assignment, else None."""
    if not day_allocation or len(day_allocation) != destination_count:
        return None
    counts = [_as_count(v) for v in day_allocation]
    if sum(counts) <= 0:
        return None
    return counts


def destination_index(
    index: int,
    total_days: int,
    destination_count: int,
    day_allocation: Optional[Sequence] = None,
) -> Optional[int]:
    """Destination index for the 0-based day ``index``; None with no destinations."""
    if destination_count <= 0:
        return None

    counts = usable_allocation(destination_count, day_allocation)
    if counts is not None:
        day_number = index + 1
        cumulative = 0
        for i, count in enumerate(counts):
            cumulative += count
            if day_number <= cumulative:
                return i
        # more itinerary days than allocated
        return destination_count - 1

    if total_days <= 0:
        return 0
    return min(destination_count - 1, (index * destination_count) // total_days)


def allocate_days(
    total_days: int,
    destinations: Sequence[str],
    day_allocation: Optional[Sequence] = None,
) -> List[str]:
    """Destination label for every day of the itinerary.

    >>> allocate_days(5, ["Paris", "Rome"], [2, 3])
    ['Paris', 'Paris', 'Rome', 'Rome', 'Rome']
    """
    if not destinations:
        return []
    labels = []
    for index in range(total_days):
        idx = destination_index(index, total_days, len(destinations), day_allocation)
        labels.append(destinations[idx])
    return labels


def join_days(
    itinerary: Itinerary,
    destinations: Sequence[str],
    day_allocation: Optional[Sequence] = None,
    trip_start: Optional[dt.date] = None,
    weather_by_destination: Optional[Mapping[str, List[ForecastDay]]] = None,
    hotels_by_destination: Optional[Mapping[str, HotelPricing]] = None,
    primary_hotel: Optional[HotelPricing] = None,
) -> List[DayCard]:
    """Attach each day's weather tip and nightly hotel rate.

    Missing data never fails the join: the augmentation is left empty for
    that day. Hotels fall back to ``primary_hotel``; weather has no fallback.
    """
    weather_by_destination = weather_by_destination or {}
    hotels_by_destination = hotels_by_destination or {}
    labels = allocate_days(len(itinerary.days), destinations, day_allocation)

    cards: List[DayCard] = []
    for index, plan in enumerate(itinerary.days):
        card = DayCard(index=index, plan=plan)
        if trip_start is not None:
            card.date = trip_start + dt.timedelta(days=index)

        if labels:
            card.destination = labels[index]

        if card.destination and card.date:
            forecasts = weather_by_destination.get(card.destination) or []
            tip = next((f.tip for f in forecasts if f.date == card.date), None)
            card.weather_tip = tip

            hotel = hotels_by_destination.get(card.destination) or primary_hotel
            if hotel is not None:
                night = hotel.rate_for(card.date)
                if night is not None:
                    card.hotel_name = hotel.name
                    card.nightly = night

        cards.append(card)
    return cards


def group_by_destination(labels: Sequence[str]) -> Dict[str, int]:
    """Count of days per destination, in first-seen order."""
    counts: Dict[str, int] = {}
    for label in labels:
        counts[label] = counts.get(label, 0) + 1
    return counts

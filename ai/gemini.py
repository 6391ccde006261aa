# ai/gemini.py
# ------------------------------------------------------------------------------
import json
import logging
import textwrap
import datetime as dt
from typing import Optional

import google.generativeai as genai
from pydantic import ValidationError

from core import config
from core.errors import ItineraryGenerationError
from core.models import Itinerary, TripRequest

log = logging.getLogger(__name__)

# Placeholder context used when the caller has no live data to offer.
# Not fetched: it does not reflect the forecast shown next to the itinerary.
ILLUSTRATIVE_WEATHER = (
    "Generally sunny with some clouds. Highs around 75°F (24°C). "
    "A 20% chance of a brief afternoon shower on the third day."
)
ILLUSTRATIVE_EVENTS = (
    "Local farmers market at the city center (Saturdays, 9am-1pm). "
    "Live music festival at Central Park (Friday evenings). "
    "Art exhibition at the Modern Art Museum (daily)."
)


# ──────────────────────────────────────────────────────────────────────────────
# Helper: configured Gemini model in JSON mode
# ──────────────────────────────────────────────────────────────────────────────
def _string():
    return {"type": "STRING"}


def _object(properties: dict, optional=()) -> dict:
    return {
        "type": "OBJECT",
        "properties": properties,
        "required": [k for k in properties if k not in optional],
    }


_TRANSPORT_SCHEMA = _object(
    {
        "mode": _string(),
        "details": _string(),
        "departureTime": _string(),
        "arrivalTime": _string(),
        "cost": _string(),
        "from": _string(),
        "to": _string(),
    },
    optional=("details",),
)

_ACTIVITY_SCHEMA = _object(
    {
        "activity": _string(),
        "description": _string(),
        "transportToNext": _TRANSPORT_SCHEMA,
    },
    optional=("transportToNext",),
)

# Same camelCase shape that parse_itinerary validates.
ITINERARY_SCHEMA = _object(
    {
        "itinerary": {
            "type": "ARRAY",
            "items": _object(
                {
                    "day": _string(),
                    "title": _string(),
                    "emoji": _string(),
                    "morning": _ACTIVITY_SCHEMA,
                    "afternoon": _ACTIVITY_SCHEMA,
                    "evening": _ACTIVITY_SCHEMA,
                    "weatherAdvice": _string(),
                },
                optional=("weatherAdvice",),
            ),
        },
        "estimatedCosts": _object(
            {"food": _string(), "accommodation": _string(), "transportation": _string()}
        ),
        "totalEstimatedCost": _string(),
    },
    optional=("estimatedCosts", "totalEstimatedCost"),
)


def _get_model():
    genai.configure(api_key=config.gemini_api_key())
    return genai.GenerativeModel(
        config.GEMINI_MODEL,
        generation_config={
            "response_mime_type": "application/json",
            "response_schema": ITINERARY_SCHEMA,
        },
    )


# ──────────────────────────────────────────────────────────────────────────────
# Prompt template
# ──────────────────────────────────────────────────────────────────────────────
_PROMPT_TEMPLATE = textwrap.dedent(
    """\
    You are an expert travel agent and logistics planner with the persona of a
    knowledgeable and enthusiastic guide. Create a highly personalized, practical
    day-by-day travel itinerary.

    User's trip data:
    - Origin: {origin}
    - Primary destination: {destination}
    - Additional destinations: {destinations}
    - Day allocation (per destinations order): {allocation}
    - Travel dates: {travel_dates}
    - Budget: {budget}
    - Travelers (total): {travelers}
    - Children: {children}
    - Rooms: {rooms}
    - Preferred currency: {currency}
    - Travel style: {styles}
    - Dream trip description: {dream_trip}

    Real-time contextual data:
    - Weather forecast: {weather_block}
    - Local events: {events_block}

    Instructions:
    1. Plan every day across ALL destinations. If a day allocation is given,
       spend that many days in each destination in order; otherwise distribute
       days to minimise backtracking. Transitions between destinations must be logical.
    2. Weave the local events into the schedule and adapt the plan to the weather.
    3. For morning and afternoon activities include "transportToNext": mode,
       provider name in "details", departure/arrival time, cost, from and to.
       The evening activity may omit it.
    4. Estimate food, accommodation and transportation costs for the whole trip
       as ranges in the preferred currency (e.g. "$500 - $700"), and set
       "totalEstimatedCost" to the sum of the lower and upper bounds.
    5. Give each day a catchy "title" and a relevant "emoji". Fill
       "weatherAdvice" only when there is specific, actionable advice.

    Answer with **JSON only**, exactly this shape:
    {{
      "itinerary": [
        {{
          "day": "Day 1",
          "title": "...",
          "emoji": "...",
          "morning": {{
            "activity": "...",
            "description": "...",
            "transportToNext": {{
              "mode": "...", "details": "...", "departureTime": "...",
              "arrivalTime": "...", "cost": "...", "from": "...", "to": "..."
            }}
          }},
          "afternoon": {{ ... }},
          "evening": {{ "activity": "...", "description": "..." }},
          "weatherAdvice": "..."
        }}
      ],
      "estimatedCosts": {{"food": "...", "accommodation": "...", "transportation": "..."}},
      "totalEstimatedCost": "..."
    }}
    """
)


def format_travel_dates(start: dt.date, end: dt.date) -> str:
    return f"From {start:%B} {start.day}, {start.year} to {end:%B} {end.day}, {end.year}"


def build_prompt(
    req: TripRequest,
    weather_block: Optional[str] = None,
    events_block: Optional[str] = None,
) -> str:
    """Return the itinerary prompt; live context replaces the illustrative text."""
    return _PROMPT_TEMPLATE.format(
        origin=req.origin or "Not specified",
        destination=req.primary_destination,
        destinations=", ".join(req.destinations) or "None",
        allocation=" / ".join(str(d) for d in req.destination_days or []) or "None",
        travel_dates=format_travel_dates(req.start, req.end),
        budget=req.budget,
        travelers=req.total_travelers,
        children=req.children,
        rooms=req.rooms,
        currency=req.currency or "USD",
        styles=", ".join(req.travel_style),
        dream_trip=req.dream_trip,
        weather_block=weather_block or ILLUSTRATIVE_WEATHER,
        events_block=events_block or ILLUSTRATIVE_EVENTS,
    )


# ──────────────────────────────────────────────────────────────────────────────
# Generate itinerary (single call, no retry)
# ──────────────────────────────────────────────────────────────────────────────
def _response_text(resp) -> str:
    try:
        return resp.candidates[0].content.parts[0].text
    except (AttributeError, IndexError, TypeError):
        return ""


def parse_itinerary(raw: str) -> Itinerary:
    raw_json = (raw or "").strip().strip("`").strip()
    if raw_json.startswith("json"):
        raw_json = raw_json[4:]
    if not raw_json:
        raise ItineraryGenerationError("AI failed to generate a valid itinerary.")
    try:
        itin = Itinerary.model_validate(json.loads(raw_json))
    except (ValueError, ValidationError) as e:
        log.warning("Rejected LLM itinerary: %s", e)
        raise ItineraryGenerationError("AI failed to generate a valid itinerary.") from e
    if not itin.days:
        raise ItineraryGenerationError("AI failed to generate a valid itinerary.")
    return itin


def generate_itinerary(prompt: str) -> Itinerary:
    model = _get_model()
    resp = model.generate_content(prompt)
    return parse_itinerary(_response_text(resp))

# main.py

import datetime
import logging
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core import config
from core.errors import (
    InvalidRequestError,
    ItineraryGenerationError,
    ResolutionError,
    UpstreamError,
)
from core.models import TripContext, TripIntake
from core.session import TripSessionStore
from services import enrichment, flights as fsvc, hotels as hsvc, weather as wsvc
from ai import gemini

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)

app = FastAPI(title="Trip Genie", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

sessions = TripSessionStore()


def _fail(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"success": False, "error": message})


def _parse_date(name: str, value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise InvalidRequestError(f"Invalid {name}: expected YYYY-MM-DD")


@app.exception_handler(RequestValidationError)
async def _invalid_input(request: Request, exc: RequestValidationError):
    return _fail(400, "Invalid input.")


@app.get("/health")
def health():
    return {"ok": True}


# ──────────────────────────────────────────────────────────────────────────────
# Itinerary generation
# ──────────────────────────────────────────────────────────────────────────────
@app.post("/api/generate")
def generate_endpoint(body: TripIntake):
    trip_req = body.to_request()
    try:
        itin = gemini.generate_itinerary(gemini.build_prompt(trip_req))
    except ItineraryGenerationError as e:
        return _fail(500, str(e))
    except Exception as e:
        log.exception("Error in /api/generate")
        return _fail(500, str(e) or "Unknown error")

    token = sessions.put(TripContext(request=trip_req, itinerary=itin))
    return {
        "success": True,
        "itinerary": itin.model_dump_json(by_alias=True, exclude_none=True),
        "token": token,
    }


@app.get("/api/itinerary/{token}")
def itinerary_endpoint(token: str):
    context = sessions.get(token)
    if context is None:
        return _fail(404, "Unknown or expired trip session.")
    try:
        view = enrichment.enrich_trip(context)
    except Exception as e:
        log.exception("Error in /api/itinerary")
        return _fail(500, str(e) or "Failed to fetch live pricing")
    return {"success": True, **view.to_wire(context)}


# ──────────────────────────────────────────────────────────────────────────────
# Live pricing
# ──────────────────────────────────────────────────────────────────────────────
@app.get("/api/flights")
def flights_endpoint(
    origin: Optional[str] = None,
    destination: Optional[str] = None,
    originLocationCode: Optional[str] = None,
    destinationLocationCode: Optional[str] = None,
    departureDate: Optional[str] = None,
    returnDate: Optional[str] = None,
    adults: int = 1,
    children: int = 0,
    currencyCode: str = "USD",
    max_results: int = Query(5, alias="max"),
    nonStop: bool = False,
):
    origin = origin or originLocationCode
    destination = destination or destinationLocationCode
    if not origin or not destination or not departureDate:
        return _fail(400, "Missing required params: origin, destination, departureDate")
    try:
        result = fsvc.fetch_flights(
            origin,
            destination,
            _parse_date("departureDate", departureDate),
            return_date=_parse_date("returnDate", returnDate) if returnDate else None,
            adults=adults,
            children=max(children, 0),
            currency=currencyCode,
            max_results=max_results,
            non_stop=nonStop,
        )
    except InvalidRequestError as e:
        return _fail(400, str(e))
    except Exception as e:
        log.exception("Flights API error")
        return _fail(500, str(e) or "Unknown error")

    return {
        "success": True,
        "originLocationCode": result.origin_code,
        "destinationLocationCode": result.destination_code,
        "flights": [f.to_wire() for f in result.flights],
        "carriers": result.carriers,
    }


@app.get("/api/hotels")
def hotels_endpoint(
    city: Optional[str] = None,
    cityCode: Optional[str] = None,
    checkInDate: Optional[str] = None,
    checkOutDate: Optional[str] = None,
    adults: int = 2,
    currency: str = "USD",
    roomQuantity: int = 1,
):
    city = city or cityCode
    if not city or not checkInDate or not checkOutDate:
        return _fail(400, "Missing required params: city, checkInDate, checkOutDate")
    try:
        result = hsvc.fetch_hotels(
            city,
            _parse_date("checkInDate", checkInDate),
            _parse_date("checkOutDate", checkOutDate),
            adults=adults,
            currency=currency,
            rooms=roomQuantity,
        )
    except (InvalidRequestError, ResolutionError) as e:
        return _fail(400, str(e))
    except Exception as e:
        log.exception("Hotels API error")
        return _fail(500, str(e) or "Unknown error")

    return {
        "success": True,
        "cityCode": result.city_code,
        "hotels": [h.to_wire() for h in result.hotels],
    }


# ──────────────────────────────────────────────────────────────────────────────
# Weather
# ──────────────────────────────────────────────────────────────────────────────
@app.get("/api/weather")
def weather_endpoint(
    city: str = "",
    date_from: str = Query("", alias="from"),
    date_to: str = Query("", alias="to"),
):
    city = city.strip()
    if not city or not date_from or not date_to:
        return _fail(400, "Missing required params: city, from, to")
    try:
        resolved, forecasts = wsvc.fetch_forecast(
            city, _parse_date("from", date_from), _parse_date("to", date_to)
        )
    except InvalidRequestError as e:
        return _fail(400, str(e))
    except ResolutionError:
        return _fail(404, "Failed to geocode city")
    except UpstreamError as e:
        if e.service == wsvc.FORECAST_SERVICE:
            return _fail(502, f"Weather API error: {e.text}")
        log.exception("Weather API error")
        return _fail(500, str(e))
    except Exception as e:
        log.exception("Weather API error")
        return _fail(500, str(e) or "Unknown error")

    return {
        "success": True,
        "city": resolved,
        "forecasts": [f.to_wire() for f in forecasts],
    }

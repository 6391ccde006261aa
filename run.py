# run.py

import argparse
import datetime
import logging

from dotenv import load_dotenv

load_dotenv()

from rich import print
from rich.logging import RichHandler
from pydantic import ValidationError

from core import config
from core.allocation import group_by_destination, trip_day_count
from core.errors import TravelPlannerError
from core.models import TRAVEL_STYLES, TripContext, TripIntake
from services import enrichment, weather as wsvc
from ai import gemini


def _live_weather_block(req) -> str | None:
    try:
        _, days = wsvc.fetch_forecast(req.primary_destination, req.start, req.end)
    except TravelPlannerError as e:
        logging.getLogger(__name__).warning("No live weather for the prompt: %s", e)
        return None
    return "; ".join(
        f"{d.date}: {d.tip} ({d.t_min:.0f}→{d.t_max:.0f}°C, rain {d.precip_prob:.0f}%)"
        for d in days
    ) or None


def main():
    p = argparse.ArgumentParser(description="Plan a trip from the command line.")
    p.add_argument("--origin", required=True)
    p.add_argument("--dest", "--destination", dest="destinations", action="append",
                   required=True, help="repeat for multi-city trips")
    p.add_argument("--days", type=int, action="append",
                   help="days per destination, same order as --dest")
    p.add_argument("--start", required=True)  # YYYY-MM-DD
    p.add_argument("--end", required=True)
    p.add_argument("--budget", required=True)
    p.add_argument("--adults", type=int, default=1)
    p.add_argument("--children", type=int, default=0)
    p.add_argument("--rooms", type=int, default=1)
    p.add_argument("--currency", default="USD")
    p.add_argument("--style", action="append", choices=sorted(TRAVEL_STYLES), required=True)
    p.add_argument("--dream", required=True, help="describe the dream trip")
    p.add_argument("--live-weather", action="store_true",
                   help="feed the live forecast into the prompt")
    args = p.parse_args()

    logging.basicConfig(
        level=config.LOG_LEVEL, format="%(message)s", handlers=[RichHandler()]
    )

    try:
        intake = TripIntake(
            origin=args.origin,
            destinations=args.destinations,
            destination_days=args.days,
            travel_dates={"from": args.start, "to": args.end},
            budget=args.budget,
            travelers=args.adults,
            children=args.children,
            rooms=args.rooms,
            currency=args.currency,
            travel_style=[TRAVEL_STYLES[s] for s in args.style],
            dream_trip=args.dream,
        )
    except ValidationError as e:
        p.error(str(e))
    req = intake.to_request()

    total = trip_day_count(req.start, req.end)
    if req.destination_days:
        print(f"Allocated {sum(req.destination_days)} of {total} trip days")

    weather_block = _live_weather_block(req) if args.live_weather else None

    print("[cyan]→ Itinerary…[/]")
    itin = gemini.generate_itinerary(gemini.build_prompt(req, weather_block))

    print("[cyan]→ Live prices & weather…[/]")
    view = enrichment.enrich_trip(TripContext(request=req, itinerary=itin))

    if view.flight:
        f = view.flight
        print(f"[bold]Flight[/] {f.price.currency} {f.price.total:.2f}  {', '.join(f.airlines)}")
    for dest, hotel in view.hotels.items():
        print(f"[bold]Hotel[/] {dest}: {hotel.name} {hotel.total.currency} {hotel.total.amount:.2f}")

    labels = [c.destination for c in view.days if c.destination]
    for dest, n in group_by_destination(labels).items():
        print(f"  {dest}: {n} day(s)")

    for card in view.days:
        day = card.plan
        when = card.date.isoformat() if card.date else ""
        print(f"\n[yellow]{day.day} {when}[/] {day.emoji} {day.title} ({card.destination or '-'})")
        print(f"  ☕ {day.morning.activity} / ☀ {day.afternoon.activity} / 🌙 {day.evening.activity}")
        if card.weather_tip:
            print(f"  [blue]{card.weather_tip}[/]")
        if card.nightly:
            print(f"  🏨 {card.hotel_name}: {card.nightly.currency} {card.nightly.price:.2f}")

    if itin.total_estimated_cost:
        print(f"\nTotal estimate: {itin.total_estimated_cost} (budget {req.budget})")
    for w in view.warnings:
        print(f"[red]{w}[/]")


if __name__ == "__main__":
    main()

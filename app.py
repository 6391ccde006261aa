# app.py

import datetime
from dotenv import load_dotenv

load_dotenv()  # ← Must precede any import depending on .env

import streamlit as st
import pandas as pd
from pydantic import ValidationError

from core.allocation import trip_day_count
from core.models import TRAVEL_STYLES, TripContext, TripIntake
from services import enrichment
from ai import gemini

# ──────────────────────────────────────────────────────────────────────────────
# 0. Streamlit configuration
# ──────────────────────────────────────────────────────────────────────────────
st.set_page_config(page_title="Trip Genie", layout="wide")

CURRENCIES = ["USD", "EUR", "GBP", "INR", "JPY", "AUD", "CAD", "CNY", "AED"]

# ──────────────────────────────────────────────────────────────────────────────
# 1. session_state initialisation (lives as long as the browser session)
# ──────────────────────────────────────────────────────────────────────────────
defaults = {
    "trip": None,            # TripContext handed from the form to the display
    "view": None,            # enrichment.TripView once live data is fetched
    "error_message": "",
    "destination_count": 1,
}
for k, v in defaults.items():
    st.session_state.setdefault(k, v)


def _format_errors(exc: ValidationError) -> str:
    lines = []
    for err in exc.errors():
        where = ".".join(str(p) for p in err["loc"]) or "form"
        lines.append(f"- {where}: {err['msg']}")
    return "\n".join(lines)


# ──────────────────────────────────────────────────────────────────────────────
# 2. Input form
# ──────────────────────────────────────────────────────────────────────────────
st.markdown("## ✈️ Trip Genie")
st.number_input("Number of destinations", min_value=1, max_value=8, step=1, key="destination_count")

with st.form("trip_form"):
    origin_input = st.text_input("Origin (City or IATA code)", placeholder="e.g., NYC or New York")

    dest_inputs, day_inputs = [], []
    for i in range(int(st.session_state.destination_count)):
        c1, c2 = st.columns([3, 1])
        dest_inputs.append(c1.text_input(f"Destination {i + 1}", placeholder="e.g., Paris", key=f"dest_{i}"))
        day_inputs.append(c2.number_input("Days", min_value=0, step=1, key=f"days_{i}"))

    c1, c2, c3 = st.columns(3)
    start_input = c1.date_input("Start date", datetime.date.today() + datetime.timedelta(days=14))
    end_input = c2.date_input("End date", datetime.date.today() + datetime.timedelta(days=18))
    currency_input = c3.selectbox("Currency", CURRENCIES)

    budget_input = st.text_input("Budget", placeholder="e.g., around $1500")
    c1, c2, c3 = st.columns(3)
    adults_input = c1.number_input("Adults", min_value=1, value=1, step=1)
    children_input = c2.number_input("Children", min_value=0, value=0, step=1)
    rooms_input = c3.number_input("Rooms", min_value=1, value=1, step=1)

    styles_input = st.multiselect(
        "Travel style", options=list(TRAVEL_STYLES), format_func=TRAVEL_STYLES.get
    )
    dream_input = st.text_area("Describe your dream trip", max_chars=1000)

    total_days = trip_day_count(start_input, end_input)
    st.caption(f"Allocated {sum(day_inputs)} of {total_days} trip days")
    submitted = st.form_submit_button("Generate itinerary")

# ──────────────────────────────────────────────────────────────────────────────
# 3. On form submission
# ──────────────────────────────────────────────────────────────────────────────
if submitted:
    try:
        intake = TripIntake(
            origin=origin_input,
            destinations=list(dest_inputs),
            destination_days=[int(n) for n in day_inputs],
            travel_dates={"from": start_input, "to": end_input},
            budget=budget_input,
            travelers=int(adults_input),
            children=int(children_input),
            rooms=int(rooms_input),
            currency=currency_input,
            travel_style=[TRAVEL_STYLES[s] for s in styles_input],
            dream_trip=dream_input,
        )
        if not intake.origin:
            raise ValueError("Origin must be at least 2 characters.")
    except ValidationError as e:
        st.session_state.error_message = "🛑 Please fix the form:\n" + _format_errors(e)
    except ValueError as e:
        st.session_state.error_message = f"🛑 {e}"
    else:
        st.session_state.error_message = ""
        trip_req = intake.to_request()
        try:
            with st.spinner("🤖 Generating itinerary with Gemini…"):
                itin = gemini.generate_itinerary(gemini.build_prompt(trip_req))
            st.session_state.trip = TripContext(request=trip_req, itinerary=itin)
            st.session_state.view = None
        except Exception as e:
            st.session_state.error_message = f"⚠️ Oh no! Something went wrong: {e}"
            st.session_state.trip = None

# ──────────────────────────────────────────────────────────────────────────────
# 4. Display error message if needed
# ──────────────────────────────────────────────────────────────────────────────
if st.session_state.error_message:
    st.error(st.session_state.error_message)

# ──────────────────────────────────────────────────────────────────────────────
# 5. Itinerary + live prices and weather
# ──────────────────────────────────────────────────────────────────────────────
trip = st.session_state.trip
if trip is not None:
    if st.session_state.view is None:
        with st.spinner("Fetching live flight & hotel prices and weather…"):
            st.session_state.view = enrichment.enrich_trip(trip)
    view = st.session_state.view
    itin = trip.itinerary

    st.subheader(f"🗓️ Your itinerary for {trip.request.primary_destination}")
    for w in view.warnings:
        st.warning(w)

    # 5.1 Flight offer
    if view.flight:
        f = view.flight
        st.markdown("### ✈️ Flight offer")
        st.metric("Price", f"{f.price.currency} {f.price.total:.2f}")
        if f.airlines:
            st.write(", ".join(f.airlines))
        for label, it in zip(["Outbound", "Return"], f.itineraries):
            rows = [
                {
                    "from": s.departure.iata_code if s.departure else "",
                    "departs": s.departure.at if s.departure else "",
                    "to": s.arrival.iata_code if s.arrival else "",
                    "arrives": s.arrival.at if s.arrival else "",
                    "flight": f"{s.carrier_name or ''} {s.number or ''}".strip(),
                }
                for s in it.segments
            ]
            st.markdown(f"**{label}**")
            st.dataframe(pd.DataFrame(rows), hide_index=True)

    # 5.2 Accommodation
    primary = view.primary_hotel
    if primary:
        st.markdown("### 🏨 Accommodation")
        st.write(f"**{primary.name}**  {primary.address}")
        st.metric("Total", f"{primary.total.currency} {primary.total.amount:.2f}")
        st.caption(f"{primary.check_in_date} – {primary.check_out_date}")
        if primary.nightly:
            df = pd.DataFrame([n.model_dump() for n in primary.nightly])
            st.dataframe(df, hide_index=True)
    others = [(d, h) for d, h in view.hotels.items() if h is not primary]
    if others:
        st.markdown("#### Other accommodations")
        for dest, h in others:
            st.write(f"{dest}: **{h.name}** {h.address} · {h.total.currency} {h.total.amount:.2f}")

    # 5.3 Budget overview
    if itin.estimated_costs and itin.total_estimated_cost:
        st.markdown("### 💰 Budget overview")
        c1, c2, c3 = st.columns(3)
        c1.metric("Food", itin.estimated_costs.food)
        c2.metric("Accommodation", itin.estimated_costs.accommodation)
        c3.metric("Transport", itin.estimated_costs.transportation)
        st.write(f"**Total:** {itin.total_estimated_cost}  (Budget: {trip.request.budget})")

    # 5.4 Day by day
    st.markdown("### 📅 Daily plan")
    for card in view.days:
        day = card.plan
        with st.expander(f"{day.emoji} {day.day}: {day.title}", expanded=card.index == 0):
            if card.weather_tip:
                st.info(f"🌤️ {card.weather_tip}")
            for icon, slot in (("☕", day.morning), ("☀️", day.afternoon), ("🌙", day.evening)):
                st.markdown(f"{icon} **{slot.activity}**  \n{slot.description}")
                t = slot.transport_to_next
                if t:
                    st.caption(
                        f"🚌 {t.mode} from {t.from_} to {t.to} · {t.departure_time} - "
                        f"{t.arrival_time} · {t.cost}" + (f" · {t.details}" if t.details else "")
                    )
            if card.nightly:
                st.write(
                    f"🏨 **{card.hotel_name}** {card.nightly.currency} {card.nightly.price:.2f}  \n"
                    f"Nightly rate for {card.nightly.date} ({card.destination})"
                )

    if st.button("⬅️ Plan another trip"):
        st.session_state.trip = None
        st.session_state.view = None
        st.rerun()

"""
Logbook Dashboard - totals, a 12-month chart, history, and trip entry.

Reads the logbook from the store configured in .env (FLIGHTLOG_STORE=csv|supabase).

Run with: streamlit run streamlit/logbook_dashboard.py
"""

from datetime import date as date_type

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from flightlog.config import Settings, configure_logging
from flightlog.logbook.models import Trip, TripLeg
from flightlog.logbook.service import LogbookService
from flightlog.logbook.stats import chart_values, compute_stats, flight_points, monthly_series
from flightlog.logbook.store import store_from_settings

LOCAL_COLOR = "#22c55e"
INTERNATIONAL_COLOR = "#f97316"
BAR_COLOR = "#2563eb"


@st.cache_resource
def get_service() -> LogbookService:
    """One service per session: reference tables are fetched once."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    return LogbookService.from_settings(settings, store=store_from_settings(settings))


def render_stats(flights) -> None:
    stats = compute_stats(flights)
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        st.metric("Flights", f"{stats.total_flights:,}", f"{stats.ytd_flights} YTD", delta_color="off")
    with c2:
        st.metric("Distance", f"{stats.total_km / 1000:.1f}k km", f"{stats.ytd_km / 1000:.1f}k YTD", delta_color="off")
    with c3:
        st.metric("Time", f"{stats.total_hours} h", f"{stats.ytd_hours} h YTD", delta_color="off")
    with c4:
        st.metric("Avg dist", f"{stats.avg_km:,} km", "per flight", delta_color="off")


def render_chart(flights) -> None:
    mode = st.radio(
        "Chart",
        options=["flights", "km", "time"],
        format_func={"flights": "Flights", "km": "Distance (km)", "time": "Time (h)"}.get,
        horizontal=True,
    )
    series = monthly_series(flights)
    fig = go.Figure()

    if mode == "flights":
        points = flight_points(flights)
        y_limit = max(4, int(series["flights"].max()) + 1)
        # Invisible bars keep all 12 months on the x axis
        fig.add_trace(go.Bar(x=series["label"], y=[0.1] * len(series), marker_color="rgba(0,0,0,0)", hoverinfo="skip"))
        if not points.empty:
            fig.add_trace(go.Scatter(
                x=points["label"],
                y=points["stack"],
                mode="markers",
                marker={
                    "size": 14,
                    "color": [LOCAL_COLOR if local else INTERNATIONAL_COLOR for local in points["is_local"]],
                },
                text=points["route"],
                hovertemplate="%{text}<extra></extra>",
            ))
        fig.update_yaxes(range=[0, y_limit + 0.5], dtick=1)
    else:
        fig.add_trace(go.Bar(x=series["label"], y=chart_values(series, mode), marker_color=BAR_COLOR))

    fig.update_layout(height=320, showlegend=False, margin={"l": 10, "r": 10, "t": 10, "b": 10})
    st.plotly_chart(fig, width="stretch")


def render_history(service: LogbookService) -> None:
    flights = service.history()
    if not flights:
        st.info("No flights logged yet.")
        return
    df = pd.DataFrame([f.to_dict() for f in flights])
    st.dataframe(
        df[["date", "origin", "destination", "airline", "flight_number", "distance_km", "duration_min"]],
        width="stretch",
        hide_index=True,
    )


def render_add_trip(service: LogbookService) -> None:
    if "leg_count" not in st.session_state:
        st.session_state.leg_count = 1

    is_return = st.toggle("Return trip", value=True)
    if st.button("+ Add stopover"):
        st.session_state.leg_count += 1

    with st.form("add_trip"):
        inputs = []
        for i in range(st.session_state.leg_count):
            st.caption(f"FLIGHT {i + 1}")
            c1, c2, c3, c4 = st.columns([2, 1, 1, 2])
            with c1:
                flight_no = st.text_input("Flight number", key=f"flight_{i}", placeholder="FA600")
            with c2:
                origin = st.text_input("From", key=f"from_{i}", placeholder="CPT")
            with c3:
                dest = st.text_input("To", key=f"to_{i}", placeholder="JNB")
            with c4:
                leg_date = st.date_input("Date", key=f"date_{i}", value=None, max_value=date_type.today())
            inputs.append((flight_no, origin, dest, leg_date))
        submitted = st.form_submit_button("Save trip")

    if not submitted:
        return

    trip = Trip(is_return=is_return)
    for flight_no, origin, dest, leg_date in inputs:
        trip.add_leg(TripLeg(
            flight_number=flight_no,
            origin_code=origin,
            destination_code=dest,
            date=leg_date.isoformat() if leg_date else None,
        ))

    with st.spinner("Looking up flights..."):
        result = service.save_trip(trip)

    if result.saved:
        st.success(f"Saved {len(result.flights)} flights.")
        return
    st.error("Trip not saved. Enter the missing airports manually and try again.")
    for i, message in sorted(result.errors.items()):
        st.warning(f"Flight {i + 1} ({result.legs[i].route()}): {message}")


def main() -> None:
    st.set_page_config(page_title="Flight Logbook", page_icon="✈️", layout="wide")
    st.title("✈️ Flight Logbook")

    service = get_service()
    flights = service.store.load()

    render_stats(flights)
    render_chart(flights)

    tab_history, tab_add = st.tabs(["Logbook", "Log new trip"])
    with tab_history:
        render_history(service)
    with tab_add:
        render_add_trip(service)


if __name__ == "__main__":
    main()

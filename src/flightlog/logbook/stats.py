"""Statistics and chart series for the logbook."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Literal, Optional

import pandas as pd

from flightlog.logbook.models import PersistedFlight
from flightlog.reference.geo import round_half_up

ChartMode = Literal["flights", "km", "time"]


@dataclass
class LogbookStats:
    """Container for logbook totals."""

    total_flights: int = 0
    total_km: int = 0
    total_min: int = 0
    ytd_flights: int = 0
    ytd_km: int = 0
    ytd_min: int = 0
    by_airline: Dict[str, int] = field(default_factory=dict)
    by_route: Dict[str, int] = field(default_factory=dict)
    local_flights: int = 0

    @property
    def avg_km(self) -> int:
        if not self.total_flights:
            return 0
        return round_half_up(self.total_km / self.total_flights)

    @property
    def total_hours(self) -> int:
        return self.total_min // 60

    @property
    def ytd_hours(self) -> int:
        return self.ytd_min // 60

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "total_flights": self.total_flights,
            "total_km": self.total_km,
            "total_min": self.total_min,
            "ytd_flights": self.ytd_flights,
            "ytd_km": self.ytd_km,
            "ytd_min": self.ytd_min,
            "avg_km": self.avg_km,
            "local_flights": self.local_flights,
            "by_airline": self.by_airline,
            "by_route": self.by_route,
        }


def _parse_date(value: str) -> Optional[date]:
    try:
        return date.fromisoformat(value[:10])
    except (TypeError, ValueError):
        return None


def compute_stats(flights: List[PersistedFlight], today: Optional[date] = None) -> LogbookStats:
    """Compute totals and year-to-date totals from a list of flights."""
    today = today or date.today()
    stats = LogbookStats()

    for f in flights:
        stats.total_flights += 1
        stats.total_km += f.distance_km or 0
        stats.total_min += f.duration_min or 0
        if f.is_local:
            stats.local_flights += 1

        d = _parse_date(f.date)
        if d is not None and d.year == today.year:
            stats.ytd_flights += 1
            stats.ytd_km += f.distance_km or 0
            stats.ytd_min += f.duration_min or 0

        if f.airline:
            stats.by_airline[f.airline] = stats.by_airline.get(f.airline, 0) + 1
        route = f.route()
        stats.by_route[route] = stats.by_route.get(route, 0) + 1

    return stats


def _month_skeleton(today: date, months: int) -> pd.DataFrame:
    end = pd.Period(year=today.year, month=today.month, freq="M")
    periods = pd.period_range(end=end, periods=months, freq="M")
    return pd.DataFrame({
        "month": periods,
        "label": [p.strftime("%b") for p in periods],
    })


def flights_dataframe(flights: List[PersistedFlight]) -> pd.DataFrame:
    """Flights as a DataFrame with a parsed `date` column (bad dates dropped)."""
    if not flights:
        return pd.DataFrame(columns=list(PersistedFlight.COLUMNS))
    df = pd.DataFrame([f.to_dict() for f in flights])
    df["date"] = pd.to_datetime(df["date"], format="%Y-%m-%d", errors="coerce")
    return df.dropna(subset=["date"])


def monthly_series(
    flights: List[PersistedFlight],
    today: Optional[date] = None,
    months: int = 12,
) -> pd.DataFrame:
    """
    One row per month for the last `months` months ending with the current one.
    Columns: month, label, flights, km, hours. Empty months are zero.
    """
    today = today or date.today()
    skeleton = _month_skeleton(today, months)
    df = flights_dataframe(flights)
    if df.empty:
        skeleton["flights"] = 0
        skeleton["km"] = 0
        skeleton["hours"] = 0
        return skeleton

    df["month"] = df["date"].dt.to_period("M")
    grouped = df.groupby("month").agg(
        flights=("origin", "size"),
        km=("distance_km", "sum"),
        minutes=("duration_min", "sum"),
    ).reset_index()
    out = skeleton.merge(grouped, on="month", how="left")
    out[["flights", "km", "minutes"]] = out[["flights", "km", "minutes"]].fillna(0).astype(int)
    out["hours"] = out["minutes"] // 60
    return out[["month", "label", "flights", "km", "hours"]]


def chart_values(series: pd.DataFrame, mode: ChartMode) -> pd.Series:
    """Bar heights for a chart mode."""
    column = {"flights": "flights", "km": "km", "time": "hours"}.get(mode)
    if column is None:
        raise ValueError(f"Unknown chart mode: {mode!r}")
    return series[column]


def flight_points(
    flights: List[PersistedFlight],
    today: Optional[date] = None,
    months: int = 12,
) -> pd.DataFrame:
    """
    Dot-plot data: one point per flight in the window, stacked 1..n within
    its month. Columns: label, stack, route, is_local.
    """
    today = today or date.today()
    skeleton = _month_skeleton(today, months)
    df = flights_dataframe(flights)
    columns = ["month", "label", "stack", "route", "is_local"]
    if df.empty:
        return pd.DataFrame(columns=columns)

    df["month"] = df["date"].dt.to_period("M")
    df = df[df["month"].isin(skeleton["month"])].sort_values("date", kind="stable").copy()
    if df.empty:
        return pd.DataFrame(columns=columns)
    df["stack"] = df.groupby("month").cumcount() + 1
    df["route"] = df["origin"] + " → " + df["destination"]
    df["label"] = df["month"].apply(lambda p: p.strftime("%b"))
    df["is_local"] = df["is_local"].astype(bool)
    return df[columns].reset_index(drop=True)

"""CLI for the flight logbook."""

import argparse
import json
import sys

import pandas as pd

from flightlog.config import Settings, configure_logging
from flightlog.errors import FlightLogError
from flightlog.logbook.models import Trip, TripLeg
from flightlog.logbook.service import LogbookService
from flightlog.logbook.stats import compute_stats, monthly_series
from flightlog.logbook.store import store_from_settings


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="flightlog",
        description="Personal flight logbook",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    lookup = sub.add_parser("lookup", help="Look up a flight number (e.g. FA600)")
    lookup.add_argument("ident", help="Flight number, IATA (FA600) or ICAO (SFR600)")

    add = sub.add_parser("add", help="Reconcile and save a trip")
    add.add_argument(
        "legs",
        nargs="+",
        metavar="LEG",
        help="FLIGHT or ORIGIN-DEST, optionally @YYYY-MM-DD (e.g. FA600@2024-01-01 CPT-JNB)",
    )
    add.add_argument(
        "--return",
        dest="is_return",
        action="store_true",
        help="Add a closing leg back to the first origin",
    )

    sub.add_parser("history", help="List logged flights, newest first")
    sub.add_parser("stats", help="Totals and the last 12 months")

    serve = sub.add_parser("serve", help="Run the lookup API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", "-p", type=int, default=8000)
    return parser.parse_args(argv)


def _cmd_lookup(service: LogbookService, args) -> int:
    normalized, status = service.lookup_flight(args.ident)
    if normalized.converted:
        print(f"{normalized.original} -> {normalized.ident}", file=sys.stderr)
    print(json.dumps(status.to_dict(), indent=2))
    return 0


def _cmd_add(service: LogbookService, args) -> int:
    trip = Trip(is_return=args.is_return)
    for spec in args.legs:
        trip.add_leg(TripLeg.from_string(spec))

    result = service.save_trip(trip)
    for i, leg in enumerate(result.legs):
        line = f"  {i + 1}. {leg.route()} [{leg.state.value}]"
        if leg.distance_km is not None:
            line += f" {leg.distance_km} km"
        if leg.duration_min is not None:
            line += f" {leg.duration_min} min"
        print(line)
        if i in result.errors:
            print(f"     {result.errors[i]}")

    if not result.saved:
        print("\nTrip not saved. Fix the legs above and try again.", file=sys.stderr)
        return 1
    print(f"\nSaved {len(result.flights)} flights.", file=sys.stderr)
    return 0


def _cmd_history(service: LogbookService, args) -> int:
    flights = service.history()
    if not flights:
        print("No flights logged.", file=sys.stderr)
        return 0
    df = pd.DataFrame([f.to_dict() for f in flights])
    print(df.to_string(index=False))
    return 0


def _cmd_stats(service: LogbookService, args) -> int:
    flights = service.history()
    stats = compute_stats(flights, today=service.today)
    print(f"\nFlights:  {stats.total_flights} ({stats.ytd_flights} YTD)")
    print(f"Distance: {stats.total_km:,} km ({stats.ytd_km:,} km YTD)")
    print(f"Time:     {stats.total_hours} h ({stats.ytd_hours} h YTD)")
    print(f"Avg dist: {stats.avg_km:,} km per flight")
    if stats.by_airline:
        print("\nBy airline:")
        for airline, count in sorted(stats.by_airline.items(), key=lambda x: -x[1]):
            print(f"  {airline}: {count}")

    series = monthly_series(flights, today=service.today)
    print("\nLast 12 months:")
    print(series[["month", "flights", "km", "hours"]].to_string(index=False))
    print()
    return 0


def _cmd_serve(settings: Settings, args) -> int:
    from flightlog.api import create_app

    app = create_app(settings)
    app.run(host=args.host, port=args.port)
    return 0


COMMANDS = {
    "lookup": _cmd_lookup,
    "add": _cmd_add,
    "history": _cmd_history,
    "stats": _cmd_stats,
}


def main(argv=None):
    args = parse_args(argv)
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    try:
        if args.command == "serve":
            sys.exit(_cmd_serve(settings, args))
        store = store_from_settings(settings) if args.command != "lookup" else None
        service = LogbookService.from_settings(settings, store=store)
        sys.exit(COMMANDS[args.command](service, args))
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except FlightLogError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

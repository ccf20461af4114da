"""HTTP API for flight lookups.

  GET /api/flight_lookup?ident=FA600
      200 {origin, destination, duration, actual_duration, departure_date}
      400 missing ident, 404 not found, 500 config/internal, else upstream status
"""

import logging
from typing import Optional

from flask import Flask, jsonify, request

from flightlog.config import Settings
from flightlog.errors import FlightLogError
from flightlog.lookup.aeroapi import AeroAPIClient
from flightlog.lookup.ident import normalize_ident
from flightlog.reference.airlines import AirlineResolver, ResolverChain

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    client: Optional[AeroAPIClient] = None,
    resolver: Optional[AirlineResolver] = None,
) -> Flask:
    settings = settings or Settings.from_env()
    client = client or AeroAPIClient(
        settings.flightaware_api_key,
        base_url=settings.aeroapi_base_url,
        timeout=settings.http_timeout,
    )
    resolver = resolver or ResolverChain.default(settings.airlines_url, timeout=settings.http_timeout)

    app = Flask(__name__)

    @app.get("/health")
    def health():
        return jsonify({"status": "ok"})

    @app.get("/api/flight_lookup")
    def flight_lookup():
        raw = request.args.get("ident", "")
        logger.info("Flight lookup input: %r", raw)
        try:
            if not raw.strip():
                return jsonify({"error": "No ident"}), 400
            if not client.api_key:
                logger.error("FLIGHTAWARE_API_KEY is not configured")
                return jsonify({"error": "Server config error"}), 500
            normalized = normalize_ident(raw, resolver)
            status = client.lookup(normalized.ident)
        except FlightLogError as e:
            logger.warning("Flight lookup for %r failed: %s", raw, e)
            return jsonify({"error": str(e)}), e.http_status
        except Exception:
            logger.exception("Flight lookup for %r crashed", raw)
            return jsonify({"error": "Internal Server Error"}), 500
        return jsonify(status.to_dict())

    return app

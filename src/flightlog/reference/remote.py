"""Best-effort download of the public reference datasets."""

import logging
from typing import Any, Optional

import requests

from flightlog.config import DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)


def fetch_dataset(url: str, timeout: float = DEFAULT_TIMEOUT) -> Optional[Any]:
    """GET a static JSON document. Returns None on any transport, status, or decode failure."""
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except requests.RequestException as e:
        logger.warning("Reference dataset fetch failed for %s: %s", url, e)
    except ValueError as e:
        logger.warning("Reference dataset at %s is not valid JSON: %s", url, e)
    return None

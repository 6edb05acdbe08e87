"""
Reference-location lookup for the "find nearby" flow.

Addresses are resolved with the Nominatim search API. Any failure is raised
as LocationError so callers can fall back to an unlocated filter pass.
"""

import logging
import os

import requests
from requests.exceptions import RequestException

from geo import LatLng

logger = logging.getLogger(__name__)

DEFAULT_GEOCODER_URL = 'https://nominatim.openstreetmap.org/search'
DEFAULT_USER_AGENT = 'pickleball-court-locator'


class LocationError(Exception):
    """Raised when a reference location can't be determined"""


def get_geocoder_settings():
    """Read geocoder settings from the environment"""
    try:
        timeout = float(os.environ.get('GEOCODER_TIMEOUT', '10'))
    except ValueError:
        logger.warning("Invalid GEOCODER_TIMEOUT, using 10 seconds")
        timeout = 10.0

    return {
        'url': os.environ.get('GEOCODER_URL', DEFAULT_GEOCODER_URL),
        'timeout': timeout,
        'user_agent': os.environ.get('GEOCODER_USER_AGENT', DEFAULT_USER_AGENT),
    }


def geocode_address(query: str, session=None) -> LatLng:
    """Resolve a free-text address to a LatLng"""
    if not query or not query.strip():
        raise LocationError("No address given")

    settings = get_geocoder_settings()
    http = session or requests

    params = {'q': query.strip(), 'format': 'json', 'limit': 1}
    try:
        logger.info(f"Geocoding address: {query}")
        response = http.get(
            settings['url'],
            params=params,
            headers={'User-Agent': settings['user_agent']},
            timeout=settings['timeout'],
        )
        response.raise_for_status()
        results = response.json()
    except RequestException as e:
        logger.error(f"Geocoding request failed for {query!r}: {str(e)}")
        raise LocationError(f"Geocoding request failed: {str(e)}") from e
    except ValueError as e:
        logger.error(f"Geocoder returned invalid JSON for {query!r}: {str(e)}")
        raise LocationError("Geocoder returned invalid JSON") from e

    if not isinstance(results, list) or not results:
        logger.warning(f"No geocoding results for {query!r}")
        raise LocationError(f"No match for {query!r}")

    try:
        location = LatLng(float(results[0]['lat']), float(results[0]['lon']))
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"Unexpected geocoding result for {query!r}: {results[0]!r}")
        raise LocationError("Unexpected geocoding result") from e

    logger.info(f"Geocoded {query!r} to {location.lat:.5f}, {location.lng:.5f}")
    return location

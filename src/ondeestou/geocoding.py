"""Reverse geocoding using OSM Nominatim API."""

import time
import logging
import requests
from typing import Optional, Dict, Any

from .config import (
    NOMINATIM_API_URL,
    NOMINATIM_LANGUAGE,
    NOMINATIM_RATE_LIMIT_SECONDS,
    NOMINATIM_TIMEOUT,
    USER_AGENT,
)

logger = logging.getLogger(__name__)


class GeocodingService:
    """Service for reverse geocoding coordinates to raw Nominatim payloads."""

    def __init__(
        self,
        api_url: str = NOMINATIM_API_URL,
        rate_limit_seconds: float = NOMINATIM_RATE_LIMIT_SECONDS,
        timeout: float = NOMINATIM_TIMEOUT,
        language: str = NOMINATIM_LANGUAGE,
    ):
        self.api_url = api_url
        self.rate_limit_seconds = rate_limit_seconds
        self.timeout = timeout
        self.language = language
        self.last_request_time = 0.0

    def reverse_geocode(self, lat: float, lon: float) -> Optional[Dict[str, Any]]:
        """
        Fetch the reverse-geocoding payload for a coordinate pair.

        The payload is returned untouched (``{"address": {...}, ...}``) so
        that AddressCache can derive its cache key and standardized address
        from it.

        Args:
            lat: Latitude coordinate
            lon: Longitude coordinate

        Returns:
            Nominatim JSON payload or None if geocoding fails

        Note:
            Respects Nominatim rate limiting (max 1 request per second).
            Returns None on errors (does not raise exceptions).
        """
        # Rate limiting
        now = time.time()
        time_since_last = now - self.last_request_time
        if time_since_last < self.rate_limit_seconds:
            sleep_time = self.rate_limit_seconds - time_since_last
            logger.debug(f"Geocoding rate limiting: sleeping {sleep_time:.1f}s")
            time.sleep(sleep_time)

        try:
            params = {
                "lat": lat,
                "lon": lon,
                "format": "json",
                "addressdetails": 1,
                "accept-language": self.language,
            }

            logger.debug(f"Reverse geocoding: ({lat}, {lon})")

            response = requests.get(
                self.api_url,
                params=params,
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT},  # Required by Nominatim
            )

            self.last_request_time = time.time()

            if response.status_code != 200:
                logger.warning(f"Geocoding API error {response.status_code}: {response.text[:100]}")
                return None

            data = response.json()
            if not isinstance(data, dict) or "error" in data:
                logger.warning(f"Geocoding returned no result for ({lat}, {lon}): {data}")
                return None

            logger.debug(f"Geocoded ({lat}, {lon}): {data.get('display_name')}")
            return data

        except requests.exceptions.Timeout:
            logger.warning("Geocoding API timeout")
            return None
        except requests.exceptions.ConnectionError:
            logger.warning("Geocoding API connection error")
            return None
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"Unexpected error in geocoding: {e}")
            return None

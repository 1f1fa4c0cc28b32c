"""
Best-effort country lookup for the ingestion endpoint.
"""

import logging
from typing import Optional
from urllib.parse import quote

import requests

from .privacy import is_private_ip

logger = logging.getLogger(__name__)


class CountryResolver:
    """Resolves an ISO country code through an HTTP geolocation API.

    Every failure (timeout, connection error, non-200 status, unexpected
    body) yields None; a lookup never raises.
    """

    def __init__(
        self,
        lookup_url: str = "http://ip-api.com/json/{ip}",
        timeout_sec: float = 1.0,
        enabled: bool = True,
        session: Optional[requests.Session] = None
    ):
        """Initialize the resolver.

        Args:
            lookup_url: URL template with an ``{ip}`` placeholder
            timeout_sec: Connect and read timeout for the lookup
            enabled: Whether lookups are performed at all
            session: Optional requests session to reuse
        """
        self.lookup_url = lookup_url
        self.timeout_sec = timeout_sec
        self.enabled = enabled
        self.session = session or requests.Session()

    def resolve(self, ip: str) -> Optional[str]:
        """Get the country code for the original (non-anonymized) address."""
        if not self.enabled or not ip or is_private_ip(ip):
            return None

        url = self.lookup_url.format(ip=quote(ip, safe=""))
        try:
            response = self.session.get(
                url,
                params={"fields": "status,countryCode"},
                timeout=self.timeout_sec
            )
        except requests.RequestException as exc:
            logger.debug(f"Geolocation lookup failed: {exc}")
            return None

        if response.status_code != 200:
            logger.debug(f"Geolocation lookup returned HTTP {response.status_code}")
            return None

        try:
            data = response.json()
        except ValueError:
            return None

        if not isinstance(data, dict) or data.get("status") != "success":
            return None

        country = data.get("countryCode")
        return country if isinstance(country, str) and country else None

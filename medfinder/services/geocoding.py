from __future__ import annotations

import logging
from typing import Optional

import httpx

from medfinder.models.schemas import Coordinate

logger = logging.getLogger(__name__)


def format_coordinate(coord: Coordinate) -> str:
    return f"{coord.latitude:.4f}, {coord.longitude:.4f}"


class ReverseGeocoder:
    """Coordinates to a display address; falls back to the formatted coordinate."""

    def __init__(self, url: str, user_agent: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = url
        self.user_agent = user_agent
        self.timeout = timeout
        self._transport = transport

    async def describe(self, coord: Coordinate) -> str:
        params = {
            "format": "json",
            "lat": coord.latitude,
            "lon": coord.longitude,
            "zoom": 18,
            "addressdetails": 1,
        }
        headers = {"User-Agent": self.user_agent}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(self.url, params=params, headers=headers)
                resp.raise_for_status()
                data = resp.json()
            name = data.get("display_name")
            if not isinstance(name, str) or not name:
                raise ValueError("response has no display_name")
            return name
        except (httpx.HTTPError, ValueError, AttributeError) as exc:
            logger.warning("Error reverse geocoding %s: %s", format_coordinate(coord), exc)
            return format_coordinate(coord)

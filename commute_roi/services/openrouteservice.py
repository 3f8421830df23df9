"""OpenRouteService clients for geocoding and driving directions.

Both endpoints need an API key (RoutingConfig.ORS_API_KEY, read from the
ORS_API_KEY environment variable). Coordinates are (lon, lat), the order
ORS uses in GeoJSON.

The geocoder reports "no match" as None so the pipeline can surface it as
a client-correctable error; the router raises UpstreamFailure because a
failed route is never the caller's fault.
"""

import logging
from typing import Any, Optional

import httpx

from commute_roi.constants import HttpConfig, RoutingConfig
from commute_roi.core.geo_calculator import LonLat
from commute_roi.model.errors import UpstreamFailure

logger = logging.getLogger(__name__)


class ORSClient:
    """Shared HTTP plumbing for OpenRouteService endpoints."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, api_key: Optional[str] = None) -> None:
        self._client = client
        self.api_key = api_key if api_key is not None else RoutingConfig.ORS_API_KEY
        if not self.api_key:
            logger.warning("ORS_API_KEY is not set; OpenRouteService requests will be rejected")

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if self._client is not None:
            return await self._client.request(method, url, **kwargs)
        async with httpx.AsyncClient(timeout=HttpConfig.TIMEOUT_S) as client:
            return await client.request(method, url, **kwargs)


class ORSGeocoder(ORSClient):
    """Free-text address to (lon, lat) via the ORS geocode/search endpoint."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
        url: str = RoutingConfig.GEOCODE_URL,
    ) -> None:
        super().__init__(client=client, api_key=api_key)
        self.url = url

    async def geocode(self, query: str) -> LonLat | None:
        """Best match for query, or None if the service found nothing or errored.

        A request failure (DNS, timeout, undecodable body) propagates as UpstreamFailure.
        """
        logger.info(f"Geocoding query: {query!r}")
        try:
            response = await self._request("GET", self.url, params={"api_key": self.api_key, "text": query})
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"Geocoding request failed: {e}") from e

        if response.is_error:
            logger.error(f"Geocoding error: {response.status_code} - {response.text[:200]}")
            return None

        try:
            data = response.json()
        except ValueError:
            logger.error("Geocoding returned invalid JSON")
            return None

        features = data.get("features") if isinstance(data, dict) else None
        if not features:
            logger.info(f"No geocoding results found for {query!r}")
            return None

        try:
            coordinates = features[0]["geometry"]["coordinates"]
            result = (float(coordinates[0]), float(coordinates[1]))
        except (KeyError, IndexError, TypeError, ValueError):
            logger.error(f"Geocoding feature has no usable coordinates: {features[0]!r}")
            return None

        logger.info(f"Geocoding result: {result}")
        return result


class ORSRouter(ORSClient):
    """Driving route between two points via ORS directions (GeoJSON)."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
        url: str = RoutingConfig.DIRECTIONS_URL,
    ) -> None:
        super().__init__(client=client, api_key=api_key)
        self.url = url

    async def route(self, start: LonLat, end: LonLat) -> list[LonLat]:
        """Route vertices from start to end.

        Raises:
            UpstreamFailure: On HTTP/transport failure or a response without geometry.
        """
        logger.info(f"Routing from {start} to {end}")
        body = {
            "coordinates": [list(start), list(end)],
            "instructions": False,
            "preference": RoutingConfig.PREFERENCE,
            "radiuses": [-1, -1],
        }
        try:
            response = await self._request("POST", self.url, json=body, headers={"authorization": self.api_key})
        except httpx.HTTPError as e:
            raise UpstreamFailure(f"Routing request failed: {e}") from e

        if response.is_error:
            raise UpstreamFailure(f"Routing failed: {response.status_code} - {response.text[:200]}")

        try:
            data = response.json()
            coordinates = data["features"][0]["geometry"]["coordinates"]
            path = [(float(c[0]), float(c[1])) for c in coordinates]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise UpstreamFailure("Invalid routing response format") from e

        if not path:
            raise UpstreamFailure("Routing returned an empty geometry")

        logger.info(f"Routing result: {len(path)} coordinate points")
        return path

"""Elevation service for sampling terrain height along a route.

Provides route elevation profiles from free, rate-limited web APIs:
- Cache-first lookup on a quantized coordinate grid (see elevation_cache)
- Chunked batch requests with a fixed pause between chunks
- Exponential-backoff retry on HTTP 429 and transport failures
- Fallback to a secondary provider when the primary fails or returns junk

Data Sources:
    Open-Elevation (primary): POST {"locations": [{latitude, longitude}]}
        -> {"results": [{"elevation": m}]}
    elevation-api.io (fallback): POST {"points": [{latitude, longitude}]}
        -> {"elevations": [m]}

A profile is either complete and index-aligned with the input path, or the
whole sampling call fails. A shorter profile is never returned.
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from commute_roi.constants import ElevationConfig, HttpConfig
from commute_roi.core.elevation_cache import CacheKey, ElevationCache, default_cache
from commute_roi.core.geo_calculator import LonLat
from commute_roi.core.retry import RateLimitedError, RetryPolicy, Sleep, with_fallback, with_retry
from commute_roi.model.errors import ElevationProviderError, UpstreamFailure
from commute_roi.services.protocols import ElevationProvider

logger = logging.getLogger(__name__)


def _as_elevation(value: Any) -> float | None:
    """Coerce a provider value to meters, or None if it is not a number."""
    if isinstance(value, dict):
        value = value.get("elevation")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


class HttpElevationProvider:
    """Base class for JSON-over-POST elevation APIs.

    Subclasses build the request payload and translate the response into a
    plain list of elevations (meters), one per requested point.

    Uses the given httpx.AsyncClient, or opens a short-lived one per request.
    """

    name = "elevation provider"

    def __init__(self, url: str, client: Optional[httpx.AsyncClient] = None) -> None:
        self.url = url
        self._client = client

    def build_payload(self, points: list[LonLat]) -> dict:
        raise NotImplementedError

    def parse_elevations(self, data: Any) -> list[Any]:
        """Extract the raw per-point values from a decoded response."""
        raise NotImplementedError

    async def elevations(self, points: list[LonLat]) -> list[float]:
        """Fetch one elevation per point, in input order.

        Raises:
            RateLimitedError: On HTTP 429 (retryable).
            httpx.TransportError: On connection failure or timeout (retryable).
            ElevationProviderError: On any other HTTP error or malformed payload.
        """
        data = await self._post_json(self.build_payload(points))
        raw = self.parse_elevations(data)

        if len(raw) != len(points):
            raise ElevationProviderError(
                self.name,
                f"returned {len(raw)} elevations for {len(points)} points",
            )

        values = [_as_elevation(value) for value in raw]
        missing = sum(1 for value in values if value is None)
        if missing:
            raise ElevationProviderError(self.name, f"{missing} of {len(points)} elevations missing or invalid")

        logger.info(f"{self.name}: {len(values)} results, sample {values[:3]}")
        return values

    @staticmethod
    def locations(points: list[LonLat]) -> list[dict[str, float]]:
        return [{"latitude": lat, "longitude": lon} for lon, lat in points]

    async def _post_json(self, payload: dict) -> Any:
        if self._client is not None:
            return await self._send(self._client, payload)
        async with httpx.AsyncClient(timeout=HttpConfig.TIMEOUT_S) as client:
            return await self._send(client, payload)

    async def _send(self, client: httpx.AsyncClient, payload: dict) -> Any:
        try:
            response = await client.post(self.url, json=payload)
        except httpx.TransportError:
            raise
        except httpx.HTTPError as e:
            # Undecodable body or redirect loop: malformed, not retryable
            raise ElevationProviderError(self.name, str(e)) from e
        logger.info(f"{self.name} response status: {response.status_code}")

        if response.status_code in ElevationConfig.RETRY_STATUS_CODES:
            raise RateLimitedError(provider=self.name, status_code=response.status_code)
        if response.is_error:
            raise ElevationProviderError(self.name, f"HTTP {response.status_code} - {response.text[:200]}")

        try:
            return response.json()
        except ValueError as e:
            raise ElevationProviderError(self.name, f"invalid JSON: {e}") from e


class OpenElevationProvider(HttpElevationProvider):
    """Primary provider: Open-Elevation lookup API."""

    name = "Open-Elevation"

    def __init__(self, client: Optional[httpx.AsyncClient] = None, url: str = ElevationConfig.PRIMARY_URL) -> None:
        super().__init__(url=url, client=client)

    def build_payload(self, points: list[LonLat]) -> dict:
        return {"locations": self.locations(points)}

    def parse_elevations(self, data: Any) -> list[Any]:
        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            raise ElevationProviderError(self.name, "invalid response format (no results list)")
        return results


class ElevationApiIoProvider(HttpElevationProvider):
    """Fallback provider: elevation-api.io.

    Responds with a bare "elevations" list, translated here into the same
    per-point list the primary provider yields.
    """

    name = "elevation-api.io"

    def __init__(self, client: Optional[httpx.AsyncClient] = None, url: str = ElevationConfig.FALLBACK_URL) -> None:
        super().__init__(url=url, client=client)

    def build_payload(self, points: list[LonLat]) -> dict:
        return {"points": self.locations(points)}

    def parse_elevations(self, data: Any) -> list[Any]:
        elevations = data.get("elevations") if isinstance(data, dict) else None
        if not isinstance(elevations, list):
            raise ElevationProviderError(self.name, "invalid response format (no elevations list)")
        return elevations


class ElevationSampler:
    """Maps a densified path to an index-aligned elevation profile.

    Uncached points are deduplicated by cache key, so a coordinate requested
    twice (in one call or across calls sharing the cache) is fetched once.
    Chunks run sequentially with a fixed pause between them to respect
    provider rate limits.

    Example:
        sampler = ElevationSampler(cache=ElevationCache())
        profile = await sampler.sample(path)
        assert len(profile) == len(path)
    """

    def __init__(
        self,
        primary: Optional[ElevationProvider] = None,
        fallback: Optional[ElevationProvider] = None,
        cache: Optional[ElevationCache] = None,
        chunk_size: int = ElevationConfig.CHUNK_SIZE,
        inter_chunk_delay_s: float = ElevationConfig.INTER_CHUNK_DELAY_S,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialize with providers and batching policy.

        Args:
            primary: ElevationProvider tried first (OpenElevationProvider if not provided)
            fallback: ElevationProvider used when primary fails (ElevationApiIoProvider if not provided)
            cache: Shared elevation cache (process-wide default if not provided)
            chunk_size: Points per provider request
            inter_chunk_delay_s: Pause between consecutive chunk requests
            retry_policy: Retry policy applied to each provider call
            sleep: Awaitable sleep used for pacing and backoff (injectable for tests)
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
        self.primary = primary or OpenElevationProvider()
        self.fallback = fallback or ElevationApiIoProvider()
        self.cache = cache if cache is not None else default_cache()
        self.chunk_size = chunk_size
        self.inter_chunk_delay_s = inter_chunk_delay_s
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    async def sample(self, path: list[LonLat]) -> list[float]:
        """Return one elevation (meters) per path point, in path order.

        Raises:
            UpstreamFailure: If any chunk fails on both providers.
        """
        logger.info(f"Starting elevation lookup for {len(path)} points")
        elevs: list[float | None] = [self.cache.get(lon=lon, lat=lat) for lon, lat in path]

        # One fetch per distinct uncached key, fanned back out to every index sharing it
        pending: dict[CacheKey, list[int]] = {}
        fetch_points: list[LonLat] = []
        for i, elev in enumerate(elevs):
            if elev is not None:
                continue
            lon, lat = path[i]
            key = self.cache.key(lon=lon, lat=lat)
            if key not in pending:
                pending[key] = []
                fetch_points.append(path[i])
            pending[key].append(i)

        fetch_keys = list(pending)
        logger.info(f"Found {len(path) - sum(len(v) for v in pending.values())} cached elevations, need to fetch {len(fetch_points)}")

        total_chunks = (len(fetch_points) + self.chunk_size - 1) // self.chunk_size
        for chunk_no, start in enumerate(range(0, len(fetch_points), self.chunk_size), start=1):
            chunk = fetch_points[start : start + self.chunk_size]
            logger.info(f"Processing chunk {chunk_no}/{total_chunks} with {len(chunk)} points")

            values = await self.fetch_chunk(chunk)

            for (lon, lat), key, value in zip(chunk, fetch_keys[start : start + self.chunk_size], values):
                self.cache.set(lon=lon, lat=lat, elevation=value)
                for idx in pending[key]:
                    elevs[idx] = value

            if chunk_no < total_chunks:
                await self._sleep(self.inter_chunk_delay_s)

        unresolved = sum(1 for elev in elevs if elev is None)
        if unresolved:
            raise UpstreamFailure(f"{unresolved} of {len(path)} elevations could not be resolved")

        logger.info(f"Elevation lookup complete: {len(elevs)} elevations retrieved")
        return elevs

    async def fetch_chunk(self, chunk: list[LonLat]) -> list[float]:
        """Fetch one chunk: primary with retry, then fallback with retry."""
        return await with_fallback(
            primary=lambda: with_retry(lambda: self.primary.elevations(chunk), self.retry_policy, self._sleep),
            secondary=lambda: with_retry(lambda: self.fallback.elevations(chunk), self.retry_policy, self._sleep),
        )

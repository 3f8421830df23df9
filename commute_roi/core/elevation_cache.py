"""In-memory elevation cache keyed by quantized coordinates.

Coordinates are rounded to ElevationConfig.CACHE_DECIMALS (4 decimals,
roughly an 11m grid) so nearby samples of the same road share one entry.

The cache lives for the whole process and is never evicted: keys come
from a handful of commute routes, so cardinality stays small. Writes are
idempotent (the same coordinate always resolves to the same elevation),
so concurrent requests populating the same key race harmlessly.
"""

from commute_roi.constants import ElevationConfig

CacheKey = tuple[float, float]


class ElevationCache:
    """Process-wide mapping from quantized (lat, lon) to elevation in meters.

    Construct one at startup and pass it to every ElevationSampler that
    should share lookups. Use default_cache() for the shared instance.

    Example:
        cache = ElevationCache()
        cache.set(lon=-72.41, lat=43.65, elevation=152.0)
        cache.get(lon=-72.41001, lat=43.65002)  # -> 152.0
    """

    def __init__(self, decimals: int = ElevationConfig.CACHE_DECIMALS) -> None:
        self._decimals = decimals
        self._values: dict[CacheKey, float] = {}

    def key(self, lon: float, lat: float) -> CacheKey:
        """Quantized (lat, lon) key for a coordinate."""
        return (round(lat, self._decimals), round(lon, self._decimals))

    def get(self, lon: float, lat: float) -> float | None:
        """Cached elevation for a coordinate, or None on a miss."""
        return self._values.get(self.key(lon=lon, lat=lat))

    def set(self, lon: float, lat: float, elevation: float) -> None:
        self._values[self.key(lon=lon, lat=lat)] = elevation

    def clear(self) -> None:
        self._values.clear()

    def __contains__(self, lon_lat: tuple[float, float]) -> bool:
        lon, lat = lon_lat
        return self.key(lon=lon, lat=lat) in self._values

    def __len__(self) -> int:
        return len(self._values)


_default_cache = ElevationCache()


def default_cache() -> ElevationCache:
    """The cache shared by all samplers that are not given their own."""
    return _default_cache

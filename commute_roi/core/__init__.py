"""Core foundation classes for route geometry, elevation and fuel.

- GeoCalculator: Haversine distance and path densification
- ElevationCache: Process-wide quantized elevation cache
- ElevationSampler: Chunked, paced, retried elevation lookup with fallback
- with_retry / with_fallback: Upstream failure policy
- compute_one_way_fuel_gallons: Grade-aware fuel model for one leg
"""

from commute_roi.core.elevation_cache import ElevationCache, default_cache
from commute_roi.core.elevation_service import (
    ElevationApiIoProvider,
    ElevationSampler,
    HttpElevationProvider,
    OpenElevationProvider,
)
from commute_roi.core.energy_model import compute_one_way_fuel_gallons, mpg_at_speed_mix, reverse_leg
from commute_roi.core.geo_calculator import GeoCalculator, LonLat
from commute_roi.core.retry import RateLimitedError, RetryPolicy, with_fallback, with_retry

__all__ = [
    # Geo calculator
    "GeoCalculator",
    "LonLat",
    # Elevation
    "ElevationCache",
    "default_cache",
    "ElevationSampler",
    "HttpElevationProvider",
    "OpenElevationProvider",
    "ElevationApiIoProvider",
    # Retry
    "RetryPolicy",
    "RateLimitedError",
    "with_retry",
    "with_fallback",
    # Energy model
    "compute_one_way_fuel_gallons",
    "mpg_at_speed_mix",
    "reverse_leg",
]

"""Shared pytest fixtures for commute_roi tests.

Provides in-memory fakes for every external service so the whole pipeline
runs offline and deterministically.

COORDINATE SYSTEM:
    Tests place routes on the equator (lat=0) heading east from lon=0, where
    one degree of longitude is exactly pi * R / 180 meters on the spherical
    Earth. Route lengths can then be written down without calling
    GeoCalculator (which would be testing with tested code).
"""

import math
from typing import Callable, Optional

import pytest

from commute_roi.constants import GeoConfig
from commute_roi.core.elevation_cache import ElevationCache
from commute_roi.core.elevation_service import ElevationSampler
from commute_roi.core.geo_calculator import LonLat
from commute_roi.core.retry import RetryPolicy
from commute_roi.model.trip import TripInput
from commute_roi.model.vehicle import SpeedShares, Vehicle, VehicleKind
from commute_roi.pipeline.trip_aggregator import TripAggregator

METERS_PER_DEGREE = math.pi * GeoConfig.EARTH_RADIUS_M / 180
TEN_MILES_M = 10 * GeoConfig.METERS_PER_MILE


def east_of_origin(meters: float) -> LonLat:
    """Point on the equator the given distance east of (0, 0)."""
    return (meters / METERS_PER_DEGREE, 0.0)


def straight_route(length_m: float, vertices: int = 2) -> list[LonLat]:
    """Evenly spaced vertices along the equator, from (0, 0) to length_m east."""
    return [east_of_origin(length_m * i / (vertices - 1)) for i in range(vertices)]


# =============================================================================
# FAKE SERVICES
# =============================================================================


class FakeElevationProvider:
    """Elevation provider answering from a function of (lon, lat).

    Every call is recorded. Exceptions queued in `failures` are raised by
    the next calls, one per call, before normal answers resume.
    """

    def __init__(
        self,
        name: str = "fake",
        elevation_fn: Callable[[float, float], float] = lambda lon, lat: 100.0,
        failures: Optional[list[Exception]] = None,
    ) -> None:
        self.name = name
        self.elevation_fn = elevation_fn
        self.failures = list(failures or [])
        self.calls: list[list[LonLat]] = []

    @property
    def requested_points(self) -> list[LonLat]:
        return [point for call in self.calls for point in call]

    async def elevations(self, points: list[LonLat]) -> list[float]:
        self.calls.append(list(points))
        if self.failures:
            raise self.failures.pop(0)
        return [self.elevation_fn(lon, lat) for lon, lat in points]


class FakeGeocoder:
    """Geocoder backed by a dict; unknown addresses return None."""

    def __init__(self, known: dict[str, LonLat]) -> None:
        self.known = known
        self.queries: list[str] = []

    async def geocode(self, query: str) -> LonLat | None:
        self.queries.append(query)
        return self.known.get(query)


class FakeRouter:
    """Router returning a fixed route, or raising a fixed error."""

    def __init__(self, route: list[LonLat], error: Optional[Exception] = None) -> None:
        self._route = route
        self.error = error
        self.calls: list[tuple[LonLat, LonLat]] = []

    async def route(self, start: LonLat, end: LonLat) -> list[LonLat]:
        self.calls.append((start, end))
        if self.error is not None:
            raise self.error
        return list(self._route)


class RecordingSleep:
    """Awaitable stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def cache() -> ElevationCache:
    """Fresh cache per test (never the process-wide default)."""
    return ElevationCache()


@pytest.fixture
def primary() -> FakeElevationProvider:
    return FakeElevationProvider(name="primary")


@pytest.fixture
def fallback() -> FakeElevationProvider:
    return FakeElevationProvider(name="fallback", elevation_fn=lambda lon, lat: -1.0)


@pytest.fixture
def sampler(
    primary: FakeElevationProvider,
    fallback: FakeElevationProvider,
    cache: ElevationCache,
    sleep: RecordingSleep,
) -> ElevationSampler:
    return ElevationSampler(
        primary=primary,
        fallback=fallback,
        cache=cache,
        retry_policy=RetryPolicy(max_attempts=3, backoff_base_s=2.0),
        sleep=sleep,
    )


@pytest.fixture
def ice_vehicle() -> Vehicle:
    """Combustion vehicle at 30 mpg (round numbers for hand-checked results)."""
    return Vehicle(id="ice30", name="Test ICE", type=VehicleKind.ICE, base_mpg_75=30, mass_kg=1650)


@pytest.fixture
def hybrid_vehicle() -> Vehicle:
    """Hybrid with the same mpg and mass as ice_vehicle."""
    return Vehicle(id="hyb30", name="Test Hybrid", type=VehicleKind.HYBRID, base_mpg_75=30, mass_kg=1650)


@pytest.fixture
def all_75() -> SpeedShares:
    return SpeedShares(s65=0.0, s70=0.0, s75=1.0)


@pytest.fixture
def flat_ten_mile_route() -> list[LonLat]:
    """10 mile straight route along the equator (2 vertices)."""
    return straight_route(TEN_MILES_M)


@pytest.fixture
def geocoder() -> FakeGeocoder:
    return FakeGeocoder(known={"home": (0.0, 0.0), "work": east_of_origin(TEN_MILES_M)})


@pytest.fixture
def router(flat_ten_mile_route: list[LonLat]) -> FakeRouter:
    return FakeRouter(route=flat_ten_mile_route)


@pytest.fixture
def aggregator(geocoder: FakeGeocoder, router: FakeRouter, sampler: ElevationSampler) -> TripAggregator:
    return TripAggregator(geocoder=geocoder, router=router, sampler=sampler)


@pytest.fixture
def trip(ice_vehicle: Vehicle, hybrid_vehicle: Vehicle, all_75: SpeedShares) -> TripInput:
    """Flat 10 mile commute, $3.50 gas, no winter penalty, no upgrade cost."""
    return TripInput(
        home="home",
        work="work",
        current_vehicle_id=ice_vehicle.id,
        new_vehicle_id=hybrid_vehicle.id,
        gas_price=3.50,
        days_per_week=5,
        weeks_per_year=50,
        winter_fraction=0.0,
        winter_penalty=0.0,
        speed_shares=all_75,
        upgrade_cost=0.0,
        vehicles=(ice_vehicle, hybrid_vehicle),
    )

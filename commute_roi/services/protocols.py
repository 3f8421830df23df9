"""Contracts for the external collaborators the pipeline depends on.

Any object with matching async methods can be plugged in; tests use
in-memory fakes, production uses the OpenRouteService, Open-Elevation
and fueleconomy.gov clients.
"""

from typing import Protocol

from commute_roi.core.geo_calculator import LonLat
from commute_roi.model.vehicle import Vehicle


class Geocoder(Protocol):
    async def geocode(self, query: str) -> LonLat | None:
        """Resolve free-text address to (lon, lat), or None if nothing matched."""
        ...


class Router(Protocol):
    async def route(self, start: LonLat, end: LonLat) -> list[LonLat]:
        """Driving route from start to end as (lon, lat) vertices.

        Raises:
            UpstreamFailure: If the provider fails or returns no geometry.
        """
        ...


class ElevationProvider(Protocol):
    name: str

    async def elevations(self, points: list[LonLat]) -> list[float]:
        """One elevation in meters per point, in input order."""
        ...


class VehicleCatalog(Protocol):
    def resolve(self, vehicle_id: str) -> Vehicle | None:
        ...

    async def lookup(self, year: int, make: str, model: str) -> list[Vehicle]:
        ...

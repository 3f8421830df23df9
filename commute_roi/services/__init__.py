"""Clients for the external services the pipeline depends on.

- protocols: Geocoder, Router, ElevationProvider and VehicleCatalog contracts
- openrouteservice: ORSGeocoder and ORSRouter
- vehicle_catalog: Built-in vehicle list and live EPA/NHTSA lookup
"""

from commute_roi.services.openrouteservice import ORSGeocoder, ORSRouter
from commute_roi.services.protocols import ElevationProvider, Geocoder, Router, VehicleCatalog
from commute_roi.services.vehicle_catalog import DEFAULT_VEHICLES, DefaultVehicleCatalog, EPAVehicleCatalog

__all__ = [
    # Contracts
    "Geocoder",
    "Router",
    "ElevationProvider",
    "VehicleCatalog",
    # OpenRouteService
    "ORSGeocoder",
    "ORSRouter",
    # Vehicles
    "DEFAULT_VEHICLES",
    "DefaultVehicleCatalog",
    "EPAVehicleCatalog",
]

"""Data model classes for a commute cost comparison.

- Vehicle / VehicleKind: Drivetrain parameters for the fuel model
- SpeedShares: Time split between 65/70/75 mph
- TripInput: One request
- FuelLegResult: One direction, one vehicle
- ElevationSummary: Min/max/gain/loss of a profile
- TripResult: Round-trip, weekly, yearly and payback figures
- TripError and subclasses: Typed failures with a ReasonCode
"""

from commute_roi.model.errors import (
    ElevationProviderError,
    ProfileMismatchError,
    ReasonCode,
    RetryExhaustedError,
    TripError,
    UpstreamFailure,
    UpstreamNotFound,
    ValidationError,
    VehicleNotFoundError,
)
from commute_roi.model.trip import ElevationSummary, FuelLegResult, TripInput, TripResult
from commute_roi.model.vehicle import SpeedShares, Vehicle, VehicleKind

__all__ = [
    "Vehicle",
    "VehicleKind",
    "SpeedShares",
    "TripInput",
    "FuelLegResult",
    "ElevationSummary",
    "TripResult",
    "ReasonCode",
    "TripError",
    "ValidationError",
    "VehicleNotFoundError",
    "ProfileMismatchError",
    "UpstreamNotFound",
    "UpstreamFailure",
    "ElevationProviderError",
    "RetryExhaustedError",
]

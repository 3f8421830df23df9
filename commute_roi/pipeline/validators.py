"""Validators - Input checks run before any external call.

Validators return Optional[ValidationError]:
- None if valid
- A ValidationError if invalid (the aggregator raises it)

validate_trip_input runs them all in order and returns the first failure,
so a bad request is rejected without spending a geocoding or elevation call.
"""

from typing import Iterable

from commute_roi.constants import TripDefaults
from commute_roi.model.errors import ValidationError
from commute_roi.model.trip import TripInput
from commute_roi.model.vehicle import SpeedShares, Vehicle


def validate_address(label: str, address: str) -> ValidationError | None:
    """Validate that an address is not blank."""
    if not address or not address.strip():
        return ValidationError(f"{label} address is required")
    return None


def validate_range(label: str, value: float, low: float, high: float | None = None) -> ValidationError | None:
    """Validate low <= value (<= high when given)."""
    if value != value:  # NaN
        return ValidationError(f"{label} must be a number")
    if value < low or (high is not None and value > high):
        bounds = f"between {low} and {high}" if high is not None else f"at least {low}"
        return ValidationError(f"{label} must be {bounds}, got {value}")
    return None


def validate_speed_shares(shares: SpeedShares) -> ValidationError | None:
    """Validate that no speed share is negative and at least one is set.

    Shares that do not sum to 1 are accepted; the fuel model treats that
    as the caller's contract.
    """
    for name, share in shares.to_dict().items():
        if share < 0:
            return ValidationError(f"Speed share {name} must not be negative, got {share}")
    if shares.total <= 0:
        return ValidationError("At least one speed share must be positive")
    return None


def validate_vehicle(vehicle: Vehicle) -> ValidationError | None:
    """Validate that a vehicle has positive MPG and mass."""
    if vehicle.base_mpg_75 <= 0:
        return ValidationError(f"Vehicle {vehicle.id} must have positive base MPG, got {vehicle.base_mpg_75}")
    if vehicle.mass_kg <= 0:
        return ValidationError(f"Vehicle {vehicle.id} must have positive mass, got {vehicle.mass_kg}")
    return None


def validate_unique_vehicle_ids(vehicles: Iterable[Vehicle]) -> ValidationError | None:
    """Validate that no two vehicles in an override list share an id."""
    seen: set[str] = set()
    for vehicle in vehicles:
        if vehicle.id in seen:
            return ValidationError(f"Duplicate vehicle id: {vehicle.id}")
        seen.add(vehicle.id)
    return None


def validate_trip_input(trip: TripInput) -> ValidationError | None:
    """Run every input check and return the first failure.

    Returns:
        None if valid, otherwise the first ValidationError found.
    """
    checks = [
        validate_address("Home", trip.home),
        validate_address("Work", trip.work),
        validate_range("Gas price", trip.gas_price, 0),
        validate_range("Days per week", trip.days_per_week, 0, TripDefaults.MAX_DAYS_PER_WEEK),
        validate_range("Weeks per year", trip.weeks_per_year, 0, TripDefaults.MAX_WEEKS_PER_YEAR),
        validate_range("Winter fraction", trip.winter_fraction, 0, 1),
        validate_range("Winter penalty", trip.winter_penalty, 0, 1),
        validate_speed_shares(trip.speed_shares),
    ]
    checks.append(validate_unique_vehicle_ids(trip.vehicles))
    checks.extend(validate_vehicle(v) for v in trip.vehicles)
    return next((error for error in checks if error is not None), None)

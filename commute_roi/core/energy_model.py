"""Grade-aware fuel model for one direction of a commute.

Converts a path, its elevation profile and a vehicle into gallons and cost:
- Speed-mix MPG: 75 mph baseline scaled by time spent at 65/70/75 mph
- Flat-road fuel: distance / blended MPG
- Climb cost: potential energy gained (m * g * dh) burned at engine efficiency
- Regen credit: part of the potential energy lost on descents, hybrids only

The grade adjustment is clamped at zero, so total fuel is never below the
flat-road baseline. No rounding is applied; formatting is the caller's job.
"""

import logging
from typing import Optional

from commute_roi.constants import EnergyConfig, GeoConfig
from commute_roi.core.geo_calculator import GeoCalculator, LonLat
from commute_roi.model.errors import ProfileMismatchError, ValidationError
from commute_roi.model.trip import FuelLegResult
from commute_roi.model.vehicle import SpeedShares, Vehicle

logger = logging.getLogger(__name__)


def mpg_at_speed_mix(base_mpg_75: float, speed_shares: SpeedShares) -> float:
    """Blended MPG for a speed mix.

    Driving slower than 75 mph improves economy: +15% at 65 mph, +8% at 70 mph.
    Shares are assumed to sum to 1.0; that is the caller's contract.
    """
    return base_mpg_75 * speed_shares.mpg_multiplier()


def reverse_leg(path: list[LonLat], profile: list[float]) -> tuple[list[LonLat], list[float]]:
    """Path and profile for the return trip, as new lists.

    Climbs of the outbound leg become descents, so the same road yields a
    different fuel figure in each direction.
    """
    return list(reversed(path)), list(reversed(profile))


def compute_one_way_fuel_gallons(
    path: list[LonLat],
    elevation_profile: list[Optional[float]],
    vehicle: Vehicle,
    gas_price: float,
    speed_shares: SpeedShares,
) -> FuelLegResult:
    """Fuel and cost for driving path once with the given vehicle.

    Args:
        path: Densified route as (lon, lat) tuples
        elevation_profile: One elevation (meters) per path point. A missing
            sample reuses the previous one (zero grade for that segment)
        vehicle: Drivetrain parameters (mass, 75 mph MPG, kind)
        gas_price: Dollars per gallon
        speed_shares: Time split between 65/70/75 mph

    Returns:
        FuelLegResult with distance, gallons (base/climb/regen/total) and cost.

    Raises:
        ProfileMismatchError: If the profile length differs from the path length.
        ValidationError: If the blended MPG is not positive.
    """
    if len(elevation_profile) != len(path):
        raise ProfileMismatchError(path_len=len(path), profile_len=len(elevation_profile))

    mpg_blend = mpg_at_speed_mix(base_mpg_75=vehicle.base_mpg_75, speed_shares=speed_shares)
    if mpg_blend <= 0:
        raise ValidationError(
            f"Blended MPG must be positive for {vehicle.id} (got {mpg_blend}); check base MPG and speed shares"
        )

    weight_n = vehicle.mass_kg * EnergyConfig.GRAVITY_M_S2
    distance_miles = 0.0
    climb_j = 0.0
    drop_j = 0.0

    for i in range(1, len(path)):
        distance_miles += GeoCalculator.haversine(path[i - 1], path[i]) / GeoConfig.METERS_PER_MILE

        prev_elev = elevation_profile[i - 1]
        elev = elevation_profile[i] if elevation_profile[i] is not None else prev_elev
        if elev is None or prev_elev is None:
            continue
        dh = elev - prev_elev
        if dh > 0:
            climb_j += weight_n * dh
        else:
            drop_j += weight_n * abs(dh)

    engine_eff = vehicle.type.engine_efficiency
    regen_eff = vehicle.type.regen_efficiency

    base_gallons = distance_miles / mpg_blend
    climb_gallons = climb_j / EnergyConfig.JOULES_PER_GALLON_GASOLINE / engine_eff
    regen_gallons = drop_j / EnergyConfig.JOULES_PER_GALLON_GASOLINE * regen_eff * engine_eff
    total_gallons = base_gallons + max(0.0, climb_gallons - regen_gallons)

    logger.debug(
        f"{vehicle.id}: {distance_miles:.2f}mi, base {base_gallons:.4f}gal, "
        f"climb {climb_gallons:.4f}gal, regen {regen_gallons:.4f}gal"
    )

    return FuelLegResult(
        distance_miles=distance_miles,
        total_gallons=total_gallons,
        cost=total_gallons * gas_price,
        base_gallons=base_gallons,
        climb_gallons=climb_gallons,
        regen_gallons=regen_gallons,
    )

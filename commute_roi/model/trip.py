"""Trip - Inputs and results of a commute cost comparison.

TripInput bundles everything a caller supplies for one request.
FuelLegResult is the output of one one-way fuel computation.
TripResult folds four legs (two vehicles, both directions) into
round-trip, weekly, yearly and payback figures.

Nothing here is persisted: a TripResult is built once per request and
discarded after the caller renders it.
"""

from dataclasses import dataclass, field
from typing import Any

import numpy as np

from commute_roi.constants import TripDefaults
from commute_roi.model.errors import ValidationError
from commute_roi.model.vehicle import SpeedShares, Vehicle


@dataclass(frozen=True)
class FuelLegResult:
    """Fuel use and cost for one direction of travel.

    Attributes:
        distance_miles: Leg length
        total_gallons: base_gallons plus net grade penalty (never below base)
        cost: total_gallons times gas price
        base_gallons: Flat-road fuel at the given speed mix
        climb_gallons: Fuel spent lifting the vehicle uphill
        regen_gallons: Fuel-equivalent credit recovered on descents (hybrids only)
    """

    distance_miles: float
    total_gallons: float
    cost: float
    base_gallons: float
    climb_gallons: float
    regen_gallons: float

    @property
    def grade_gallons(self) -> float:
        """Net fuel added by terrain (total minus flat-road baseline)."""
        return self.total_gallons - self.base_gallons

    def to_dict(self) -> dict[str, float]:
        return {
            "distanceMiles": self.distance_miles,
            "totalGallons": self.total_gallons,
            "cost": self.cost,
            "baseGallons": self.base_gallons,
            "climbGallons": self.climb_gallons,
            "regenGallons": self.regen_gallons,
        }


@dataclass(frozen=True)
class ElevationSummary:
    """Shape of a one-way elevation profile.

    Attributes:
        min_m: Lowest sample
        max_m: Highest sample
        gain_m: Sum of all rises along the path
        loss_m: Sum of all drops along the path (positive number)
    """

    min_m: float
    max_m: float
    gain_m: float
    loss_m: float

    @staticmethod
    def from_profile(profile: list[float]) -> "ElevationSummary":
        if not profile:
            return ElevationSummary(min_m=0.0, max_m=0.0, gain_m=0.0, loss_m=0.0)
        elev = np.asarray(profile, dtype=float)
        deltas = np.diff(elev)
        return ElevationSummary(
            min_m=float(elev.min()),
            max_m=float(elev.max()),
            gain_m=float(deltas[deltas > 0].sum()),
            loss_m=float(-deltas[deltas < 0].sum()),
        )

    def to_dict(self) -> dict[str, float]:
        return {"minM": self.min_m, "maxM": self.max_m, "gainM": self.gain_m, "lossM": self.loss_m}


def _required(data: dict[str, Any], *keys: str) -> str:
    """First present key as a string; KeyError naming the first key if none is set."""
    for key in keys:
        if data.get(key) is not None:
            return str(data[key])
    raise KeyError(keys[0])


def _number(data: dict[str, Any], *keys: str, default: float) -> float:
    """First present key converted to float, else default."""
    for key in keys:
        if key in data and data[key] is not None:
            try:
                return float(data[key])
            except (TypeError, ValueError) as e:
                raise ValidationError(f"{key} must be a number, got {data[key]!r}") from e
    return default


@dataclass(frozen=True)
class TripInput:
    """Everything needed to compare two vehicles on one commute.

    Attributes:
        home, work: Free-text addresses, geocoded by the pipeline
        gas_price: Dollars per gallon
        days_per_week: Commute days per week
        weeks_per_year: Commute weeks per year
        winter_fraction: Share of the year with winter driving (0..1)
        winter_penalty: Fuel economy loss during winter (0..1)
        speed_shares: Time split between 65/70/75 mph
        current_vehicle_id: Vehicle driven today
        new_vehicle_id: Candidate replacement
        upgrade_cost: Net cost of switching (<= 0 means no ROI/payback)
        vehicles: Optional override list; built-in catalog used when empty
    """

    home: str
    work: str
    current_vehicle_id: str
    new_vehicle_id: str
    gas_price: float = TripDefaults.GAS_PRICE
    days_per_week: float = TripDefaults.DAYS_PER_WEEK
    weeks_per_year: float = TripDefaults.WEEKS_PER_YEAR
    winter_fraction: float = TripDefaults.WINTER_FRACTION
    winter_penalty: float = TripDefaults.WINTER_PENALTY
    speed_shares: SpeedShares = field(default_factory=lambda: SpeedShares(**TripDefaults.SPEED_SHARES))
    upgrade_cost: float = TripDefaults.UPGRADE_COST
    vehicles: tuple[Vehicle, ...] = ()

    @property
    def winter_multiplier(self) -> float:
        """Linear cost de-rating applied to every round trip."""
        return 1 + self.winter_fraction * self.winter_penalty

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TripInput":
        """Parse a request body using snake_case or the web API's camelCase keys.

        Raises:
            ValidationError: If a required field is missing or malformed.
        """
        try:
            shares_data = data.get("speed_shares", data.get("speedShares"))
            speed_shares = (
                SpeedShares.from_dict(shares_data)
                if shares_data is not None
                else SpeedShares(**TripDefaults.SPEED_SHARES)
            )
            vehicles = tuple(Vehicle.from_dict(v) for v in (data.get("vehicles") or ()))
            return cls(
                home=_required(data, "home"),
                work=_required(data, "work"),
                current_vehicle_id=_required(data, "current_vehicle_id", "currentVehicleId"),
                new_vehicle_id=_required(data, "new_vehicle_id", "newVehicleId"),
                gas_price=_number(data, "gas_price", "gasPrice", default=TripDefaults.GAS_PRICE),
                days_per_week=_number(data, "days_per_week", "daysPerWeek", default=TripDefaults.DAYS_PER_WEEK),
                weeks_per_year=_number(data, "weeks_per_year", "weeksPerYear", default=TripDefaults.WEEKS_PER_YEAR),
                winter_fraction=_number(data, "winter_fraction", "winterFrac", default=TripDefaults.WINTER_FRACTION),
                winter_penalty=_number(data, "winter_penalty", "winterPen", default=TripDefaults.WINTER_PENALTY),
                speed_shares=speed_shares,
                upgrade_cost=_number(data, "upgrade_cost", "upgradeCost", default=TripDefaults.UPGRADE_COST),
                vehicles=vehicles,
            )
        except KeyError as e:
            raise ValidationError(f"Missing required field: {e.args[0]}") from e
        except (AttributeError, TypeError, ValueError) as e:
            raise ValidationError(f"Malformed trip input: {e}") from e


@dataclass(frozen=True)
class TripResult:
    """Round-trip comparison of the current and candidate vehicle.

    Attributes:
        distance_miles: Round-trip distance
        elevation: One-way densified elevation samples (meters)
        rt_cost_cur, rt_cost_new: Round-trip cost including winter penalty
        weekly_cur, weekly_new: Round-trip cost times commute days
        yearly_cur, yearly_new: Weekly cost times commute weeks
        savings: yearly_cur - yearly_new (negative if the candidate costs more)
        roi: savings / upgrade_cost, or None when upgrade_cost <= 0
        payback_years: upgrade_cost / savings, or None unless both are positive
        legs: The four one-way results keyed "out_cur", "back_cur", "out_new", "back_new"
        elevation_summary: Min/max/gain/loss of the one-way profile
    """

    distance_miles: float
    elevation: list[float]
    rt_cost_cur: float
    rt_cost_new: float
    weekly_cur: float
    weekly_new: float
    yearly_cur: float
    yearly_new: float
    savings: float
    roi: float | None
    payback_years: float | None
    legs: dict[str, FuelLegResult] = field(default_factory=dict)
    elevation_summary: ElevationSummary | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize in the camelCase response shape of the web API."""
        return {
            "distanceMi": self.distance_miles,
            "elevation": list(self.elevation),
            "rtCostCur": self.rt_cost_cur,
            "rtCostNew": self.rt_cost_new,
            "weeklyCur": self.weekly_cur,
            "weeklyNew": self.weekly_new,
            "yearlyCur": self.yearly_cur,
            "yearlyNew": self.yearly_new,
            "savings": self.savings,
            "roi": self.roi,
            "paybackYears": self.payback_years,
            "legs": {name: leg.to_dict() for name, leg in self.legs.items()},
            "elevationSummary": self.elevation_summary.to_dict() if self.elevation_summary else None,
        }

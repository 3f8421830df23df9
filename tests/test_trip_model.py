"""Tests for the data model: vehicles, trip input parsing, results and errors."""

import pytest

from commute_roi.constants import TripDefaults
from commute_roi.model.errors import (
    ElevationProviderError,
    ProfileMismatchError,
    ReasonCode,
    RetryExhaustedError,
    UpstreamFailure,
    UpstreamNotFound,
    ValidationError,
    VehicleNotFoundError,
)
from commute_roi.model.trip import ElevationSummary, FuelLegResult, TripInput, TripResult
from commute_roi.model.vehicle import SpeedShares, Vehicle, VehicleKind


class TestVehicle:
    """Vehicle and VehicleKind."""

    def test_kind_efficiencies(self) -> None:
        assert VehicleKind.ICE.engine_efficiency == 0.27
        assert VehicleKind.ICE.regen_efficiency == 0.0
        assert VehicleKind.HYBRID.engine_efficiency == 0.33
        assert VehicleKind.HYBRID.regen_efficiency == 0.15

    def test_from_dict_accepts_camel_case(self) -> None:
        vehicle = Vehicle.from_dict(
            {"id": "mav", "name": "Maverick", "type": "hybrid", "baseMpg75": 31, "massKg": 1700}
        )
        assert vehicle.type is VehicleKind.HYBRID
        assert vehicle.base_mpg_75 == 31.0
        assert vehicle.mass_kg == 1700.0
        assert vehicle.is_hybrid

    def test_to_dict_round_trips_through_from_dict(self, hybrid_vehicle: Vehicle) -> None:
        assert Vehicle.from_dict(hybrid_vehicle.to_dict()) == hybrid_vehicle

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValueError):
            Vehicle.from_dict({"id": "x", "type": "diesel", "base_mpg_75": 30, "mass_kg": 1500})

    def test_with_mass_leaves_original_untouched(self, ice_vehicle: Vehicle) -> None:
        heavier = ice_vehicle.with_mass(mass_kg=2000, source="estimated")
        assert heavier.mass_kg == 2000
        assert heavier.source == "estimated"
        assert ice_vehicle.mass_kg == 1650


class TestTripInputFromDict:
    """TripInput.from_dict - request body parsing."""

    def test_camel_case_body(self) -> None:
        trip = TripInput.from_dict(
            {
                "home": "A",
                "work": "B",
                "gasPrice": 3.2,
                "daysPerWeek": 4,
                "weeksPerYear": 46,
                "winterFrac": 0.3,
                "winterPen": 0.12,
                "speedShares": {"s65": 0.2, "s70": 0.3, "s75": 0.5},
                "currentVehicleId": "rav4_2017_awd",
                "newVehicleId": "rav4_hybrid",
                "upgradeCost": 5000,
            }
        )
        assert trip.gas_price == 3.2
        assert trip.days_per_week == 4
        assert trip.weeks_per_year == 46
        assert trip.winter_fraction == 0.3
        assert trip.winter_penalty == 0.12
        assert trip.speed_shares == SpeedShares(s65=0.2, s70=0.3, s75=0.5)
        assert trip.current_vehicle_id == "rav4_2017_awd"
        assert trip.new_vehicle_id == "rav4_hybrid"
        assert trip.upgrade_cost == 5000
        assert trip.vehicles == ()

    def test_defaults_applied(self) -> None:
        trip = TripInput.from_dict(
            {"home": "A", "work": "B", "current_vehicle_id": "x", "new_vehicle_id": "y"}
        )
        assert trip.gas_price == TripDefaults.GAS_PRICE
        assert trip.days_per_week == TripDefaults.DAYS_PER_WEEK
        assert trip.weeks_per_year == TripDefaults.WEEKS_PER_YEAR
        assert trip.speed_shares == SpeedShares(**TripDefaults.SPEED_SHARES)
        assert trip.upgrade_cost == 0.0

    def test_vehicle_override_list(self) -> None:
        trip = TripInput.from_dict(
            {
                "home": "A",
                "work": "B",
                "currentVehicleId": "a",
                "newVehicleId": "b",
                "vehicles": [
                    {"id": "a", "name": "A", "type": "ice", "baseMpg75": 25, "massKg": 1600},
                    {"id": "b", "name": "B", "type": "hybrid", "baseMpg75": 35, "massKg": 1700},
                ],
            }
        )
        assert [v.id for v in trip.vehicles] == ["a", "b"]

    def test_missing_field_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError, match="Missing required field: new_vehicle_id"):
            TripInput.from_dict({"home": "A", "work": "B", "currentVehicleId": "x"})

    def test_non_numeric_field_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError, match="gasPrice must be a number"):
            TripInput.from_dict(
                {"home": "A", "work": "B", "currentVehicleId": "x", "newVehicleId": "y", "gasPrice": "cheap"}
            )

    def test_malformed_vehicle_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError):
            TripInput.from_dict(
                {"home": "A", "work": "B", "currentVehicleId": "x", "newVehicleId": "y", "vehicles": [{"id": "x"}]}
            )

    def test_winter_multiplier(self) -> None:
        trip = TripInput(home="A", work="B", current_vehicle_id="x", new_vehicle_id="y", winter_fraction=0.25, winter_penalty=0.1)
        assert trip.winter_multiplier == pytest.approx(1.025)


class TestElevationSummary:
    """ElevationSummary.from_profile."""

    def test_gain_and_loss(self) -> None:
        summary = ElevationSummary.from_profile([100.0, 150.0, 120.0, 200.0])
        assert summary.min_m == 100.0
        assert summary.max_m == 200.0
        assert summary.gain_m == pytest.approx(130.0)
        assert summary.loss_m == pytest.approx(30.0)

    def test_empty_profile(self) -> None:
        assert ElevationSummary.from_profile([]) == ElevationSummary(min_m=0.0, max_m=0.0, gain_m=0.0, loss_m=0.0)


class TestTripResultSerialization:
    """TripResult.to_dict uses the web API's camelCase keys."""

    def test_keys_and_null_payback(self) -> None:
        leg = FuelLegResult(
            distance_miles=10, total_gallons=0.4, cost=1.4, base_gallons=0.4, climb_gallons=0, regen_gallons=0
        )
        result = TripResult(
            distance_miles=20,
            elevation=[1.0, 2.0],
            rt_cost_cur=2.8,
            rt_cost_new=2.0,
            weekly_cur=14.0,
            weekly_new=10.0,
            yearly_cur=700.0,
            yearly_new=500.0,
            savings=200.0,
            roi=None,
            payback_years=None,
            legs={"out_cur": leg},
        )
        data = result.to_dict()

        assert data["distanceMi"] == 20
        assert data["rtCostCur"] == 2.8
        assert data["yearlyNew"] == 500.0
        assert data["roi"] is None
        assert data["paybackYears"] is None
        assert data["legs"]["out_cur"]["totalGallons"] == 0.4
        assert data["elevationSummary"] is None


class TestErrors:
    """ReasonCode classification of every TripError subclass."""

    @pytest.mark.parametrize(
        "error, reason, status",
        [
            (ValidationError("bad"), ReasonCode.VALIDATION, 400),
            (VehicleNotFoundError("nope"), ReasonCode.VALIDATION, 400),
            (ProfileMismatchError(path_len=3, profile_len=2), ReasonCode.UPSTREAM, 500),
            (UpstreamNotFound("no match"), ReasonCode.NOT_FOUND, 400),
            (UpstreamFailure("down"), ReasonCode.UPSTREAM, 500),
            (ElevationProviderError("p", "down"), ReasonCode.UPSTREAM, 500),
            (RetryExhaustedError(attempts=3), ReasonCode.UPSTREAM, 500),
        ],
    )
    def test_reason_and_status(self, error, reason: ReasonCode, status: int) -> None:
        assert error.reason is reason
        assert error.reason.http_status == status
        assert error.to_dict() == {"error": error.message, "reason": reason.value}

    def test_vehicle_not_found_message(self) -> None:
        assert VehicleNotFoundError("f150").message == "Vehicle not found: f150"

"""Tests for the grade-aware fuel model.

Expected values are worked out by hand from the model's formula:
    base    = miles / (base_mpg_75 * speed multiplier)
    climb   = m * g * rise / 121e6 / engine_eff
    regen   = m * g * drop / 121e6 * regen_eff * engine_eff
    total   = base + max(0, climb - regen)
"""

import pytest

from commute_roi.constants import EnergyConfig
from commute_roi.core.energy_model import compute_one_way_fuel_gallons, mpg_at_speed_mix, reverse_leg
from commute_roi.model.errors import ProfileMismatchError, ValidationError
from commute_roi.model.vehicle import SpeedShares, Vehicle, VehicleKind

from conftest import TEN_MILES_M, straight_route

G = EnergyConfig.GRAVITY_M_S2
J_PER_GAL = EnergyConfig.JOULES_PER_GALLON_GASOLINE


@pytest.fixture
def hill_route() -> list:
    """10 mile route, 3 vertices: start, midpoint, end."""
    return straight_route(TEN_MILES_M, vertices=3)


# A single 100m climb then a 100m drop back to the start elevation
HILL_PROFILE = [200.0, 300.0, 200.0]


class TestSpeedMix:
    """mpg_at_speed_mix - MPG blended across 65/70/75 mph."""

    def test_all_at_75_is_baseline(self) -> None:
        assert mpg_at_speed_mix(30, SpeedShares(s65=0, s70=0, s75=1)) == 30

    def test_all_at_65_gains_15_percent(self) -> None:
        assert mpg_at_speed_mix(30, SpeedShares(s65=1, s70=0, s75=0)) == pytest.approx(34.5)

    def test_mixed_shares_are_weighted(self) -> None:
        """0.5 * 1.15 + 0.25 * 1.08 + 0.25 * 1.00 = 1.095."""
        shares = SpeedShares(s65=0.5, s70=0.25, s75=0.25)
        assert mpg_at_speed_mix(20, shares) == pytest.approx(20 * 1.095)


class TestFlatRoute:
    """Flat profiles cost exactly the flat-road baseline."""

    def test_ten_mile_scenario(self, flat_ten_mile_route, ice_vehicle, all_75) -> None:
        """10 mi at 30 mpg and $3.50: 0.3333 gal, $1.1667 one way."""
        leg = compute_one_way_fuel_gallons(
            path=flat_ten_mile_route,
            elevation_profile=[150.0, 150.0],
            vehicle=ice_vehicle,
            gas_price=3.50,
            speed_shares=all_75,
        )
        assert leg.distance_miles == pytest.approx(10.0, rel=1e-9)
        assert leg.total_gallons == pytest.approx(10 / 30, rel=1e-9)
        assert leg.cost == pytest.approx(3.50 * 10 / 30, rel=1e-9)
        assert round(leg.cost, 4) == 1.1667

    @pytest.mark.parametrize("kind", [VehicleKind.ICE, VehicleKind.HYBRID])
    def test_total_equals_base_exactly(self, flat_ten_mile_route, all_75, kind: VehicleKind) -> None:
        """No climb and no drop: total == base for every drivetrain."""
        vehicle = Vehicle(id="v", name="v", type=kind, base_mpg_75=25, mass_kg=2000)
        leg = compute_one_way_fuel_gallons(flat_ten_mile_route, [10.0, 10.0], vehicle, 3.0, all_75)

        assert leg.total_gallons == leg.base_gallons
        assert leg.climb_gallons == 0.0
        assert leg.regen_gallons == 0.0
        assert leg.grade_gallons == 0.0


class TestHillRoute:
    """100m climb then 100m drop."""

    def test_ice_climb_penalty(self, hill_route, ice_vehicle, all_75) -> None:
        """ICE: climb = 1650 * g * 100 / 121e6 / 0.27 ~ 0.0495 gal, no regen."""
        leg = compute_one_way_fuel_gallons(hill_route, HILL_PROFILE, ice_vehicle, 3.50, all_75)

        expected_climb = 1650 * G * 100 / J_PER_GAL / 0.27
        assert leg.climb_gallons == pytest.approx(expected_climb, rel=1e-9)
        assert leg.climb_gallons == pytest.approx(0.0495, abs=1e-4)
        assert leg.regen_gallons == 0.0
        assert leg.total_gallons == pytest.approx(leg.base_gallons + expected_climb, rel=1e-9)
        assert leg.cost - leg.base_gallons * 3.50 == pytest.approx(expected_climb * 3.50, rel=1e-6)

    def test_hybrid_adds_less_than_ice(self, hill_route, ice_vehicle, hybrid_vehicle, all_75) -> None:
        """Same mass and mpg: hybrid's net grade cost is strictly lower."""
        ice = compute_one_way_fuel_gallons(hill_route, HILL_PROFILE, ice_vehicle, 3.50, all_75)
        hybrid = compute_one_way_fuel_gallons(hill_route, HILL_PROFILE, hybrid_vehicle, 3.50, all_75)

        assert hybrid.regen_gallons > 0
        assert hybrid.grade_gallons < ice.grade_gallons
        assert hybrid.cost < ice.cost

    def test_hybrid_regen_formula(self, hill_route, hybrid_vehicle, all_75) -> None:
        leg = compute_one_way_fuel_gallons(hill_route, HILL_PROFILE, hybrid_vehicle, 3.50, all_75)

        energy_j = 1650 * G * 100
        assert leg.climb_gallons == pytest.approx(energy_j / J_PER_GAL / 0.33, rel=1e-9)
        assert leg.regen_gallons == pytest.approx(energy_j / J_PER_GAL * 0.15 * 0.33, rel=1e-9)

    def test_total_never_below_base(self, hill_route, hybrid_vehicle, all_75) -> None:
        """Pure descent with a hybrid: regen exceeds climb, grade clamps at 0."""
        leg = compute_one_way_fuel_gallons(hill_route, [900.0, 500.0, 100.0], hybrid_vehicle, 3.50, all_75)

        assert leg.regen_gallons > leg.climb_gallons
        assert leg.total_gallons == leg.base_gallons

    def test_reverse_swaps_uphill_direction(self, hill_route, hybrid_vehicle, all_75) -> None:
        """A net climb outbound becomes a net descent on the way back."""
        profile = [100.0, 150.0, 250.0]
        out = compute_one_way_fuel_gallons(hill_route, profile, hybrid_vehicle, 3.50, all_75)
        back_path, back_profile = reverse_leg(hill_route, profile)
        back = compute_one_way_fuel_gallons(back_path, back_profile, hybrid_vehicle, 3.50, all_75)

        assert out.regen_gallons == 0.0
        assert back.climb_gallons == 0.0
        # Energy lifted outbound is the energy available for regen on return
        assert back.regen_gallons == pytest.approx(out.climb_gallons * 0.15 * 0.33 * 0.33, rel=1e-9)
        assert back.distance_miles == pytest.approx(out.distance_miles, rel=1e-12)


class TestPreconditions:
    """Input checks at the model boundary."""

    def test_profile_length_mismatch_raises(self, flat_ten_mile_route, ice_vehicle, all_75) -> None:
        with pytest.raises(ProfileMismatchError) as exc_info:
            compute_one_way_fuel_gallons(flat_ten_mile_route, [1.0], ice_vehicle, 3.50, all_75)
        assert exc_info.value.path_len == 2
        assert exc_info.value.profile_len == 1

    def test_zero_speed_shares_raise_validation_error(self, flat_ten_mile_route, ice_vehicle) -> None:
        """Blended MPG of 0 would divide by zero."""
        with pytest.raises(ValidationError, match="Blended MPG must be positive"):
            compute_one_way_fuel_gallons(
                flat_ten_mile_route, [0.0, 0.0], ice_vehicle, 3.50, SpeedShares(s65=0, s70=0, s75=0)
            )

    def test_missing_sample_reuses_previous(self, hill_route, ice_vehicle, all_75) -> None:
        """A None sample is treated as no elevation change for that segment."""
        leg = compute_one_way_fuel_gallons(hill_route, [100.0, None, 100.0], ice_vehicle, 3.50, all_75)
        assert leg.climb_gallons == 0.0

    def test_single_point_path_is_free(self, ice_vehicle, all_75) -> None:
        leg = compute_one_way_fuel_gallons([(0.0, 0.0)], [50.0], ice_vehicle, 3.50, all_75)
        assert leg.distance_miles == 0.0
        assert leg.total_gallons == 0.0
        assert leg.cost == 0.0


class TestReverseLeg:
    """reverse_leg - return trip as new lists."""

    def test_reverses_both_lists(self) -> None:
        path = [(0.0, 0.0), (1.0, 0.0), (2.0, 0.0)]
        profile = [1.0, 2.0, 3.0]
        back_path, back_profile = reverse_leg(path, profile)
        assert back_path == [(2.0, 0.0), (1.0, 0.0), (0.0, 0.0)]
        assert back_profile == [3.0, 2.0, 1.0]

    def test_does_not_mutate_or_alias_inputs(self) -> None:
        path = [(0.0, 0.0), (1.0, 0.0)]
        profile = [1.0, 2.0]
        back_path, back_profile = reverse_leg(path, profile)

        back_path.append((9.0, 9.0))
        back_profile.append(9.0)
        assert path == [(0.0, 0.0), (1.0, 0.0)]
        assert profile == [1.0, 2.0]

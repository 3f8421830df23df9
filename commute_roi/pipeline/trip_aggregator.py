"""Trip aggregator - the route-to-cost pipeline behind compute_trip.

Runs one request end to end:
1. Validate input and resolve both vehicles (no network yet)
2. Geocode home and work
3. Route between them and densify the path
4. Sample elevation once along the outbound path
5. Run the fuel model for both vehicles, outbound and (reversed) return
6. Apply the winter multiplier and roll up weekly/yearly/ROI figures

Failures are raised as TripError subclasses and never retried here;
retrying and provider fallback live inside the elevation sampler.
"""

import logging
from typing import Optional

import httpx

from commute_roi.constants import GeoConfig, HttpConfig
from commute_roi.core.elevation_cache import ElevationCache
from commute_roi.core.elevation_service import ElevationApiIoProvider, ElevationSampler, OpenElevationProvider
from commute_roi.core.energy_model import compute_one_way_fuel_gallons, reverse_leg
from commute_roi.core.geo_calculator import GeoCalculator, LonLat
from commute_roi.model.errors import TripError, UpstreamFailure, UpstreamNotFound, VehicleNotFoundError
from commute_roi.model.trip import ElevationSummary, FuelLegResult, TripInput, TripResult
from commute_roi.model.vehicle import SpeedShares, Vehicle
from commute_roi.pipeline.trip_state_machine import TripContext, TripLoggingListener, TripStateMachine
from commute_roi.pipeline.validators import validate_trip_input
from commute_roi.services.openrouteservice import ORSGeocoder, ORSRouter
from commute_roi.services.protocols import Geocoder, Router, VehicleCatalog
from commute_roi.services.vehicle_catalog import DefaultVehicleCatalog

logger = logging.getLogger(__name__)


def roll_up(
    rt_cost_cur: float,
    rt_cost_new: float,
    days_per_week: float,
    weeks_per_year: float,
    upgrade_cost: float,
) -> dict[str, float | None]:
    """Weekly, yearly, savings, ROI and payback from two round-trip costs.

    ROI is None unless upgrade_cost > 0. Payback is None unless both
    upgrade_cost > 0 and savings > 0: an upgrade that costs more to run
    never pays back.
    """
    weekly_cur = rt_cost_cur * days_per_week
    weekly_new = rt_cost_new * days_per_week
    yearly_cur = weekly_cur * weeks_per_year
    yearly_new = weekly_new * weeks_per_year
    savings = yearly_cur - yearly_new

    return {
        "weekly_cur": weekly_cur,
        "weekly_new": weekly_new,
        "yearly_cur": yearly_cur,
        "yearly_new": yearly_new,
        "savings": savings,
        "roi": savings / upgrade_cost if upgrade_cost > 0 else None,
        "payback_years": upgrade_cost / savings if upgrade_cost > 0 and savings > 0 else None,
    }


def compute_legs(
    path: list[LonLat],
    profile: list[float],
    current: Vehicle,
    candidate: Vehicle,
    gas_price: float,
    speed_shares: SpeedShares,
) -> dict[str, FuelLegResult]:
    """Outbound and return legs for both vehicles over one sampled path."""
    back_path, back_profile = reverse_leg(path, profile)
    legs = {}
    for suffix, vehicle in (("cur", current), ("new", candidate)):
        legs[f"out_{suffix}"] = compute_one_way_fuel_gallons(path, profile, vehicle, gas_price, speed_shares)
        legs[f"back_{suffix}"] = compute_one_way_fuel_gallons(back_path, back_profile, vehicle, gas_price, speed_shares)
    return legs


class TripAggregator:
    """Orchestrates geocoding, routing, elevation and the fuel model.

    Collaborators are injected so tests can run the full pipeline offline.

    Example:
        async with httpx.AsyncClient() as client:
            aggregator = TripAggregator.create(client=client)
            result = await aggregator.compute_trip(trip)
    """

    def __init__(
        self,
        geocoder: Geocoder,
        router: Router,
        sampler: ElevationSampler,
        catalog: Optional[VehicleCatalog] = None,
        densify_step_m: float = GeoConfig.DENSIFY_STEP_M,
    ) -> None:
        """Initialize with external collaborators.

        Args:
            geocoder: Address to coordinate lookup
            router: Directions provider
            sampler: Elevation sampler (owns cache, retry and fallback policy)
            catalog: Vehicle catalog used when the request has no vehicle list
            densify_step_m: Max spacing of elevation samples along the route
        """
        self.geocoder = geocoder
        self.router = router
        self.sampler = sampler
        self.catalog = catalog or DefaultVehicleCatalog()
        self.densify_step_m = densify_step_m

    @classmethod
    def create(
        cls,
        client: Optional[httpx.AsyncClient] = None,
        cache: Optional[ElevationCache] = None,
        catalog: Optional[VehicleCatalog] = None,
    ) -> "TripAggregator":
        """Factory wiring the production OpenRouteService and elevation clients."""
        sampler = ElevationSampler(
            primary=OpenElevationProvider(client=client),
            fallback=ElevationApiIoProvider(client=client),
            cache=cache,
        )
        return cls(
            geocoder=ORSGeocoder(client=client),
            router=ORSRouter(client=client),
            sampler=sampler,
            catalog=catalog,
        )

    def resolve_vehicles(self, trip: TripInput) -> tuple[Vehicle, Vehicle]:
        """Look up both vehicles in the request's list or the catalog.

        Raises:
            VehicleNotFoundError: If either id is unknown.
        """
        catalog = DefaultVehicleCatalog(trip.vehicles) if trip.vehicles else self.catalog
        current = catalog.resolve(trip.current_vehicle_id)
        if current is None:
            raise VehicleNotFoundError(trip.current_vehicle_id)
        candidate = catalog.resolve(trip.new_vehicle_id)
        if candidate is None:
            raise VehicleNotFoundError(trip.new_vehicle_id)
        return current, candidate

    async def compute_trip(self, trip: TripInput, sm: Optional[TripStateMachine] = None) -> TripResult:
        """Compare current and candidate vehicle on the commute described by trip.

        Args:
            trip: Request parameters
            sm: Optional state machine to drive (a fresh one is created if not provided)

        Returns:
            TripResult with round-trip, weekly, yearly and payback figures.

        Raises:
            ValidationError: Bad input or unknown vehicle (before any network call).
            UpstreamNotFound: An address could not be geocoded.
            UpstreamFailure: Routing or elevation providers failed.
        """
        if sm is None:
            sm = TripStateMachine(context=TripContext())
            sm.add_listener(TripLoggingListener())

        try:
            return await self._run(trip, sm)
        except TripError as e:
            logger.error(f"Trip computation failed in state {sm.current_state.name}: {e.message}")
            sm.send("fail", error=e)
            raise

    async def _run(self, trip: TripInput, sm: TripStateMachine) -> TripResult:
        error = validate_trip_input(trip)
        if error is not None:
            raise error

        current, candidate = self.resolve_vehicles(trip)
        sm.send("resolve_vehicles", current=current, candidate=candidate)

        logger.info("Geocoding addresses...")
        origin = await self.geocoder.geocode(trip.home)
        if origin is None:
            raise UpstreamNotFound(f"Geocoding failed: no match for home address {trip.home!r}")
        destination = await self.geocoder.geocode(trip.work)
        if destination is None:
            raise UpstreamNotFound(f"Geocoding failed: no match for work address {trip.work!r}")
        sm.send("geocode", origin=origin, destination=destination)

        route = await self.router.route(origin, destination)
        if not route:
            raise UpstreamFailure("Routing returned an empty geometry")
        sm.send("route", route=route)

        path = GeoCalculator.densify(route, step_m=self.densify_step_m)
        sm.send("densify", path=path)

        profile = await self.sampler.sample(path)
        sm.send("sample_elevation", profile=profile)

        legs = compute_legs(path, profile, current, candidate, trip.gas_price, trip.speed_shares)
        sm.send("compute_legs", legs=legs)

        winter_mult = trip.winter_multiplier
        rt_cost_cur = (legs["out_cur"].cost + legs["back_cur"].cost) * winter_mult
        rt_cost_new = (legs["out_new"].cost + legs["back_new"].cost) * winter_mult
        sm.send("apply_winter", rt_cost_cur=rt_cost_cur, rt_cost_new=rt_cost_new)

        totals = roll_up(
            rt_cost_cur=rt_cost_cur,
            rt_cost_new=rt_cost_new,
            days_per_week=trip.days_per_week,
            weeks_per_year=trip.weeks_per_year,
            upgrade_cost=trip.upgrade_cost,
        )
        result = TripResult(
            distance_miles=legs["out_cur"].distance_miles + legs["back_cur"].distance_miles,
            elevation=profile,
            rt_cost_cur=rt_cost_cur,
            rt_cost_new=rt_cost_new,
            legs=legs,
            elevation_summary=ElevationSummary.from_profile(profile),
            **totals,
        )
        sm.send("roll_up", result=result)

        logger.info(
            f"Trip computed: {result.distance_miles:.1f}mi round trip, "
            f"${result.rt_cost_cur:.2f} vs ${result.rt_cost_new:.2f}, savings ${result.savings:.0f}/yr"
        )
        return result


async def compute_trip(
    trip: TripInput,
    cache: Optional[ElevationCache] = None,
    catalog: Optional[VehicleCatalog] = None,
) -> TripResult:
    """Run one trip computation against the live services.

    Opens a single HTTP client shared by every provider for this request.
    """
    async with httpx.AsyncClient(timeout=HttpConfig.TIMEOUT_S, headers={"User-Agent": HttpConfig.USER_AGENT}) as client:
        aggregator = TripAggregator.create(client=client, cache=cache, catalog=catalog)
        return await aggregator.compute_trip(trip)

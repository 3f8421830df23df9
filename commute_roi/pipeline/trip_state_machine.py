"""State machine for one trip computation.

Uses python-statemachine to make the pipeline stages explicit:
- One state per completed stage, entered only in order
- before_* actions store each stage's output on the TripContext model
- A fail event reachable from every working state
- A listener that logs every transition

States:
    pending -> vehicles_resolved -> geocoded -> routed -> densified
            -> sampled -> legs_computed -> winter_adjusted -> done
    any working state -> failed

The machine holds no I/O. TripAggregator does the awaiting and sends one
event per finished stage, so the context always reflects how far a
request got before it finished or failed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from statemachine import State, StateMachine

if TYPE_CHECKING:
    from commute_roi.core.geo_calculator import LonLat
    from commute_roi.model.errors import TripError
    from commute_roi.model.trip import FuelLegResult, TripResult
    from commute_roi.model.vehicle import Vehicle

logger = logging.getLogger(__name__)


@dataclass
class TripContext:
    """Per-request data accumulated as the pipeline advances.

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model.
    """

    state: str | None = None

    current: Vehicle | None = None
    candidate: Vehicle | None = None
    origin: LonLat | None = None
    destination: LonLat | None = None
    raw_route: list[LonLat] = field(default_factory=list)
    path: list[LonLat] = field(default_factory=list)
    profile: list[float] = field(default_factory=list)
    legs: dict[str, FuelLegResult] = field(default_factory=dict)
    rt_cost_cur: float | None = None
    rt_cost_new: float | None = None
    result: TripResult | None = None
    error: TripError | None = None

    def __repr__(self) -> str:
        return (
            f"TripContext(state={self.state}, "
            f"route={len(self.raw_route)}pts, path={len(self.path)}pts, "
            f"profile={len(self.profile)}, legs={sorted(self.legs)})"
        )


class TripLoggingListener:
    """Listener that logs every transition of a TripStateMachine."""

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.info(f"[TRIP] {source.name} --({event})--> {target.name}")


class TripStateMachine(StateMachine):
    """Stage tracker for a single compute_trip call."""

    # ==========================================================================
    # State Definitions
    # ==========================================================================

    pending = State("Pending", initial=True)
    vehicles_resolved = State("VehiclesResolved")
    geocoded = State("Geocoded")
    routed = State("Routed")
    densified = State("Densified")
    sampled = State("Sampled")
    legs_computed = State("LegsComputed")
    winter_adjusted = State("WinterAdjusted")
    done = State("Done", final=True)
    failed = State("Failed", final=True)

    # ==========================================================================
    # Transitions
    # ==========================================================================

    resolve_vehicles = pending.to(vehicles_resolved)
    geocode = vehicles_resolved.to(geocoded)
    route = geocoded.to(routed)
    densify = routed.to(densified)
    sample_elevation = densified.to(sampled)
    compute_legs = sampled.to(legs_computed)
    apply_winter = legs_computed.to(winter_adjusted)
    roll_up = winter_adjusted.to(done)

    fail = (
        pending.to(failed)
        | vehicles_resolved.to(failed)
        | geocoded.to(failed)
        | routed.to(failed)
        | densified.to(failed)
        | sampled.to(failed)
        | legs_computed.to(failed)
        | winter_adjusted.to(failed)
    )

    def __init__(self, context: TripContext | None = None) -> None:
        super().__init__(model=context or TripContext())

    @property
    def context(self) -> TripContext:
        """Alias for model."""
        return self.model

    @property
    def is_finished(self) -> bool:
        return self.done.is_active or self.failed.is_active

    # ==========================================================================
    # Transition Actions (before_* hooks)
    # ==========================================================================

    def before_resolve_vehicles(self, current: Vehicle, candidate: Vehicle) -> None:
        self.context.current = current
        self.context.candidate = candidate

    def before_geocode(self, origin: LonLat, destination: LonLat) -> None:
        self.context.origin = origin
        self.context.destination = destination

    def before_route(self, route: list[LonLat]) -> None:
        self.context.raw_route = route

    def before_densify(self, path: list[LonLat]) -> None:
        self.context.path = path

    def before_sample_elevation(self, profile: list[float]) -> None:
        self.context.profile = profile

    def before_compute_legs(self, legs: dict[str, FuelLegResult]) -> None:
        self.context.legs = legs

    def before_apply_winter(self, rt_cost_cur: float, rt_cost_new: float) -> None:
        self.context.rt_cost_cur = rt_cost_cur
        self.context.rt_cost_new = rt_cost_new

    def before_roll_up(self, result: TripResult) -> None:
        self.context.result = result

    def before_fail(self, error: TripError) -> None:
        self.context.error = error

    def __repr__(self) -> str:
        return f"TripStateMachine(state={self.current_state.name}, model={self.context!r})"

"""Trip pipeline: validation, stage tracking and orchestration.

- validators: Input checks returning Optional[ValidationError]
- TripStateMachine: python-statemachine stage tracker for one request
- TripAggregator / compute_trip: Address pair in, TripResult out
"""

from commute_roi.pipeline.trip_aggregator import TripAggregator, compute_trip, roll_up
from commute_roi.pipeline.trip_state_machine import TripContext, TripLoggingListener, TripStateMachine
from commute_roi.pipeline.validators import validate_trip_input

__all__ = [
    "TripAggregator",
    "compute_trip",
    "roll_up",
    "TripContext",
    "TripStateMachine",
    "TripLoggingListener",
    "validate_trip_input",
]

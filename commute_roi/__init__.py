"""Commute ROI - Grade-aware fuel cost comparison for a daily commute.

Turns two addresses and two vehicles into round-trip, weekly and yearly
fuel costs, plus the return on switching vehicles:
- Geocoding and driving directions from OpenRouteService
- Elevation sampled along the densified route, cached and rate limited
- A physics fuel model that charges climbs and credits hybrid regen
- A state machine tracking each request through the pipeline

Modules:
    core: Foundation (geodesy, elevation cache/sampler, retry, fuel model)
    model: Data structures (Vehicle, TripInput, TripResult, errors)
    services: External clients (OpenRouteService, vehicle catalogs)
    pipeline: Validation, trip state machine and the aggregator

Example:
    from commute_roi.model import TripInput
    from commute_roi.pipeline import compute_trip
"""

"""Command-line entry point.

Usage:
    python -m commute_roi --home "..." --work "..." --current rav4_2017_awd --new rav4_hybrid

Prints a cost summary, or the full result as JSON with --json. On failure
prints the error payload to stderr and exits with a per-reason status.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Optional, Sequence

from commute_roi.constants import TripDefaults
from commute_roi.model.errors import ReasonCode, TripError
from commute_roi.model.trip import TripInput, TripResult
from commute_roi.model.vehicle import SpeedShares
from commute_roi.pipeline.trip_aggregator import compute_trip
from commute_roi.services.vehicle_catalog import DEFAULT_VEHICLES

logger = logging.getLogger(__name__)

EXIT_CODES = {
    ReasonCode.VALIDATION: 2,
    ReasonCode.NOT_FOUND: 3,
    ReasonCode.UPSTREAM: 4,
}


def build_parser() -> argparse.ArgumentParser:
    vehicle_ids = ", ".join(v.id for v in DEFAULT_VEHICLES)
    parser = argparse.ArgumentParser(
        prog="commute_roi",
        description="Compare commute fuel cost of your current vehicle against a candidate.",
        epilog=f"Built-in vehicles: {vehicle_ids}",
    )
    parser.add_argument("--home", required=True, help="Home address")
    parser.add_argument("--work", required=True, help="Work address")
    parser.add_argument("--current", required=True, help="Current vehicle id")
    parser.add_argument("--new", required=True, help="Candidate vehicle id")
    parser.add_argument("--gas-price", type=float, default=TripDefaults.GAS_PRICE, help="Dollars per gallon")
    parser.add_argument("--days-per-week", type=float, default=TripDefaults.DAYS_PER_WEEK)
    parser.add_argument("--weeks-per-year", type=float, default=TripDefaults.WEEKS_PER_YEAR)
    parser.add_argument("--winter-fraction", type=float, default=TripDefaults.WINTER_FRACTION)
    parser.add_argument("--winter-penalty", type=float, default=TripDefaults.WINTER_PENALTY)
    parser.add_argument(
        "--speed-shares",
        type=float,
        nargs=3,
        metavar=("S65", "S70", "S75"),
        default=[TripDefaults.SPEED_SHARES[k] for k in ("s65", "s70", "s75")],
        help="Share of time at 65, 70 and 75 mph",
    )
    parser.add_argument("--upgrade-cost", type=float, default=TripDefaults.UPGRADE_COST)
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    return parser


def trip_from_args(args: argparse.Namespace) -> TripInput:
    s65, s70, s75 = args.speed_shares
    return TripInput(
        home=args.home,
        work=args.work,
        current_vehicle_id=args.current,
        new_vehicle_id=args.new,
        gas_price=args.gas_price,
        days_per_week=args.days_per_week,
        weeks_per_year=args.weeks_per_year,
        winter_fraction=args.winter_fraction,
        winter_penalty=args.winter_penalty,
        speed_shares=SpeedShares(s65=s65, s70=s70, s75=s75),
        upgrade_cost=args.upgrade_cost,
    )


def format_summary(result: TripResult) -> str:
    lines = [
        f"Round trip:       {result.distance_miles:.1f} mi",
        f"Round-trip cost:  ${result.rt_cost_cur:.2f} current, ${result.rt_cost_new:.2f} new",
        f"Weekly cost:      ${result.weekly_cur:.2f} current, ${result.weekly_new:.2f} new",
        f"Yearly cost:      ${result.yearly_cur:.0f} current, ${result.yearly_new:.0f} new",
        f"Yearly savings:   ${result.savings:.0f}",
    ]
    if result.elevation_summary is not None:
        s = result.elevation_summary
        lines.append(f"Elevation:        {s.min_m:.0f}-{s.max_m:.0f} m, +{s.gain_m:.0f} m / -{s.loss_m:.0f} m one way")
    if result.roi is not None:
        lines.append(f"ROI:              {result.roi:.1%} per year")
    if result.payback_years is not None:
        lines.append(f"Payback:          {result.payback_years:.1f} years")
    return "\n".join(lines)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one trip computation from command-line arguments.

    Returns:
        0 on success, otherwise the exit code for the failure's ReasonCode.
    """
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)

    try:
        result = asyncio.run(compute_trip(trip_from_args(args)))
    except TripError as e:
        logger.error(f"Trip failed ({e.reason.value}): {e.message}")
        print(json.dumps(e.to_dict()), file=sys.stderr)
        return EXIT_CODES[e.reason]

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_summary(result))
    return 0

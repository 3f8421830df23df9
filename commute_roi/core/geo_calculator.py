"""Geodesic calculations on Earth's surface.

Provides geographic helper functions for commute routes:
- Distance calculation (Haversine formula)
- Path length (sum of segment distances)
- Path densification (resampling a coarse route into short segments)

All calculations use WGS84 spherical Earth approximation (R = 6,371 km).
Coordinates are (lon, lat) tuples in decimal degrees, matching GeoJSON order.
"""

import logging
from math import atan2, cos, floor, radians, sin, sqrt

from commute_roi.constants import GeoConfig

logger = logging.getLogger(__name__)

# Earth's radius in meters (WGS84 spherical approximation)
EARTH_RADIUS_M = GeoConfig.EARTH_RADIUS_M

# (lon, lat) in decimal degrees - GeoJSON order used by routing providers
LonLat = tuple[float, float]


class GeoCalculator:
    """Static methods for geodesic calculations on Earth's surface.

    All methods use WGS84 spherical Earth model (R = 6,371 km).
    Distances are in meters.
    """

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def haversine_distance_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Calculate great-circle distance between two points using Haversine formula.

        Args:
            lat1: Latitude of first point (decimal degrees)
            lon1: Longitude of first point (decimal degrees)
            lat2: Latitude of second point (decimal degrees)
            lon2: Longitude of second point (decimal degrees)

        Returns:
            Distance in meters.
        """
        dlat = radians(lat2 - lat1)
        dlon = radians(lon2 - lon1)
        a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlon / 2) ** 2
        return EARTH_RADIUS_M * 2 * atan2(sqrt(a), sqrt(1 - a))

    @staticmethod
    def haversine(a: LonLat, b: LonLat) -> float:
        """Haversine distance between two (lon, lat) tuples in meters."""
        return GeoCalculator.haversine_distance_m(lat1=a[1], lon1=a[0], lat2=b[1], lon2=b[0])

    @staticmethod
    def path_length_m(path: list[LonLat]) -> float:
        """Total length of a path in meters (0 for fewer than 2 points)."""
        return sum(GeoCalculator.haversine(path[i - 1], path[i]) for i in range(1, len(path)))

    @staticmethod
    def densify(path: list[LonLat], step_m: float = GeoConfig.DENSIFY_STEP_M) -> list[LonLat]:
        """Insert intermediate points so no segment is longer than step_m.

        Each segment longer than step_m gets floor(d / step_m) points placed at
        multiples of step_m from its start, followed by the original end vertex.
        Every original vertex is kept in order.

        Points are interpolated linearly in (lon, lat) space rather than along
        the great circle. At highway step sizes the distance error is negligible,
        but the result is not geodesically exact.

        Args:
            path: Route vertices as (lon, lat) tuples
            step_m: Maximum spacing between output points in meters

        Returns:
            New list of (lon, lat) tuples. Paths with fewer than 2 points are
            returned as an unchanged copy.

        Raises:
            ValueError: If step_m is not positive.
        """
        if step_m <= 0:
            raise ValueError(f"step_m must be positive, got {step_m}")
        if len(path) < 2:
            return list(path)

        out: list[LonLat] = [path[0]]
        for i in range(1, len(path)):
            a = path[i - 1]
            b = path[i]
            dist = GeoCalculator.haversine(a, b)

            if dist <= step_m:
                out.append(b)
                continue

            n = floor(dist / step_m)
            for k in range(1, n + 1):
                t = (k * step_m) / dist
                out.append((a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t))
            out.append(b)

        logger.info(f"Densified {len(path)} route points to {len(out)} with {step_m:.0f}m step")
        return out

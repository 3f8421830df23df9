"""Configuration constants for Commute ROI.

All configurable parameters are centralized here for easy tuning.

Classes:
    GeoConfig: Earth model and path densification
    HttpConfig: Shared HTTP client settings
    ElevationConfig: Elevation providers, caching, batching and retry
    EnergyConfig: Physical constants and drivetrain efficiencies
    RoutingConfig: OpenRouteService geocoding and directions
    VehicleConfig: Vehicle catalog sources and EPA conversion
    TripDefaults: Default commute parameters
"""

import os


class GeoConfig:
    """Earth model and path densification parameters."""

    # WGS84 spherical approximation
    EARTH_RADIUS_M = 6_371_000
    METERS_PER_MILE = 1609.344

    # Max spacing between densified route points (meters)
    # 200m keeps a 20 mile commute around 160 elevation lookups
    DENSIFY_STEP_M = 200.0


class HttpConfig:
    """Shared HTTP client settings."""

    TIMEOUT_S = 30.0
    USER_AGENT = "commute-roi/0.1"


class ElevationConfig:
    """Elevation provider endpoints, caching, batching and retry policy."""

    # Free but rate-limited providers
    PRIMARY_URL = "https://api.open-elevation.com/api/v1/lookup"
    FALLBACK_URL = "https://elevation-api.io/api/elevation"

    # Cache key precision: 4 decimals ~ 11m grid
    CACHE_DECIMALS = 4

    # Points per provider request
    CHUNK_SIZE = 50
    # Pause between chunks to stay under provider rate limits
    INTER_CHUNK_DELAY_S = 2.0

    # Retry: wait BACKOFF_BASE_S ** attempt after 429 or transport failure (2s, 4s); none after the last
    MAX_ATTEMPTS = 3
    BACKOFF_BASE_S = 2.0
    RETRY_STATUS_CODES = (429,)


class EnergyConfig:
    """Physical constants and drivetrain efficiencies for the fuel model."""

    GRAVITY_M_S2 = 9.80665
    # ~121 MJ per gallon of gasoline
    JOULES_PER_GALLON_GASOLINE = 121e6

    # MPG multiplier relative to the 75 mph baseline
    SPEED_FACTORS = {
        "s65": 1.15,
        "s70": 1.08,
        "s75": 1.00,
    }

    # Fraction of fuel energy turned into useful work
    ENGINE_EFFICIENCY = {
        "ice": 0.27,
        "hybrid": 0.33,
    }
    # Fraction of descent energy recovered by regenerative braking
    REGEN_EFFICIENCY = {
        "ice": 0.0,
        "hybrid": 0.15,
    }
    assert set(ENGINE_EFFICIENCY.keys()) == set(REGEN_EFFICIENCY.keys())


assert all(0 < eff <= 1 for eff in EnergyConfig.ENGINE_EFFICIENCY.values()), "Engine efficiency must be in (0, 1]"
assert all(0 <= eff <= 1 for eff in EnergyConfig.REGEN_EFFICIENCY.values()), "Regen efficiency must be in [0, 1]"


class RoutingConfig:
    """OpenRouteService geocoding and directions.

    Set ORS_API_KEY in the environment before running against the live service.
    """

    ORS_API_KEY = os.getenv("ORS_API_KEY", "")
    GEOCODE_URL = "https://api.openrouteservice.org/geocode/search"
    DIRECTIONS_URL = "https://api.openrouteservice.org/v2/directions/driving-car/geojson"
    PREFERENCE = "fastest"


class VehicleConfig:
    """Vehicle catalog sources and EPA-to-highway-speed conversion."""

    EPA_MENU_URL = "https://www.fueleconomy.gov/ws/rest/vehicle/menu/options"
    EPA_VEHICLE_URL = "https://www.fueleconomy.gov/ws/rest/vehicle/{vehicle_id}"
    NHTSA_MODELS_URL = "https://vpic.nhtsa.dot.gov/api/vehicles/GetModelsForMakeYear/make/{make}/modelyear/{year}"

    # EPA highway test averages ~48 mph; real 75 mph driving is 10-20% worse
    EPA_TO_75MPH_FACTOR = 0.85
    # Detail requests per lookup (each option is one extra request)
    MAX_EPA_OPTIONS = 10

    HYBRID_KEYWORDS = ("hybrid", "electric", "prime", "plug-in")

    # Curb mass estimates by EPA vehicle class, checked in order (kg)
    MASS_BY_CLASS_KG = (
        (("compact", "subcompact"), 1300),
        (("midsize",), 1600),
        (("large", "full", "sedan"), 1800),
        (("suv", "crossover", "sport utility"), 2000),
        (("truck", "pickup"), 2200),
        (("minivan", "van"), 2100),
    )
    DEFAULT_MASS_KG = 1600

    POPULAR_MAKES = (
        "BMW",
        "Ford",
        "Honda",
        "Jeep",
        "Rivian",
        "Subaru",
        "Tesla",
        "Toyota",
        "Volkswagen",
    )


class TripDefaults:
    """Default commute parameters used when the caller leaves them out."""

    GAS_PRICE = 3.50
    DAYS_PER_WEEK = 3
    WEEKS_PER_YEAR = 48
    WINTER_FRACTION = 0.25
    WINTER_PENALTY = 0.10
    SPEED_SHARES = {"s65": 0.0, "s70": 0.0, "s75": 1.0}
    UPGRADE_COST = 0.0

    MAX_DAYS_PER_WEEK = 7
    MAX_WEEKS_PER_YEAR = 53


assert abs(sum(TripDefaults.SPEED_SHARES.values()) - 1.0) < 1e-9, "Default speed shares must sum to 1"
assert set(TripDefaults.SPEED_SHARES.keys()) == set(EnergyConfig.SPEED_FACTORS.keys())

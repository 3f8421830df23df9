"""Vehicle catalog - where Vehicle records come from.

Two sources:
- DefaultVehicleCatalog: the built-in list (or a caller-supplied override list)
- EPAVehicleCatalog: live lookup against fueleconomy.gov, with model lists
  from NHTSA vPIC

EPA records carry highway MPG but no mass, so conversion estimates:
- base_mpg_75 from EPA highway MPG (15% worse than the ~48 mph test cycle)
- drivetrain kind from fuel type and model name keywords
- curb mass from the EPA vehicle class (source "estimated")

Mass estimation is the one place where a degraded-but-successful result is
designed in: an unknown class falls back to a midsize estimate.
"""

import logging
import re
from typing import Any, Iterable, Optional
from urllib.parse import quote

import httpx

from commute_roi.constants import HttpConfig, VehicleConfig
from commute_roi.model.vehicle import Vehicle, VehicleKind

logger = logging.getLogger(__name__)


DEFAULT_VEHICLES: tuple[Vehicle, ...] = (
    Vehicle(id="rav4_2017_awd", name="2017 Toyota RAV4 XLE (non-hybrid AWD)", type=VehicleKind.ICE, base_mpg_75=25, mass_kg=1650),
    Vehicle(id="mav_hybrid_cons", name="Ford Maverick Hybrid (hilly - conservative)", type=VehicleKind.HYBRID, base_mpg_75=29, mass_kg=1700),
    Vehicle(id="mav_hybrid_mid", name="Ford Maverick Hybrid (hilly - mid)", type=VehicleKind.HYBRID, base_mpg_75=31, mass_kg=1700),
    Vehicle(id="mav_hybrid_flat", name="Ford Maverick Hybrid (flat baseline)", type=VehicleKind.HYBRID, base_mpg_75=33, mass_kg=1700),
    Vehicle(id="rav4_hybrid", name="Toyota RAV4 Hybrid AWD", type=VehicleKind.HYBRID, base_mpg_75=32, mass_kg=1700),
    Vehicle(id="f150_hybrid", name="Ford F-150 Hybrid PowerBoost", type=VehicleKind.HYBRID, base_mpg_75=20, mass_kg=2450),
)


# =============================================================================
# EPA CONVERSION
# =============================================================================


def convert_epa_to_base75(highway_mpg: float) -> float:
    """EPA highway MPG scaled down to a steady 75 mph, rounded to 0.1."""
    return round(highway_mpg * VehicleConfig.EPA_TO_75MPH_FACTOR, 1)


def determine_vehicle_type(fuel_type: str, model: str) -> VehicleKind:
    """Hybrid if the fuel type or model name mentions a hybrid/electric drivetrain."""
    text = f"{fuel_type} {model}".lower()
    if any(keyword in text for keyword in VehicleConfig.HYBRID_KEYWORDS):
        return VehicleKind.HYBRID
    return VehicleKind.ICE


def estimate_mass_by_class(vehicle_class: str) -> float:
    """Rough curb mass (kg) for an EPA vehicle class string."""
    class_lower = vehicle_class.lower()
    for keywords, mass_kg in VehicleConfig.MASS_BY_CLASS_KG:
        if any(keyword in class_lower for keyword in keywords):
            return mass_kg
    return VehicleConfig.DEFAULT_MASS_KG


def vehicle_from_epa(record: dict[str, Any]) -> Vehicle:
    """Convert a fueleconomy.gov vehicle record into a Vehicle.

    Raises:
        KeyError, TypeError, ValueError: If required EPA fields are missing or malformed.
    """
    year = int(record["year"])
    make = str(record["make"])
    model = str(record["model"])
    trany = str(record.get("trany") or "")
    drive = str(record.get("drive") or "")

    vehicle_id = re.sub(r"[^a-z0-9_]", "_", f"epa_{year}_{make}_{model}_{record['id']}".lower())
    trans_info = trany.replace("Automatic", "Auto").split(" ")[0] if trany else "?"

    return Vehicle(
        id=vehicle_id,
        name=f"{year} {make} {model} ({trans_info}, {drive})",
        type=determine_vehicle_type(fuel_type=str(record.get("fuelType") or ""), model=model),
        base_mpg_75=convert_epa_to_base75(float(record["highway08"])),
        mass_kg=estimate_mass_by_class(str(record.get("VClass") or "")),
        year=year,
        make=make,
        model=model,
        trim=f"{trans_info}, {drive}, {record.get('cylinders')}cyl",
        city_mpg=_optional_float(record.get("city08")),
        highway_mpg=_optional_float(record.get("highway08")),
        combined_mpg=_optional_float(record.get("comb08")),
        source="estimated",
    )


def _optional_float(value: Any) -> float | None:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def _menu_items(data: Any) -> list[dict]:
    """fueleconomy.gov returns a single dict instead of a list for one option."""
    items = data.get("menuItem") if isinstance(data, dict) else None
    if items is None:
        return []
    if isinstance(items, dict):
        return [items]
    return list(items)


# =============================================================================
# CATALOGS
# =============================================================================


class DefaultVehicleCatalog:
    """Catalog backed by an in-memory vehicle list.

    Example:
        catalog = DefaultVehicleCatalog()
        rav4 = catalog.resolve("rav4_2017_awd")
    """

    def __init__(self, vehicles: Optional[Iterable[Vehicle]] = None) -> None:
        """Initialize with optional vehicle list.

        Args:
            vehicles: Vehicles to serve (DEFAULT_VEHICLES if not provided or empty)
        """
        vehicles = tuple(vehicles or ())
        self._vehicles: dict[str, Vehicle] = {v.id: v for v in (vehicles or DEFAULT_VEHICLES)}

    @property
    def vehicles(self) -> list[Vehicle]:
        return list(self._vehicles.values())

    def resolve(self, vehicle_id: str) -> Vehicle | None:
        return self._vehicles.get(vehicle_id)

    async def lookup(self, year: int, make: str, model: str) -> list[Vehicle]:
        """Vehicles whose year matches (when known) and whose name mentions make and model."""
        make_lower, model_lower = make.lower(), model.lower()
        return [
            v
            for v in self._vehicles.values()
            if make_lower in v.name.lower()
            and model_lower in v.name.lower()
            and (v.year is None or v.year == year)
        ]


class EPAVehicleCatalog:
    """Live vehicle lookup against fueleconomy.gov and NHTSA vPIC.

    Vehicles found by lookup() are remembered so resolve() can return them
    by id for the rest of the process.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        self._client = client
        self._resolved: dict[str, Vehicle] = {}

    @staticmethod
    def popular_makes() -> list[str]:
        """Curated list of manufacturers offered for lookup."""
        return list(VehicleConfig.POPULAR_MAKES)

    def resolve(self, vehicle_id: str) -> Vehicle | None:
        return self._resolved.get(vehicle_id)

    async def lookup(self, year: int, make: str, model: str) -> list[Vehicle]:
        """EPA vehicle options for year/make/model (first MAX_EPA_OPTIONS only).

        Options whose detail request fails are logged and skipped; a failing
        menu request yields an empty list.
        """
        logger.info(f"Looking up EPA vehicles: {year} {make} {model}")
        try:
            menu = await self._get_json(
                VehicleConfig.EPA_MENU_URL,
                params={"year": year, "make": make, "model": model},
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"EPA menu lookup failed for {year} {make} {model}: {e}")
            return []

        option_ids = [item.get("value") for item in _menu_items(menu)][: VehicleConfig.MAX_EPA_OPTIONS]
        vehicles: list[Vehicle] = []
        for option_id in option_ids:
            try:
                record = await self._get_json(VehicleConfig.EPA_VEHICLE_URL.format(vehicle_id=option_id))
                vehicle = vehicle_from_epa(record)
            except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping EPA vehicle {option_id}: {e}")
                continue
            self._resolved[vehicle.id] = vehicle
            vehicles.append(vehicle)

        logger.info(f"Found {len(vehicles)} EPA vehicle(s)")
        return vehicles

    async def fetch_models(self, make: str, year: int) -> list[str]:
        """Sorted distinct model names for make/year from NHTSA vPIC ([] on failure)."""
        url = VehicleConfig.NHTSA_MODELS_URL.format(make=quote(make), year=year)
        try:
            data = await self._get_json(url, params={"format": "json"})
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"NHTSA model lookup failed for {make} {year}: {e}")
            return []

        results = data.get("Results", []) if isinstance(data, dict) else []
        names = {str(r.get("Model_Name", "")).strip() for r in results if isinstance(r, dict)}
        return sorted(name for name in names if name)

    async def _get_json(self, url: str, params: Optional[dict] = None) -> Any:
        headers = {"Accept": "application/json"}
        if self._client is not None:
            response = await self._client.get(url, params=params, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=HttpConfig.TIMEOUT_S) as client:
                response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.json()

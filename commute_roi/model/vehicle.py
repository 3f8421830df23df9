"""Vehicle - Drivetrain parameters consumed by the fuel model.

A Vehicle is an immutable record created by a vehicle catalog
(built-in list or EPA lookup) and never mutated by the pipeline.

SpeedShares describes how the commute's driving time splits between
the three reference highway speeds.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from commute_roi.constants import EnergyConfig


class VehicleKind(str, Enum):
    """Drivetrain type. Only hybrids recover descent energy."""

    ICE = "ice"
    HYBRID = "hybrid"

    @property
    def engine_efficiency(self) -> float:
        return EnergyConfig.ENGINE_EFFICIENCY[self.value]

    @property
    def regen_efficiency(self) -> float:
        return EnergyConfig.REGEN_EFFICIENCY[self.value]


@dataclass(frozen=True)
class SpeedShares:
    """Share of driving time spent at 65, 70 and 75 mph.

    The fuel model assumes the shares sum to 1.0 but does not check it.

    Attributes:
        s65: Fraction of time at 65 mph
        s70: Fraction of time at 70 mph
        s75: Fraction of time at 75 mph
    """

    s65: float = 0.0
    s70: float = 0.0
    s75: float = 1.0

    @property
    def total(self) -> float:
        return self.s65 + self.s70 + self.s75

    def mpg_multiplier(self) -> float:
        """Blend of the per-speed MPG factors weighted by time share."""
        factors = EnergyConfig.SPEED_FACTORS
        return self.s65 * factors["s65"] + self.s70 * factors["s70"] + self.s75 * factors["s75"]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpeedShares":
        return cls(
            s65=float(data.get("s65", 0.0)),
            s70=float(data.get("s70", 0.0)),
            s75=float(data.get("s75", 0.0)),
        )

    def to_dict(self) -> dict[str, float]:
        return {"s65": self.s65, "s70": self.s70, "s75": self.s75}


@dataclass(frozen=True)
class Vehicle:
    """A vehicle as seen by the fuel model.

    Attributes:
        id: Catalog identifier
        name: Display name
        type: Drivetrain kind (ice or hybrid)
        base_mpg_75: Fuel economy at a steady 75 mph
        mass_kg: Curb mass in kilograms
        year, make, model, trim: Descriptive metadata (EPA lookups)
        city_mpg, highway_mpg, combined_mpg: EPA ratings when known
        source: "manual", "epa" or "estimated" (mass guessed from class)

    Example:
        rav4 = Vehicle(id="rav4", name="Toyota RAV4", type=VehicleKind.ICE, base_mpg_75=25, mass_kg=1650)
    """

    id: str
    name: str
    type: VehicleKind
    base_mpg_75: float
    mass_kg: float
    year: int | None = None
    make: str | None = None
    model: str | None = None
    trim: str | None = None
    city_mpg: float | None = None
    highway_mpg: float | None = None
    combined_mpg: float | None = None
    source: str = field(default="manual")

    @property
    def is_hybrid(self) -> bool:
        return self.type is VehicleKind.HYBRID

    def with_mass(self, mass_kg: float, source: str) -> "Vehicle":
        """Return a copy with a different mass (the original is left untouched)."""
        return replace(self, mass_kg=mass_kg, source=source)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Vehicle":
        """Build from a JSON record in either snake_case or the web API's camelCase."""
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", data["id"])),
            type=VehicleKind(data["type"]),
            base_mpg_75=float(data.get("base_mpg_75", data.get("baseMpg75"))),
            mass_kg=float(data.get("mass_kg", data.get("massKg"))),
            year=data.get("year"),
            make=data.get("make"),
            model=data.get("model"),
            trim=data.get("trim"),
            city_mpg=data.get("city_mpg", data.get("cityMpg")),
            highway_mpg=data.get("highway_mpg", data.get("highwayMpg")),
            combined_mpg=data.get("combined_mpg", data.get("combinedMpg")),
            source=data.get("source", "manual"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "baseMpg75": self.base_mpg_75,
            "massKg": self.mass_kg,
            "year": self.year,
            "make": self.make,
            "model": self.model,
            "trim": self.trim,
            "cityMpg": self.city_mpg,
            "highwayMpg": self.highway_mpg,
            "combinedMpg": self.combined_mpg,
            "source": self.source,
        }

    def __repr__(self) -> str:
        return f"Vehicle(id={self.id}, type={self.type.value}, mpg75={self.base_mpg_75}, mass={self.mass_kg:.0f}kg)"

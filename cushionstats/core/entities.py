"""Shared dataclasses that represent the cushion analysis world."""

from __future__ import annotations

import math
from dataclasses import dataclass
from types import MappingProxyType
from collections.abc import Iterator, Mapping
from typing import NamedTuple

from cushionstats.exceptions import ConfigurationError, InvalidGeometry

OVERLAY_FOAM = "VF"
DENSITY_BOUNDS = ("structural_density_min", "structural_density_max")


@dataclass(frozen=True)
class CushionGeometry:
    """Raw geometry and mass of one physical cushion (mm and grams)."""

    cushion_id: str
    foam: str
    length: float
    width: float
    vf_thickness: float
    sag_height: float
    sag_width: float
    mass: float
    thickness_probes: tuple[float | None, ...] = ()

    def __post_init__(self) -> None:
        for name in ("length", "width", "vf_thickness", "sag_height", "sag_width"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise InvalidGeometry(
                    f"Cushion '{self.cushion_id}': {name} must be a finite value >= 0, got {value}"
                )
        if not math.isfinite(self.mass) or self.mass <= 0:
            raise InvalidGeometry(
                f"Cushion '{self.cushion_id}': mass must be > 0, got {self.mass}"
            )
        for probe in self.thickness_probes:
            if probe is not None and not math.isnan(probe) and probe < 0:
                raise InvalidGeometry(
                    f"Cushion '{self.cushion_id}': thickness probes must be >= 0, got {probe}"
                )

    @property
    def present_probes(self) -> tuple[float, ...]:
        return tuple(
            p for p in self.thickness_probes if p is not None and not math.isnan(p)
        )


@dataclass(frozen=True)
class FoamDensityRange:
    """Nominal density range of a foam grade in kg/m³."""

    foam: str
    min_density: float
    max_density: float

    def __post_init__(self) -> None:
        if not (0 < self.min_density < self.max_density):
            raise ConfigurationError(
                f"Foam '{self.foam}': expected 0 < min < max, got "
                f"min={self.min_density}, max={self.max_density}"
            )


class FoamSpec(Mapping[str, FoamDensityRange]):
    """Read-only foam label -> density range table."""

    def __init__(self, ranges: Mapping[str, FoamDensityRange] | None = None) -> None:
        self._ranges = MappingProxyType(dict(ranges or {}))

    @classmethod
    def from_rows(cls, rows: list[tuple[str, float, float]]) -> "FoamSpec":
        ranges: dict[str, FoamDensityRange] = {}
        for foam, low, high in rows:
            if foam in ranges:
                raise ConfigurationError(f"Foam '{foam}' listed twice in foam spec")
            ranges[foam] = FoamDensityRange(foam, float(low), float(high))
        return cls(ranges)

    def range_for(self, foam: str) -> FoamDensityRange:
        try:
            return self._ranges[foam]
        except KeyError:
            raise ConfigurationError(
                f"Foam '{foam}' is not in the foam spec. Known foams: "
                f"{', '.join(sorted(self._ranges))}"
            ) from None

    def __getitem__(self, foam: str) -> FoamDensityRange:
        return self._ranges[foam]

    def __iter__(self) -> Iterator[str]:
        return iter(self._ranges)

    def __len__(self) -> int:
        return len(self._ranges)

    def __repr__(self) -> str:
        return f"FoamSpec({dict(self._ranges)!r})"


# Manufacturer specification, kg/m³
DEFAULT_FOAM_SPEC = FoamSpec.from_rows(
    [
        (OVERLAY_FOAM, 58.0, 62.0),
        ("EN40-230", 39.0, 42.0),
        ("EN50-250", 49.0, 53.5),
    ]
)


@dataclass(frozen=True)
class DensityEstimate:
    """Estimated density interval of the structural foam in one cushion.

    Volumes are in mm³, masses in grams and densities in kg/m³.
    """

    cushion_id: str
    foam: str
    mean_thickness: float
    overlay_volume: float
    cutout_volume: float
    structural_volume: float
    overlay_mass_min: float
    overlay_mass_max: float
    structural_mass_min: float
    structural_mass_max: float
    structural_density_min: float
    structural_density_max: float
    spec_density_min: float | None = None
    spec_density_max: float | None = None

    @property
    def within_spec(self) -> bool | None:
        if self.spec_density_min is None or self.spec_density_max is None:
            return None
        return (
            self.structural_density_min <= self.spec_density_max
            and self.structural_density_max >= self.spec_density_min
        )

    def density_bound(self, bound: str) -> float:
        if bound not in DENSITY_BOUNDS:
            raise ConfigurationError(
                f"Unknown density bound '{bound}'. Use structural_density_min or "
                "structural_density_max"
            )
        return getattr(self, bound)


@dataclass(frozen=True)
class Measurement:
    """One test reading in long form."""

    variable: str
    cushion_id: str
    foam: str
    level: str
    value: float


class GroupKey(NamedTuple):
    variable: str
    level: str

    def __str__(self) -> str:
        return f"{self.variable}/{self.level}"


@dataclass(frozen=True)
class Group:
    """All measurements of one (variable, level) across foam types."""

    key: GroupKey
    measurements: tuple[Measurement, ...]

    @property
    def variable(self) -> str:
        return self.key.variable

    @property
    def level(self) -> str:
        return self.key.level

    @property
    def foams(self) -> tuple[str, ...]:
        return tuple(sorted({m.foam for m in self.measurements}))

    @property
    def values(self) -> tuple[float, ...]:
        return tuple(m.value for m in self.measurements)

    def by_foam(self, foam: str) -> tuple[float, ...]:
        return tuple(m.value for m in self.measurements if m.foam == foam)

    def __len__(self) -> int:
        return len(self.measurements)


@dataclass(frozen=True)
class SummaryStat:
    """Descriptive statistics with a Student-t confidence interval.

    ``foam`` is None when the statistics pool every foam in the group.
    """

    variable: str
    level: str
    foam: str | None
    n: int
    mean: float
    median: float
    sd: float
    se: float
    ci_lower: float
    ci_upper: float
    confidence_level: float = 0.95


@dataclass(frozen=True)
class EquivalenceResult:
    """Welch TOST outcome for one (variable, level) group.

    ``difference`` is ``mean_a - mean_b``; ``ci_lower``/``ci_upper`` bound it at
    the ``1 - 2 * alpha`` level that matches the two one-sided tests.
    """

    variable: str
    level: str
    foam_a: str
    foam_b: str
    n_a: int
    n_b: int
    mean_a: float
    mean_b: float
    difference: float
    equivalence_bound: float
    t_statistic: float
    df: float
    difference_p: float
    eq_lower_p: float
    eq_upper_p: float
    is_significant_difference: bool
    is_equivalent: bool
    ci_lower: float
    ci_upper: float
    alpha: float = 0.05

    @property
    def key(self) -> GroupKey:
        return GroupKey(self.variable, self.level)

    @property
    def classification(self) -> str:
        if self.is_significant_difference and self.is_equivalent:
            return "different and equivalent"
        if self.is_significant_difference:
            return "different"
        if self.is_equivalent:
            return "equivalent"
        return "inconclusive"


@dataclass(frozen=True)
class GroupFailure:
    """Why a group could not be analysed."""

    kind: str
    message: str

    @classmethod
    def from_exception(cls, exc: Exception) -> "GroupFailure":
        return cls(kind=type(exc).__name__, message=str(exc))


@dataclass(frozen=True)
class GroupOutcome:
    """Either a result or a failure for one group key."""

    key: GroupKey
    result: EquivalenceResult | None = None
    failure: GroupFailure | None = None

    def __post_init__(self) -> None:
        if (self.result is None) == (self.failure is None):
            raise ValueError("GroupOutcome needs exactly one of result or failure")

    @property
    def ok(self) -> bool:
        return self.result is not None


@dataclass(frozen=True)
class DensityPoint:
    """A measurement paired with its cushion's density bound."""

    cushion_id: str
    foam: str
    level: str
    value: float
    density_bound: float | None


__all__ = [
    "OVERLAY_FOAM",
    "DENSITY_BOUNDS",
    "CushionGeometry",
    "FoamDensityRange",
    "FoamSpec",
    "DEFAULT_FOAM_SPEC",
    "DensityEstimate",
    "Measurement",
    "GroupKey",
    "Group",
    "SummaryStat",
    "EquivalenceResult",
    "GroupFailure",
    "GroupOutcome",
    "DensityPoint",
]

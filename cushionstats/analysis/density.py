"""Structural foam density estimation.

The structural (HR) foam layer cannot be weighed on its own. Its mass is
bounded by subtracting the overlay (VF) mass, which is itself bounded by the
overlay foam's nominal density range. Total mass is fixed, so the bounds
cross over: the lightest possible overlay leaves the most mass for the
structural layer (``structural_mass_max = mass - overlay_mass_min``) and the
heaviest overlay leaves the least.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from statistics import fmean

from cushionstats.core.entities import (
    DEFAULT_FOAM_SPEC,
    OVERLAY_FOAM,
    CushionGeometry,
    DensityEstimate,
    FoamSpec,
)
from cushionstats.exceptions import InsufficientData, InvalidGeometry, SchemaConflict

logger = logging.getLogger(__name__)

MM3_PER_M3 = 1e9
GRAMS_PER_KG = 1000.0
# g/mm³ -> kg/m³
DENSITY_SCALE = 1e6


class DensityEstimator:
    """Turn cushion geometry and mass into a structural density interval."""

    def __init__(self, foam_spec: FoamSpec = DEFAULT_FOAM_SPEC) -> None:
        self._foam_spec = foam_spec
        self._overlay = foam_spec.range_for(OVERLAY_FOAM)

    @property
    def foam_spec(self) -> FoamSpec:
        return self._foam_spec

    def estimate(self, geometry: CushionGeometry) -> DensityEstimate:
        """Estimate the structural density bounds for one cushion.

        Raises:
            InsufficientData: If the cushion has no thickness probes.
            InvalidGeometry: If the structural volume is not positive.
            ConfigurationError: If the cushion's foam has no density range.
        """
        structural_spec = self._foam_spec.range_for(geometry.foam)

        probes = geometry.present_probes
        if not probes:
            raise InsufficientData(
                f"Cushion '{geometry.cushion_id}' has no thickness probe readings"
            )
        mean_thickness = fmean(probes)

        overlay_volume = geometry.length * geometry.width * geometry.vf_thickness
        cutout_volume = geometry.sag_height * geometry.sag_width * geometry.length
        structural_volume = (
            geometry.length * geometry.width * mean_thickness
            - overlay_volume
            - cutout_volume
        )
        if structural_volume <= 0:
            raise InvalidGeometry(
                f"Cushion '{geometry.cushion_id}': structural volume is "
                f"{structural_volume:.6g} mm³; overlay and cutout exceed the cushion"
            )

        overlay_m3 = overlay_volume / MM3_PER_M3
        overlay_mass_min = overlay_m3 * self._overlay.min_density * GRAMS_PER_KG
        overlay_mass_max = overlay_m3 * self._overlay.max_density * GRAMS_PER_KG
        structural_mass_max = geometry.mass - overlay_mass_min
        structural_mass_min = geometry.mass - overlay_mass_max

        estimate = DensityEstimate(
            cushion_id=geometry.cushion_id,
            foam=geometry.foam,
            mean_thickness=mean_thickness,
            overlay_volume=overlay_volume,
            cutout_volume=cutout_volume,
            structural_volume=structural_volume,
            overlay_mass_min=overlay_mass_min,
            overlay_mass_max=overlay_mass_max,
            structural_mass_min=structural_mass_min,
            structural_mass_max=structural_mass_max,
            structural_density_min=DENSITY_SCALE * structural_mass_min / structural_volume,
            structural_density_max=DENSITY_SCALE * structural_mass_max / structural_volume,
            spec_density_min=structural_spec.min_density,
            spec_density_max=structural_spec.max_density,
        )
        if estimate.structural_mass_min <= 0:
            logger.warning(
                "Density: overlay mass bound exceeds total mass for cushion %s",
                geometry.cushion_id,
                extra={"cushion_id": geometry.cushion_id},
            )
        return estimate

    def estimate_all(
        self, geometries: Iterable[CushionGeometry]
    ) -> dict[str, DensityEstimate]:
        """Estimate every cushion, aborting on the first malformed record."""
        estimates: dict[str, DensityEstimate] = {}
        for geometry in geometries:
            if geometry.cushion_id in estimates:
                raise SchemaConflict(
                    f"Cushion '{geometry.cushion_id}' appears more than once in the geometry table"
                )
            estimates[geometry.cushion_id] = self.estimate(geometry)

        out_of_spec = [e.cushion_id for e in estimates.values() if e.within_spec is False]
        logger.info(
            "Density: estimated %s cushion(s), %s outside nominal spec",
            len(estimates),
            len(out_of_spec),
            extra={"cushions": len(estimates), "out_of_spec": out_of_spec},
        )
        return estimates


__all__ = ["DensityEstimator", "MM3_PER_M3", "DENSITY_SCALE"]

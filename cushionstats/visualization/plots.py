"""Box plots per variable and the density anomaly scatter."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from cushionstats.core.entities import DensityPoint, Measurement

from .core import _check_plotly, px

logger = logging.getLogger(__name__)


def _columns(rows: list[dict[str, object]]) -> dict[str, list[object]]:
    return {key: [row[key] for row in rows] for key in rows[0]}


def measurement_boxplot(measurements: Iterable[Measurement], variable: str):
    """Spread of one variable per foam, one panel per load level.

    Every observation is drawn on top of its box so single outliers stay
    visible.
    """
    _check_plotly()
    rows = [
        {"foam": m.foam, "level": m.level, "value": m.value, "cushion": m.cushion_id}
        for m in measurements
        if m.variable == variable
    ]
    if not rows:
        raise ValueError(f"No measurements for variable '{variable}'")
    levels = sorted({row["level"] for row in rows})
    fig = px.box(
        _columns(rows),
        x="foam",
        y="value",
        color="foam",
        facet_col="level",
        category_orders={"level": levels},
        points="all",
        hover_data=["cushion"],
        title=variable,
    )
    fig.update_yaxes(title_text=variable, col=1)
    return fig


def density_scatter(
    points: Sequence[DensityPoint],
    *,
    variable: str,
    bound: str = "structural_density_max",
):
    """Measured value against estimated structural density, labelled by cushion."""
    _check_plotly()
    rows = [
        {
            "density": p.density_bound,
            "value": p.value,
            "level": p.level,
            "cushion": p.cushion_id,
        }
        for p in points
        if p.density_bound is not None
    ]
    if not rows:
        raise ValueError("No measurements could be paired with a density estimate")
    foams = sorted({p.foam for p in points})
    fig = px.scatter(
        _columns(rows),
        x="density",
        y="value",
        color="level",
        text="cushion",
        title=f"{variable} vs {bound} ({', '.join(foams)})",
        labels={"density": f"{bound} (kg/m³)", "value": variable},
    )
    fig.update_traces(textposition="middle right")
    return fig


def _slug(name: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "_", name).strip("_") or "plot"


def write_figures(figures: dict[str, object], directory: str | Path) -> list[Path]:
    """Write each figure to ``<directory>/<name>.html``."""
    _check_plotly()
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    written = []
    for name, fig in figures.items():
        path = directory / f"{_slug(name)}.html"
        fig.write_html(str(path), include_plotlyjs="cdn")
        written.append(path)
    logger.info("Visualization: wrote %s figure(s) to %s", len(written), directory)
    return written

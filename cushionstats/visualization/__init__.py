"""Interactive plotly figures for exploring cushion measurements."""

from .core import PLOTLY_AVAILABLE
from .plots import density_scatter, measurement_boxplot, write_figures

__all__ = [
    "PLOTLY_AVAILABLE",
    "measurement_boxplot",
    "density_scatter",
    "write_figures",
]

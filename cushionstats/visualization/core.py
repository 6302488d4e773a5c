"""Core utilities for visualization."""

from __future__ import annotations

try:
    import plotly.express as px

    PLOTLY_AVAILABLE = True
except ImportError:
    PLOTLY_AVAILABLE = False
    px = None  # type: ignore


def _check_plotly() -> None:
    """Check if plotly is available."""
    if not PLOTLY_AVAILABLE:
        from cushionstats.exceptions import DependencyError

        raise DependencyError(
            "Plotly is required for cushion plots. "
            "Install with: pip install 'cushionstats[viz]'"
        )


__all__ = ["PLOTLY_AVAILABLE", "_check_plotly", "px"]

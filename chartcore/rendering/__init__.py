"""Rendering targets that satisfy the chartcore target/layer contract."""

from .plotly_target import FigureTarget, TraceLayer, ColorState

__all__ = [
    "FigureTarget",
    "TraceLayer",
    "ColorState",
]

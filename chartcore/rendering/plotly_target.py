"""
Plotly-backed rendering target for chartcore charts.

A ``FigureTarget`` wraps one ``go.Figure`` and satisfies the target side
of the chart contract: ``layer(options)`` returns a ``TraceLayer`` that
owns exactly one trace in the figure and replaces it on every draw.

Usage:
    target = FigureTarget()
    chart = LineChart(target)          # attaches layers via target.layer()
    chart.draw(df)
    target.figure.write_image("out.png")
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from ..config import get_settings

# Default colour sequence (golden-ratio HSL spacing, pre-computed hex)
_DEFAULT_COLORS = [
    "#cc6633",  # hue=0.000
    "#55cc33",  # hue=0.618
    "#3384cc",  # hue=0.236
    "#a833cc",  # hue=0.854
    "#33cc98",  # hue=0.472
    "#cc3340",  # hue=0.090
    "#33cccc",  # hue=0.708
    "#ccbe33",  # hue=0.326
]

# Explicit layout defaults
_DEFAULT_LAYOUT = dict(
    paper_bgcolor="white",
    plot_bgcolor="white",
    font_color="#2a3f5f",
)


def _downsample_minmax(x_arr, val_arr, max_points: int):
    """Downsample using min-max decimation to preserve peaks and dips.

    Splits data into buckets and keeps the min and max value from each
    bucket, preserving the visual envelope of the signal.

    Returns (x_out, val_out) as lists ready for Plotly.
    """
    n = len(val_arr)
    if n <= max_points:
        return list(x_arr), list(val_arr)

    # Each bucket contributes 2 points (min + max), so use half as many buckets
    n_buckets = max(max_points // 2, 1)
    bucket_size = n / n_buckets

    indices = []
    for i in range(n_buckets):
        start = int(i * bucket_size)
        end = min(int((i + 1) * bucket_size), n)
        if start >= end:
            continue
        chunk = val_arr[start:end]
        if not np.isfinite(chunk).any():
            indices.append(start)
            continue
        idx_min = start + int(np.nanargmin(chunk))
        idx_max = start + int(np.nanargmax(chunk))
        indices.extend(sorted((idx_min, idx_max)))

    indices = sorted(set(indices))
    return [x_arr[i] for i in indices], [val_arr[i] for i in indices]


def _to_xy(data: Any) -> tuple[list, np.ndarray]:
    """Normalise draw input to an x list and a float y array.

    Accepts a pandas Series or DataFrame (first column, index as x),
    a mapping with ``x``/``y`` keys, or a plain sequence of y values.
    """
    if isinstance(data, pd.DataFrame):
        if data.shape[1] == 0:
            return [], np.array([], dtype=float)
        data = data.iloc[:, 0]
    if isinstance(data, pd.Series):
        index = data.index
        if isinstance(index, pd.DatetimeIndex):
            x = [t.isoformat() for t in index]
        else:
            x = index.tolist()
        return x, data.to_numpy(dtype=float, na_value=np.nan)
    if isinstance(data, dict):
        y = np.asarray(data["y"], dtype=float)
        x = list(data.get("x", range(len(y))))
        if len(x) != len(y):
            raise ValueError(f"x and y lengths differ: {len(x)} != {len(y)}")
        return x, y
    if data is None:
        return [], np.array([], dtype=float)
    y = np.asarray(data, dtype=float).ravel()
    return list(range(len(y))), y


# ---------------------------------------------------------------------------
# ColorState: stable colour per layer name
# ---------------------------------------------------------------------------

class ColorState:
    """Tracks label-to-color assignments for stable coloring across draws."""

    def __init__(
        self,
        label_colors: dict[str, str] | None = None,
        color_index: int = 0,
    ):
        self.label_colors: dict[str, str] = dict(label_colors or {})
        self.color_index: int = color_index

    def next_color(self, label: str) -> str:
        """Return a stable colour for *label*, assigning a new one if unseen."""
        if label in self.label_colors:
            return self.label_colors[label]
        color = _DEFAULT_COLORS[self.color_index % len(_DEFAULT_COLORS)]
        self.color_index += 1
        self.label_colors[label] = color
        return color


# ---------------------------------------------------------------------------
# Layer
# ---------------------------------------------------------------------------

class TraceLayer:
    """A chart layer that renders into one trace of a ``FigureTarget``."""

    def __init__(
        self,
        target: FigureTarget,
        name: str,
        mode: str = "lines",
        color: str | None = None,
        max_points: int | None = None,
    ):
        self.target = target
        self.name = name
        self.mode = mode
        self.color = color or target.color_state.next_color(name)
        self.max_points = max_points or get_settings().max_display_points
        self._trace_uid: Optional[str] = None

    def _scatter_cls(self, n_points: int):
        """Return go.Scattergl for large datasets, go.Scatter otherwise."""
        threshold = get_settings().gl_threshold
        return go.Scattergl if n_points > threshold else go.Scatter

    def _trace_index(self) -> Optional[int]:
        if self._trace_uid is None:
            return None
        for i, trace in enumerate(self.target.figure.data):
            if trace.uid == self._trace_uid:
                return i
        return None

    def draw(self, data: Any) -> go.BaseTraceType:
        """Replace this layer's trace with one built from *data*."""
        x, y = _to_xy(data)
        x_disp, y_disp = _downsample_minmax(x, y, self.max_points)
        y_disp = [float(v) if np.isfinite(v) else None for v in y_disp]

        Scatter = self._scatter_cls(len(y_disp))
        props = dict(
            x=x_disp, y=y_disp,
            name=self.name,
            mode=self.mode,
            line=dict(color=self.color),
            marker=dict(color=self.color),
        )

        fig = self.target.figure
        idx = self._trace_index()
        if idx is not None and isinstance(fig.data[idx], Scatter):
            fig.data[idx].update(**props)
            return fig.data[idx]

        # New trace, or crossing the WebGL threshold: drop and re-add
        if idx is not None:
            self.clear()
        self._trace_uid = f"{self.name}-{id(self):x}"
        fig.add_trace(Scatter(uid=self._trace_uid, **props))
        return fig.data[-1]

    def clear(self) -> None:
        """Remove this layer's trace from the figure (if drawn)."""
        idx = self._trace_index()
        if idx is None:
            return
        fig = self.target.figure
        fig.data = [t for i, t in enumerate(fig.data) if i != idx]
        self._trace_uid = None


# ---------------------------------------------------------------------------
# Target
# ---------------------------------------------------------------------------

class FigureTarget:
    """Rendering target wrapping a Plotly figure."""

    def __init__(
        self,
        figure: Optional[go.Figure] = None,
        color_state: Optional[ColorState] = None,
    ):
        if figure is None:
            figure = go.Figure()
            figure.update_layout(**_DEFAULT_LAYOUT)
        self.figure = figure
        self.color_state = color_state or ColorState()
        self._layer_count = 0

    def layer(self, options: dict | None = None) -> TraceLayer:
        """Create a new ``TraceLayer`` drawing into this figure.

        Options:
            name:  Trace name (default ``layer<N>``).
            mode:  Plotly scatter mode (default ``"lines"``).
            color:  Fixed trace colour; otherwise assigned per name.
            max_points:  Decimation threshold for this layer.
        """
        options = dict(options or {})
        self._layer_count += 1
        name = options.pop("name", None) or f"layer{self._layer_count}"
        return TraceLayer(self, name, **options)

    def trace_names(self) -> list[str]:
        return [t.name for t in self.figure.data]

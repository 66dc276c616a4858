"""Composable, re-drawable charts: subclass cascades, layers, mixins and events."""

from .chart import Chart, derive, layer_owner
from .config import Settings, configure, get_settings
from .errors import (
    ChartError,
    ChartAssertionError,
    UnknownChartError,
    LayerNotFoundError,
    chart_assert,
)
from .events import EventChannel, Subscription
from .logging import setup_logging
from .protocols import Layer, Target
from .registry import ChartRegistry, get_default_registry

__all__ = [
    "Chart",
    "derive",
    "layer_owner",
    "Settings",
    "configure",
    "get_settings",
    "setup_logging",
    "ChartError",
    "ChartAssertionError",
    "UnknownChartError",
    "LayerNotFoundError",
    "chart_assert",
    "EventChannel",
    "Subscription",
    "Layer",
    "Target",
    "ChartRegistry",
    "get_default_registry",
]

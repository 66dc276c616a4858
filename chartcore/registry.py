"""
Name → chart class registry.

Chart classes created with ``derive`` (or declared with a ``chart_name``
class keyword) are registered here so that ``Chart.add_mixin`` and
``ChartRegistry.create`` can instantiate them by name alone.

Usage:
    registry = get_default_registry()
    BarChart = registry["Bar"]
    chart = registry.create("Bar", target, padding=4)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator

from .config import get_settings
from .errors import UnknownChartError
from .logging import get_logger, tagged

if TYPE_CHECKING:
    from .chart import Chart

logger = get_logger()


class ChartRegistry:
    """Registry of chart classes keyed by name. Last registration wins."""

    def __init__(self):
        self._charts: dict[str, type[Chart]] = {}

    def register(self, name: str, chart_cls: type[Chart]) -> None:
        """Register *chart_cls* under *name*, shadowing any previous class."""
        previous = self._charts.get(name)
        if previous is not None and previous is not chart_cls and get_settings().warn_on_redefine:
            logger.warning(
                f"Chart name '{name}' re-registered: {chart_cls.__qualname__} "
                f"replaces {previous.__qualname__}",
                extra=tagged("registry"),
            )
        self._charts[name] = chart_cls
        logger.debug(f"[Registry] Registered chart '{name}'", extra=tagged("registry"))

    def get(self, name: str) -> type[Chart] | None:
        return self._charts.get(name)

    def list_charts(self) -> list[str]:
        return sorted(self._charts.keys())

    def create(self, name: str, target: Any, *args, **kwargs) -> Chart:
        """Instantiate the chart registered under *name* against *target*.

        Raises:
            UnknownChartError: If nothing is registered under *name*.
        """
        return self[name](target, *args, **kwargs)

    def __getitem__(self, name: str) -> type[Chart]:
        chart_cls = self._charts.get(name)
        if chart_cls is None:
            raise UnknownChartError(f"No chart registered under '{name}'")
        return chart_cls

    def __contains__(self, name: object) -> bool:
        return name in self._charts

    def __iter__(self) -> Iterator[str]:
        return iter(self._charts)

    def __len__(self) -> int:
        return len(self._charts)


_default_registry: ChartRegistry | None = None


def get_default_registry() -> ChartRegistry:
    """Return the process-wide registry used when no registry is given."""
    global _default_registry
    if _default_registry is None:
        _default_registry = ChartRegistry()
    return _default_registry

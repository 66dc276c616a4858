"""Exception types raised by chartcore."""


class ChartError(Exception):
    """Base class for every error chartcore raises on its own account."""


class ChartAssertionError(ChartError, AssertionError):
    """A caller broke the chart/layer capability contract."""


class UnknownChartError(ChartError, KeyError):
    """No chart class is registered under the requested name."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class LayerNotFoundError(ChartError, KeyError):
    """No layer is attached under the requested name."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


def chart_assert(test, message: str) -> None:
    """Raise :class:`ChartAssertionError` with *message* unless *test* is truthy."""
    if test:
        return
    raise ChartAssertionError(f"[chartcore] {message}")

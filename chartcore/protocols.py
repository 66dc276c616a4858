"""Capability contract between charts, rendering targets and layers."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Layer(Protocol):
    """A named sub-renderer attached to a chart."""

    def draw(self, data: Any) -> Any:
        """Render *data* (already transformed by the owning chart)."""
        ...


@runtime_checkable
class Target(Protocol):
    """A rendering context a chart is bound to."""

    def layer(self, options: Any = None) -> Layer:
        """Create a new layer bound to this target."""
        ...

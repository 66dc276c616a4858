"""
Chart base class: subclassing, layers, mixins and the draw pass.

A chart is bound to one rendering target at construction. Its class
chain supplies ``initialize`` hooks (run once, base first) and
``transform`` hooks (run every draw, most-derived first). Drawing pipes
the data through the transforms, then hands the result to every layer
and every mixin.

Usage:
    Bars = derive(Chart, "Bars", {
        "initialize": lambda self, **opts: self.attach_layer("bars", self.target, opts),
        "transform": lambda self, data: sorted(data),
    })
    chart = Bars(figure_target, mode="markers")
    chart.draw([3, 1, 2])
"""

from __future__ import annotations

import types
import weakref
from types import MappingProxyType
from typing import Any, Mapping

from .cascade import init_cascade, record_own_hooks, transform_cascade
from .errors import LayerNotFoundError, chart_assert
from .events import EventChannel, _MISSING
from .logging import get_logger, tagged
from .protocols import Layer, Target
from .registry import ChartRegistry, get_default_registry

logger = get_logger()


class Chart(EventChannel):
    """Root of every chart class.

    Class attributes:
        superclass:  Parent chart class (None for ``Chart`` itself).
        registry:  Registry that ``derive`` registers into and that
                   ``add_mixin`` resolves names against.
    """

    superclass: type[Chart] | None = None
    registry: ChartRegistry = get_default_registry()
    _own_hooks: frozenset[str] = frozenset()

    def __init_subclass__(cls, chart_name: str | None = None, **kwargs):
        super().__init_subclass__(**kwargs)
        parents = [b for b in cls.__bases__ if isinstance(b, type) and issubclass(b, Chart)]
        if len(parents) != 1:
            raise TypeError(
                f"{cls.__name__} must derive from exactly one chart class, "
                f"got {[p.__name__ for p in parents]}"
            )
        cls.superclass = parents[0]
        cls._own_hooks = record_own_hooks(cls)
        if chart_name is not None:
            cls.registry.register(chart_name, cls)

    def __init__(self, target: Any, *args, **kwargs):
        EventChannel.__init__(self)
        self._target = target
        self._layers: dict[str, Layer] = {}
        self._mixins: list[Chart] = []

        init_cascade(self, args, kwargs)

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__} layers={list(self._layers)} "
            f"mixins={len(self._mixins)}>"
        )

    @property
    def target(self) -> Any:
        return self._target

    @property
    def base(self) -> Any:
        """Alias of :attr:`target`."""
        return self._target

    @property
    def layers(self) -> Mapping[str, Layer]:
        return MappingProxyType(self._layers)

    @property
    def mixins(self) -> tuple[Chart, ...]:
        return tuple(self._mixins)

    def initialize(self, *args, **kwargs) -> None:
        """Per-class setup hook. Override in a subclass; never call ``super()``."""

    @classmethod
    def extend(
        cls,
        name: str,
        instance_members: dict[str, Any] | None = None,
        static_members: dict[str, Any] | None = None,
        registry: ChartRegistry | None = None,
    ) -> type[Chart]:
        """Derive and register a subclass of this chart. See :func:`derive`."""
        return derive(cls, name, instance_members, static_members, registry)

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def get_layer(self, name: str) -> Layer | None:
        return self._layers.get(name)

    def attach_layer(self, name: str, target: Target, options: Any = None) -> Layer:
        """Create a layer with ``target.layer(options)`` and attach it under *name*.

        The layer gets a weak back-reference to this chart; read it with
        :func:`layer_owner`.
        """
        layer = target.layer(options)
        layer._chart = weakref.ref(self)
        self._layers[name] = layer
        logger.debug(f"[{type(self).__name__}] Attached layer '{name}'", extra=tagged("layer"))
        return layer

    def reattach_layer(self, name: str, layer: Layer) -> Layer:
        """Attach an existing layer object (e.g. one returned by ``detach_layer``)."""
        chart_assert(
            callable(getattr(layer, "draw", None)),
            "When reattaching a layer, the second argument must be a chart layer",
        )
        layer._chart = weakref.ref(self)
        self._layers[name] = layer
        logger.debug(f"[{type(self).__name__}] Reattached layer '{name}'", extra=tagged("layer"))
        return layer

    def detach_layer(self, name: str) -> Layer:
        """Remove the layer attached under *name* and return it, unbound but intact.

        The back-reference is only cleared while it still points at this
        chart, so a layer already reattached elsewhere keeps its new owner.

        Raises:
            LayerNotFoundError: If no layer is attached under *name*.
        """
        if name not in self._layers:
            raise LayerNotFoundError(f"No layer attached under '{name}'")
        layer = self._layers.pop(name)
        if layer_owner(layer) is self:
            del layer._chart
        logger.debug(f"[{type(self).__name__}] Detached layer '{name}'", extra=tagged("layer"))
        return layer

    def layer(self, name: str, target: Any = _MISSING, options: Any = _MISSING) -> Layer | None:
        """Get, reattach or attach a layer depending on the arguments given.

        - ``layer(name)``: same as ``get_layer(name)``
        - ``layer(name, existing_layer)``: same as ``reattach_layer``
        - ``layer(name, target, options)``: same as ``attach_layer``
        """
        if target is _MISSING:
            return self.get_layer(name)
        if options is _MISSING:
            return self.reattach_layer(name, target)
        return self.attach_layer(name, target, options)

    def unlayer(self, name: str) -> Layer:
        """Alias of :meth:`detach_layer`."""
        return self.detach_layer(name)

    # ------------------------------------------------------------------
    # Mixins
    # ------------------------------------------------------------------

    def add_mixin(self, chart_name: str, target: Any, *args, **kwargs) -> Chart:
        """Construct the chart registered as *chart_name* on *target* and embed it.

        Mixins are drawn after this chart's layers, in the order they were added.

        Raises:
            UnknownChartError: If nothing is registered under *chart_name*.
        """
        chart = self.registry[chart_name](target, *args, **kwargs)
        self._mixins.append(chart)
        logger.debug(
            f"[{type(self).__name__}] Added mixin '{chart_name}' (#{len(self._mixins)})",
            extra=tagged("mixin"),
        )
        return chart

    def mixin(self, chart_name: str, target: Any, *args, **kwargs) -> Chart:
        """Alias of :meth:`add_mixin`."""
        return self.add_mixin(chart_name, target, *args, **kwargs)

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw(self, data: Any = None) -> Any:
        """Transform *data* and draw it on every layer, then every mixin.

        Returns:
            The transformed data handed to the layers and mixins.
        """
        data = transform_cascade(self, data)

        for layer in list(self._layers.values()):
            layer.draw(data)

        for mixin in list(self._mixins):
            mixin.draw(data)

        logger.debug(
            f"[{type(self).__name__}] Drew {len(self._layers)} layer(s), "
            f"{len(self._mixins)} mixin(s)",
            extra=tagged("draw"),
        )
        return data


def derive(
    parent: type[Chart],
    name: str,
    instance_members: dict[str, Any] | None = None,
    static_members: dict[str, Any] | None = None,
    registry: ChartRegistry | None = None,
) -> type[Chart]:
    """Create a chart class named *name* whose single parent is *parent*.

    Args:
        parent: Chart class to inherit from.
        name: Class name; also the name the class is registered under.
        instance_members: Methods and attributes for instances. A
            ``constructor`` (or ``__init__``) entry replaces the inherited
            constructor; it must call ``parent.__init__(self, target, ...)``
            itself. Without one, all arguments pass through to the parent.
        static_members: Class-level members overlaid on the parent's.
            Plain functions are stored as static methods.
        registry: Registry to register in (and to resolve this class's
            mixins from). Defaults to ``parent.registry``.

    Returns:
        The new chart class, already registered under *name*.
    """
    namespace: dict[str, Any] = {"__module__": parent.__module__}
    for key, value in (instance_members or {}).items():
        namespace["__init__" if key == "constructor" else key] = value
    for key, value in (static_members or {}).items():
        if isinstance(value, types.FunctionType):
            value = staticmethod(value)
        namespace[key] = value
    if registry is not None:
        namespace["registry"] = registry

    child = type(parent)(name, (parent,), namespace)
    child.registry.register(name, child)
    return child


def layer_owner(layer: Any) -> Chart | None:
    """Return the chart *layer* is attached to, or None.

    None also covers a detached layer and one whose chart was collected.
    """
    ref = getattr(layer, "_chart", None)
    return ref() if ref is not None else None

"""
Initialization and transform cascades over a chart class's ancestor chain.

Each chart class records, when it is created, which cascade hooks it
defines itself (``_own_hooks``). The cascades walk the explicit
``superclass`` links and call a hook only at the levels that define it,
so an inherited hook never runs twice.

    initialize:  root → most-derived, once per defining level
    transform:   instance → most-derived → root, output piped into input
"""

from __future__ import annotations

from typing import Any, Callable

HOOKS = ("initialize", "transform")


def record_own_hooks(chart_cls: type) -> frozenset[str]:
    """Return the cascade hooks defined directly in *chart_cls*'s body."""
    namespace = vars(chart_cls)
    return frozenset(h for h in HOOKS if namespace.get(h) is not None)


def ancestors(chart_cls: type) -> list[type]:
    """Return *chart_cls* followed by its superclasses, most-derived first."""
    chain = []
    cls = chart_cls
    while cls is not None:
        chain.append(cls)
        cls = cls.superclass
    return chain


def own_hook(chart_cls: type, hook: str, instance: Any) -> Callable[..., Any] | None:
    """Return *chart_cls*'s own *hook* bound to *instance*, or None if not defined at that level."""
    if hook not in vars(chart_cls).get("_own_hooks", ()):
        return None
    # __get__ honours staticmethod/classmethod as well as plain functions
    return vars(chart_cls)[hook].__get__(instance, chart_cls)


def init_cascade(instance: Any, args: tuple = (), kwargs: dict | None = None) -> None:
    """Run every own ``initialize`` on *instance*, base class first."""
    kwargs = kwargs or {}
    for cls in reversed(ancestors(type(instance))):
        initialize = own_hook(cls, "initialize", instance)
        if initialize is not None:
            initialize(*args, **kwargs)


def transform_cascade(instance: Any, data: Any) -> Any:
    """Pipe *data* through every own ``transform``, most-derived first.

    A ``transform`` assigned on the instance itself runs before any
    class-level transform.
    """
    instance_transform = vars(instance).get("transform")
    if instance_transform is not None:
        data = instance_transform(data)

    for cls in ancestors(type(instance)):
        transform = own_hook(cls, "transform", instance)
        if transform is not None:
            data = transform(data)
    return data

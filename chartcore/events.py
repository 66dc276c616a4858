"""
Per-instance named-event channel.

Every chart owns one channel (``Chart`` inherits from ``EventChannel``).
Subscriptions live in one ordered bucket per event name and fire in
subscription order.

Usage:
    chart.on("brush", on_brush).once("ready", on_ready)
    chart.trigger("brush", (0, 10))
    chart.off("brush", context=panel)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable


# Distinguishes ``off(name)`` from ``off(name, None, None)``
_MISSING: Any = object()


@dataclass(eq=False)
class Subscription:
    """One subscribed callback.

    Attributes:
        callback:  Callable invoked with the trigger arguments.
        context:  Grouping key used by ``off(..., context=...)``.
                  Defaults to the channel itself.
        chart:  The channel that created this subscription.
    """

    callback: Callable[..., Any]
    context: Any
    chart: Any


class EventChannel:
    """Named-event registry with subscribe/unsubscribe/emit."""

    def __init__(self) -> None:
        self._events: dict[str, list[Subscription]] = {}

    def on(self, name: str, callback: Callable[..., Any], context: Any = None) -> EventChannel:
        """Subscribe *callback* to *name*. Returns self for chaining.

        *context* is only a grouping key for ``off(context=...)``; it is
        not passed to *callback*. Bind it yourself (a method or
        ``functools.partial``) when the callback needs it.
        """
        bucket = self._events.setdefault(name, [])
        bucket.append(Subscription(
            callback=callback,
            context=context if context is not None else self,
            chart=self,
        ))
        return self

    def once(self, name: str, callback: Callable[..., Any], context: Any = None) -> EventChannel:
        """Subscribe *callback* to fire on the next ``trigger(name)`` only."""

        def _once(*args, **kwargs):
            self.off(name, _once)
            return callback(*args, **kwargs)

        return self.on(name, _once, context)

    def off(self, name: Any = _MISSING, callback: Any = _MISSING, context: Any = _MISSING) -> EventChannel:
        """Remove subscriptions.

        - ``off()``: empty every bucket.
        - ``off(name)``: empty the bucket for *name*.
        - ``off(name, callback, context)``: remove every subscription whose
          callback equals *callback* OR whose context is *context*, in the
          bucket for *name*, or in every bucket when *name* is falsy.
        """
        if name is _MISSING:
            for bucket in self._events.values():
                bucket.clear()
            return self

        if callback is _MISSING and context is _MISSING:
            bucket = self._events.get(name)
            if bucket is not None:
                bucket.clear()
            return self

        callback = None if callback is _MISSING else callback
        context = None if context is _MISSING else context

        names = [name] if name else list(self._events)
        for n in names:
            bucket = self._events.get(n)
            if not bucket:
                continue
            # In-place so a dispatch loop holding this list sees the removal
            bucket[:] = [
                sub for sub in bucket
                if not (
                    (callback is not None and sub.callback == callback)
                    or (context is not None and sub.context is context)
                )
            ]
        return self

    def trigger(self, name: str, *args, **kwargs) -> EventChannel:
        """Invoke every callback subscribed to *name* with the given arguments.

        Callbacks receive exactly the trigger arguments, never the
        subscription context. No-op when nothing was ever subscribed to
        *name*. Exceptions raised
        by callbacks propagate and abort the rest of the dispatch.
        """
        bucket = self._events.get(name)
        if bucket is None:
            return self

        for sub in list(bucket):
            # Unsubscribed by an earlier callback in this same dispatch
            if sub not in bucket:
                continue
            sub.callback(*args, **kwargs)
        return self

    def listeners(self, name: str) -> list[Callable[..., Any]]:
        """Return the callbacks currently subscribed to *name*, in firing order."""
        return [sub.callback for sub in self._events.get(name, ())]

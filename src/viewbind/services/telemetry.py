"""Timing spans for one page load.

Disabled by default; a disabled call costs one ContextVar lookup. With
``--verbose`` every page load produces a span tree rooted at
``page.render`` (children ``fetch`` and ``Binder.render``) that ends up in
``RenderResult.meta["telemetry"]`` and is printed by the renderer.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from viewbind.services.result import RenderResult

_verbose_enabled: ContextVar[bool] = ContextVar("_verbose_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)


@dataclass
class Span:
    """One timed step; children are the steps it contained."""

    name: str
    parent: Span | None = field(default=None, repr=False)
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def child(self, name: str) -> Span:
        span = Span(name=name, parent=self)
        self.children.append(span)
        return span

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            data["annotations"] = dict(self.annotations)
        if self.children:
            data["children"] = [c.to_dict() for c in self.children]
        return data


def _log_span(span: Span, *, ok: bool) -> None:
    structlog.get_logger("viewbind.telemetry").debug(
        "span.complete",
        span_name=span.name,
        duration_ms=round(span.duration_ms, 2),
        ok=ok,
        children=len(span.children),
    )


@contextmanager
def _activate(span: Span) -> Generator[Span]:
    """Make *span* current for the block, then close and log it."""
    token = _current_span.set(span)
    ok = False
    try:
        yield span
        ok = True
    finally:
        span.end()
        _current_span.reset(token)
        _log_span(span, ok=ok)


@contextmanager
def root_span(name: str) -> Generator[Span | None]:
    """Open the top-level span of a page load; yields None when disabled."""
    if not _verbose_enabled.get():
        yield None
        return
    with _activate(Span(name=name)) as span:
        yield span


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Open a child of the current span.

    Yields None when telemetry is disabled or no span is open.
    """
    parent = _current_span.get() if _verbose_enabled.get() else None
    if parent is None:
        yield None
        return
    with _activate(parent.child(name)) as span:
        yield span


def inject_meta(result: RenderResult, span: Span) -> RenderResult:
    """Copy of *result* with the span tree under ``meta["telemetry"]``."""
    return result.model_copy(update={"meta": {**(result.meta or {}), "telemetry": span.to_dict()}})


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Time each call as a span named after the function.

    Inside an open span the call becomes a child. Called on its own it is
    the root, and a returned RenderResult carries the tree in ``meta``.
    """

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        if not _verbose_enabled.get():
            return func(*args, **kwargs)

        parent = _current_span.get()
        span = parent.child(func.__qualname__) if parent else Span(name=func.__qualname__)
        with _activate(span):
            result = func(*args, **kwargs)

        if parent is None and isinstance(result, RenderResult):
            return inject_meta(result, span)  # type: ignore[return-value]
        return result

    return wrapper


def enable_telemetry() -> None:
    """Turn span collection on for the current context (``--verbose``)."""
    _verbose_enabled.set(True)


def disable_telemetry() -> None:
    _verbose_enabled.set(False)


def get_current_span() -> Span | None:
    """The open span, for ad-hoc annotation; None when disabled."""
    if not _verbose_enabled.get():
        return None
    return _current_span.get()

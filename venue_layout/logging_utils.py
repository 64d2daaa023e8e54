from __future__ import annotations

import inspect
import logging
import reprlib
from functools import wraps
from typing import Any, Callable, Iterable, MutableMapping, Optional, Sequence, Set, TypeVar, cast

import numpy as np

from .model import Seat, Sector
from .types import Vertex

F = TypeVar("F", bound=Callable[..., Any])

_repr = reprlib.Repr()
_repr.maxother = 160
_repr.maxlist = 6
_repr.maxtuple = 6
_repr.maxdict = 6


def _summarize_array(value: np.ndarray) -> str:
    parts = [f"ndarray(shape={tuple(value.shape)}, dtype={value.dtype})"]
    if value.size and value.dtype.kind in "biuf":
        parts.append(f"min={float(value.min()):.6g}")
        parts.append(f"max={float(value.max()):.6g}")
    return ", ".join(parts)


def _summarize_sequence(value: Sequence[Any], max_items: int) -> Optional[str]:
    if not value:
        return None
    first = value[0]
    if isinstance(first, Seat):
        rows = sorted({seat.row for seat in value if isinstance(seat, Seat)})
        shown = ",".join(rows[:max_items]) + (",..." if len(rows) > max_items else "")
        return f"<{len(value)} seat(s) rows=[{shown}]>"
    if isinstance(first, Vertex) and len(value) > max_items:
        xs = [v[0] for v in value]
        ys = [v[1] for v in value]
        return (
            f"<{len(value)} vertices x=[{min(xs):.6g}, {max(xs):.6g}] "
            f"y=[{min(ys):.6g}, {max(ys):.6g}]>"
        )
    return None


def _safe_repr(value: Any, *, max_items: int = 5, max_length: int = 400) -> str:
    if isinstance(value, np.ndarray):
        return _summarize_array(value)
    if isinstance(value, Sector):
        return (
            f"Sector(id={value.id!r}, shape={value.shape!r}, vertices={len(value.vertices)}, "
            f"seats={len(value.seats)}, rotation={value.rotation}, curvature={value.curvature})"
        )
    if isinstance(value, (list, tuple)) and not isinstance(value, Vertex):
        summary = _summarize_sequence(value, max_items)
        if summary is not None:
            return summary
    try:
        rendered = _repr.repr(value)
    except Exception as exc:  # pragma: no cover
        rendered = f"<repr-error {exc!r}>"
    if len(rendered) > max_length:
        return rendered[:max_length] + "... (truncated)"
    return rendered


def _format_arguments(args: Sequence[Any], kwargs: MutableMapping[str, Any]) -> str:
    parts = []
    if args:
        parts.append("args=[" + ", ".join(_safe_repr(arg) for arg in args) + "]")
    if kwargs:
        parts.append("kwargs={" + ", ".join(f"{key}={_safe_repr(val)}" for key, val in kwargs.items()) + "}")
    return ", ".join(parts) if parts else "no-args"


def debug_log_call(
    logger: logging.Logger, *, name: Optional[str] = None, log_result: bool = True
) -> Callable[[F], F]:
    """Return a decorator that traces a layout call at DEBUG level.

    The entry line carries the call's arguments and the exit line its result,
    both rendered through ``_safe_repr``: seat lists collapse to a count and
    the rows they cover, long polygons to their vertex count and extent,
    sectors to their id, shape and sizes, and numpy arrays to shape and range.
    A failing call is logged with its traceback and the arguments it received
    before the exception propagates. Wrapping an already wrapped callable
    returns it unchanged.
    """

    def decorator(func: F) -> F:
        if getattr(func, "_debug_logging_wrapped", False):
            return func

        label = name or getattr(func, "__qualname__", getattr(func, "__name__", "<callable>"))

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):
            tracing = logger.isEnabledFor(logging.DEBUG)
            arguments = _format_arguments(args, kwargs) if tracing else ""
            if tracing:
                logger.debug("Entering %s (%s)", label, arguments)
            try:
                result = func(*args, **kwargs)
            except Exception:
                if tracing:
                    logger.exception("%s failed for %s", label, arguments)
                raise
            if tracing:
                summary = f" -> {_safe_repr(result)}" if log_result else ""
                logger.debug("Exiting %s%s", label, summary)
            return result

        setattr(wrapper, "_debug_logging_wrapped", True)
        return cast(F, wrapper)

    return decorator


def apply_debug_logging(
    namespace: MutableMapping[str, Any],
    *,
    logger: Optional[logging.Logger] = None,
    skip: Optional[Iterable[str]] = None,
) -> None:
    """Wrap the public module-level functions of ``namespace`` with DEBUG tracing.

    Private helpers (leading underscore) stay unwrapped; they run once per
    candidate seat and would flood the log.
    """

    module_name = namespace.get("__name__")
    if not isinstance(module_name, str):  # pragma: no cover
        module_name = None
    logger = logger or logging.getLogger(module_name or __name__)
    skip_set: Set[str] = set(skip or [])

    for attr_name, value in list(namespace.items()):
        if attr_name in skip_set or attr_name.startswith("_"):
            continue
        if inspect.isfunction(value) and getattr(value, "__module__", None) == module_name:
            namespace[attr_name] = debug_log_call(logger, name=attr_name)(value)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Verbose debug logging enabled for %s", module_name or "<unknown module>")


__all__ = ["apply_debug_logging", "debug_log_call"]

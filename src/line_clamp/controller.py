"""Public clamp entry points."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Any, Mapping, Optional, Union

from line_clamp.config import AnimateValue, ClampOptions, ClampValue, merge_options
from line_clamp.engine import Truncator
from line_clamp.layout import (
    LayoutEngine,
    RichLayoutEngine,
    element_height,
    is_css_length,
    max_height,
    max_lines,
    parse_int,
)
from line_clamp.nodes import Element

logger = logging.getLogger(__name__)

DEFAULT_ANIMATION_MS = 10


class ClampValueError(ValueError):
    """Raised for clamp values that are not a count, ``auto`` or a length."""


@dataclass
class ClampResult:
    """Markup before clamping and, when truncation ran, after it."""

    original: str
    clamped: Optional[str] = None
    pending: Optional["asyncio.Task[str]"] = None


def resolve_target_lines(
    element: Element, layout: LayoutEngine, clamp_value: ClampValue
) -> float:
    """Turn a clamp value into a line count."""
    if clamp_value == "auto":
        return max_lines(element, layout)
    if is_css_length(clamp_value):
        return max_lines(element, layout, parse_int(clamp_value))
    if isinstance(clamp_value, str):
        if clamp_value.strip().isdigit():
            return int(clamp_value)
        raise ClampValueError(f"Unsupported clamp value: {clamp_value!r}")
    return clamp_value


def animation_delay(animate: AnimateValue) -> float:
    """Return the pause between animated steps in seconds."""
    if animate is True:
        return DEFAULT_ANIMATION_MS / 1000.0
    return max(0.0, float(animate)) / 1000.0


def apply_native_clamp(element: Element, lines: float, options: ClampOptions) -> None:
    """Hand clamping to the layout engine's own line clamp."""
    element.style.update(
        {
            "overflow": "hidden",
            "text-overflow": "ellipsis",
            "-webkit-box-orient": "vertical",
            "display": "-webkit-box",
            "-webkit-line-clamp": str(int(lines)),
        }
    )
    if is_css_length(options.clamp):
        element.style["height"] = str(options.clamp)


@dataclass
class ClampPlan:
    """How a clamp request will be carried out."""

    options: ClampOptions
    layout: LayoutEngine
    truncator: Optional[Truncator] = None
    native: bool = False


def plan_clamp(
    element: Element,
    options: Union[ClampOptions, Mapping[str, Any], None] = None,
    *,
    layout: Optional[LayoutEngine] = None,
    **overrides: Any,
) -> ClampPlan:
    """Resolve the target and apply the native clamp or build a truncator."""
    opts = merge_options(options, **overrides)
    engine: LayoutEngine = layout or RichLayoutEngine()
    lines = resolve_target_lines(element, engine, opts.clamp)
    if engine.supports_native_clamp and opts.use_native_clamp:
        apply_native_clamp(element, lines, opts)
        logger.debug("Native clamp applied at %s lines", lines)
        return ClampPlan(opts, engine, native=True)
    height = max_height(element, engine, lines)
    current = element_height(element, engine)
    if current <= height:
        logger.debug("Content fits (%s <= %s); nothing to clamp", current, height)
        return ClampPlan(opts, engine)
    logger.debug("Clamping from height %s to %s (%s lines)", current, height, lines)
    return ClampPlan(opts, engine, Truncator(element, engine, height, opts))


def clamp(
    element: Element,
    options: Union[ClampOptions, Mapping[str, Any], None] = None,
    *,
    layout: Optional[LayoutEngine] = None,
    **overrides: Any,
) -> ClampResult:
    """Clamp ``element`` to the configured number of lines.

    The element is mutated in place. With ``animate`` set inside a running
    event loop, truncation is scheduled as a task on ``result.pending``
    and ``result.clamped`` stays unset.
    """
    original = element.inner_markup
    plan = plan_clamp(element, options, layout=layout, **overrides)
    truncator = plan.truncator
    if truncator is None:
        return ClampResult(original=original)
    if plan.options.animate:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; clamping synchronously")
        else:
            delay = animation_delay(plan.options.animate)
            task = loop.create_task(truncator.run_async(delay))
            return ClampResult(original=original, pending=task)
    return ClampResult(original=original, clamped=truncator.run())


async def clamp_async(
    element: Element,
    options: Union[ClampOptions, Mapping[str, Any], None] = None,
    *,
    layout: Optional[LayoutEngine] = None,
    **overrides: Any,
) -> ClampResult:
    """Clamp ``element``, pacing steps when ``animate`` is set."""
    original = element.inner_markup
    plan = plan_clamp(element, options, layout=layout, **overrides)
    truncator = plan.truncator
    if truncator is None:
        return ClampResult(original=original)
    if plan.options.animate:
        clamped = await truncator.run_async(animation_delay(plan.options.animate))
    else:
        clamped = truncator.run()
    return ClampResult(original=original, clamped=clamped)

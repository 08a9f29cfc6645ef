"""Layout queries backed by Rich text wrapping."""

from __future__ import annotations

import io
import math
import re
from typing import Optional, Protocol

from rich.console import Console
from rich.text import Text

from line_clamp.nodes import Element

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_INHERITED = {"line-height", "font-size"}


class LayoutEngine(Protocol):
    """Read-only view of a layout engine."""

    supports_native_clamp: bool

    def computed_style(self, element: Element, prop: str) -> str:
        ...

    def scroll_height(self, element: Element) -> float:
        ...

    def offset_height(self, element: Element) -> float:
        ...

    def client_height(self, element: Element) -> float:
        ...


def parse_int(value: object) -> Optional[int]:
    """Return the integer prefix of a CSS value, e.g. ``"3em" -> 3``."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if not isinstance(value, str):
        return None
    match = _INT_PREFIX.match(value)
    if match is None:
        return None
    return int(match.group(1))


def is_css_length(value: object) -> bool:
    return isinstance(value, str) and ("px" in value or "em" in value)


def element_height(element: Element, layout: LayoutEngine) -> float:
    """Return the rendered height of ``element``.

    Inline elements report zero offset and client heights, so the largest
    of the three extents is used.
    """
    return max(
        layout.scroll_height(element),
        layout.offset_height(element),
        layout.client_height(element),
    )


def line_height(element: Element, layout: LayoutEngine) -> float:
    """Return the line height of ``element``.

    ``normal`` varies between renderers; 1.2 times the font size sits at
    the top of the usual 1.0-1.2 range.
    """
    value = layout.computed_style(element, "line-height")
    if value.strip() == "normal":
        font_size = parse_int(layout.computed_style(element, "font-size")) or 0
        return font_size * 1.2
    return parse_int(value) or 0


def max_lines(
    element: Element, layout: LayoutEngine, height: Optional[float] = None
) -> int:
    """Return how many lines fit in ``height`` (or the element's height)."""
    available = height or element_height(element, layout)
    per_line = line_height(element, layout)
    if per_line <= 0:
        return 0
    return max(math.floor(available / per_line), 0)


def max_height(element: Element, layout: LayoutEngine, lines: float) -> float:
    return line_height(element, layout) * lines


class RichLayoutEngine:
    """Layout engine measuring markup the way a Rich console wraps it."""

    supports_native_clamp = True

    def __init__(
        self,
        width: int = 80,
        *,
        font_size: str = "16px",
        line_height: str = "normal",
        console: Optional[Console] = None,
    ) -> None:
        self.width = max(1, width)
        self._defaults = {"font-size": font_size, "line-height": line_height}
        self._console = console or Console(
            file=io.StringIO(),
            width=self.width,
            color_system=None,
            legacy_windows=False,
        )

    def computed_style(self, element: Element, prop: str) -> str:
        node: Optional[Element] = element
        while node is not None:
            if prop in node.style:
                return node.style[prop]
            if prop not in _INHERITED:
                break
            node = node.parent
        return self._defaults.get(prop, "")

    def render_lines(self, element: Element) -> list[Text]:
        """Wrap the element's content, honoring the native line clamp."""
        text = Text.from_markup(element.inner_markup)
        if not text.plain:
            return []
        lines = list(text.wrap(self._console, self.width))
        limit = self._native_line_limit(element)
        if limit is None or len(lines) <= limit:
            return lines
        kept = lines[:limit]
        if kept:
            last = kept[-1].copy()
            last.rstrip()
            last.append("…")
            last.truncate(self.width, overflow="ellipsis")
            kept[-1] = last
        return kept

    def render(self, element: Element) -> Text:
        return Text("\n").join(self.render_lines(element))

    def scroll_height(self, element: Element) -> float:
        return len(self.render_lines(element)) * line_height(element, self)

    def offset_height(self, element: Element) -> float:
        if element.style.get("display") == "inline":
            return 0
        explicit = parse_int(element.style.get("height"))
        if explicit is not None:
            return explicit
        return self.scroll_height(element)

    def client_height(self, element: Element) -> float:
        return self.offset_height(element)

    def _native_line_limit(self, element: Element) -> Optional[int]:
        if element.style.get("display") != "-webkit-box":
            return None
        return parse_int(element.style.get("-webkit-line-clamp"))

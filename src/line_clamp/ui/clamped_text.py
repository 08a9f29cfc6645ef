"""Static widget that clamps its markup to the space it is given."""

from __future__ import annotations

import asyncio
from dataclasses import replace
import logging
from typing import Optional

from rich.text import Text
from textual import events
from textual.timer import Timer
from textual.widgets import Static

from line_clamp.config import ClampOptions
from line_clamp.controller import animation_delay, plan_clamp
from line_clamp.engine import Truncator
from line_clamp.layout import RichLayoutEngine
from line_clamp.nodes import Element

logger = logging.getLogger(__name__)


class ClampedText(Static):
    """Markup display clamped to the widget's width and line budget."""

    def __init__(
        self,
        markup: str = "",
        *,
        options: Optional[ClampOptions] = None,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
        disabled: bool = False,
    ) -> None:
        super().__init__("", name=name, id=id, classes=classes, disabled=disabled)
        self._source = ""
        self._options = options or ClampOptions()
        self._size_override: Optional[tuple[int, int]] = None
        self._timer: Optional[Timer] = None
        self._truncator: Optional[Truncator] = None
        self._step_delay = 0.01
        self._current_markup = ""
        self._rendered = Text()
        if markup:
            self.set_markup(markup)

    def on_mount(self) -> None:
        self._render_clamped()

    def on_unmount(self) -> None:
        self._stop_animation()

    def on_resize(self, event: events.Resize) -> None:
        self._render_clamped()

    def set_markup(self, markup: str) -> None:
        self._source = markup
        self._render_clamped()

    def set_options(self, options: ClampOptions) -> None:
        self._options = options
        self._render_clamped()

    def set_size_override(self, size: Optional[tuple[int, int]]) -> None:
        self._size_override = size
        self._render_clamped()

    @property
    def source(self) -> str:
        return self._source

    @property
    def clamp_options(self) -> ClampOptions:
        return self._options

    @property
    def current_markup(self) -> str:
        return self._current_markup

    @property
    def rendered_text(self) -> Text:
        return self._rendered

    @property
    def is_clamping(self) -> bool:
        return self._truncator is not None

    def _available_size(self) -> tuple[int, int]:
        if self._size_override is not None:
            width, height = self._size_override
            return max(0, width), max(0, height)
        if not self.is_attached:
            return 0, 0
        size = getattr(self, "content_size", None) or getattr(self, "size", None)
        return max(0, getattr(size, "width", 0)), max(0, getattr(size, "height", 0))

    def _render_clamped(self) -> None:
        self._stop_animation()
        width, height = self._available_size()
        if width <= 0 or not self._source:
            self._show("")
            return
        element = Element.from_markup(self._source, style={"line-height": "1px"})
        layout = RichLayoutEngine(width)
        options = self._options
        if options.clamp == "auto":
            options = replace(options, clamp=height)
        plan = plan_clamp(element, options, layout=layout)
        if plan.native:
            self._show(element.inner_markup, layout.render(element))
            return
        truncator = plan.truncator
        if truncator is None:
            self._show(element.inner_markup)
            return
        if options.animate and self._can_schedule():
            self._truncator = truncator
            self._step_delay = max(0.01, animation_delay(options.animate))
            self._advance()
            return
        self._show(truncator.run())

    def _can_schedule(self) -> bool:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return False
        return self.is_attached

    def _advance(self) -> None:
        truncator = self._truncator
        if truncator is None:
            return
        finished = truncator.step()
        self._show(truncator.result)
        if finished:
            logger.debug("Animated clamp finished in %d steps", truncator.steps)
            self._truncator = None
            self._timer = None
            return
        self._timer = self.set_timer(self._step_delay, self._advance)

    def _stop_animation(self) -> None:
        if self._timer is not None:
            self._timer.stop()
            self._timer = None
        self._truncator = None

    def _show(self, markup: str, rendered: Optional[Text] = None) -> None:
        self._current_markup = markup
        self._rendered = rendered if rendered is not None else Text.from_markup(markup)
        # on_mount pushes the stored text once the widget is in an app
        if self.is_attached:
            self.update(self._rendered)

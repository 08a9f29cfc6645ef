"""Interactive preview of clamped markup."""

from __future__ import annotations

from dataclasses import replace
import logging

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Footer

from line_clamp.config import ClampOptions
from line_clamp.logging_setup import set_console_level
from line_clamp.ui.clamped_text import ClampedText

logger = logging.getLogger(__name__)


class ClampPreviewApp(App):
    """Shows markup clamped to the terminal width."""

    TITLE = "line-clamp preview"
    CSS = """
    ClampedText {
        height: 1fr;
        padding: 0 1;
    }
    """

    BINDINGS = [
        Binding("up", "more_lines", "More lines"),
        Binding("down", "fewer_lines", "Fewer lines"),
        Binding("r", "replay", "Replay"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, markup: str, options: ClampOptions) -> None:
        super().__init__()
        self._markup = markup
        self._options = options

    def compose(self) -> ComposeResult:
        yield ClampedText(self._markup, options=self._options, id="clamped")
        yield Footer()

    def _clamped(self) -> ClampedText:
        return self.query_one("#clamped", ClampedText)

    def _adjust_lines(self, delta: int) -> None:
        widget = self._clamped()
        current = widget.clamp_options.clamp
        if not isinstance(current, int):
            return
        options = replace(widget.clamp_options, clamp=max(1, current + delta))
        widget.set_options(options)

    def action_more_lines(self) -> None:
        self._adjust_lines(1)

    def action_fewer_lines(self) -> None:
        self._adjust_lines(-1)

    def action_replay(self) -> None:
        widget = self._clamped()
        widget.set_markup(widget.source)


def run_preview(markup: str, options: ClampOptions) -> int:
    """Run the preview app and return an exit code."""
    logger.info("Preview start")
    set_console_level(logging.WARNING)
    app = ClampPreviewApp(markup, options)
    app.run()
    logger.info("Preview exit")
    return 0

"""Tests for the self-clamping Static widget."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Any

from textual.app import App, ComposeResult

from line_clamp.config import ClampOptions
from line_clamp.ui.clamped_text import ClampedText

WORDS = "aaaa bbbb cccc dddd"


def _engine_options(**overrides: Any) -> ClampOptions:
    base = ClampOptions(clamp=1, use_native_clamp=False, split_on_chars=(" ",))
    return replace(base, **overrides)


def test_builds_outside_an_app() -> None:
    widget = ClampedText(WORDS)
    assert widget.source == WORDS
    assert widget.current_markup == ""


def test_native_clamp_ellipsizes_last_line() -> None:
    widget = ClampedText(WORDS, options=ClampOptions(clamp=1))
    widget.set_size_override((10, 3))
    assert widget.rendered_text.plain.endswith("…")
    assert "cccc" not in widget.rendered_text.plain
    assert widget.current_markup == WORDS


def test_engine_clamp_walks_back_into_earlier_text() -> None:
    widget = ClampedText(options=_engine_options())
    widget.set_size_override((10, 3))
    widget.set_markup("First part. [i]tail words[/i]")
    assert widget.current_markup == "First par…"
    assert widget.source == "First part. [i]tail words[/i]"


def test_auto_uses_available_height() -> None:
    widget = ClampedText(WORDS, options=_engine_options(clamp="auto"))
    widget.set_size_override((10, 2))
    assert widget.current_markup == WORDS
    widget.set_size_override((10, 1))
    assert widget.current_markup == "aaaa bbbb…"


def test_zero_width_shows_nothing() -> None:
    widget = ClampedText(WORDS)
    widget.set_size_override((0, 4))
    assert widget.current_markup == ""
    assert widget.rendered_text.plain == ""


def test_set_options_reclamps() -> None:
    widget = ClampedText(WORDS, options=_engine_options(clamp=2))
    widget.set_size_override((10, 4))
    assert widget.current_markup == WORDS
    widget.set_options(_engine_options(clamp=1))
    assert widget.current_markup == "aaaa bbbb…"
    assert widget.clamp_options.clamp == 1


def test_unmounted_animation_runs_to_completion() -> None:
    widget = ClampedText(WORDS, options=_engine_options(animate=True))
    widget.set_size_override((10, 1))
    assert not widget.is_clamping
    assert widget.current_markup == "aaaa bbbb…"


def test_mount_shows_stored_markup() -> None:
    result: dict[str, str] = {}

    class PlainApp(App):
        def compose(self) -> ComposeResult:
            yield ClampedText("[b]short[/b]", id="clamped")

    async def runner() -> None:
        app = PlainApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            widget = app.query_one("#clamped", ClampedText)
            result["plain"] = widget.rendered_text.plain

    asyncio.run(runner())
    assert result["plain"] == "short"


class ClampApp(App):
    def compose(self) -> ComposeResult:
        yield ClampedText(WORDS, options=_engine_options(animate=True), id="clamped")


def test_animated_clamp_steps_on_timer() -> None:
    result: dict[str, str] = {}

    async def runner() -> None:
        app = ClampApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            widget = app.query_one("#clamped", ClampedText)
            widget.set_size_override((10, 1))
            assert widget.is_clamping
            for _ in range(200):
                if not widget.is_clamping:
                    break
                await pilot.pause(0.02)
            result["markup"] = widget.current_markup

    asyncio.run(runner())
    assert result["markup"] == "aaaa bbbb…"

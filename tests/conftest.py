"""Pytest configuration for line-clamp."""

from __future__ import annotations

import math
from typing import Callable

import pytest

from line_clamp.nodes import Element


class GridLayout:
    """Layout fake: a fixed number of characters fits on every row."""

    supports_native_clamp = False

    def __init__(self, width: int, line_height: int = 10) -> None:
        self.width = width
        self.line_height = line_height
        self.measured: list[float] = []

    def computed_style(self, element: Element, prop: str) -> str:
        if prop == "line-height":
            return f"{self.line_height}px"
        if prop == "font-size":
            return f"{self.line_height}px"
        return element.style.get(prop, "")

    def scroll_height(self, element: Element) -> float:
        rows = math.ceil(len(element.plain) / self.width)
        height = rows * self.line_height
        self.measured.append(height)
        return height

    def offset_height(self, element: Element) -> float:
        return 0

    def client_height(self, element: Element) -> float:
        return 0


@pytest.fixture
def grid_layout() -> Callable[..., GridLayout]:
    return GridLayout

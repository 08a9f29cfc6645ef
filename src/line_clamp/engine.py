"""Progressive truncation of a container's trailing text."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
from typing import Optional

from line_clamp.config import ClampOptions
from line_clamp.layout import LayoutEngine, element_height
from line_clamp.nodes import Element, Node, TextNode, iter_text_nodes
from line_clamp.nodes import parse_markup, prune_trailing

logger = logging.getLogger(__name__)


@dataclass
class ChunkState:
    """Chunks of the active text split on one boundary character."""

    split_char: str
    chunks: list[str]
    last_chunk: Optional[str] = None


@dataclass
class TruncationState:
    """Where a truncation run currently stands."""

    target: Optional[TextNode]
    split_plan: list[str]
    chunk_state: Optional[ChunkState] = None
    done: bool = False
    nodes_exhausted: int = field(default=0)


def split_chunks(value: str, split_char: str) -> list[str]:
    """Split like JavaScript's ``String.split``: ``""`` yields characters."""
    if split_char == "":
        return list(value)
    return value.split(split_char)


class TextCursor:
    """Walks a snapshot of a container's text leaves from the end."""

    def __init__(self, root: Element, marker: str) -> None:
        self._root = root
        self._marker = marker
        self._leaves = list(iter_text_nodes(root))
        self._index = len(self._leaves)

    def previous(self) -> Optional[TextNode]:
        while self._index > 0:
            self._index -= 1
            node = self._leaves[self._index]
            if not node.is_attached_to(self._root):
                continue
            if node.value in ("", self._marker):
                continue
            return node
        return None


class Truncator:
    """Shrinks a container chunk by chunk until it fits ``max_height``.

    Every call to :meth:`step` performs one transition: pick a boundary
    character when none is active, drop the trailing chunk and append the
    marker, then measure. A fit on any boundary other than ``""`` restores
    the dropped chunk and refines with the next, finer boundary; a fit at
    character level is final. A text node with nothing left to remove is
    emptied and the walk moves to the previous text node.
    """

    def __init__(
        self,
        element: Element,
        layout: LayoutEngine,
        max_height: float,
        options: ClampOptions,
    ) -> None:
        self.element = element
        self.steps = 0
        self._layout = layout
        self._max_height = max_height
        self._options = options
        self._marker = options.truncation_char
        self._suffix: list[Node] = []
        self._marked: Optional[TextNode] = None
        prune_trailing(element, self._marker)
        self._cursor = TextCursor(element, self._marker)
        self.state = TruncationState(
            target=self._cursor.previous(),
            split_plan=list(options.split_on_chars),
        )

    @property
    def done(self) -> bool:
        return self.state.done

    @property
    def result(self) -> str:
        return self.element.inner_markup

    def run(self) -> str:
        while not self.step():
            pass
        return self.result

    async def run_async(self, delay: float) -> str:
        """Run to completion, sleeping ``delay`` seconds between steps."""
        while not self.step():
            await asyncio.sleep(delay)
        return self.result

    def step(self) -> bool:
        """Advance one transition and return True once finished."""
        state = self.state
        if state.done:
            return True
        target = state.target
        if not self._max_height or target is None:
            return self._finish()
        self.steps += 1

        chunk_state = state.chunk_state
        if chunk_state is None:
            split_char = state.split_plan.pop(0) if state.split_plan else ""
            value = self._unmarked(target)
            chunk_state = ChunkState(split_char, split_chunks(value, split_char))
            logger.debug(
                "Splitting on %r: %d chunks", split_char, len(chunk_state.chunks)
            )
        split_char = chunk_state.split_char

        if len(chunk_state.chunks) > 1:
            chunk_state.last_chunk = chunk_state.chunks.pop()
            self._apply_marker(target, split_char.join(chunk_state.chunks))
            state.chunk_state = chunk_state
        else:
            state.chunk_state = None

        if self._options.truncation_markup:
            self._attach_suffix(target)

        if state.chunk_state is not None:
            if element_height(self.element, self._layout) <= self._max_height:
                if split_char == "":
                    return self._finish()
                restored = (
                    split_char.join(chunk_state.chunks)
                    + split_char
                    + (chunk_state.last_chunk or "")
                )
                self._apply_marker(target, restored)
                state.chunk_state = None
        elif split_char == "":
            self._advance_node(target)
        return state.done

    def _apply_marker(self, target: TextNode, text: str) -> None:
        target.value = text + self._marker
        self._marked = target

    def _unmarked(self, target: TextNode) -> str:
        """Return the text of ``target`` without the marker this run appended."""
        if self._marked is not target:
            return target.value
        return target.value.removesuffix(self._marker)

    def _attach_suffix(self, target: TextNode) -> None:
        """Place ``" " + markup + marker`` right after the active text."""
        target.value = self._unmarked(target)
        self._marked = None
        self._detach_suffix()
        parent = target.parent
        if parent is None:
            return
        self._suffix = [
            TextNode(" "),
            *parse_markup(self._options.truncation_markup or ""),
            TextNode(self._marker),
        ]
        parent.insert_after(target, self._suffix)

    def _detach_suffix(self) -> None:
        for node in self._suffix:
            node.remove()
        self._suffix = []

    def _advance_node(self, target: TextNode) -> None:
        self._apply_marker(target, "")
        self._detach_suffix()
        prune_trailing(self.element, self._marker)
        state = self.state
        state.nodes_exhausted += 1
        state.target = self._cursor.previous()
        state.split_plan = list(self._options.split_on_chars)
        state.chunk_state = None
        if state.target is None:
            logger.debug("No earlier text node; stopping")
            self._finish()
        else:
            logger.debug("Moved to previous text node %r", state.target)

    def _finish(self) -> bool:
        self.state.done = True
        logger.debug(
            "Truncation finished after %d steps (%d nodes exhausted)",
            self.steps,
            self.state.nodes_exhausted,
        )
        return True

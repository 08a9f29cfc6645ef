"""Markup node tree for clampable content."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from rich.errors import MarkupError
from rich.markup import RE_TAGS, escape
from rich.style import Style


class Node:
    """Base class for tree nodes."""

    def __init__(self) -> None:
        self.parent: Optional[Element] = None

    @property
    def plain(self) -> str:
        raise NotImplementedError

    @property
    def markup(self) -> str:
        raise NotImplementedError

    def remove(self) -> None:
        """Detach this node from its parent."""
        if self.parent is None:
            return
        self.parent.children.remove(self)
        self.parent = None

    def is_attached_to(self, root: "Element") -> bool:
        node: Optional[Node] = self
        while node is not None:
            if node is root:
                return True
            node = node.parent
        return False


class TextNode(Node):
    """Mutable text leaf."""

    def __init__(self, value: str = "") -> None:
        super().__init__()
        self.value = value

    def __repr__(self) -> str:
        return f"TextNode({self.value!r})"

    @property
    def plain(self) -> str:
        return self.value

    @property
    def markup(self) -> str:
        return escape(self.value)


class Element(Node):
    """Container node, optionally wrapped in a Rich style tag.

    ``style`` holds CSS-like layout properties read by the layout engine,
    for example ``line-height`` or ``-webkit-line-clamp``.
    """

    def __init__(
        self,
        tag: Optional[str] = None,
        children: Iterable[Node] = (),
        style: Optional[dict[str, str]] = None,
    ) -> None:
        super().__init__()
        self.tag = tag
        self.style: dict[str, str] = dict(style or {})
        self.children: list[Node] = []
        for child in children:
            self.append(child)

    def __repr__(self) -> str:
        return f"Element({self.tag!r}, {self.children!r})"

    @classmethod
    def from_markup(
        cls, markup: str, *, style: Optional[dict[str, str]] = None
    ) -> "Element":
        """Build an untagged container from Rich markup."""
        return cls(children=parse_markup(markup), style=style)

    @property
    def last_child(self) -> Optional[Node]:
        return self.children[-1] if self.children else None

    def append(self, node: Node) -> Node:
        node.remove()
        node.parent = self
        self.children.append(node)
        return node

    def insert_after(self, anchor: Node, nodes: Iterable[Node]) -> None:
        """Insert ``nodes`` right after ``anchor``, which must be a child."""
        index = self.children.index(anchor) + 1
        for node in nodes:
            node.remove()
            node.parent = self
            self.children.insert(index, node)
            index += 1

    @property
    def plain(self) -> str:
        return "".join(child.plain for child in self.children)

    @property
    def inner_markup(self) -> str:
        return "".join(child.markup for child in self.children)

    @inner_markup.setter
    def inner_markup(self, markup: str) -> None:
        for child in list(self.children):
            child.remove()
        for node in parse_markup(markup):
            self.append(node)

    @property
    def markup(self) -> str:
        if self.tag is None:
            return self.inner_markup
        return f"[{self.tag}]{self.inner_markup}[/]"


def parse_markup(markup: str) -> list[Node]:
    """Parse Rich console markup into a list of detached nodes."""
    root = Element()
    stack: list[Element] = [root]
    reopened: set[int] = set()
    position = 0

    def add_text(text: str) -> None:
        if not text:
            return
        parent = stack[-1]
        last = parent.last_child
        if isinstance(last, TextNode):
            last.value += text
        else:
            parent.append(TextNode(text))

    for match in RE_TAGS.finditer(markup):
        full_text, escapes, tag_text = match.groups()
        start, end = match.span()
        if start > position:
            add_text(markup[position:start])
        position = end
        if escapes:
            backslashes, escaped = divmod(len(escapes), 2)
            add_text("\\" * backslashes)
            if escaped:
                add_text(full_text[len(escapes) :])
                continue
        if tag_text.startswith("/"):
            _close_tag(stack, reopened, tag_text[1:].strip(), start)
            continue
        element = Element(tag_text)
        stack[-1].append(element)
        stack.append(element)
    if position < len(markup):
        add_text(markup[position:])
    while len(stack) > 1:
        _pop(stack, reopened)

    nodes = list(root.children)
    for node in nodes:
        node.remove()
    return nodes


def _tag_name(tag: Optional[str]) -> str:
    return Style.normalize((tag or "").partition("=")[0])


def _close_tag(
    stack: list[Element], reopened: set[int], name: str, position: int
) -> None:
    """Close ``[/name]`` (or the innermost tag for ``[/]``) the way Rich does.

    A named close may skip over tags opened after the one it closes. Those
    tags still apply to the text that follows, so they are reopened as
    fresh elements under the new innermost parent.
    """
    if len(stack) == 1:
        raise MarkupError(
            f"closing tag '[/{name}]' at position {position} has nothing to close"
        )
    if not name:
        _pop(stack, reopened)
        return
    wanted = Style.normalize(name)
    for index in range(len(stack) - 1, 0, -1):
        if _tag_name(stack[index].tag) == wanted:
            break
    else:
        raise MarkupError(
            f"closing tag '[/{name}]' at position {position} doesn't match "
            "any open tag"
        )
    inner = stack[index + 1 :]
    while len(stack) > index:
        _pop(stack, reopened)
    for element in inner:
        fresh = Element(element.tag)
        stack[-1].append(fresh)
        stack.append(fresh)
        reopened.add(id(fresh))


def _pop(stack: list[Element], reopened: set[int]) -> None:
    element = stack.pop()
    # reopened tags that never received text are dropped
    if id(element) in reopened and not element.children:
        element.remove()


def iter_text_nodes(root: Element) -> Iterator[TextNode]:
    """Yield text leaves in document order."""
    for child in root.children:
        if isinstance(child, TextNode):
            yield child
        elif isinstance(child, Element):
            yield from iter_text_nodes(child)


def prune_trailing(root: Element, marker: str) -> int:
    """Remove spent nodes along the trailing edge of ``root``.

    Text nodes that are empty or hold only the marker are removed, as are
    elements left without children. Returns the number of removed nodes.
    """
    removed = 0
    while root.children:
        last = root.children[-1]
        if isinstance(last, Element):
            removed += prune_trailing(last, marker)
            if last.children:
                break
            last.remove()
            removed += 1
        elif isinstance(last, TextNode) and last.value in ("", marker):
            last.remove()
            removed += 1
        else:
            break
    return removed

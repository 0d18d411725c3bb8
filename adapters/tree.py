"""Pure-Python retained tree renderer (framework ``core``).

Nodes live in a small box/text tree. Rendering lays text out top to bottom,
wrapping at the viewport width and clipping at its height, then diffs the
frame against the previous one cell by cell, the way a terminal renderer
decides what to repaint.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from adapters.retained import RetainedAdapter
from domain.models import ApplyPolicy


@dataclass(eq=False)
class TextNode:
    """A leaf holding one string."""

    id: str
    content: str


@dataclass(eq=False)
class BoxNode:
    """A container laying its children out vertically."""

    id: str
    children: list[BoxNode | TextNode] = field(default_factory=list)


class FrameBuffer:
    """A width x height grid of characters with cell-level diffing."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._blank = " " * width
        self.rows: list[str] = [self._blank] * height

    def _layout(self, root: BoxNode) -> Iterator[str]:
        stack: list[BoxNode | TextNode] = [root]
        while stack:
            node = stack.pop()
            if isinstance(node, BoxNode):
                stack.extend(reversed(node.children))
                continue
            text = node.content
            if not text:
                yield ""
                continue
            for offset in range(0, len(text), self.width):
                yield text[offset : offset + self.width]

    def draw(self, root: BoxNode) -> int:
        """Paint *root* into the buffer and return how many cells changed."""
        frame: list[str] = []
        for line in self._layout(root):
            if len(frame) == self.height:
                break
            frame.append(line.ljust(self.width))
        frame.extend([self._blank] * (self.height - len(frame)))

        changed = 0
        for previous, current in zip(self.rows, frame, strict=True):
            if previous != current:
                changed += sum(1 for a, b in zip(previous, current, strict=True) if a != b)
        self.rows = frame
        return changed


class TreeAdapter(RetainedAdapter[TextNode]):
    """RendererAdapter backed by an in-process box/text tree."""

    name = "core"

    def __init__(self, policy: ApplyPolicy, width: int, height: int) -> None:
        super().__init__(policy)
        self.root = BoxNode(id="bench-root")
        self.buffer = FrameBuffer(width, height)
        self.changed_cells = 0
        self._view: BoxNode | None = None

    @property
    def mounted(self) -> list[TextNode]:
        """Nodes currently in the view, in display order."""
        if self._view is None:
            return []
        return [node for node in self._view.children if isinstance(node, TextNode)]

    def create_node(self, node_id: str, text: str) -> TextNode:
        return TextNode(id=node_id, content=text)

    def set_text(self, node: TextNode, text: str) -> None:
        node.content = text

    async def mount(self, nodes: Sequence[TextNode]) -> None:
        self._view = BoxNode(id="bench-view", children=list(nodes))
        self.root.children = [self._view]

    async def reorder(self, nodes: Sequence[TextNode], removed: Sequence[TextNode]) -> None:
        if self._view is None:
            await self.mount(nodes)
            return
        self._view.children = list(nodes)

    async def render(self) -> None:
        self.changed_cells = self.buffer.draw(self.root)

    async def destroy(self) -> None:
        await super().destroy()
        self.root.children.clear()
        self._view = None

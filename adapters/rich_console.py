"""Rich renderer adapter (framework ``rich``).

Nodes are ``rich.text.Text`` objects kept between payloads; a render prints
the visible ones as a ``Group`` to an off-screen terminal console sized to
the viewport, then discards the captured frame.
"""

from __future__ import annotations

import io
from collections.abc import Sequence

from rich.console import Console, Group
from rich.text import Text

from adapters.retained import RetainedAdapter
from domain.models import ApplyPolicy


class RichAdapter(RetainedAdapter[Text]):
    """RendererAdapter that draws through a Rich Console."""

    name = "rich"

    def __init__(self, policy: ApplyPolicy, width: int, height: int) -> None:
        super().__init__(policy)
        self._height = height
        self._frame = io.StringIO()
        self._console = Console(
            file=self._frame,
            width=width,
            height=height,
            force_terminal=True,
            color_system="truecolor",
            highlight=False,
            legacy_windows=False,
        )
        self._view: list[Text] = []
        self.frame_chars = 0

    @property
    def mounted(self) -> list[Text]:
        return list(self._view)

    def create_node(self, node_id: str, text: str) -> Text:
        return Text(text, style="default")

    def set_text(self, node: Text, text: str) -> None:
        node.plain = text

    async def mount(self, nodes: Sequence[Text]) -> None:
        self._view = list(nodes)

    async def render(self) -> None:
        # Every node takes at least one row, so rows past the viewport are never visible.
        self._console.print(Group(*self._view[: self._height]), crop=True)
        self.frame_chars = self._frame.tell()
        self._frame.seek(0)
        self._frame.truncate()

    async def destroy(self) -> None:
        await super().destroy()
        self._view = []
        self._frame.close()

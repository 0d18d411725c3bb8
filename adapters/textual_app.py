"""Textual renderer adapter (framework ``textual``).

Nodes are ``Static`` widgets inside a vertical container of a headless
Textual app. ``start`` boots the app through ``App.run_test`` and keeps the
pilot; a render is a ``pilot.pause()``, which lets Textual process pending
messages and repaint the screen.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from contextlib import AsyncExitStack

from textual.app import App, ComposeResult
from textual.containers import Vertical
from textual.pilot import Pilot
from textual.widget import Widget
from textual.widgets import Static

from adapters.retained import RetainedAdapter
from domain.models import ApplyPolicy

logger = logging.getLogger("framebench.adapters.textual")


class BenchApp(App[None]):
    """Minimal app hosting the benchmark's widget list."""

    CSS = """
    #bench-root {
        height: 1fr;
        overflow: hidden hidden;
    }
    #bench-root > Static {
        height: auto;
    }
    """

    def compose(self) -> ComposeResult:
        yield Vertical(id="bench-root")


class TextualAdapter(RetainedAdapter[Static]):
    """RendererAdapter driving Textual widgets in a headless app."""

    name = "textual"

    def __init__(self, policy: ApplyPolicy, width: int, height: int) -> None:
        super().__init__(policy)
        self._size = (width, height)
        self._stack = AsyncExitStack()
        self._app: BenchApp | None = None
        self._pilot: Pilot[None] | None = None
        self._mounted: set[Static] = set()

    @property
    def _container(self) -> Vertical:
        if self._app is None:
            msg = "textual adapter used before start()"
            raise RuntimeError(msg)
        return self._app.query_one("#bench-root", Vertical)

    async def start(self) -> None:
        self._app = BenchApp()
        self._pilot = await self._stack.enter_async_context(self._app.run_test(size=self._size))
        logger.debug("Textual app started at %sx%s", *self._size)

    @property
    def mounted(self) -> list[Widget]:
        """Widgets currently in the bench container, in display order."""
        return list(self._container.children)

    def create_node(self, node_id: str, text: str) -> Static:
        return Static(text, markup=False)

    def set_text(self, node: Static, text: str) -> None:
        node.update(text)

    async def mount(self, nodes: Sequence[Static]) -> None:
        container = self._container
        await container.remove_children()
        self._mounted = set(nodes)
        if nodes:
            await container.mount_all(nodes)

    async def reorder(self, nodes: Sequence[Static], removed: Sequence[Static]) -> None:
        container = self._container
        for widget in removed:
            self._mounted.discard(widget)
            await widget.remove()
        fresh = [node for node in nodes if node not in self._mounted]
        if fresh:
            self._mounted.update(fresh)
            await container.mount_all(fresh)
        for index, node in enumerate(nodes):
            if container.children[index] is not node:
                container.move_child(node, before=index)

    async def render(self) -> None:
        if self._pilot is None:
            msg = "textual adapter used before start()"
            raise RuntimeError(msg)
        await self._pilot.pause()

    async def destroy(self) -> None:
        await super().destroy()
        self._mounted.clear()
        await self._stack.aclose()
        self._app = None
        self._pilot = None

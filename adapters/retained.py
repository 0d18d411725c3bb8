"""Shared payload application for retained-mode renderer adapters.

Each apply policy maps to one method, chosen once at construction, so
``build`` never branches on the scenario. Concrete adapters only supply the
node primitives: create, retext, mount and reorder.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Sequence
from typing import Generic, TypeVar

from domain.models import ApplyPolicy, ListItem, ListPayload, TextPayload, WorkloadPayload

N = TypeVar("N")

_TEXT_NODE_ID = "bench-text"


class RetainedAdapter(ABC, Generic[N]):
    """Applies workload payloads to a tree of back-end specific nodes.

    Node identity policy:
    - TEXT: one node, content replaced in place.
    - REBUILD: every payload discards all nodes and mounts fresh ones.
    - KEYED: nodes are reused by item id and reordered; none are dropped.
    - REPLACE: like KEYED, but nodes whose id disappeared are dropped.
    - MUTATE: the first payload mounts the list; later ones only retext
      the ids listed in ``mutate_ids``.
    """

    name = ""

    def __init__(self, policy: ApplyPolicy) -> None:
        self.policy = policy
        self._text_node: N | None = None
        self._keyed: dict[str, N] = {}
        self._list_mounted = False
        appliers: dict[ApplyPolicy, Callable[[WorkloadPayload], Awaitable[None]]] = {
            ApplyPolicy.TEXT: self._apply_text,
            ApplyPolicy.REBUILD: self._apply_rebuild,
            ApplyPolicy.KEYED: self._apply_keyed,
            ApplyPolicy.REPLACE: self._apply_replace,
            ApplyPolicy.MUTATE: self._apply_mutate,
        }
        self._apply = appliers[policy]

    # -- Back-end primitives -------------------------------------------------

    @abstractmethod
    def create_node(self, node_id: str, text: str) -> N:
        """Create a detached node showing *text*."""

    @abstractmethod
    def set_text(self, node: N, text: str) -> None:
        """Replace the content of an existing node."""

    @abstractmethod
    async def mount(self, nodes: Sequence[N]) -> None:
        """Replace everything on screen with *nodes*, in order."""

    async def reorder(self, nodes: Sequence[N], removed: Sequence[N]) -> None:
        """Make *nodes* the on-screen children, dropping *removed*."""
        await self.mount(nodes)

    # -- RendererAdapter -----------------------------------------------------

    async def start(self) -> None:
        return None

    async def build(self, payload: WorkloadPayload) -> None:
        await self._apply(payload)

    @abstractmethod
    async def render(self) -> None: ...

    async def destroy(self) -> None:
        self._text_node = None
        self._keyed.clear()
        self._list_mounted = False

    # -- Policies ------------------------------------------------------------

    @staticmethod
    def _expect_list(payload: WorkloadPayload) -> ListPayload:
        if not isinstance(payload, ListPayload):
            msg = f"expected a list payload, got {type(payload).__name__}"
            raise TypeError(msg)
        return payload

    async def _apply_text(self, payload: WorkloadPayload) -> None:
        if not isinstance(payload, TextPayload):
            msg = f"expected a text payload, got {type(payload).__name__}"
            raise TypeError(msg)
        if self._text_node is None:
            self._text_node = self.create_node(_TEXT_NODE_ID, payload.value)
            await self.mount([self._text_node])
        else:
            self.set_text(self._text_node, payload.value)

    async def _apply_rebuild(self, payload: WorkloadPayload) -> None:
        items = self._expect_list(payload).items
        await self.mount([self.create_node(item.id, item.text) for item in items])

    def _reconcile(self, items: Sequence[ListItem], *, prune: bool) -> tuple[list[N], list[N]]:
        ordered: list[N] = []
        for item in items:
            node = self._keyed.get(item.id)
            if node is None:
                node = self.create_node(item.id, item.text)
                self._keyed[item.id] = node
            else:
                self.set_text(node, item.text)
            ordered.append(node)
        removed: list[N] = []
        if prune:
            live = {item.id for item in items}
            for stale in [key for key in self._keyed if key not in live]:
                removed.append(self._keyed.pop(stale))
        return ordered, removed

    async def _apply_keyed(self, payload: WorkloadPayload, *, prune: bool = False) -> None:
        items = self._expect_list(payload).items
        ordered, removed = self._reconcile(items, prune=prune)
        if not self._list_mounted:
            await self.mount(ordered)
            self._list_mounted = True
        else:
            await self.reorder(ordered, removed)

    async def _apply_replace(self, payload: WorkloadPayload) -> None:
        await self._apply_keyed(payload, prune=True)

    async def _apply_mutate(self, payload: WorkloadPayload) -> None:
        listing = self._expect_list(payload)
        if not self._list_mounted:
            ordered, _ = self._reconcile(listing.items, prune=False)
            await self.mount(ordered)
            self._list_mounted = True
            return
        texts = listing.items_by_id or {}
        for item_id in listing.mutate_ids or ():
            node = self._keyed.get(item_id)
            text = texts.get(item_id)
            if node is not None and text is not None:
                self.set_text(node, text)

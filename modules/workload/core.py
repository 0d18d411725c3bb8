"""Workload module -- named, reproducible payload generators.

Every scenario is registered once in ``SCENARIOS`` as a ``ScenarioSpec``
carrying its apply policy and a factory that resolves sizes for a scale.
The harness looks a scenario up once, so the measured loop never branches
on scenario names.

Payloads are a pure function of ``(scenario, seed, scale)``; drivers use the
iteration index as the seed, in increasing order.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from domain.errors import UnknownScenarioError
from domain.models import (
    ApplyPolicy,
    ListItem,
    ListPayload,
    Scenario,
    TextPayload,
    WorkloadPayload,
)
from modules.rng.core import (
    MUTATE_SALT,
    create_rng,
    make_list,
    make_text,
    round_half_up,
    salted,
    scaled,
    shuffle,
)

logger = logging.getLogger("framebench.workload")

# Base sizes at scale 1.
TEXT_LEN = 256
LIST_ITEMS = 200
LIST_TEXT_LEN = 20
MUTATE_PCT = 0.1

# Seed of the fixed base list reused by identity-preserving scenarios.
_BASE_LIST_SEED = 1

PayloadFn = Callable[[int], WorkloadPayload]
UpdateFn = Callable[[WorkloadPayload], Awaitable[object]]
IterationHook = Callable[[int], None]
Settings = dict[str, str | int | float]


@dataclass(frozen=True)
class Workload:
    """A resolved scenario: its settings, apply policy and payload function."""

    scenario: Scenario
    policy: ApplyPolicy
    generate: PayloadFn

    @property
    def settings(self) -> Settings:
        return self.scenario.settings

    async def warmup(self, update: UpdateFn, iterations: int) -> None:
        """Submit one payload per iteration; nothing is reported back."""
        for i in range(iterations):
            await update(self.generate(i))

    async def run(
        self,
        update: UpdateFn,
        iterations: int,
        on_iteration_done: IterationHook | None = None,
    ) -> None:
        """Submit one payload per iteration, firing the hook after each."""
        for i in range(iterations):
            payload = self.generate(i)
            await update(payload)
            if on_iteration_done is not None:
                on_iteration_done(i)


@dataclass(frozen=True)
class ScenarioSpec:
    """Registry entry describing how to build a scenario's workload."""

    name: str
    policy: ApplyPolicy
    description: str
    factory: Callable[[float], tuple[Settings, PayloadFn]]

    def build(self, scale: float) -> Workload:
        settings, generate = self.factory(scale)
        scenario = Scenario(name=self.name, settings={"scenario": self.name, **settings})
        return Workload(scenario=scenario, policy=self.policy, generate=generate)


# ---------------------------------------------------------------------------
# Mutation picks
# ---------------------------------------------------------------------------


def pick_mutate_indices(items_count: int, mutate_count: int, seed: int) -> list[int]:
    """Draw *mutate_count* distinct indices below *items_count*, without replacement.

    Raises:
        ValueError: If more indices are requested than exist.
    """
    if mutate_count > items_count:
        msg = f"cannot pick {mutate_count} distinct indices from {items_count}"
        raise ValueError(msg)
    rng = create_rng(salted(seed, MUTATE_SALT))
    picked: list[int] = []
    used: set[int] = set()
    while len(picked) < mutate_count:
        idx = math.floor(rng() * items_count)
        if idx in used:
            continue
        used.add(idx)
        picked.append(idx)
    return picked


def pick_mutate_ids(base: Sequence[ListItem], mutate_count: int, seed: int) -> list[str]:
    """Return the ids of the items selected for mutation at *seed*."""
    return [base[idx].id for idx in pick_mutate_indices(len(base), mutate_count, seed)]


# ---------------------------------------------------------------------------
# Scenario factories
# ---------------------------------------------------------------------------


def _text_update(scale: float) -> tuple[Settings, PayloadFn]:
    text_len = scaled(TEXT_LEN, scale)

    def generate(seed: int) -> WorkloadPayload:
        return TextPayload(value=make_text(text_len, seed))

    return {"textLen": text_len}, generate


def _fresh_list(*, unique_ids: bool) -> Callable[[float], tuple[Settings, PayloadFn]]:
    def factory(scale: float) -> tuple[Settings, PayloadFn]:
        items_count = scaled(LIST_ITEMS, scale)
        text_len = scaled(LIST_TEXT_LEN, scale)

        def generate(seed: int) -> WorkloadPayload:
            return ListPayload(items=tuple(make_list(items_count, text_len, seed, unique_ids=unique_ids)))

        return {"itemsCount": items_count, "textLen": text_len}, generate

    return factory


def _shuffled_list(scale: float) -> tuple[Settings, PayloadFn]:
    items_count = scaled(LIST_ITEMS, scale)
    text_len = scaled(LIST_TEXT_LEN, scale)
    base = make_list(items_count, text_len, _BASE_LIST_SEED)

    def generate(seed: int) -> WorkloadPayload:
        return ListPayload(items=tuple(shuffle(base, seed)))

    return {"itemsCount": items_count, "textLen": text_len}, generate


def _mutated_list(scale: float) -> tuple[Settings, PayloadFn]:
    items_count = scaled(LIST_ITEMS, scale)
    text_len = scaled(LIST_TEXT_LEN, scale)
    mutate_count = max(1, round_half_up(items_count * MUTATE_PCT))
    base = make_list(items_count, text_len, _BASE_LIST_SEED)

    def generate(seed: int) -> WorkloadPayload:
        mutate_ids = pick_mutate_ids(base, mutate_count, seed)
        chosen = set(mutate_ids)
        items = tuple(
            ListItem(id=item.id, text=make_text(text_len, seed + i * 31)) if item.id in chosen else item
            for i, item in enumerate(base)
        )
        return ListPayload(
            items=items,
            mutate_ids=tuple(mutate_ids),
            items_by_id={item.id: item.text for item in items},
        )

    settings: Settings = {
        "itemsCount": items_count,
        "textLen": text_len,
        "mutatePct": MUTATE_PCT,
        "mutateCount": mutate_count,
    }
    return settings, generate


# Registration order is the default run order.
SCENARIOS: dict[str, ScenarioSpec] = {
    spec.name: spec
    for spec in (
        ScenarioSpec(
            name="text_update",
            policy=ApplyPolicy.TEXT,
            description="fresh seeded text on a single node",
            factory=_text_update,
        ),
        ScenarioSpec(
            name="list_rebuild",
            policy=ApplyPolicy.REBUILD,
            description="discard and rebuild the whole list",
            factory=_fresh_list(unique_ids=True),
        ),
        ScenarioSpec(
            name="list_keyed_shuffle",
            policy=ApplyPolicy.KEYED,
            description="reorder a fixed list, reusing nodes by id",
            factory=_shuffled_list,
        ),
        ScenarioSpec(
            name="list_mutate_10pct",
            policy=ApplyPolicy.MUTATE,
            description="rewrite 10% of a fixed list in place",
            factory=_mutated_list,
        ),
        ScenarioSpec(
            name="list_replace",
            policy=ApplyPolicy.REPLACE,
            description="swap in a list whose ids are all new",
            factory=_fresh_list(unique_ids=True),
        ),
        ScenarioSpec(
            name="list_shuffle",
            policy=ApplyPolicy.REBUILD,
            description="rebuild the list from a shuffled fixed base",
            factory=_shuffled_list,
        ),
    )
}


def scenario_names() -> list[str]:
    """Return registered scenario names in default run order."""
    return list(SCENARIOS)


def create_workload(name: str, scale: float) -> Workload:
    """Resolve *name* at *scale* into a ready-to-drive workload.

    Raises:
        UnknownScenarioError: If no scenario is registered under *name*.
    """
    spec = SCENARIOS.get(name)
    if spec is None:
        raise UnknownScenarioError(name)
    workload = spec.build(scale)
    logger.debug("Resolved scenario %s at scale %s: %s", name, scale, workload.settings)
    return workload

"""Deterministic pseudo-random helpers for workload generation.

A 32-bit linear congruential generator plus the text/list/shuffle helpers
built on it. Nothing here is cryptographic: the only goal is that the same
seed always yields the same payloads, run after run, machine after machine.

Call sites salt the base seed with a step-specific constant so that text
synthesis, shuffling and mutation picks never draw from correlated streams.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

from domain.models import ListItem

_MASK32 = 0xFFFFFFFF
_MODULUS = 0x100000000
_MULTIPLIER = 1664525
_INCREMENT = 1013904223
_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"

# Per-step seed salts.
TEXT_SALT = 0x85EBCA6B
SHUFFLE_SALT = 0x9E3779B9
MUTATE_SALT = 0x27D4EB2D


def salted(seed: int, salt: int) -> int:
    """Combine a base seed with a step salt into a uint32 seed."""
    return (seed ^ salt) & _MASK32


def create_rng(seed: int) -> Callable[[], float]:
    """Return a generator of floats in [0, 1) seeded with *seed*.

    Each call advances the state first and then returns ``state / 2**32``.
    """
    state = seed & _MASK32

    def _next() -> float:
        nonlocal state
        state = (state * _MULTIPLIER + _INCREMENT) & _MASK32
        return state / _MODULUS

    return _next


def make_text(length: int, seed: int) -> str:
    """Return exactly *length* base-36 characters derived from *seed*."""
    rng = create_rng(salted(seed, TEXT_SALT))
    chars: list[str] = []
    while len(chars) < length:
        chars.append(_ALPHABET[math.floor(rng() * 36)])
    return "".join(chars[:length])


def make_list(count: int, length: int, seed: int, *, unique_ids: bool = False) -> list[ListItem]:
    """Build *count* items whose text is ``make_text(length, seed + i)``.

    Ids are ``item-{i}``, or ``item-{seed}-{i}`` when *unique_ids* is set so
    that every seed mints a disjoint id space.
    """
    prefix = f"{seed}-" if unique_ids else ""
    return [ListItem(id=f"item-{prefix}{i}", text=make_text(length, seed + i)) for i in range(count)]


def shuffle(items: Sequence[ListItem], seed: int) -> list[ListItem]:
    """Return a seeded Fisher-Yates permutation of *items*."""
    out = list(items)
    rng = create_rng(salted(seed, SHUFFLE_SALT))
    for i in range(len(out) - 1, 0, -1):
        j = math.floor(rng() * (i + 1))
        out[i], out[j] = out[j], out[i]
    return out


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from negative infinity."""
    return math.floor(value + 0.5)


def scaled(base: float, scale: float) -> int:
    """Scale a base size, never going below one."""
    return max(1, round_half_up(base * scale))

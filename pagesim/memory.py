"""Physical memory frames and the page replacement policies."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Protocol, Sequence

if TYPE_CHECKING:
    from .page_table import PageTableEntry


class _Tracked(Protocol):
    last_access_moment: int
    access_counter: int


@dataclass(eq=False)
class PhysicalFrame:
    """One frame of physical memory."""

    modified: bool = False
    allocated: bool = False
    last_access_moment: int = 0
    access_counter: int = 0
    virtual_page: PageTableEntry | None = None


class ReplacementPolicy(Enum):
    """Algorithms for choosing which resident page to evict."""

    RANDOM = "random"
    LRU = "lru"
    MFU = "mfu"
    LFU = "lfu"

    @classmethod
    def parse(cls, name: str | ReplacementPolicy) -> ReplacementPolicy:
        """Return the policy called ``name``; raise ValueError if there is none."""
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            raise ValueError(f"unknown replacement algorithm: {name!r}") from None


def init_memory(total_frames: int) -> list[PhysicalFrame]:
    """Return ``total_frames`` free, unmodified frames."""
    if total_frames < 0:
        raise ValueError(f"frame count must not be negative, got {total_frames}")
    return [PhysicalFrame() for _ in range(total_frames)]


def find_free_frame(memory: Sequence[PhysicalFrame]) -> int | None:
    """Return the index of the first unallocated frame, or None if all are in use."""
    return next((index for index, frame in enumerate(memory) if not frame.allocated), None)


def _require_entries(entries: Sequence[_Tracked]) -> None:
    if not entries:
        raise ValueError("cannot choose a victim among no entries")


def random_replacement(size: int, rng: random.Random | None = None) -> int:
    """Return a random index in ``range(size)``."""
    if size <= 0:
        raise ValueError("cannot choose a victim among no entries")
    source = random if rng is None else rng
    return source.randrange(size)


def lru_replacement(entries: Sequence[_Tracked]) -> int:
    """Return the index of the least recently used entry (first one on ties)."""
    _require_entries(entries)
    return min(enumerate(entries), key=lambda pair: pair[1].last_access_moment)[0]


def mfu_replacement(entries: Sequence[_Tracked]) -> int:
    """Return the index of the most frequently used entry (first one on ties)."""
    _require_entries(entries)
    return max(enumerate(entries), key=lambda pair: pair[1].access_counter)[0]


def lfu_replacement(entries: Sequence[_Tracked]) -> int:
    """Return the index of the least frequently used entry (first one on ties)."""
    _require_entries(entries)
    return min(enumerate(entries), key=lambda pair: pair[1].access_counter)[0]


def select_victim(
    policy: str | ReplacementPolicy,
    entries: Sequence[_Tracked],
    rng: random.Random | None = None,
) -> int:
    """Return the index of the entry that ``policy`` would evict."""
    chosen = ReplacementPolicy.parse(policy)
    if chosen is ReplacementPolicy.RANDOM:
        return random_replacement(len(entries), rng)
    if chosen is ReplacementPolicy.LRU:
        return lru_replacement(entries)
    if chosen is ReplacementPolicy.MFU:
        return mfu_replacement(entries)
    return lfu_replacement(entries)
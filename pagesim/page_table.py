"""Page tables: dense, two-level, three-level and inverted."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Union

from .memory import ReplacementPolicy, select_victim as _select_victim

ADDRESS_SIZE = 32


class TableType(IntEnum):
    """Kinds of page table, numbered as on the command line."""

    DENSE = 0
    TWO_LEVEL = 1
    THREE_LEVEL = 2
    INVERTED = 3


@dataclass(frozen=True)
class TableOffsets:
    """Number of address bits indexing each level of a page table."""

    outer: int
    second: int
    third: int


def table_offsets(table_type: TableType | int, offset: int) -> TableOffsets:
    """Split the page-number bits of an address between the table levels.

    An inverted table is indexed by frame, not by address bits, so it is
    given the dense split.
    """
    kind = TableType(table_type)
    if not 0 <= offset <= ADDRESS_SIZE:
        raise ValueError(f"page offset must be between 0 and {ADDRESS_SIZE}, got {offset}")
    page_bits = ADDRESS_SIZE - offset
    if kind is TableType.TWO_LEVEL:
        second = page_bits // 2
        return TableOffsets(page_bits - second, second, 0)
    if kind is TableType.THREE_LEVEL:
        inner = page_bits // 3
        return TableOffsets(page_bits - 2 * inner, inner, inner)
    return TableOffsets(page_bits, 0, 0)


@dataclass(eq=False, slots=True)
class PageTableEntry:
    """A page table entry: whether the page is resident and in which frame."""

    valid: bool = False
    frame: int | None = None


@dataclass(eq=False, slots=True)
class InvertedEntry:
    """An inverted page table slot, standing for one physical frame."""

    frame: int | None = None
    modified: bool = False
    page: int | None = None
    last_access_moment: int = 0
    access_counter: int = 0


def _check_index(index: int, size: int) -> None:
    if not 0 <= index < size:
        raise IndexError(f"page index {index} out of range for table of {size} entries")


class DensePageTable:
    """A single-level table; entries come into being on first use."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"table size must not be negative, got {size}")
        self.size = size
        self._entries: dict[int, PageTableEntry] = {}

    def __len__(self) -> int:
        return self.size

    def entry(self, index: int) -> PageTableEntry:
        """Return the entry for page ``index``."""
        _check_index(index, self.size)
        found = self._entries.get(index)
        if found is None:
            found = self._entries[index] = PageTableEntry()
        return found


class TwoLevelPageTable:
    """An outer table whose inner dense tables are allocated on demand."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"table size must not be negative, got {size}")
        self.size = size
        self._inner: dict[int, DensePageTable] = {}

    def __len__(self) -> int:
        return self.size

    def entry(self, outer: int, second: int, second_bits: int) -> PageTableEntry:
        """Return the entry at ``outer``/``second``, creating the inner table if needed."""
        _check_index(outer, self.size)
        inner = self._inner.get(outer)
        if inner is None:
            inner = self._inner[outer] = DensePageTable(1 << second_bits)
        return inner.entry(second)


class ThreeLevelPageTable:
    """An outer table of on-demand two-level tables."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"table size must not be negative, got {size}")
        self.size = size
        self._inner: dict[int, TwoLevelPageTable] = {}

    def __len__(self) -> int:
        return self.size

    def entry(
        self, outer: int, second: int, third: int, second_bits: int, third_bits: int
    ) -> PageTableEntry:
        """Return the entry at ``outer``/``second``/``third``, creating inner tables as needed."""
        _check_index(outer, self.size)
        inner = self._inner.get(outer)
        if inner is None:
            inner = self._inner[outer] = TwoLevelPageTable(1 << second_bits)
        return inner.entry(second, third, third_bits)


class InvertedPageTable:
    """One slot per physical frame, each naming the virtual page it holds."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"table size must not be negative, got {size}")
        self.entries = [InvertedEntry() for _ in range(size)]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[InvertedEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> InvertedEntry:
        return self.entries[index]

    def find(self, page: int) -> tuple[int | None, bool]:
        """Look up ``page``.

        Returns ``(index, True)`` if a slot holds the page, otherwise
        ``(index, False)`` with the first empty slot, or ``(None, False)``
        if every slot is taken.
        """
        if page < 0:
            raise ValueError(f"page number must not be negative, got {page}")
        free = None
        for index, slot in enumerate(self.entries):
            if slot.page == page:
                return index, True
            if free is None and slot.page is None:
                free = index
        return free, False

    def select_victim(
        self, policy: str | ReplacementPolicy, rng: random.Random | None = None
    ) -> int:
        """Return the index of the slot that ``policy`` would evict."""
        return _select_victim(policy, self.entries, rng)


PageTable = Union[DensePageTable, TwoLevelPageTable, ThreeLevelPageTable, InvertedPageTable]


def create_page_table(number_of_pages: int, table_type: TableType | int) -> PageTable:
    """Return an empty page table of the given kind with ``number_of_pages`` outer entries."""
    kind = TableType(table_type)
    if kind is TableType.DENSE:
        return DensePageTable(number_of_pages)
    if kind is TableType.TWO_LEVEL:
        return TwoLevelPageTable(number_of_pages)
    if kind is TableType.THREE_LEVEL:
        return ThreeLevelPageTable(number_of_pages)
    return InvertedPageTable(number_of_pages)


def get_page(
    table: PageTable,
    outer: int,
    second: int,
    third: int,
    second_bits: int,
    third_bits: int,
) -> PageTableEntry:
    """Return the entry of a hierarchical table for the given level indices."""
    if isinstance(table, DensePageTable):
        return table.entry(outer)
    if isinstance(table, TwoLevelPageTable):
        return table.entry(outer, second, second_bits)
    if isinstance(table, ThreeLevelPageTable):
        return table.entry(outer, second, third, second_bits, third_bits)
    raise TypeError("an inverted page table has no per-page entries; use find()")
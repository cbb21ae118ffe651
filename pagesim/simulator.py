"""Trace-driven simulation of demand paging over several page table layouts."""

from __future__ import annotations

import random
import sys
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterable, Iterator, Sequence

from .bits import calculate_offset, make_mask
from .memory import PhysicalFrame, ReplacementPolicy, find_free_frame, init_memory, select_victim
from .page_table import (
    InvertedPageTable,
    TableType,
    create_page_table,
    get_page,
    table_offsets,
)

LOGS_DIR = "logs"
DEBUG_LOG = "debug.log"
_RULE = "============================="
_MAX_ADDRESS = 0xFFFFFFFF


def _write_debug(stream: IO[str], message: str) -> None:
    stream.write(f"{_RULE}\n{message}\n{_RULE}\n")
    stream.flush()


@dataclass(frozen=True)
class SimulationResult:
    """Counters gathered over a run."""

    memory_accesses: int
    page_faults: int
    dirty_pages: int


class Simulator:
    """Feeds memory accesses through a page table and a set of physical frames.

    ``page_size`` and ``mem_size`` are in kilobytes.
    """

    def __init__(
        self,
        policy: str | ReplacementPolicy,
        page_size: int,
        mem_size: int,
        table_type: TableType | int,
        rng: random.Random | None = None,
        debug_log: IO[str] | None = None,
    ) -> None:
        self.policy = ReplacementPolicy.parse(policy)
        if page_size <= 0:
            raise ValueError(f"page size must be positive, got {page_size}")
        if mem_size < 0:
            raise ValueError(f"memory size must not be negative, got {mem_size}")
        self.table_type = TableType(table_type)
        self.page_size = page_size
        self.mem_size = mem_size
        self.page_offset = calculate_offset(page_size << 10)
        self.offsets = table_offsets(self.table_type, self.page_offset)
        self.total_frames = mem_size // page_size
        if self.table_type is TableType.INVERTED:
            number_of_pages = self.total_frames
        else:
            number_of_pages = 1 << self.offsets.outer
        self.table = create_page_table(number_of_pages, self.table_type)
        self.memory: list[PhysicalFrame] = init_memory(self.total_frames)
        self.rng = rng
        self.debug_log = debug_log
        self.memory_accesses = 0
        self.page_faults = 0
        self.dirty_pages = 0
        self._clock = 0

    @property
    def result(self) -> SimulationResult:
        """The counters as they stand now."""
        return SimulationResult(self.memory_accesses, self.page_faults, self.dirty_pages)

    def _log(self, message: str) -> None:
        if self.debug_log is not None:
            _write_debug(self.debug_log, message)

    def _tick(self) -> int:
        self._clock += 1
        return self._clock

    def _touch(self, frame: PhysicalFrame, write: bool) -> None:
        frame.last_access_moment = self._tick()
        frame.access_counter += 1
        if write:
            frame.modified = True

    def _load(self, frame: PhysicalFrame, write: bool) -> None:
        frame.modified = write
        frame.last_access_moment = self._tick()
        frame.access_counter = 1

    def _split(self, addr: int) -> tuple[int, int, int, int]:
        """Return the level indices of ``addr`` and how many table lookups it costs."""
        shift = self.page_offset
        bits = self.offsets
        if self.table_type is TableType.TWO_LEVEL:
            second = (addr >> shift) & make_mask(bits.second)
            outer = (addr >> (shift + bits.second)) & make_mask(bits.outer)
            return outer, second, -1, 2
        if self.table_type is TableType.THREE_LEVEL:
            third = (addr >> shift) & make_mask(bits.third)
            second = (addr >> (shift + bits.third)) & make_mask(bits.second)
            outer = (addr >> (shift + bits.second + bits.third)) & make_mask(bits.outer)
            return outer, second, third, 3
        return addr >> shift, -1, -1, 1

    def access(self, addr: int, rw: str) -> bool:
        """Simulate one access; ``rw`` of ``"W"`` is a write. Return True on a hit."""
        if not 0 <= addr <= _MAX_ADDRESS:
            raise ValueError(f"address {addr:#x} does not fit in 32 bits")
        write = rw == "W"
        self._log(f"Processing access: address=0x{addr:x}, operation={rw}")
        outer, second, third, levels = self._split(addr)
        self.memory_accesses += levels
        if isinstance(self.table, InvertedPageTable):
            return self._access_inverted(self.table, outer, write)
        return self._access_hierarchical(outer, second, third, write)

    def _access_inverted(self, table: InvertedPageTable, page: int, write: bool) -> bool:
        self._log(f"Looking up page {page} in the inverted table")
        index, found = table.find(page)
        if found:
            assert index is not None
            slot = table[index]
            self._log(f"Page found in frame {index}; updating access data")
            slot.last_access_moment = self._tick()
            slot.access_counter += 1
            if write:
                slot.modified = True
            assert slot.frame is not None
            self._touch(self.memory[slot.frame], write)
            return True

        if index is not None:
            self.page_faults += 1
            self.memory_accesses += 1
            self._log(f"Page fault - placing page {page} in free frame {index}")
            slot = table[index]
            slot.frame = index
        else:
            # Evictions from the inverted table are not counted as page faults.
            self._log("Page fault - running the replacement algorithm")
            index = table.select_victim(self.policy, self.rng)
            self._log(f"Algorithm chose frame {index} for replacement")
            slot = table[index]
            if slot.modified:
                self.dirty_pages += 1
                self._log("Replaced page was modified (dirty)")
            self.memory_accesses += 1
        slot.page = page
        slot.last_access_moment = self._tick()
        slot.access_counter = 1
        slot.modified = write
        self._load(self.memory[index], write)
        return False

    def _access_hierarchical(self, outer: int, second: int, third: int, write: bool) -> bool:
        entry = get_page(self.table, outer, second, third, self.offsets.second, self.offsets.third)
        if entry.valid:
            self._log(f"Hit - page {outer}-{second}-{third} found in frame {entry.frame}")
            assert entry.frame is not None
            self._touch(self.memory[entry.frame], write)
            return True

        self.page_faults += 1
        self.memory_accesses += 1
        self._log(f"Page fault - page {outer}-{second}-{third} is not in memory")
        index = find_free_frame(self.memory)
        if index is None:
            self._log("Memory full - running the replacement algorithm")
            index = select_victim(self.policy, self.memory, self.rng)
            self._log(f"Algorithm chose frame {index} for replacement")
            frame = self.memory[index]
            if frame.modified:
                self.dirty_pages += 1
                self._log("Replaced page was modified (dirty)")
            evicted = frame.virtual_page
            if evicted is not None:
                evicted.valid = False
                evicted.frame = None
        else:
            self.memory_accesses += 1
            self._log(f"Placing page in free frame {index}")
            frame = self.memory[index]
            frame.allocated = True
        frame.virtual_page = entry
        self._load(frame, write)
        entry.frame = index
        entry.valid = True
        return False

    def run(self, accesses: Iterable[tuple[int, str]]) -> SimulationResult:
        """Simulate every ``(address, rw)`` pair in order and return the counters."""
        for addr, rw in accesses:
            self.access(addr, rw)
        return self.result


def parse_trace(lines: Iterable[str]) -> Iterator[tuple[int, str]]:
    """Yield ``(address, rw)`` pairs from lines of ``<hex address> <R|W>``.

    Blank lines are skipped; malformed lines raise ValueError.
    """
    for number, line in enumerate(lines, 1):
        fields = line.split()
        if not fields:
            continue
        if len(fields) != 2 or len(fields[1]) != 1:
            raise ValueError(f"line {number}: expected '<hex address> <R|W>', got {line.strip()!r}")
        try:
            addr = int(fields[0], 16)
        except ValueError:
            raise ValueError(f"line {number}: bad hexadecimal address {fields[0]!r}") from None
        if not 0 <= addr <= _MAX_ADDRESS:
            raise ValueError(f"line {number}: address {fields[0]!r} does not fit in 32 bits")
        yield addr, fields[1]


def format_report(
    result: SimulationResult, algorithm: str, filename: str, page_size: int, mem_size: int
) -> str:
    """Return the summary printed at the end of a run."""
    lines = [
        f"Algorithm: {algorithm}",
        f"Filename: {filename}",
        f"Page size: {page_size}",
        f"Memory size: {mem_size}",
        f"Memory accesses: {result.memory_accesses}",
        f"Page faults: {result.page_faults}",
        f"Dirty pages: {result.dirty_pages}",
    ]
    return "\n".join(lines) + "\n"


def main(argv: Sequence[str] | None = None) -> int:
    """Run the simulator: ALGORITHM TRACE PAGE_KB MEMORY_KB TABLE_TYPE [debug]."""
    args = list(sys.argv[1:] if argv is None else argv)
    debug = len(args) == 6 and args[5] == "debug"
    if not debug and len(args) < 5:
        print("Insuficient number of arguments")
        return 1

    algorithm, filename = args[0], args[1]
    try:
        page_size, mem_size, table_type = (int(value) for value in args[2:5])
    except ValueError:
        print("error: page size, memory size and table type must be integers", file=sys.stderr)
        return 1

    with ExitStack() as stack:
        debug_file: IO[str] | None = None
        if debug:
            try:
                debug_file = stack.enter_context(open(DEBUG_LOG, "w", encoding="utf-8"))
            except OSError:
                print("Could not open the debug log")
            else:
                _write_debug(debug_file, "Starting memory access simulation")

        try:
            simulator = Simulator(algorithm, page_size, mem_size, table_type, debug_log=debug_file)
            with (Path(LOGS_DIR) / filename).open(encoding="utf-8") as trace:
                result = simulator.run(parse_trace(trace))
        except (OSError, ValueError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1

        print(format_report(result, algorithm, filename, page_size, mem_size), end="")
        if debug_file is not None:
            _write_debug(
                debug_file,
                f"Simulation finished. Accesses: {result.memory_accesses}, "
                f"Page faults: {result.page_faults}, Dirty pages: {result.dirty_pages}",
            )
    return 0


if __name__ == "__main__":
    sys.exit(main())
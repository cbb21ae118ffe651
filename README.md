# pagesim

A trace-driven virtual memory simulator. It replays a trace of memory
accesses against a simulated physical memory and page table. At the end it
reports three counts for the trace: memory accesses, page faults, and
dirty pages written back on eviction.

## Page tables

The page table type is given by number:

| Type | Layout                           |
|------|----------------------------------|
| `0`  | dense (single-level) page table  |
| `1`  | two-level page table             |
| `2`  | three-level page table           |
| `3`  | inverted page table              |

Addresses are 32 bits wide. The page offset is `log2(PAGE_SIZE * 1024)`
bits, and the remaining page number bits are split between the levels:

- Two-level tables give half of the bits (rounded down) to the inner level
  and the rest to the outer level.
- Three-level tables give a third of the bits (rounded down) to each inner
  level and the rest to the outer level.

Inner tables are created only when a page inside them is first touched. An
inverted table has one slot per physical frame.

## Replacement policies

When every frame is in use, a policy chooses the frame to evict:

- `random`: a frame chosen at random
- `lru`: the least recently used frame
- `lfu`: the least frequently used frame
- `mfu`: the most frequently used frame

On ties, `lru`, `lfu` and `mfu` pick the lowest index.

## Installation

```
pip install .
```

## Usage

```
pagesim ALGORITHM TRACE PAGE_SIZE MEM_SIZE TABLE_TYPE [debug]
```

- `ALGORITHM`: one of `random`, `lru`, `lfu` or `mfu`
- `TRACE`: name of the trace file, looked up inside the `logs/` directory
  of the current directory
- `PAGE_SIZE`: page size in KB
- `MEM_SIZE`: physical memory size in KB. The number of frames is
  `MEM_SIZE // PAGE_SIZE`.
- `TABLE_TYPE`: `0`, `1`, `2` or `3`, as in the table above
- `debug`: optional, and only recognised as the sixth argument. It writes a
  step-by-step account of the simulation to `debug.log` in the current
  directory.

Each line of a trace holds a hexadecimal address and an operation. `W` is a
write and any other single character is a read. Blank lines are skipped. A
malformed line, or an address wider than 32 bits, stops the run with an
error.

```
0041f7a0 R
13f5e2c0 W
05e78900 R
```

Example:

```
$ pagesim lru trace.log 4 128 1
Algorithm: lru
Filename: trace.log
Page size: 4
Memory size: 128
Memory accesses: ...
Page faults: ...
Dirty pages: ...
```

The command exits with status 1 in these cases:

- fewer than five arguments are given (it prints `Insuficient number of arguments`)
- a size or the table type is not an integer
- the algorithm or table type is unknown
- the trace cannot be read or is malformed

## How the counters move

**Memory accesses**

- Every access costs one memory access per table level: 1 for dense and
  inverted tables, 2 for two-level tables, and 3 for three-level tables.
- For dense and multi-level tables, a page fault adds one more. Placing the
  page in a free frame adds a further one.
- For inverted tables, any miss adds one more.

**Page faults**

- For dense and multi-level tables, every miss counts as a page fault.
- For inverted tables, only a miss that fills an empty slot counts as a page
  fault. A miss that evicts a page does not.

**Dirty pages**

- Counted when the evicted frame, or inverted table slot, had been written
  since it was loaded.

## Using it as a library

```python
from pagesim.memory import ReplacementPolicy
from pagesim.page_table import TableType
from pagesim.simulator import Simulator, parse_trace, format_report

with open("logs/trace.log") as trace:
    sim = Simulator(ReplacementPolicy.parse("lru"), 4, 128, TableType(1), None, None)
    result = sim.run(parse_trace(trace))

print(format_report(result, "lru", "trace.log", 4, 128), end="")
```

**`pagesim.simulator`**

- `Simulator.access(addr, rw)` processes a single access and returns `True`
  on a hit.
- `Simulator.run(accesses)` processes a sequence of `(address, operation)`
  pairs and returns a `SimulationResult` with `memory_accesses`,
  `page_faults` and `dirty_pages`.
- The `rng` argument takes a `random.Random` for reproducible `random`
  eviction. Without it, the `random` module is used.
- The `debug_log` argument takes a text stream to receive the step-by-step
  account.

**Other modules**

- `pagesim.memory` holds `PhysicalFrame`, `ReplacementPolicy` and the
  victim-selection functions.
- `pagesim.page_table` holds the four table classes, `TableType`,
  `table_offsets` and `get_page`.
- `pagesim.bits` holds the address bit helpers `calculate_offset`,
  `make_mask` and `count_bits_unsigned`.

## Running the tests

```
pip install .[test]
pytest
```
import io
import random

import pytest

from pagesim.page_table import TableType, get_page
from pagesim.simulator import (
    SimulationResult,
    Simulator,
    format_report,
    main,
    parse_trace,
)

PAGE_A = 0x0000
PAGE_B = 0x1000
PAGE_C = 0x2000

ALL_TYPES = list(TableType)
HIERARCHICAL = [TableType.DENSE, TableType.TWO_LEVEL, TableType.THREE_LEVEL]


def _two_frames(policy, table_type, rng=None):
    return Simulator(policy, 4, 8, table_type, rng=rng)


@pytest.mark.parametrize("table_type", ALL_TYPES)
def test_distinct_pages_within_capacity_all_fault(table_type):
    sim = Simulator("lru", 4, 64, table_type)
    trace = [(page << 12, "R") for page in range(sim.total_frames)]
    result = sim.run(trace)
    assert result.page_faults == len(trace)
    assert result.dirty_pages == 0


@pytest.mark.parametrize("table_type", ALL_TYPES)
def test_repeated_page_faults_once(table_type):
    sim = _two_frames("lru", table_type)
    hits = [sim.access(PAGE_A + 4 * step, "R") for step in range(5)]
    assert hits == [False, True, True, True, True]
    assert sim.page_faults == 1


@pytest.mark.parametrize(
    "table_type, levels",
    [(TableType.DENSE, 1), (TableType.TWO_LEVEL, 2), (TableType.THREE_LEVEL, 3), (TableType.INVERTED, 1)],
)
def test_hit_costs_one_lookup_per_level(table_type, levels):
    sim = _two_frames("lru", table_type)
    sim.access(PAGE_A, "R")
    before = sim.memory_accesses
    assert sim.access(PAGE_A, "W") is True
    assert sim.memory_accesses - before == levels


@pytest.mark.parametrize("table_type", ALL_TYPES)
def test_fault_costs_more_than_hit(table_type):
    sim = _two_frames("lru", table_type)
    sim.access(PAGE_A, "R")
    fault_cost = sim.memory_accesses
    sim.access(PAGE_A, "R")
    hit_cost = sim.memory_accesses - fault_cost
    assert fault_cost > hit_cost


@pytest.mark.parametrize("table_type", ALL_TYPES)
def test_evicting_written_page_counts_dirty(table_type):
    sim = Simulator("lru", 4, 4, table_type)
    sim.access(PAGE_A, "W")
    sim.access(PAGE_B, "R")
    assert sim.dirty_pages == 1


@pytest.mark.parametrize("table_type", ALL_TYPES)
def test_evicting_read_page_is_clean(table_type):
    sim = Simulator("lru", 4, 4, table_type)
    sim.access(PAGE_A, "R")
    sim.access(PAGE_B, "R")
    sim.access(PAGE_C, "R")
    assert sim.dirty_pages == 0


@pytest.mark.parametrize("table_type", ALL_TYPES)
def test_write_on_hit_marks_dirty(table_type):
    sim = Simulator("lru", 4, 4, table_type)
    sim.access(PAGE_A, "R")
    sim.access(PAGE_A, "W")
    sim.access(PAGE_B, "R")
    assert sim.dirty_pages == 1


@pytest.mark.parametrize("table_type", ALL_TYPES)
@pytest.mark.parametrize("policy, a_survives", [("lru", False), ("lfu", True), ("mfu", False)])
def test_policies_choose_expected_victim(table_type, policy, a_survives):
    sim = _two_frames(policy, table_type)
    for _ in range(3):
        sim.access(PAGE_A, "R")
    sim.access(PAGE_B, "R")
    assert sim.access(PAGE_C, "R") is False
    assert sim.access(PAGE_A, "R") is a_survives


@pytest.mark.parametrize("table_type", HIERARCHICAL)
def test_evicted_entry_is_invalidated(table_type):
    sim = Simulator("lru", 4, 4, table_type)
    sim.access(PAGE_A, "R")
    outer, second, third, _ = sim._split(PAGE_A)
    entry = get_page(sim.table, outer, second, third, sim.offsets.second, sim.offsets.third)
    assert entry.valid is True
    assert entry.frame == 0
    sim.access(PAGE_B, "R")
    assert entry.valid is False
    assert entry.frame is None
    assert sim.memory[0].virtual_page is not entry


def test_inverted_replacement_not_counted_as_fault():
    sim = Simulator("lru", 4, 4, TableType.INVERTED)
    sim.access(PAGE_A, "R")
    assert sim.access(PAGE_B, "R") is False
    assert sim.page_faults == 1
    assert sim.table[0].page == PAGE_B >> 12


@pytest.mark.parametrize("table_type", ALL_TYPES)
def test_random_policy_is_reproducible_with_seed(table_type):
    trace = [((step * 7) % 11) << 12 for step in range(60)]
    results = []
    for _ in range(2):
        sim = Simulator("random", 4, 12, table_type, rng=random.Random(42))
        results.append(sim.run((addr, "W") for addr in trace))
    assert results[0] == results[1]
    assert results[0].page_faults <= len(trace)


def test_result_property_matches_counters():
    sim = _two_frames("lru", TableType.DENSE)
    sim.run([(PAGE_A, "W"), (PAGE_B, "R"), (PAGE_C, "R")])
    assert sim.result == SimulationResult(sim.memory_accesses, sim.page_faults, sim.dirty_pages)


def test_unknown_algorithm_rejected():
    with pytest.raises(ValueError):
        Simulator("fifo", 4, 8, TableType.DENSE)


def test_zero_page_size_rejected():
    with pytest.raises(ValueError):
        Simulator("lru", 0, 8, TableType.DENSE)


def test_unknown_table_type_rejected():
    with pytest.raises(ValueError):
        Simulator("lru", 4, 8, 7)


def test_address_out_of_range_rejected():
    sim = _two_frames("lru", TableType.DENSE)
    with pytest.raises(ValueError):
        sim.access(1 << 32, "R")


@pytest.mark.parametrize("table_type", ALL_TYPES)
def test_no_frames_cannot_load(table_type):
    sim = Simulator("lru", 8, 4, table_type)
    with pytest.raises(ValueError):
        sim.access(PAGE_A, "R")


def test_debug_log_receives_messages():
    log = io.StringIO()
    sim = Simulator("lru", 4, 8, TableType.DENSE, debug_log=log)
    sim.access(PAGE_A, "R")
    text = log.getvalue()
    assert "=============================" in text
    assert "0x0" in text


def test_parse_trace_reads_pairs():
    lines = ["0041f7a0 R\n", "   \n", "0x10 W\n"]
    assert list(parse_trace(lines)) == [(0x0041F7A0, "R"), (0x10, "W")]


@pytest.mark.parametrize("line", ["zz R", "10", "10 RW", "100000000 R", "-5 R"])
def test_parse_trace_rejects_malformed(line):
    with pytest.raises(ValueError):
        list(parse_trace([line]))


def test_format_report_layout():
    result = SimulationResult(memory_accesses=10, page_faults=4, dirty_pages=2)
    text = format_report(result, "lru", "trace.log", 4, 128)
    assert text == (
        "Algorithm: lru\n"
        "Filename: trace.log\n"
        "Page size: 4\n"
        "Memory size: 128\n"
        "Memory accesses: 10\n"
        "Page faults: 4\n"
        "Dirty pages: 2\n"
    )


def _write_trace(tmp_path, lines):
    logs = tmp_path / "logs"
    logs.mkdir()
    (logs / "trace.txt").write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_main_prints_report(tmp_path, monkeypatch, capsys):
    lines = ["00000000 W", "00001000 R", "00002000 R", "00000000 R"]
    _write_trace(tmp_path, lines)
    monkeypatch.chdir(tmp_path)
    assert main(["lru", "trace.txt", "4", "8", "0"]) == 0
    expected = Simulator("lru", 4, 8, TableType.DENSE).run(parse_trace(lines))
    assert capsys.readouterr().out == format_report(expected, "lru", "trace.txt", 4, 8)


def test_main_debug_writes_log(tmp_path, monkeypatch, capsys):
    _write_trace(tmp_path, ["00000000 R"])
    monkeypatch.chdir(tmp_path)
    assert main(["lfu", "trace.txt", "4", "8", "1", "debug"]) == 0
    assert "Algorithm: lfu" in capsys.readouterr().out
    assert "=============================" in (tmp_path / "debug.log").read_text(encoding="utf-8")


def test_main_insufficient_arguments(capsys):
    assert main(["lru", "trace.txt"]) == 1
    assert "Insuficient number of arguments" in capsys.readouterr().out


def test_main_missing_trace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["lru", "absent.txt", "4", "8", "0"]) == 1


def test_main_bad_number(tmp_path, monkeypatch):
    _write_trace(tmp_path, ["00000000 R"])
    monkeypatch.chdir(tmp_path)
    assert main(["lru", "trace.txt", "four", "8", "0"]) == 1
"""
Scenario Loader and CLI Tests

Loads the bundled scenario files and drives the command-line entry point
end to end.
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.sorting import SortAlgorithm
from models.memory import FitStrategy
from models.process import SchedulingAlgorithm
from simulator import main, run_deadlock, run_memory
from utils.logger import SimulatorLogger
from utils.scenario_loader import (
    ScenarioLoadError,
    get_scenario_description,
    load_scenario,
    parse_scenario,
)

SCENARIOS = project_root / "scenarios"


def _write(tmp_path, data, name="scenario.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_load_round_robin_scenario():
    scenario = load_scenario(str(SCENARIOS / "round_robin.json"))
    assert scenario.scheduling.algorithm == SchedulingAlgorithm.ROUND_ROBIN
    assert scenario.scheduling.quantum == 3
    assert [p.pid for p in scenario.scheduling.processes] == ["P1", "P2", "P3"]
    assert scenario.memory is None and scenario.deadlock is None


def test_load_defaults(tmp_path):
    path = _write(tmp_path, {
        "memory": {"operations": []},
        "sorting": {"size": 12, "seed": 4},
    })
    scenario = load_scenario(path)
    assert scenario.memory.total_memory == 2048
    assert scenario.memory.strategy == FitStrategy.BEST_FIT
    assert scenario.sorting.algorithm == SortAlgorithm.QUICK
    assert len(scenario.sorting.values) == 12
    assert scenario.description == ""


@pytest.mark.parametrize("data", [
    [],
    {"description": "nothing to run"},
    {"scheduling": {}},
    {"scheduling": {"processes": [{"pid": "P1", "arrival_time": 0}]}},
    {"scheduling": {"processes": [
        {"pid": "P1", "arrival_time": 0, "burst_time": 2},
        {"pid": "P1", "arrival_time": 1, "burst_time": 2},
    ]}},
    {"scheduling": {"quantum": 0, "processes": []}},
    {"scheduling": {"processes": [{"pid": "P1", "arrival_time": -1, "burst_time": 2}]}},
    {"memory": {"strategy": "Perfect Fit"}},
    {"memory": {"operations": [{"op": "compact"}]}},
    {"memory": {"operations": [{"op": "allocate", "name": "A"}]}},
    {"memory": {"operations": [{"op": "tick", "amount": -2}]}},
    {"memory": []},
    {"memory": {"operations": ["allocate"]}},
    {"memory": {"operations": {"op": "tick"}}},
    {"scheduling": {"processes": [5]}},
    {"scheduling": {"processes": "P1"}},
    {"deadlock": {"available": [1], "processes": ["P0"]}},
    {"deadlock": {"available": [1], "release": "P0"}},
    {"sorting": "quick"},
    {"deadlock": {"processes": []}},
    {"deadlock": {"available": [1, 1], "processes": [{"name": "P0", "allocation": [0], "max": [1, 1]}]}},
    {"sorting": {"algorithm": "quick"}},
    {"sorting": {"algorithm": "bogo", "values": [1]}},
])
def test_invalid_scenarios(data):
    with pytest.raises(ScenarioLoadError):
        parse_scenario(data)


def test_load_errors(tmp_path):
    with pytest.raises(ScenarioLoadError):
        load_scenario(str(tmp_path / "missing.json"))

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ScenarioLoadError):
        load_scenario(str(broken))


def test_get_scenario_description(tmp_path):
    assert get_scenario_description(str(SCENARIOS / "sorting.json")) == "Parallel quick sort on a fixed array"
    assert get_scenario_description(str(tmp_path / "missing.json")) == ""


def test_run_memory_replays_operations():
    scenario = load_scenario(str(SCENARIOS / "memory_fragmentation.json"))
    state = run_memory(scenario, SimulatorLogger(quiet=True))

    stats = state.stats()
    assert stats.used == 300
    assert stats.fragmented == 100
    assert stats.fragmented_pct == pytest.approx(10.0)
    assert state.current_time == 4

    assert [p.name for p in state.history] == ["A", "B", "C", "D", "E"]
    released = {p.name: p.deallocated_at for p in state.history}
    assert released == {"A": 3, "B": 4, "C": 3, "D": None, "E": None}

    placed = {b.occupant.name: (b.start, b.end) for b in state.blocks if not b.is_free}
    assert placed == {"E": (600, 750), "D": (800, 950)}


def test_run_memory_strategy_override():
    scenario = load_scenario(str(SCENARIOS / "memory_fragmentation.json"))
    assert run_memory(scenario, SimulatorLogger(quiet=True), strategy="worst").strategy == FitStrategy.WORST_FIT
    assert run_memory(scenario, SimulatorLogger(quiet=True), strategy="nope") is None


def test_run_deadlock_release_makes_state_safe():
    scenario = load_scenario(str(SCENARIOS / "mutual_wait.json"))
    state = run_deadlock(scenario, SimulatorLogger(quiet=True))

    assert state.available == [1, 0]
    assert state.last_result.safe
    assert state.last_result.sequence == ["P1"]


def test_cli_schedule(capsys):
    assert main(["schedule", "--scenario", str(SCENARIOS / "round_robin.json")]) == 0
    out = capsys.readouterr().out
    assert "CPU SCHEDULING: RR (quantum=3)" in out
    assert "P3: Start Time = 14, Duration = 2" in out
    assert "CPU utilization:         100.00%" in out


def test_cli_schedule_override(capsys):
    assert main(["schedule", "--scenario", str(SCENARIOS / "round_robin.json"), "--algorithm", "sjf"]) == 0
    assert "CPU SCHEDULING: SJF" in capsys.readouterr().out

    assert main(["schedule", "--scenario", str(SCENARIOS / "round_robin.json"), "--algorithm", "lottery"]) == 1
    assert "[ERROR]" in capsys.readouterr().out


def test_cli_deadlock(capsys):
    assert main(["deadlock", "--scenario", str(SCENARIOS / "bankers_safe.json")]) == 0
    out = capsys.readouterr().out
    assert "System is in a safe state with sequence: P1 -> P3 -> P4 -> P0 -> P2" in out
    assert "R0 -> P1 (allocation, 2)" in out


def test_cli_deadlock_unsafe_then_release(capsys):
    assert main(["deadlock", "--scenario", str(SCENARIOS / "mutual_wait.json")]) == 0
    out = capsys.readouterr().out
    assert "[WARNING] System is in a deadlock state." in out
    assert "Resources released from process P0" in out
    assert "System is in a safe state with sequence: P1" in out


def test_cli_sort(capsys):
    assert main(["sort", "--scenario", str(SCENARIOS / "sorting.json"), "--algorithm", "bucket"]) == 0
    out = capsys.readouterr().out
    assert "SORTING: BUCKET" in out
    assert "Output: [3, 7, 15, 28, 42, 64, 81, 93]" in out


def test_cli_memory_writes_log_file(tmp_path, capsys):
    log_path = tmp_path / "run.log"
    code = main([
        "memory", "--scenario", str(SCENARIOS / "memory_fragmentation.json"),
        "--log-file", str(log_path),
    ])
    assert code == 0
    text = log_path.read_text(encoding="utf-8")
    assert text.startswith("Simulation Log - ")
    assert "F requests 900 - REJECTED" in text
    assert "[DEBUG]" not in text


def test_cli_failures(tmp_path, capsys):
    assert main(["memory", "--scenario", str(tmp_path / "missing.json")]) == 1
    assert "Failed to load scenario" in capsys.readouterr().out

    assert main(["sort", "--scenario", str(SCENARIOS / "round_robin.json")]) == 1
    assert "Scenario has no 'sorting' section" in capsys.readouterr().out

    with pytest.raises(SystemExit):
        main(["compile", "--scenario", str(SCENARIOS / "sorting.json")])


def test_cli_rejects_bad_width(capsys):
    assert main(["schedule", "--scenario", str(SCENARIOS / "round_robin.json"), "--width", "0"]) == 1
    assert "[ERROR]" in capsys.readouterr().out

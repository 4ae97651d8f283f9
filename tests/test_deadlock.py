"""
Deadlock Safety Tests

Covers the priority-ordered Banker's safety check, the resource-allocation
graph and the deadlock session.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.avoidance import check_safety
from algorithms.graph import EdgeType, NodeType, build_resource_graph
from analysis.events import EventType
from models.resource import ResourceAllocation
from models.system_state import SystemState
from utils.errors import ValidationError


def _big_safe_example(priorities=None):
    """Five processes over three resource types, available [3, 3, 2]."""
    rows = [
        ("P0", [0, 1, 0], [7, 5, 3]),
        ("P1", [2, 0, 0], [3, 2, 2]),
        ("P2", [3, 0, 2], [9, 0, 2]),
        ("P3", [2, 1, 1], [2, 2, 2]),
        ("P4", [0, 0, 2], [4, 3, 3]),
    ]
    priorities = priorities or {}
    return [ResourceAllocation(name, alloc, max_d, priorities.get(name, 0)) for name, alloc, max_d in rows]


def _mutual_wait():
    return [
        ResourceAllocation("P0", [1, 0], [2, 1]),
        ResourceAllocation("P1", [0, 1], [1, 2]),
    ]


def test_need_is_max_minus_allocation():
    for process in _big_safe_example():
        assert process.need == [m - a for m, a in zip(process.max_demand, process.allocation)]
    assert _big_safe_example()[0].need == [7, 4, 3]


def test_big_safe_example():
    result = check_safety([3, 3, 2], _big_safe_example())
    assert result.safe
    # A pass keeps scanning after each success; P4 finishes before the second pass reaches P0
    assert result.sequence == ["P1", "P3", "P4", "P0", "P2"]


def test_priority_sets_scan_order():
    result = check_safety([3, 3, 2], _big_safe_example({"P3": 0, "P1": 1, "P0": 2, "P2": 2, "P4": 2}))
    assert result.safe
    assert result.sequence == ["P3", "P1", "P0", "P2", "P4"]


def test_mutual_wait_is_unsafe():
    result = check_safety([0, 0], _mutual_wait())
    assert not result.safe
    assert result.sequence == []
    assert result.finished == []


def test_unsafe_keeps_partial_progress_separately():
    processes = [
        ResourceAllocation("A", [0, 0], [1, 1]),
        ResourceAllocation("B", [1, 0], [3, 0]),
    ]
    result = check_safety([1, 1], processes)
    assert not result.safe
    assert result.sequence == []
    assert result.finished == ["A"]


def test_safety_check_is_pure():
    processes = _big_safe_example()
    available = [3, 3, 2]
    first = check_safety(available, processes)
    second = check_safety(available, processes)
    assert first == second
    assert available == [3, 3, 2]
    assert [p.process_id for p in processes] == ["P0", "P1", "P2", "P3", "P4"]


def test_no_processes_is_safe():
    result = check_safety([1, 2], [])
    assert result.safe and result.sequence == []


def test_vector_validation():
    with pytest.raises(ValidationError):
        check_safety([3, 3], _big_safe_example())
    with pytest.raises(ValidationError):
        check_safety([3, -1, 2], _big_safe_example())
    with pytest.raises(ValidationError):
        ResourceAllocation("X", [1, 2], [1])
    with pytest.raises(ValidationError):
        ResourceAllocation("X", [3, 0], [2, 0])
    with pytest.raises(ValidationError):
        ResourceAllocation("X", [1, -1], [2, 0])
    with pytest.raises(ValidationError):
        ResourceAllocation("X", [float("nan")], [2])


def test_resource_graph_edges():
    graph = build_resource_graph(2, _mutual_wait())

    assert [(n.node_id, n.node_type) for n in graph.nodes] == [
        ("R0", NodeType.RESOURCE),
        ("R1", NodeType.RESOURCE),
        ("P0", NodeType.PROCESS),
        ("P1", NodeType.PROCESS),
    ]
    allocation = {(e.source, e.target, e.weight) for e in graph.edges_of_type(EdgeType.ALLOCATION)}
    request = {(e.source, e.target, e.weight) for e in graph.edges_of_type(EdgeType.REQUEST)}
    assert allocation == {("R0", "P0", 1), ("R1", "P1", 1)}
    assert request == {("P0", "R0", 1), ("P0", "R1", 1), ("P1", "R0", 1), ("P1", "R1", 1)}
    assert graph.neighbors("R0") == ["P0"]


def test_resource_graph_skips_zero_entries():
    processes = [ResourceAllocation("P", [0, 2], [0, 2])]
    graph = build_resource_graph(2, processes)
    assert [(e.source, e.target, e.edge_type) for e in graph.edges] == [("R1", "P", EdgeType.ALLOCATION)]


def test_system_state_session():
    state = SystemState()
    assert state.set_available("3, 3, 2").success
    for process in _big_safe_example():
        assert state.add_process(process.process_id, process.allocation, process.max_demand).success

    assert state.need_matrix.shape == (5, 3)
    assert np.array_equal(state.need_matrix, state.max_demand_matrix - state.allocation_matrix)

    result = state.check_safety()
    assert result.success and result.value.safe
    assert state.last_result.sequence == ["P1", "P3", "P4", "P0", "P2"]


def test_release_returns_allocation_without_recheck():
    state = SystemState([0, 0])
    state.add_process("P0", "1, 0", "2, 1", "1")
    state.add_process("P1", [0, 1], [1, 2], 2)

    verdict = state.check_safety().value
    assert not verdict.safe and verdict.sequence == []

    removed = state.remove_process("P0")
    assert removed.success
    assert state.available == [1, 0]
    assert [p.process_id for p in state.processes] == ["P1"]
    assert state.last_result is None, "Removing a process must not run a safety check"
    assert len(state.event_log.get_events_by_type(EventType.SAFETY_CHECK)) == 1


def test_system_state_rejections_leave_state_unchanged():
    state = SystemState()
    assert state.add_process("P0", [1], [1]).error_kind == "validation"

    state.set_available([2, 2])
    state.add_process("P0", [1, 0], [1, 1])

    assert state.add_process("P0", [0, 0], [1, 1]).error_kind == "validation"
    assert state.add_process("P1", [0, 0, 0], [1, 1, 1]).error_kind == "validation"
    assert state.add_process("P2", "1, x", "2, 2").error_kind == "validation"
    assert state.add_process("P3", [0, 0], [1, 1], priority="high").error_kind == "validation"
    assert state.set_available([1, 2, 3]).error_kind == "validation"
    assert state.set_available("1,,2").error_kind == "validation"
    assert state.remove_process("ghost").error_kind == "not_found"

    assert state.available == [2, 2]
    assert [p.process_id for p in state.processes] == ["P0"]


def test_display_lists_matrices():
    state = SystemState([3, 3, 2])
    state.add_process("P0", [0, 1, 0], [7, 5, 3])
    text = state.display()
    assert "Need Matrix (Max - Allocation):" in text
    assert "P0" in text


def test_event_log_queries_by_subject():
    state = SystemState([1, 1])
    state.add_process("P0", [0, 0], [1, 1])
    state.add_process("P0", [0, 0], [1, 1])
    state.remove_process("P0")

    events = state.event_log.get_events_for("P0")
    assert [e.event_type for e in events] == [
        EventType.PROCESS_ADDED,
        EventType.REJECTION,
        EventType.PROCESS_REMOVED,
    ]


def test_system_state_accepts_numpy_available():
    state = SystemState(np.array([3, 3, 2]))
    assert state.available == [3, 3, 2]
    assert SystemState(state.available_vector).available == [3, 3, 2]
    assert SystemState().available == []

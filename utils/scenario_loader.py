"""
Scenario Loader for the OS Concepts Simulator.

Loads and validates JSON scenario files. A scenario holds one optional
section per simulator:

    {
      "description": "...",
      "scheduling": {"algorithm": "rr", "quantum": 3,
                     "processes": [{"pid": "P1", "arrival_time": 0, "burst_time": 5}]},
      "memory": {"total_memory": 1000, "strategy": "Best Fit",
                 "operations": [{"op": "allocate", "name": "A", "size": 100},
                                {"op": "tick", "amount": 2},
                                {"op": "deallocate", "name": "A"}]},
      "deadlock": {"available": [3, 3, 2],
                   "processes": [{"name": "P0", "allocation": [0, 1, 0], "max": [7, 5, 3]}],
                   "release": ["P0"]},
      "sorting": {"algorithm": "quick", "values": [5, 3, 1]}
    }
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from algorithms.sorting import SortAlgorithm, random_values
from models.memory import FitStrategy
from models.process import Process, SchedulingAlgorithm
from models.memory_state import DEFAULT_STRATEGY, DEFAULT_TOTAL_MEMORY
from models.schedule_state import DEFAULT_QUANTUM
from utils.errors import ValidationError
from utils.validation import validate_int, validate_vector


class ScenarioLoadError(Exception):
    """Exception raised when scenario file cannot be loaded or is invalid."""
    pass


MEMORY_OPERATIONS = ("allocate", "deallocate", "tick")


@dataclass
class SchedulingScenario:
    algorithm: SchedulingAlgorithm
    quantum: int
    processes: List[Process]


@dataclass
class MemoryScenario:
    total_memory: int
    strategy: FitStrategy
    operations: List[Dict[str, Any]]


@dataclass
class DeadlockScenario:
    available: List[int]
    processes: List[Dict[str, Any]]
    release: List[str] = field(default_factory=list)


@dataclass
class SortingScenario:
    algorithm: SortAlgorithm
    values: List[int]


@dataclass
class Scenario:
    description: str = ""
    scheduling: Optional[SchedulingScenario] = None
    memory: Optional[MemoryScenario] = None
    deadlock: Optional[DeadlockScenario] = None
    sorting: Optional[SortingScenario] = None


def load_scenario(file_path: str) -> Scenario:
    """
    Load scenario from JSON file.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Scenario with a parsed section for every simulator present in the file

    Raises:
        ScenarioLoadError: If file cannot be loaded or is invalid
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ScenarioLoadError(f"Scenario file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise ScenarioLoadError(f"Invalid JSON in scenario file: {e}")

    return parse_scenario(data)


def parse_scenario(data: Dict[str, Any]) -> Scenario:
    """
    Build a Scenario from already-decoded JSON data.

    Raises:
        ScenarioLoadError: If a section is missing required fields or holds
            invalid values
    """
    if not isinstance(data, dict):
        raise ScenarioLoadError("Scenario must be a JSON object")

    sections = ('scheduling', 'memory', 'deadlock', 'sorting')
    if not any(name in data for name in sections):
        raise ScenarioLoadError(f"Scenario has none of the sections: {', '.join(sections)}")

    scenario = Scenario(description=data.get('description', ''))

    for name in sections:
        if name in data:
            _require_object(data[name], f"'{name}' section")

    try:
        if 'scheduling' in data:
            scenario.scheduling = _load_scheduling(data['scheduling'])
        if 'memory' in data:
            scenario.memory = _load_memory(data['memory'])
        if 'deadlock' in data:
            scenario.deadlock = _load_deadlock(data['deadlock'])
        if 'sorting' in data:
            scenario.sorting = _load_sorting(data['sorting'])
    except ValidationError as e:
        raise ScenarioLoadError(str(e))

    return scenario


def _require_object(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ScenarioLoadError(f"{what} must be a JSON object, got {type(value).__name__}")
    return value


def _require_list(value: Any, what: str) -> List[Any]:
    if not isinstance(value, list):
        raise ScenarioLoadError(f"{what} must be a JSON array, got {type(value).__name__}")
    return value


def _load_scheduling(section: Dict[str, Any]) -> SchedulingScenario:
    """
    Load the scheduling section.

    Args:
        section: Scheduling dictionary from scenario

    Returns:
        SchedulingScenario
    """
    if 'processes' not in section:
        raise ScenarioLoadError("Scheduling section missing 'processes' field")

    processes = []
    for proc_data in _require_list(section['processes'], "Scheduling 'processes'"):
        _require_object(proc_data, "Scheduling process")
        required_fields = ['pid', 'arrival_time', 'burst_time']
        for name in required_fields:
            if name not in proc_data:
                raise ScenarioLoadError(f"Process missing required field: {name}")
        processes.append(Process(
            pid=str(proc_data['pid']),
            arrival_time=proc_data['arrival_time'],
            burst_time=proc_data['burst_time'],
            priority=proc_data.get('priority', 0)
        ))

    pids = [p.pid for p in processes]
    if len(set(pids)) != len(pids):
        raise ScenarioLoadError(f"Duplicate process ids in scheduling section: {pids}")

    return SchedulingScenario(
        algorithm=SchedulingAlgorithm.parse(section.get('algorithm', 'fcfs')),
        quantum=validate_int(section.get('quantum', DEFAULT_QUANTUM), "quantum", minimum=1),
        processes=processes
    )


def _load_memory(section: Dict[str, Any]) -> MemoryScenario:
    """Load the memory section; operations are validated for shape only."""
    total_memory = validate_int(section.get('total_memory', DEFAULT_TOTAL_MEMORY), "total_memory", minimum=1)
    strategy = FitStrategy.parse(section.get('strategy', DEFAULT_STRATEGY))

    operations = []
    for i, op in enumerate(_require_list(section.get('operations', []), "Memory 'operations'")):
        _require_object(op, f"Memory operation {i}")
        kind = op.get('op')
        if kind not in MEMORY_OPERATIONS:
            raise ScenarioLoadError(
                f"Memory operation {i}: unknown op {kind!r} (expected one of {MEMORY_OPERATIONS})"
            )
        if kind == 'allocate' and ('name' not in op or 'size' not in op):
            raise ScenarioLoadError(f"Memory operation {i}: allocate needs 'name' and 'size'")
        if kind == 'deallocate' and 'name' not in op:
            raise ScenarioLoadError(f"Memory operation {i}: deallocate needs 'name'")
        op = dict(op)
        if kind == 'tick':
            op['amount'] = validate_int(op.get('amount', 1), f"operations[{i}].amount")
        operations.append(op)

    return MemoryScenario(total_memory, strategy, operations)


def _load_deadlock(section: Dict[str, Any]) -> DeadlockScenario:
    """
    Load the deadlock section.

    Vector lengths are checked against 'available' here so a bad file fails
    at load time rather than halfway through a run.
    """
    if 'available' not in section:
        raise ScenarioLoadError("Deadlock section missing 'available' field")
    available = validate_vector(section['available'], "available")

    processes = []
    for proc_data in _require_list(section.get('processes', []), "Deadlock 'processes'"):
        _require_object(proc_data, "Deadlock process")
        for name in ('name', 'allocation', 'max'):
            if name not in proc_data:
                raise ScenarioLoadError(f"Deadlock process missing required field: {name}")
        for name in ('allocation', 'max'):
            validate_vector(proc_data[name], f"{proc_data['name']}.{name}", length=len(available))
        processes.append({
            'name': str(proc_data['name']),
            'allocation': list(proc_data['allocation']),
            'max': list(proc_data['max']),
            'priority': proc_data.get('priority', 0),
        })

    release = [str(name) for name in _require_list(section.get('release', []), "Deadlock 'release'")]
    return DeadlockScenario(available, processes, release)


def _load_sorting(section: Dict[str, Any]) -> SortingScenario:
    algorithm = SortAlgorithm.parse(section.get('algorithm', 'quick'))
    if 'values' in section:
        values = validate_vector(section['values'], "values")
    elif 'size' in section:
        values = random_values(section['size'], section.get('seed'))
    else:
        raise ScenarioLoadError("Sorting section needs 'values' or 'size'")
    return SortingScenario(algorithm, values)


def get_scenario_description(file_path: str) -> str:
    """
    Get description from scenario file without full loading.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Description string, or empty string if not present or unreadable
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return ''
    return data.get('description', '') if isinstance(data, dict) else ''

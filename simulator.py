#!/usr/bin/env python3
"""
OS Concepts Simulator
Main entry point for the simulation system.

Educational tool for demonstrating CPU scheduling, memory allocation,
deadlock avoidance and sorting algorithms.
"""

import argparse
import sys
from typing import Callable, Dict, List, Optional

from algorithms.sorting import SortTrace, trace_sort
from analysis.metrics import render_gantt
from models.memory_state import MemoryState
from models.schedule_state import ScheduleState
from models.system_state import SystemState
from utils.errors import SimulatorError
from utils.logger import SimulatorLogger
from utils.scenario_loader import Scenario, ScenarioLoadError, load_scenario

MODES = ['schedule', 'memory', 'deadlock', 'sort']


def run_scheduling(
    scenario: Scenario,
    logger: SimulatorLogger,
    algorithm: Optional[str] = None,
    quantum: Optional[int] = None,
    width: int = 60
) -> Optional[ScheduleState]:
    """
    Schedule the scenario's processes and print the Gantt chart and metrics.

    Args:
        scenario: Loaded scenario (must have a scheduling section)
        logger: Logger instance
        algorithm: Overrides the scenario's algorithm
        quantum: Overrides the scenario's quantum
        width: Gantt chart width in characters

    Returns:
        The session after running, or None if the run failed
    """
    config = scenario.scheduling
    state = ScheduleState(config.algorithm, config.quantum, logger=logger)

    for process in config.processes:
        state.add_process(process.arrival_time, process.burst_time, process.priority, pid=process.pid)

    for setter, value in ((state.set_algorithm, algorithm), (state.set_quantum, quantum)):
        if value is not None:
            result = setter(value)
            if not result:
                logger.log(result.message, "error")
                return None

    logger.log(f"\n{'='*60}")
    logger.log(f"CPU SCHEDULING: {state.algorithm.value.upper()}"
               + (f" (quantum={state.quantum})" if state.algorithm.value == "rr" else ""))
    logger.log(f"{'='*60}\n")

    result = state.run()
    if not result:
        logger.log(result.message, "error")
        return None

    logger.log("Execution Steps:")
    for step in state.steps:
        logger.log(f"  {step.process_id}: Start Time = {step.start_time}, Duration = {step.duration}")

    try:
        chart = render_gantt(state.steps, width)
    except SimulatorError as e:
        logger.log(str(e), "error")
        return None
    logger.log("\nGantt Chart:")
    logger.log(chart)

    logger.log("")
    logger.log(state.metrics().display())
    return state


def run_memory(
    scenario: Scenario,
    logger: SimulatorLogger,
    strategy: Optional[str] = None
) -> Optional[MemoryState]:
    """
    Replay the scenario's allocate/deallocate/tick operations.

    Deallocate operations name a process; the most recent active process with
    that name is released.

    Returns:
        The session after replay, or None if the strategy override is invalid
    """
    config = scenario.memory
    state = MemoryState(config.total_memory, config.strategy, logger=logger)

    if strategy is not None:
        result = state.set_strategy(strategy)
        if not result:
            logger.log(result.message, "error")
            return None

    logger.log(f"\n{'='*60}")
    logger.log(f"MEMORY ALLOCATION: {state.strategy.value.upper()} (total={state.total_memory})")
    logger.log(f"{'='*60}\n")

    for op in config.operations:
        kind = op['op']
        if kind == 'tick':
            state.tick(op.get('amount', 1))
        elif kind == 'allocate':
            result = state.allocate(op['name'], op['size'])
            if not result:
                logger.log(result.message, "warning")
        else:
            process_id = _active_process_id(state, op['name'])
            result = state.deallocate(process_id if process_id else op['name'])
            if not result:
                logger.log(result.message, "warning")

        logger.log(state.display(), "debug")

    logger.log(state.display())
    return state


def _active_process_id(state: MemoryState, name: str) -> Optional[str]:
    """Id of the most recently allocated active process called name."""
    matches = [p for p in state.active_processes() if p.name == name]
    if not matches:
        return None
    return max(matches, key=lambda p: state.history.index(p)).process_id


def run_deadlock(scenario: Scenario, logger: SimulatorLogger) -> Optional[SystemState]:
    """
    Build the resource state, run the safety check, apply releases and
    check again after each one.

    Returns:
        The session after all releases, or None if the initial state is invalid
    """
    config = scenario.deadlock
    state = SystemState(logger=logger)

    logger.log(f"\n{'='*60}")
    logger.log("DEADLOCK AVOIDANCE: BANKER'S SAFETY CHECK")
    logger.log(f"{'='*60}\n")

    result = state.set_available(config.available)
    if not result:
        logger.log(result.message, "error")
        return None

    for proc in config.processes:
        result = state.add_process(proc['name'], proc['allocation'], proc['max'], proc['priority'])
        if not result:
            return None

    logger.log(state.display())
    state.check_safety()
    _display_graph(state, logger)

    for name in config.release:
        if state.remove_process(name):
            state.check_safety()

    return state


def _display_graph(state: SystemState, logger: SimulatorLogger) -> None:
    """Display resource-allocation graph edges."""
    graph = state.resource_graph()
    logger.log("\nResource-Allocation Graph:")
    for edge in graph.edges:
        logger.log(f"  {edge.source} -> {edge.target} ({edge.edge_type.value}, {edge.weight})")


def run_sorting(
    scenario: Scenario,
    logger: SimulatorLogger,
    algorithm: Optional[str] = None
) -> Optional[SortTrace]:
    """Trace the scenario's sort and print the summary counters."""
    config = scenario.sorting
    try:
        trace = trace_sort(config.values, algorithm or config.algorithm)
    except SimulatorError as e:
        logger.log(str(e), "error")
        return None

    logger.log(f"\n{'='*60}")
    logger.log(f"SORTING: {trace.algorithm.value.upper()}")
    logger.log(f"{'='*60}\n")
    logger.log(f"Input:  {trace.initial}")
    for event in trace.events:
        logger.log(f"  {event.kind.value:8} {list(event.indices)} -> {list(event.snapshot)}", "debug")
    logger.log(f"Output: {trace.result}")
    logger.log(f"Comparisons: {trace.comparisons}")
    logger.log(f"Swaps: {trace.swaps}")
    logger.log(f"Events: {len(trace.events)}")
    return trace


def main(argv: Optional[List[str]] = None):
    """Main entry point for the simulator."""
    parser = argparse.ArgumentParser(
        description='OS Concepts Simulator'
    )
    parser.add_argument(
        'mode',
        choices=MODES,
        help='Simulator to run'
    )
    parser.add_argument(
        '--scenario',
        type=str,
        required=True,
        help='Path to scenario JSON file'
    )
    parser.add_argument(
        '--algorithm',
        type=str,
        default=None,
        help='Override the scheduling (fcfs, sjf, priority, rr) or sort (quick, merge, bucket) algorithm'
    )
    parser.add_argument(
        '--quantum',
        type=int,
        default=None,
        help='Override the Round Robin time quantum'
    )
    parser.add_argument(
        '--strategy',
        type=str,
        default=None,
        help='Override the memory fit strategy (first, best, worst, next)'
    )
    parser.add_argument(
        '--width',
        type=int,
        default=60,
        help='Gantt chart width in characters (default: 60)'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write the log to this file'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args(argv)

    logger = SimulatorLogger(verbose=args.verbose, log_file=args.log_file)
    try:
        scenario = load_scenario(args.scenario)
    except ScenarioLoadError as e:
        logger.log(f"Failed to load scenario: {e}", "error")
        logger.close()
        return 1

    section = {'schedule': 'scheduling', 'memory': 'memory', 'deadlock': 'deadlock', 'sort': 'sorting'}[args.mode]
    if getattr(scenario, section) is None:
        logger.log(f"Scenario has no '{section}' section", "error")
        logger.close()
        return 1

    if scenario.description:
        logger.log(scenario.description)

    runners: Dict[str, Callable] = {
        'schedule': lambda: run_scheduling(scenario, logger, args.algorithm, args.quantum, args.width),
        'memory': lambda: run_memory(scenario, logger, args.strategy),
        'deadlock': lambda: run_deadlock(scenario, logger),
        'sort': lambda: run_sorting(scenario, logger, args.algorithm),
    }
    outcome = runners[args.mode]()
    logger.close()
    return 0 if outcome is not None else 1


if __name__ == '__main__':
    sys.exit(main())

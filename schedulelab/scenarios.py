"""What-if transforms over task graphs.

Every function here is pure: it returns a new TaskGraph and leaves the base
graph untouched, so several named scenarios can be simulated side by side.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace

from schedulelab.config import DEFAULT_DURATION_FLOOR
from schedulelab.model import Task, TaskGraph
from schedulelab.validate import ConfigError, GraphError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Scenario:
    name: str
    graph: TaskGraph


def _scaled(task: Task, factor: float, floor: float | None) -> Task:
    def _one(value: float) -> float:
        scaled = value * factor
        return scaled if floor is None else max(floor, scaled)

    return replace(
        task,
        optimistic=_one(task.optimistic),
        most_likely=_one(task.most_likely),
        pessimistic=_one(task.pessimistic),
    )


def _check_factor(factor: float, floor: float | None) -> None:
    if not factor > 0:
        raise ConfigError(f"scale factor must be > 0 (got {factor})")
    if floor is not None and not floor > 0:
        raise ConfigError(f"duration floor must be > 0 (got {floor})")


def scale_durations(
    graph: TaskGraph, factor: float, *, floor: float | None = DEFAULT_DURATION_FLOOR
) -> TaskGraph:
    """Multiply all three estimates of every task, flooring each at `floor`.

    With factor 1.0 the result equals `graph` whenever no estimate is below
    the floor.
    Pass `floor=None` to scale without any floor.
    """

    _check_factor(factor, floor)
    return TaskGraph.construct(_scaled(t, factor, floor) for t in graph.tasks)


def scale_subset(
    graph: TaskGraph,
    task_ids: Iterable[str],
    factor: float,
    *,
    floor: float | None = DEFAULT_DURATION_FLOOR,
) -> TaskGraph:
    _check_factor(factor, floor)
    changed = {tid: _scaled(graph.task(tid), factor, floor) for tid in task_ids}
    return graph.replace_tasks(changed)


def drop_dependency(graph: TaskGraph, task_id: str, dependency_id: str) -> TaskGraph:
    task = graph.task(task_id)
    if dependency_id not in task.dependencies:
        raise GraphError(f"task '{task_id}' does not depend on '{dependency_id}'")
    deps = tuple(d for d in task.dependencies if d != dependency_id)
    return graph.replace_tasks({task_id: replace(task, dependencies=deps)})


def clear_dependencies(graph: TaskGraph, task_id: str) -> TaskGraph:
    task = graph.task(task_id)
    return graph.replace_tasks({task_id: replace(task, dependencies=())})


PRESETS = ("optimistic", "pessimistic", "add-resources", "parallel")


def apply_preset(
    graph: TaskGraph, preset: str, *, task_ids: Iterable[str] = ()
) -> Scenario:
    """Build one of the stock what-if scenarios.

    - optimistic: every estimate x0.8 (floored at 1)
    - pessimistic: every estimate x1.3
    - add-resources: estimates of `task_ids` x0.7 (floored at 1)
    - parallel: `task_ids` lose all of their dependencies
    """

    ids = tuple(task_ids)
    if preset == "optimistic":
        scenario = Scenario("Optimistic Scenario", scale_durations(graph, 0.8))
    elif preset == "pessimistic":
        scenario = Scenario("Pessimistic Scenario", scale_durations(graph, 1.3, floor=None))
    elif preset == "add-resources":
        if not ids:
            raise ConfigError("add-resources needs at least one task id")
        scenario = Scenario("Added Resources Scenario", scale_subset(graph, ids, 0.7))
    elif preset == "parallel":
        if not ids:
            raise ConfigError("parallel needs at least one task id")
        g = graph
        for tid in ids:
            g = clear_dependencies(g, tid)
        scenario = Scenario("Parallel Tasks Scenario", g)
    else:
        raise ConfigError(
            f"unknown scenario {preset!r} (expected one of {', '.join(PRESETS)})"
        )

    logger.debug("built scenario %r from %d tasks", scenario.name, len(graph))
    return scenario

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from schedulelab.model import Task


class GraphError(ValueError):
    pass


class CycleError(GraphError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"dependency cycle detected involving task '{task_id}'")
        self.task_id = task_id


class DanglingDependencyError(GraphError):
    def __init__(self, task_id: str, missing_id: str) -> None:
        super().__init__(
            f"task '{task_id}' depends on unknown task '{missing_id}'"
        )
        self.task_id = task_id
        self.missing_id = missing_id


class ValidationError(ValueError):
    pass


class InvalidEstimateError(ValidationError):
    def __init__(self, task_id: str, detail: str) -> None:
        super().__init__(f"task '{task_id}' has an invalid estimate: {detail}")
        self.task_id = task_id


class ConfigError(ValueError):
    pass


class TooFewIterationsError(ConfigError):
    def __init__(self, iterations: int, minimum: int) -> None:
        super().__init__(
            f"iterations must be >= {minimum} for reliable percentiles "
            f"(got {iterations})"
        )
        self.iterations = iterations
        self.minimum = minimum


class EmptyGraphError(ConfigError):
    def __init__(self) -> None:
        super().__init__("a task graph needs at least one task")


class SimulationCancelled(RuntimeError):
    pass


def validate_estimate(task: "Task") -> None:
    o, m, p = task.optimistic, task.most_likely, task.pessimistic
    if o <= 0:
        raise InvalidEstimateError(task.id, f"optimistic must be > 0 (got {o})")
    if not o <= m <= p:
        raise InvalidEstimateError(
            task.id,
            f"expected optimistic <= mostLikely <= pessimistic (got {o}, {m}, {p})",
        )


def validate_tasks(tasks: Sequence["Task"]) -> tuple[str, ...]:
    """Validate tasks and return a topological order of their ids.

    Checks run in a fixed order (empty, duplicate ids, estimates, dangling
    references, cycles) so the reported error is deterministic.

    Cycles are found with Kahn's in-degree count. Ready tasks are released in
    input order, so ties in the returned order follow the input. When tasks
    remain unordered, the first of them in input order is reported.
    """

    if not tasks:
        raise EmptyGraphError()

    seen: set[str] = set()
    for task in tasks:
        if task.id in seen:
            raise GraphError(f"duplicate task id '{task.id}'")
        seen.add(task.id)

    for task in tasks:
        validate_estimate(task)

    for task in tasks:
        for dep in task.dependencies:
            if dep not in seen:
                raise DanglingDependencyError(task.id, dep)
            if dep == task.id:
                raise CycleError(task.id)

    in_degree = {t.id: len(set(t.dependencies)) for t in tasks}
    dependents: dict[str, list[str]] = {t.id: [] for t in tasks}
    for task in tasks:
        for dep in dict.fromkeys(task.dependencies):
            dependents[dep].append(task.id)

    ready = deque(t.id for t in tasks if in_degree[t.id] == 0)
    order: list[str] = []
    while ready:
        tid = ready.popleft()
        order.append(tid)
        for child in dependents[tid]:
            in_degree[child] -= 1
            if in_degree[child] == 0:
                ready.append(child)

    if len(order) != len(tasks):
        raise CycleError(_task_on_cycle(tasks, in_degree))

    return tuple(order)


def _task_on_cycle(tasks: Sequence["Task"], in_degree: dict[str, int]) -> str:
    # Every unordered task has an unordered dependency, so walking those edges
    # from the first stuck task must revisit a task; that task is on a cycle.
    deps = {t.id: t.dependencies for t in tasks}
    current = next(t.id for t in tasks if in_degree[t.id] > 0)
    visited: set[str] = set()
    while current not in visited:
        visited.add(current)
        current = next(d for d in deps[current] if in_degree[d] > 0)
    return current

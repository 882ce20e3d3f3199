from __future__ import annotations

# Forward pass of the Critical Path Method over one set of sampled durations.

from collections.abc import Mapping

from schedulelab.model import TaskGraph
from schedulelab.types import Schedule


def evaluate(graph: TaskGraph, durations: Mapping[str, float]) -> Schedule:
    """Compute earliest starts, finishes and completion for one trial.

    Walks the graph's precomputed topological order once, so the cost is
    O(tasks + edges).
    """

    start: dict[str, float] = {}
    finish: dict[str, float] = {}
    for tid in graph.topological_order():
        deps = graph.task(tid).dependencies
        s = max((finish[d] for d in deps), default=0.0)
        start[tid] = s
        finish[tid] = s + float(durations[tid])

    completion = max(finish.values())
    return Schedule(earliest_start=start, finish=finish, completion=completion)


def critical_path(graph: TaskGraph, schedule: Schedule) -> tuple[str, ...]:
    """Chain of tasks, root first, ending at the task that finished last.

    At each step the predecessor is the dependency whose finish equals the
    task's start. Ties resolve to the earliest task in input order.
    """

    rank = {t.id: i for i, t in enumerate(graph.tasks)}
    finish = schedule.finish

    last = min(
        (tid for tid in finish if finish[tid] == schedule.completion),
        key=rank.__getitem__,
    )

    path = [last]
    cur = last
    while True:
        deps = graph.task(cur).dependencies
        if not deps:
            break
        s = schedule.earliest_start[cur]
        cur = min((d for d in deps if finish[d] == s), key=rank.__getitem__)
        path.append(cur)

    path.reverse()
    return tuple(path)

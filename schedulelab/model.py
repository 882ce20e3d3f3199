from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field, replace
from typing import Any

from schedulelab.validate import GraphError, validate_tasks

# Accepted spellings for editable fields -> dataclass attribute.
_FIELD_ALIASES = {
    "name": "name",
    "dependencies": "dependencies",
    "optimistic": "optimistic",
    "most_likely": "most_likely",
    "mostLikely": "most_likely",
    "pessimistic": "pessimistic",
}


@dataclass(frozen=True)
class Task:
    id: str
    name: str
    optimistic: float
    most_likely: float
    pessimistic: float
    dependencies: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Lists and other iterables are frozen so tasks stay hashable.
        object.__setattr__(self, "dependencies", tuple(str(d) for d in self.dependencies))

    @staticmethod
    def from_json(obj: dict[str, Any]) -> "Task":
        if not isinstance(obj, dict):
            raise ValueError("task records must be objects")
        try:
            task_id = str(obj["id"])
            most_likely = obj["mostLikely"] if "mostLikely" in obj else obj["most_likely"]
            return Task(
                id=task_id,
                name=str(obj.get("name", task_id)),
                optimistic=float(obj["optimistic"]),
                most_likely=float(most_likely),
                pessimistic=float(obj["pessimistic"]),
                dependencies=tuple(obj.get("dependencies", [])),
            )
        except KeyError as e:
            raise ValueError(f"task record is missing required key {e}") from None
        except TypeError as e:
            raise ValueError(f"task record '{obj.get('id')}' has a malformed field: {e}") from None

    def to_json(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "dependencies": list(self.dependencies),
            "optimistic": self.optimistic,
            "mostLikely": self.most_likely,
            "pessimistic": self.pessimistic,
        }


@dataclass(frozen=True)
class TaskGraph:
    """Validated, immutable DAG of tasks.

    Construction validates estimates, references and acyclicity, and caches a
    topological order. Every edit returns a new graph, so one instance can be
    shared by concurrent trials.
    """

    tasks: tuple[Task, ...]
    order: tuple[str, ...] = field(init=False, repr=False, compare=False)
    _index: dict[str, Task] = field(init=False, repr=False, compare=False)
    _dependents: dict[str, tuple[str, ...]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        tasks = tuple(self.tasks)
        order = validate_tasks(tasks)

        dependents: dict[str, list[str]] = {t.id: [] for t in tasks}
        for t in tasks:
            for dep in dict.fromkeys(t.dependencies):
                dependents[dep].append(t.id)

        object.__setattr__(self, "tasks", tasks)
        object.__setattr__(self, "order", order)
        object.__setattr__(self, "_index", {t.id: t for t in tasks})
        object.__setattr__(
            self, "_dependents", {k: tuple(v) for k, v in dependents.items()}
        )

    @classmethod
    def construct(cls, tasks: Iterable[Task]) -> "TaskGraph":
        return cls(tasks=tuple(tasks))

    @classmethod
    def from_json(cls, obj: Any) -> "TaskGraph":
        if isinstance(obj, dict):
            if "tasks" not in obj:
                raise ValueError("graph payload must be a list or have a 'tasks' key")
            obj = obj["tasks"]
        if not isinstance(obj, list):
            raise ValueError("graph payload 'tasks' must be a list")
        return cls.construct(Task.from_json(t) for t in obj)

    def to_json(self) -> dict[str, Any]:
        return {"tasks": [t.to_json() for t in self.tasks]}

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(self.tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._index

    def task(self, task_id: str) -> Task:
        try:
            return self._index[task_id]
        except KeyError:
            raise GraphError(f"unknown task '{task_id}'") from None

    def topological_order(self) -> tuple[str, ...]:
        return self.order

    def dependents(self, task_id: str) -> tuple[str, ...]:
        self.task(task_id)
        return self._dependents[task_id]

    def replace_tasks(self, changed: dict[str, Task]) -> "TaskGraph":
        """Return a new graph with the given tasks swapped in by id."""

        for tid in changed:
            self.task(tid)
        return TaskGraph.construct(changed.get(t.id, t) for t in self.tasks)

    def with_updated_task(self, task_id: str, field_name: str, value: Any) -> "TaskGraph":
        """Return a new graph with one field of one task replaced.

        The result is fully re-validated. A value breaking
        optimistic <= mostLikely <= pessimistic raises InvalidEstimateError;
        it is never clamped.
        """

        attr = _FIELD_ALIASES.get(field_name)
        if attr is None:
            raise ValueError(f"unsupported task field '{field_name}'")

        if attr == "name":
            new_value: Any = str(value)
        elif attr == "dependencies":
            new_value = tuple(str(d) for d in value)
        else:
            new_value = float(value)

        current = self.task(task_id)
        return self.replace_tasks({task_id: replace(current, **{attr: new_value})})

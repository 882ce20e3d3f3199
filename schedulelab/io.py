from __future__ import annotations

import csv
import json
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from schedulelab.model import TaskGraph
from schedulelab.types import SimulationResult

# Eight-task software project used by `schedulelab example`.
SAMPLE_PROJECT: list[dict[str, Any]] = [
    {"id": "1", "name": "Requirements Analysis", "dependencies": [], "optimistic": 3, "mostLikely": 5, "pessimistic": 10},
    {"id": "2", "name": "UI Design", "dependencies": ["1"], "optimistic": 4, "mostLikely": 7, "pessimistic": 12},
    {"id": "3", "name": "Backend Architecture", "dependencies": ["1"], "optimistic": 5, "mostLikely": 8, "pessimistic": 14},
    {"id": "4", "name": "Frontend Development", "dependencies": ["2"], "optimistic": 8, "mostLikely": 12, "pessimistic": 20},
    {"id": "5", "name": "Backend Development", "dependencies": ["3"], "optimistic": 10, "mostLikely": 15, "pessimistic": 25},
    {"id": "6", "name": "Integration", "dependencies": ["4", "5"], "optimistic": 4, "mostLikely": 6, "pessimistic": 10},
    {"id": "7", "name": "Testing", "dependencies": ["6"], "optimistic": 5, "mostLikely": 8, "pessimistic": 15},
    {"id": "8", "name": "Deployment", "dependencies": ["7"], "optimistic": 2, "mostLikely": 3, "pessimistic": 5},
]


def load_graph(path: Path) -> TaskGraph:
    raw = json.loads(path.read_text(encoding="utf-8"))
    return TaskGraph.from_json(raw)


def write_graph_json(path: Path, graph: TaskGraph) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(graph.to_json(), indent=2), encoding="utf-8")


def write_result_json(path: Path, result: SimulationResult) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(result.to_json(), indent=2, sort_keys=True), encoding="utf-8"
    )


def write_completions_csv(path: Path, completions: Sequence[float]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["trial", "completion"])
        for i, c in enumerate(completions, start=1):
            w.writerow([i, c])


def write_histogram_csv(path: Path, result: SimulationResult) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(
            ["range", "lo", "hi", "count", "probability", "cumulative_probability", "midpoint"]
        )
        for b, c in zip(result.histogram, result.cumulative):
            w.writerow([b.range, b.lo, b.hi, b.count, b.probability, c.probability, b.midpoint])

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from graph_helpers import make_task
from schedulelab.model import TaskGraph


@pytest.fixture(scope="session", autouse=True)
def _add_repo_root_to_syspath() -> None:
    """Make local packages importable when running tests from `tests/`.

    Some PyTest invocations end up with `tests/` as the import root. Ensure the
    repo root is on `sys.path` so `import schedulelab` and `import runner` work.
    """

    root = Path(__file__).resolve().parents[1]
    root_str = str(root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)


@pytest.fixture
def chain_graph() -> TaskGraph:
    return TaskGraph.construct(
        [make_task("A", 2, 3, 5), make_task("B", 1, 2, 4, ("A",))]
    )


@pytest.fixture
def diamond_graph() -> TaskGraph:
    return TaskGraph.construct(
        [
            make_task("A", 1, 2, 3),
            make_task("B", 50, 60, 70, ("A",)),
            make_task("C", 1, 2, 3, ("A",)),
            make_task("D", 1, 1, 1, ("B", "C")),
        ]
    )


@pytest.fixture
def repo_root() -> Path:
    return Path(__file__).resolve().parents[1]

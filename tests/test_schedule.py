from __future__ import annotations

import random

from graph_helpers import make_task
from schedulelab.model import TaskGraph
from schedulelab.sampling import sample_durations
from schedulelab.scenarios import drop_dependency
from schedulelab.schedule import critical_path, evaluate


def test_chain_forward_pass(chain_graph: TaskGraph) -> None:
    s = evaluate(chain_graph, {"A": 3.0, "B": 2.0})
    assert s.earliest_start == {"A": 0.0, "B": 3.0}
    assert s.finish == {"A": 3.0, "B": 5.0}
    assert s.completion == 5.0


def test_diamond_start_tracks_the_slowest_dependency(diamond_graph: TaskGraph) -> None:
    durations = {"A": 2.0, "B": 60.0, "C": 2.0, "D": 1.0}
    s = evaluate(diamond_graph, durations)
    assert s.earliest_start["B"] == 2.0
    assert s.earliest_start["C"] == 2.0
    assert s.earliest_start["D"] == 62.0
    assert s.completion == 63.0
    assert critical_path(diamond_graph, s) == ("A", "B", "D")


def test_diamond_with_sampled_durations_follows_b(diamond_graph: TaskGraph) -> None:
    rng = random.Random(11)
    for _ in range(200):
        d = sample_durations(diamond_graph, rng)
        s = evaluate(diamond_graph, d)
        assert s.earliest_start["D"] == s.earliest_start["B"] + d["B"]


def test_dropped_edge_starts_at_zero(diamond_graph: TaskGraph) -> None:
    g = drop_dependency(diamond_graph, "C", "A")
    rng = random.Random(5)
    for _ in range(200):
        d = sample_durations(g, rng)
        s = evaluate(g, d)
        assert s.earliest_start["C"] == 0.0
        assert s.earliest_start["B"] == d["A"]


def test_roots_always_start_at_zero() -> None:
    g = TaskGraph.construct(
        [
            make_task("r1", 1, 2, 3),
            make_task("r2", 4, 5, 9),
            make_task("x", 1, 2, 3, ("r1", "r2")),
        ]
    )
    rng = random.Random(1)
    for _ in range(100):
        s = evaluate(g, sample_durations(g, rng))
        assert s.earliest_start["r1"] == 0.0
        assert s.earliest_start["r2"] == 0.0


def test_completion_covers_the_realized_critical_path(diamond_graph: TaskGraph) -> None:
    rng = random.Random(3)
    for _ in range(100):
        d = sample_durations(diamond_graph, rng)
        s = evaluate(diamond_graph, d)
        path = critical_path(diamond_graph, s)
        assert s.completion >= max(d[t] for t in path)
        assert sum(d[t] for t in path) == s.completion


def test_critical_path_ties_resolve_by_input_order() -> None:
    g = TaskGraph.construct(
        [
            make_task("a", 1, 1, 1),
            make_task("b", 1, 1, 1),
            make_task("c", 1, 1, 1, ("b", "a")),
        ]
    )
    s = evaluate(g, {"a": 1.0, "b": 1.0, "c": 1.0})
    assert critical_path(g, s) == ("a", "c")

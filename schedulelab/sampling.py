from __future__ import annotations

import math
from typing import Protocol

from schedulelab.model import Task, TaskGraph


class UniformSource(Protocol):
    """Anything yielding uniform floats in [0, 1).

    Both `random.Random` and `numpy.random.Generator` satisfy this.
    """

    def random(self) -> float:
        raise NotImplementedError


def _splitmix64(x: int) -> int:
    x = (x + 0x9E3779B97F4A7C15) & 0xFFFFFFFFFFFFFFFF
    z = x
    z = (z ^ (z >> 30)) * 0xBF58476D1CE4E5B9 & 0xFFFFFFFFFFFFFFFF
    z = (z ^ (z >> 27)) * 0x94D049BB133111EB & 0xFFFFFFFFFFFFFFFF
    return z ^ (z >> 31)


def seed_for_trial(base_seed: int, trial_id: int) -> int:
    """Seed of the private random stream owned by one trial.

    The run seed is mixed before the trial index is added, so two run seeds
    never share a set of trial streams.
    """

    run_key = _splitmix64(base_seed & 0xFFFFFFFFFFFFFFFF)
    return _splitmix64((run_key + trial_id) & 0xFFFFFFFFFFFFFFFF)


def triangular_inverse_cdf(u: float, lo: float, mode: float, hi: float) -> float:
    span = hi - lo
    f = (mode - lo) / span
    if u < f:
        return lo + math.sqrt(u * span * (mode - lo))
    return hi - math.sqrt((1.0 - u) * span * (hi - mode))


def sample_duration(task: Task, rng: UniformSource) -> float:
    lo, hi = float(task.optimistic), float(task.pessimistic)
    if hi == lo:
        # Zero-width distribution: no draw is consumed.
        return lo
    u = float(rng.random())
    return triangular_inverse_cdf(u, lo, float(task.most_likely), hi)


def sample_durations(graph: TaskGraph, rng: UniformSource) -> dict[str, float]:
    # Draw in input order so stream consumption is fixed for a given graph.
    return {t.id: sample_duration(t, rng) for t in graph.tasks}

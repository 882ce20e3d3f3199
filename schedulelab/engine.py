from __future__ import annotations

# Trial loop shared by every executor. One trial = sample -> forward pass.

import threading
from collections.abc import Callable, Iterable

from schedulelab.config import check_iterations
from schedulelab.model import TaskGraph
from schedulelab.sampling import UniformSource, sample_durations, seed_for_trial
from schedulelab.schedule import critical_path, evaluate
from schedulelab.types import Trial
from schedulelab.validate import SimulationCancelled

ProgressCallback = Callable[[int, int], None]
RngFactory = Callable[[int], UniformSource]


def run_trial(graph: TaskGraph, trial_id: int, rng: UniformSource) -> Trial:
    durations = sample_durations(graph, rng)
    schedule = evaluate(graph, durations)
    return Trial(
        trial_id=trial_id,
        durations=durations,
        earliest_start=schedule.earliest_start,
        completion=schedule.completion,
        critical_path=critical_path(graph, schedule),
    )


def run(graph: TaskGraph, iterations: int, rng: UniformSource) -> list[float]:
    """Run `iterations` trials off one injected stream; ascending completions."""

    check_iterations(iterations)
    out = [run_trial(graph, i, rng).completion for i in range(iterations)]
    out.sort()
    return out


def run_trials(
    graph: TaskGraph,
    trial_ids: Iterable[int],
    *,
    seed: int,
    make_rng: RngFactory,
    progress: ProgressCallback | None = None,
    progress_every: int = 1,
    total: int | None = None,
    cancel: threading.Event | None = None,
) -> list[Trial]:
    """Run the given trials, each on its own stream derived from `seed`."""

    ids = list(trial_ids)
    total = len(ids) if total is None else total
    every = max(1, int(progress_every))

    trials: list[Trial] = []
    for done, trial_id in enumerate(ids):
        if cancel is not None and cancel.is_set():
            raise SimulationCancelled(f"cancelled after {done} of {total} trials")
        rng = make_rng(seed_for_trial(seed, trial_id))
        trials.append(run_trial(graph, trial_id, rng))
        if progress is not None and (done + 1) % every == 0:
            progress(done + 1, total)

    if progress is not None and len(ids) % every != 0:
        progress(len(ids), total)
    return trials

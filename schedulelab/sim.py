from __future__ import annotations

# Public simulation entrypoint.
#
# Validation happens here, before any trial runs. Trials are then handed to a
# RunExecutor; the NumPy and process-pool strategies are opt-in.

import logging
import threading
import time

from schedulelab.config import SimulationConfig, check_iterations
from schedulelab.engine import ProgressCallback
from schedulelab.executors import RunExecutor, executor_for_name
from schedulelab.metrics import aggregate
from schedulelab.model import TaskGraph
from schedulelab.types import SimulationResult, Trial

logger = logging.getLogger(__name__)


def simulate_many(
    *,
    graph: TaskGraph,
    iterations: int,
    seed: int,
    executor: RunExecutor | None = None,
    progress: ProgressCallback | None = None,
    progress_every: int | None = None,
    cancel: threading.Event | None = None,
) -> list[Trial]:
    """Run independent trials, returned in trial-id order.

    Trial i samples from a stream seeded by `seed_for_trial(seed, i)`, so the
    result does not depend on which executor runs it.
    """

    check_iterations(iterations)
    if executor is None:
        executor = executor_for_name("stdlib")
    every = progress_every if progress_every is not None else max(1, iterations // 100)
    return executor.execute(
        graph=graph,
        iterations=iterations,
        seed=seed,
        progress=progress,
        progress_every=every,
        cancel=cancel,
    )


def run_simulation(
    graph: TaskGraph,
    config: SimulationConfig,
    *,
    scenario: str | None = None,
    progress: ProgressCallback | None = None,
    cancel: threading.Event | None = None,
) -> SimulationResult:
    cfg = config.resolved()
    executor = executor_for_name(cfg.executor, workers=cfg.workers)
    logger.info(
        "simulating %d tasks x %d trials (seed=%d, executor=%s)",
        len(graph),
        cfg.iterations,
        cfg.seed,
        cfg.executor,
    )

    started = time.monotonic()
    trials = simulate_many(
        graph=graph,
        iterations=cfg.iterations,
        seed=cfg.seed,
        executor=executor,
        progress=progress,
        progress_every=cfg.progress_every,
        cancel=cancel,
    )
    completions = sorted(t.completion for t in trials)
    result = aggregate(
        completions,
        target=cfg.target,
        critical_paths=(t.critical_path for t in trials),
        top_paths=cfg.top_paths,
        seed=cfg.seed,
        scenario=scenario,
    )
    logger.info(
        "simulation finished in %.3fs (p50=%.3f, p90=%.3f)",
        time.monotonic() - started,
        result.median,
        result.p90,
    )
    return result

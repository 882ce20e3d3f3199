from __future__ import annotations

import logging
import random
import threading
from concurrent.futures import FIRST_COMPLETED, ProcessPoolExecutor, wait
from dataclasses import dataclass
from typing import Protocol

from schedulelab.engine import ProgressCallback, RngFactory, run_trials
from schedulelab.model import TaskGraph
from schedulelab.types import Trial
from schedulelab.validate import ConfigError, SimulationCancelled

logger = logging.getLogger(__name__)


def _numpy_rng(seed: int):
    import numpy as np

    return np.random.default_rng(seed)


_RNG_FACTORIES: dict[str, RngFactory] = {
    "stdlib": random.Random,
    "numpy": _numpy_rng,
}


def rng_factory(backend: str) -> RngFactory:
    try:
        return _RNG_FACTORIES[backend]
    except KeyError:
        raise ConfigError(
            f"unknown random backend {backend!r} (expected one of {sorted(_RNG_FACTORIES)})"
        ) from None


class RunExecutor(Protocol):
    def execute(
        self,
        *,
        graph: TaskGraph,
        iterations: int,
        seed: int,
        progress: ProgressCallback | None,
        progress_every: int,
        cancel: threading.Event | None,
    ) -> list[Trial]:
        raise NotImplementedError


@dataclass(frozen=True)
class StdlibExecutor:
    def execute(
        self,
        *,
        graph: TaskGraph,
        iterations: int,
        seed: int,
        progress: ProgressCallback | None,
        progress_every: int,
        cancel: threading.Event | None,
    ) -> list[Trial]:
        return run_trials(
            graph,
            range(iterations),
            seed=seed,
            make_rng=random.Random,
            progress=progress,
            progress_every=progress_every,
            cancel=cancel,
        )


@dataclass(frozen=True)
class NumpyExecutor:
    def execute(
        self,
        *,
        graph: TaskGraph,
        iterations: int,
        seed: int,
        progress: ProgressCallback | None,
        progress_every: int,
        cancel: threading.Event | None,
    ) -> list[Trial]:
        return run_trials(
            graph,
            range(iterations),
            seed=seed,
            make_rng=_numpy_rng,
            progress=progress,
            progress_every=progress_every,
            cancel=cancel,
        )


def _run_chunk(graph: TaskGraph, start: int, stop: int, seed: int, backend: str) -> list[Trial]:
    return run_trials(graph, range(start, stop), seed=seed, make_rng=rng_factory(backend))


@dataclass(frozen=True)
class ParallelExecutor:
    """Fan chunks of trials out over worker processes.

    Each trial owns the same per-trial stream as in the sequential executors,
    so the output matches them exactly. Chunks are concatenated in order.
    Cancellation is checked as chunks complete; chunks not yet started are
    dropped.
    """

    workers: int | None = None
    chunk_size: int = 250
    backend: str = "stdlib"

    def execute(
        self,
        *,
        graph: TaskGraph,
        iterations: int,
        seed: int,
        progress: ProgressCallback | None,
        progress_every: int,
        cancel: threading.Event | None,
    ) -> list[Trial]:
        rng_factory(self.backend)  # reject unknown backends before spawning workers
        if self.chunk_size < 1:
            raise ConfigError(f"chunk_size must be >= 1 (got {self.chunk_size})")

        bounds = [
            (lo, min(lo + self.chunk_size, iterations))
            for lo in range(0, iterations, self.chunk_size)
        ]
        logger.debug(
            "dispatching %d trials in %d chunks (workers=%s)",
            iterations,
            len(bounds),
            self.workers,
        )

        results: dict[int, list[Trial]] = {}
        done_trials = 0
        pool = ProcessPoolExecutor(max_workers=self.workers)
        try:
            pending = {
                pool.submit(_run_chunk, graph, lo, hi, seed, self.backend): idx
                for idx, (lo, hi) in enumerate(bounds)
            }
            while pending:
                if cancel is not None and cancel.is_set():
                    raise SimulationCancelled(
                        f"cancelled after {done_trials} of {iterations} trials"
                    )
                finished, _ = wait(pending, timeout=0.1, return_when=FIRST_COMPLETED)
                for fut in finished:
                    idx = pending.pop(fut)
                    results[idx] = fut.result()
                    done_trials += len(results[idx])
                    if progress is not None:
                        progress(done_trials, iterations)
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

        out: list[Trial] = []
        for idx in range(len(bounds)):
            out.extend(results[idx])
        return out


def executor_for_name(name: str, *, workers: int | None = None) -> RunExecutor:
    if name == "stdlib":
        return StdlibExecutor()
    if name == "numpy":
        return NumpyExecutor()
    if name == "parallel":
        return ParallelExecutor(workers=workers)
    raise ConfigError(f"Unsupported executor: {name!r}")

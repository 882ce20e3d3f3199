from __future__ import annotations

import random
from dataclasses import dataclass, replace

from schedulelab.validate import ConfigError, TooFewIterationsError

# Fewer trials than this give unstable P10/P90 estimates.
MIN_ITERATIONS = 100
DEFAULT_ITERATIONS = 1000
HISTOGRAM_TARGET_BUCKETS = 20
DEFAULT_DURATION_FLOOR = 1.0
DEFAULT_TOP_PATHS = 10

EXECUTORS = ("stdlib", "numpy", "parallel")


def check_iterations(iterations: int) -> None:
    if isinstance(iterations, bool) or not isinstance(iterations, int):
        raise ConfigError(f"iterations must be an integer (got {iterations!r})")
    if iterations < MIN_ITERATIONS:
        raise TooFewIterationsError(iterations, MIN_ITERATIONS)


@dataclass(frozen=True)
class SimulationConfig:
    iterations: int = DEFAULT_ITERATIONS
    seed: int | None = None
    target: float | None = None
    executor: str = "stdlib"
    workers: int | None = None
    progress_every: int | None = None
    top_paths: int = DEFAULT_TOP_PATHS

    def validate(self) -> None:
        check_iterations(self.iterations)
        if self.executor not in EXECUTORS:
            raise ConfigError(
                f"executor must be one of {', '.join(EXECUTORS)} (got {self.executor!r})"
            )
        if self.workers is not None and self.workers < 1:
            raise ConfigError(f"workers must be >= 1 (got {self.workers})")
        if self.progress_every is not None and self.progress_every < 1:
            raise ConfigError(f"progress_every must be >= 1 (got {self.progress_every})")
        if self.top_paths < 0:
            raise ConfigError(f"top_paths must be >= 0 (got {self.top_paths})")

    def resolved(self) -> "SimulationConfig":
        """Validated copy with a concrete seed and progress interval."""

        self.validate()
        seed = self.seed
        if seed is None:
            seed = random.SystemRandom().randrange(2**63)
        every = self.progress_every
        if every is None:
            every = max(1, self.iterations // 100)
        return replace(self, seed=int(seed), progress_every=every)

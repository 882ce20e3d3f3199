from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from schedulelab.config import SimulationConfig
from schedulelab.model import TaskGraph
from schedulelab.sim import run_simulation
from schedulelab.types import SimulationResult

logger = logging.getLogger(__name__)

RunProgress = Callable[[int, int, int], None]  # (run_token, done, total)


@dataclass(frozen=True)
class RunRequest:
    graph: TaskGraph
    config: SimulationConfig
    scenario: str | None = None


@dataclass(frozen=True)
class RunOutputs:
    request: RunRequest
    result: SimulationResult
    elapsed_seconds: float


def elapsed_seconds(*, started_at: float | None, now: float) -> float:
    if started_at is None:
        return 0.0
    return max(0.0, now - started_at)


class RunController:
    """Owns the background-run lifecycle.

    One run at a time executes on a worker thread. `cancel_active()` stops new
    trials from launching; a cancelled run raises SimulationCancelled from
    `wait()` and produces no result.
    """

    def __init__(self, *, progress: RunProgress | None = None) -> None:
        self._progress = progress
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="schedulelab-run")
        self._lock = threading.Lock()
        self._next_token = 1
        self._active_token: int | None = None
        self._cancel: threading.Event | None = None
        self._cancelled_tokens: set[int] = set()
        self._futures: dict[int, Future[RunOutputs]] = {}

    def is_running(self) -> bool:
        with self._lock:
            return self._active_token is not None

    def is_cancelled(self, run_token: int) -> bool:
        with self._lock:
            return run_token in self._cancelled_tokens

    def active_token(self) -> int | None:
        return self._active_token

    def start(self, request: RunRequest) -> int:
        # Config errors surface here, synchronously, before the thread starts.
        request.config.validate()

        with self._lock:
            if self._active_token is not None:
                raise RuntimeError("Run already active")
            run_token = self._next_token
            self._next_token += 1
            self._active_token = run_token
            self._cancel = threading.Event()
            cancel = self._cancel

        fut = self._pool.submit(self._run, run_token, request, cancel)
        with self._lock:
            self._futures[run_token] = fut
        fut.add_done_callback(lambda _f, tok=run_token: self._on_finished(tok))
        logger.debug("started run %d", run_token)
        return run_token

    def _run(
        self, run_token: int, request: RunRequest, cancel: threading.Event
    ) -> RunOutputs:
        started_at = time.monotonic()

        def _forward(done: int, total: int) -> None:
            if self._progress is not None:
                self._progress(run_token, done, total)

        result = run_simulation(
            request.graph,
            request.config,
            scenario=request.scenario,
            progress=_forward,
            cancel=cancel,
        )
        return RunOutputs(
            request=request,
            result=result,
            elapsed_seconds=elapsed_seconds(started_at=started_at, now=time.monotonic()),
        )

    def _on_finished(self, run_token: int) -> None:
        with self._lock:
            if self._active_token == run_token:
                self._active_token = None
                self._cancel = None
        logger.debug("run %d finished", run_token)

    def cancel_active(self) -> None:
        with self._lock:
            if self._active_token is None or self._cancel is None:
                return
            self._cancelled_tokens.add(self._active_token)
            self._cancel.set()

    def wait(self, run_token: int, timeout: float | None = None) -> RunOutputs:
        """Block until the run finishes and return its outputs.

        Re-raises whatever the run raised, including SimulationCancelled.
        A finished run is handed out once; its token is forgotten afterwards.
        """

        with self._lock:
            fut = self._futures.get(run_token)
        if fut is None:
            raise ValueError(f"unknown run token {run_token}")
        try:
            return fut.result(timeout=timeout)
        finally:
            if fut.done():
                self._forget(run_token)

    def _forget(self, run_token: int) -> None:
        with self._lock:
            self._futures.pop(run_token, None)
            self._cancelled_tokens.discard(run_token)

    def shutdown(self) -> None:
        self.cancel_active()
        self._pool.shutdown(wait=True)
        with self._lock:
            self._futures.clear()
            self._cancelled_tokens.clear()

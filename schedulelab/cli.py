from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from schedulelab.config import DEFAULT_ITERATIONS, EXECUTORS, SimulationConfig
from schedulelab.io import (
    SAMPLE_PROJECT,
    load_graph,
    write_completions_csv,
    write_graph_json,
    write_histogram_csv,
    write_result_json,
)
from schedulelab.model import TaskGraph
from schedulelab.scenarios import PRESETS, apply_preset
from schedulelab.sim import run_simulation

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="schedulelab", description="Monte Carlo project completion estimator"
    )
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sim = sub.add_parser("simulate", help="Run a simulation for a task graph")
    sim.add_argument("--graph", required=True, type=Path)
    sim.add_argument("--iterations", type=int, default=DEFAULT_ITERATIONS)
    sim.add_argument("--seed", type=int, default=None)
    sim.add_argument("--target", type=float, default=None, help="Target completion date")
    sim.add_argument("--scenario", choices=PRESETS, default=None)
    sim.add_argument(
        "--scenario-tasks",
        nargs="*",
        default=[],
        help="Task ids used by the add-resources and parallel scenarios",
    )
    sim.add_argument("--executor", choices=EXECUTORS, default="stdlib")
    sim.add_argument("--workers", type=int, default=None)
    sim.add_argument("--out-summary", required=True, type=Path)
    sim.add_argument("--out-completions", required=False, type=Path)
    sim.add_argument("--out-histogram", required=False, type=Path)

    val = sub.add_parser("validate", help="Validate a task graph and print its order")
    val.add_argument("--graph", required=True, type=Path)

    ex = sub.add_parser("example", help="Write a sample task graph")
    ex.add_argument("--out", required=True, type=Path)
    return p


def _simulate(args: argparse.Namespace) -> int:
    graph = load_graph(args.graph)
    label = None
    if args.scenario:
        scenario = apply_preset(graph, args.scenario, task_ids=args.scenario_tasks)
        graph, label = scenario.graph, scenario.name

    config = SimulationConfig(
        iterations=args.iterations,
        seed=args.seed,
        target=args.target,
        executor=args.executor,
        workers=args.workers,
    )
    result = run_simulation(graph, config, scenario=label)

    write_result_json(args.out_summary, result)
    if args.out_completions:
        write_completions_csv(args.out_completions, result.completions)
    if args.out_histogram:
        write_histogram_csv(args.out_histogram, result)
    return 0


def main(argv: list[str] | None = None) -> int:
    p = _build_parser()
    args = p.parse_args(argv)
    logging.basicConfig(
        level=getattr(args, "log_level", "WARNING"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.cmd == "simulate":
            return _simulate(args)

        if args.cmd == "validate":
            graph = load_graph(args.graph)
            print(" > ".join(graph.topological_order()))
            return 0

        if args.cmd == "example":
            write_graph_json(args.out, TaskGraph.from_json(SAMPLE_PROJECT))
            return 0
    except (ValueError, OSError) as e:
        # Graph, estimate and config errors are all ValueErrors; OSError covers unreadable paths.
        logger.debug("rejected input", exc_info=True)
        sys.stderr.write(f"error: {e}\n")
        return 2

    raise AssertionError(f"Unhandled command: {args.cmd}")

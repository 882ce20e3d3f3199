"""Headless Monte Carlo estimator for project completion times.

Tasks carry three-point duration estimates and form a dependency DAG. Each
trial samples durations, runs a forward pass over the graph, and records the
project completion time; many trials are aggregated into a distribution.

Run from source:

    python -m schedulelab simulate --graph project.json --out-summary out.json
"""

from __future__ import annotations

import logging

__all__ = ["__version__"]

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

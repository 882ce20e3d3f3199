from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Schedule:
    earliest_start: dict[str, float]
    finish: dict[str, float]
    completion: float


@dataclass(frozen=True)
class Trial:
    trial_id: int
    durations: dict[str, float]
    earliest_start: dict[str, float]
    completion: float
    critical_path: tuple[str, ...]


@dataclass(frozen=True)
class HistogramBucket:
    range: str
    lo: float
    hi: float
    count: int
    probability: float
    midpoint: float


@dataclass(frozen=True)
class CumulativePoint:
    range: str
    midpoint: float
    probability: float


@dataclass(frozen=True)
class CriticalPathCount:
    tasks: tuple[str, ...]
    count: int


@dataclass(frozen=True)
class SimulationResult:
    completions: tuple[float, ...]
    min: float
    max: float
    mean: float
    median: float
    p10: float
    p25: float
    p75: float
    p90: float
    histogram: tuple[HistogramBucket, ...]
    cumulative: tuple[CumulativePoint, ...]
    target: float | None = None
    target_probability: float | None = None
    top_critical_paths: tuple[CriticalPathCount, ...] = ()
    seed: int | None = None
    scenario: str | None = None

    @property
    def iterations(self) -> int:
        return len(self.completions)

    def percentiles(self) -> dict[str, float]:
        return {
            "p10": self.p10,
            "p25": self.p25,
            "p50": self.median,
            "p75": self.p75,
            "p90": self.p90,
        }

    def to_json(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "iterations": self.iterations,
            "seed": self.seed,
            "scenario": self.scenario,
            "completion": {
                "min": self.min,
                "max": self.max,
                "mean": self.mean,
                "median": self.median,
                "percentiles": self.percentiles(),
            },
            "target": {
                "date": self.target,
                "probability": self.target_probability,
            },
            "histogram": [
                {
                    "range": b.range,
                    "lo": b.lo,
                    "hi": b.hi,
                    "count": b.count,
                    "probability": b.probability,
                    "midpoint": b.midpoint,
                }
                for b in self.histogram
            ],
            "cumulative": [
                {"range": c.range, "midpoint": c.midpoint, "probability": c.probability}
                for c in self.cumulative
            ],
            "critical_path": {
                "top_paths": [
                    {"tasks": ">".join(p.tasks), "count": p.count}
                    for p in self.top_critical_paths
                ]
            },
        }
        return out

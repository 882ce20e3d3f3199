from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Sequence

from schedulelab.config import DEFAULT_TOP_PATHS, HISTOGRAM_TARGET_BUCKETS
from schedulelab.types import (
    CriticalPathCount,
    CumulativePoint,
    HistogramBucket,
    SimulationResult,
)


def _require_values(values_sorted: Sequence[float]) -> None:
    if not values_sorted:
        raise ValueError("statistics need at least one completion time")


def percentile_sorted(values_sorted: Sequence[float], p: float) -> float:
    """Nearest-rank percentile: element at floor(n * p / 100).

    No interpolation. The index is capped at n - 1 so p=100 is the max.
    """

    _require_values(values_sorted)
    n = len(values_sorted)
    idx = int(math.floor(n * p / 100.0))
    return float(values_sorted[max(0, min(n - 1, idx))])


def median_sorted(values_sorted: Sequence[float]) -> float:
    # Element at floor(n/2): for even n this is the upper of the two middle
    # values, not their average.
    _require_values(values_sorted)
    return float(values_sorted[len(values_sorted) // 2])


def target_probability(values: Sequence[float], target: float) -> float:
    _require_values(values)
    hits = sum(1 for v in values if v <= target)
    return hits / len(values) * 100.0


def _fmt_edge(x: float) -> str:
    return str(int(x)) if float(x).is_integer() else f"{x:g}"


def histogram(
    values_sorted: Sequence[float], *, target_buckets: int = HISTOGRAM_TARGET_BUCKETS
) -> list[HistogramBucket]:
    """Fixed-width histogram on integer edges.

    lo = floor(min), hi = ceil(max) and width = max(1, ceil((hi - lo) / target)).
    Buckets are half-open [lo + k*w, lo + (k+1)*w) for every start <= hi, so
    each value lands in exactly one bucket.
    """

    _require_values(values_sorted)
    n = len(values_sorted)
    lo = math.floor(values_sorted[0])
    hi = math.ceil(values_sorted[-1])
    width = max(1, math.ceil((hi - lo) / target_buckets))

    bucket_count = (hi - lo) // width + 1
    counts = [0] * bucket_count
    for v in values_sorted:
        idx = int((v - lo) // width)
        counts[max(0, min(bucket_count - 1, idx))] += 1

    out: list[HistogramBucket] = []
    for k, c in enumerate(counts):
        b_lo = lo + k * width
        b_hi = b_lo + width
        out.append(
            HistogramBucket(
                range=f"{_fmt_edge(b_lo)}-{_fmt_edge(b_hi - 1)}",
                lo=float(b_lo),
                hi=float(b_hi),
                count=c,
                probability=c / n * 100.0,
                midpoint=b_lo + width / 2.0,
            )
        )
    return out


def cumulative(buckets: Sequence[HistogramBucket]) -> list[CumulativePoint]:
    total = sum(b.count for b in buckets)
    running = 0
    out: list[CumulativePoint] = []
    for b in buckets:
        running += b.count
        out.append(
            CumulativePoint(
                range=b.range,
                midpoint=b.midpoint,
                probability=running / total * 100.0 if total else 0.0,
            )
        )
    return out


def critical_path_frequency(
    paths: Iterable[tuple[str, ...]], *, top_n: int = DEFAULT_TOP_PATHS
) -> list[CriticalPathCount]:
    """Most frequent critical paths, by descending count then path."""

    counts = Counter(tuple(p) for p in paths if p)
    ordered = sorted(counts, key=lambda p: (-counts[p], p))
    return [CriticalPathCount(tasks=p, count=int(counts[p])) for p in ordered[:top_n]]


def aggregate(
    values_sorted: Sequence[float],
    *,
    target: float | None = None,
    critical_paths: Iterable[tuple[str, ...]] = (),
    top_paths: int = DEFAULT_TOP_PATHS,
    seed: int | None = None,
    scenario: str | None = None,
) -> SimulationResult:
    """Summarize ascending completion times into a SimulationResult."""

    _require_values(values_sorted)
    values = tuple(float(v) for v in values_sorted)
    if any(a > b for a, b in zip(values, values[1:])):
        raise ValueError("completion times must be sorted ascending")

    buckets = histogram(values)
    return SimulationResult(
        completions=values,
        min=values[0],
        max=values[-1],
        mean=math.fsum(values) / len(values),
        median=median_sorted(values),
        p10=percentile_sorted(values, 10),
        p25=percentile_sorted(values, 25),
        p75=percentile_sorted(values, 75),
        p90=percentile_sorted(values, 90),
        histogram=tuple(buckets),
        cumulative=tuple(cumulative(buckets)),
        target=target,
        target_probability=(
            target_probability(values, target) if target is not None else None
        ),
        top_critical_paths=tuple(critical_path_frequency(critical_paths, top_n=top_paths)),
        seed=seed,
        scenario=scenario,
    )

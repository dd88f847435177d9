from typing import Dict, Sequence, Tuple, Optional
from tra.models import TestExecution, PerformanceMetrics, TestDuration


# (label, upper bound in seconds); the last bucket is open ended.
DURATION_BUCKETS: Tuple[Tuple[str, Optional[float]], ...] = (
    ("<1s", 1),
    ("1-5s", 5),
    ("5-15s", 15),
    ("15-60s", 60),
    (">=60s", None),
)


def bucket_for(duration_ms: int) -> str:
    seconds = duration_ms / 1000
    for label, upper in DURATION_BUCKETS:
        if upper is None or seconds < upper:
            return label
    return DURATION_BUCKETS[-1][0]


def empty_distribution() -> Dict[str, int]:
    return {label: 0 for label, _ in DURATION_BUCKETS}


def compute_performance_metrics(tests: Sequence[TestExecution]) -> PerformanceMetrics:
    # Zero durations mean the timing is missing, not that the test was fast.
    timed = [tr for tr in tests if tr.duration > 0]
    distribution = empty_distribution()

    if not timed:
        return PerformanceMetrics(average_duration=0.0, duration_distribution=distribution)

    slowest = timed[0]
    fastest = timed[0]
    total = 0

    for tr in timed:
        total += tr.duration
        if tr.duration > slowest.duration:
            slowest = tr
        if tr.duration < fastest.duration:
            fastest = tr
        distribution[bucket_for(tr.duration)] += 1

    return PerformanceMetrics(
        average_duration=total / len(timed),
        slowest_test=TestDuration(name=slowest.identity_key(), duration=slowest.duration),
        fastest_test=TestDuration(name=fastest.identity_key(), duration=fastest.duration),
        duration_distribution=distribution,
    )

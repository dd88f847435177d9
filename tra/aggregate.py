import logging
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence

from tra.config import AnalyticsConfig
from tra.fingerprint import build_rules, compute_failure_clusters
from tra.models import (
    AggregateSummary,
    AnalyticsResult,
    DateRange,
    TestExecution,
    PASSED,
    FAILED,
    BROKEN,
    SKIPPED,
    ms_to_datetime,
)
from tra.normalize import normalize_records
from tra.scoring import compute_flakiness, compute_retry_analysis, compute_performance_metrics

log = logging.getLogger(__name__)


def compute_summary(tests: Sequence[TestExecution], now: Optional[datetime] = None) -> AggregateSummary:
    counts = {PASSED: 0, FAILED: 0, BROKEN: 0, SKIPPED: 0}
    total_duration = 0
    earliest = None
    latest = None
    threads = set()
    flaky_flagged = 0
    retried = 0

    for tr in tests:
        counts[tr.status] += 1
        total_duration += tr.duration

        start = tr.time.start
        if start is not None:
            earliest = start if earliest is None else min(earliest, start)
            latest = start if latest is None else max(latest, start)

        if tr.thread_id:
            threads.add(tr.thread_id)
        if tr.flaky:
            flaky_flagged += 1
        if tr.retry_count > 0:
            retried += 1

    if earliest is None:
        now = now or datetime.now(timezone.utc)
        date_range = DateRange(earliest=now, latest=now)
    else:
        date_range = DateRange(earliest=ms_to_datetime(earliest), latest=ms_to_datetime(latest))

    total = len(tests)

    return AggregateSummary(
        total_tests=total,
        passed_tests=counts[PASSED],
        failed_tests=counts[FAILED],
        broken_tests=counts[BROKEN],
        skipped_tests=counts[SKIPPED],
        total_duration=total_duration,
        date_range=date_range,
        thread_count=len(threads) or 1,
        flaky_flagged_tests=flaky_flagged,
        retried_tests=retried,
        pass_rate=counts[PASSED] / total * 100 if total > 0 else 0.0,
        average_duration=total_duration / total if total > 0 else 0.0,
    )


def aggregate_test_data(
    tests: Sequence[TestExecution],
    config: Optional[AnalyticsConfig] = None,
    now: Optional[datetime] = None,
) -> AnalyticsResult:
    config = config or AnalyticsConfig.from_dict({})
    tests = tuple(tests)
    include_parameters = config.include_parameters()

    log.debug("Aggregating %d test executions", len(tests))

    return AnalyticsResult(
        tests=tests,
        summary=compute_summary(tests, now=now),
        flakiness=compute_flakiness(tests, include_parameters=include_parameters),
        retry_analysis=compute_retry_analysis(
            tests,
            top_n=config.get_retry_top_n(),
            include_parameters=include_parameters,
        ),
        failure_clusters=compute_failure_clusters(tests, rules=build_rules(config.get_signature_rules())),
        performance_metrics=compute_performance_metrics(tests),
    )


def analyze_batches(
    batches: Iterable[Any],
    config: Optional[AnalyticsConfig] = None,
    now: Optional[datetime] = None,
) -> AnalyticsResult:
    config = config or AnalyticsConfig.from_dict({})
    tests = normalize_records(batches, deduplicate=config.deduplicate_uids())
    return aggregate_test_data(tests, config=config, now=now)

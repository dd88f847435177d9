"""Tests for the summary aggregator and the analytics pipeline."""

from datetime import datetime, timezone

from tra.aggregate import aggregate_test_data, analyze_batches, compute_summary
from tra.config import AnalyticsConfig
from tra.models import TestExecution, TestTime

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_counts_are_conserved(execution) -> None:
    tests = [
        execution("a", "passed"),
        execution("b", "failed"),
        execution("c", "broken"),
        execution("d", "skipped"),
        execution("e", "passed"),
    ]

    summary = compute_summary(tests, now=NOW)

    assert summary.total_tests == 5
    assert (summary.passed_tests, summary.failed_tests, summary.broken_tests, summary.skipped_tests) == (2, 1, 1, 1)
    assert summary.passed_tests + summary.failed_tests + summary.broken_tests + summary.skipped_tests == 5
    assert summary.pass_rate == 40.0


def test_duration_and_date_range(execution) -> None:
    tests = [
        execution("a", start=3_000, duration=100),
        execution("b", start=1_000, duration=200),
        execution("c", start=2_000, duration=300),
    ]

    summary = compute_summary(tests, now=NOW)

    assert summary.total_duration == 600
    assert summary.average_duration == 200
    assert summary.date_range.earliest == datetime.fromtimestamp(1, tz=timezone.utc)
    assert summary.date_range.latest == datetime.fromtimestamp(3, tz=timezone.utc)


def test_zero_start_is_a_real_timestamp() -> None:
    test = TestExecution(name="a", status="passed", time=TestTime(start=0, stop=10, duration=10))

    summary = compute_summary([test], now=NOW)

    assert summary.date_range.earliest == datetime.fromtimestamp(0, tz=timezone.utc)


def test_date_range_falls_back_to_now(execution) -> None:
    summary = compute_summary([execution("a", start=None)], now=NOW)

    assert summary.date_range.earliest == NOW
    assert summary.date_range.latest == NOW


def test_thread_count(execution) -> None:
    threaded = [
        execution("a", threadId="t1"),
        execution("b", threadId="t2"),
        execution("c", threadId="t1"),
        execution("d"),
    ]

    assert compute_summary(threaded, now=NOW).thread_count == 2
    assert compute_summary([execution("a")], now=NOW).thread_count == 1


def test_flaky_hint_and_retried_counts(execution) -> None:
    tests = [execution("a", flaky=True), execution("b", retryCount=2), execution("c", retryCount=0)]

    summary = compute_summary(tests, now=NOW)

    assert summary.flaky_flagged_tests == 1
    assert summary.retried_tests == 1


def test_empty_input_degrades_gracefully() -> None:
    result = aggregate_test_data([], now=NOW)

    assert result.summary.total_tests == 0
    assert result.summary.total_duration == 0
    assert result.summary.pass_rate == 0.0
    assert result.summary.thread_count == 1
    assert result.flakiness.flaky_tests == ()
    assert result.flakiness.overall_flakiness_score == 0.0
    assert result.retry_analysis.total_retries == 0
    assert result.failure_clusters.clusters == ()
    assert result.performance_metrics.average_duration == 0.0
    assert result.performance_metrics.slowest_test is None


def test_pipeline_is_deterministic(raw) -> None:
    batches = [
        {"children": [
            raw("T1", "passed", start=1_000),
            raw("T1", "failed", start=2_000, message="AssertionError: x"),
            raw("T2", "broken", start=3_000, message="AssertionError: y", retryCount=1),
        ]},
        [raw("T3", "failed", start=4_000, message="TimeoutError")],
    ]

    first = analyze_batches(batches, now=NOW)
    second = analyze_batches(batches, now=NOW)

    assert first.to_dict() == second.to_dict()
    assert first.to_json() == second.to_json()


def test_result_is_json_serializable(raw) -> None:
    result = analyze_batches([[raw("T1", "passed"), raw("T1", "failed")]], now=NOW)

    data = result.to_dict()

    assert data["summary"]["date_range"]["earliest"].startswith("2023-11-14")
    assert data["flakiness"]["flaky_tests"][0]["test_name"] == "T1"
    assert isinstance(data["tests"], list)


def test_config_drives_identity_and_rules(raw) -> None:
    config = AnalyticsConfig.from_dict({
        "identity": {"include_parameters": True},
        "clustering": {"rules": [{"contains": "boom", "signature": "Boom"}]},
    })
    batches = [[
        raw("T", "passed", parameters=["a"]),
        raw("T", "failed", parameters=["b"], message="boom"),
        raw("U", "failed", message="boom"),
    ]]

    result = analyze_batches(batches, config=config, now=NOW)

    assert result.flakiness.flaky_tests == ()
    assert result.failure_clusters.clusters[0].error_signature == "Boom"


def test_out_of_range_start_falls_back_to_now(raw) -> None:
    result = analyze_batches([[raw("T1", "passed", start=10**17), raw("T1", "failed", start=10**17)]], now=NOW)

    assert result.summary.date_range.earliest == NOW
    assert result.summary.date_range.latest == NOW
    assert result.flakiness.flaky_tests[0].last_execution is None

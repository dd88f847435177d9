from pathlib import Path
from tra.models import AnalyticsResult
from tra.filters import format_duration


def write_result_json(result: AnalyticsResult, output_path: Path):
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(result.to_json())


def render_summary(result: AnalyticsResult) -> str:
    lines = []
    lines.append("# Test Report Analytics\n")

    summary = result.summary
    lines.append("## Summary\n")
    lines.append(f"- Total Tests: {summary.total_tests}")
    lines.append(f"- Passed: {summary.passed_tests}")
    lines.append(f"- Failed: {summary.failed_tests}")
    lines.append(f"- Broken: {summary.broken_tests}")
    lines.append(f"- Skipped: {summary.skipped_tests}")
    lines.append(f"- Pass Rate: {summary.pass_rate:.1f}%")
    lines.append(f"- Duration: {format_duration(summary.total_duration)}")
    lines.append(f"- Threads: {summary.thread_count}")
    lines.append(
        f"- Date Range: {summary.date_range.earliest.isoformat()} .. {summary.date_range.latest.isoformat()}"
    )

    flakiness = result.flakiness
    if flakiness.flaky_tests:
        lines.append("\n## Flaky Tests\n")
        lines.append(f"Overall flakiness score: {flakiness.overall_flakiness_score:.2f}\n")
        for ft in flakiness.flaky_tests[:10]:
            lines.append(
                f"- **{ft.test_name}**: score {ft.flakiness_score:.2f} "
                f"({ft.pass_count} passed, {ft.fail_count} failed)"
            )

    retries = result.retry_analysis
    if retries.retried_test_count:
        lines.append("\n## Retries\n")
        lines.append(f"- Total Retries: {retries.total_retries}")
        lines.append(f"- Retried Tests: {retries.retried_test_count}")
        lines.append(f"- Passed After Retry: {retries.successful_retry_count} ({retries.success_rate * 100:.1f}%)")
        if retries.most_retried_tests:
            lines.append("- Most Retried:")
            for rt in retries.most_retried_tests:
                lines.append(f"  - {rt.test_name} ({rt.retry_count})")

    clusters = result.failure_clusters
    if clusters.clusters:
        lines.append("\n## Failure Clusters\n")
        for cluster in clusters.clusters:
            lines.append(f"- **{cluster.error_signature}** ({cluster.similarity * 100:.0f}% of failures)")
            for name in cluster.member_test_names[:10]:
                lines.append(f"  - {name}")

    perf = result.performance_metrics
    lines.append("\n## Performance\n")
    lines.append(f"- Average Duration: {perf.average_duration / 1000:.2f}s")
    if perf.slowest_test:
        lines.append(f"- Slowest: {perf.slowest_test.name} ({format_duration(perf.slowest_test.duration)})")
    if perf.fastest_test:
        lines.append(f"- Fastest: {perf.fastest_test.name} ({perf.fastest_test.duration}ms)")
    for label, count in perf.duration_distribution.items():
        lines.append(f"- {label}: {count}")

    return "\n".join(lines)


def write_summary(result: AnalyticsResult, output_path: Path):
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(render_summary(result))

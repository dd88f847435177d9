from datetime import datetime
from typing import List, Optional, Sequence
from tra.models import TestExecution, ms_to_datetime


def filter_by_date_range(
    tests: Sequence[TestExecution],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[TestExecution]:
    """Keep tests started inside [start, end]; tests without a start time are kept."""
    kept = []
    for tr in tests:
        if tr.time.start is None:
            kept.append(tr)
            continue

        started_at = ms_to_datetime(tr.time.start)
        if start and started_at < start:
            continue
        if end and started_at > end:
            continue
        kept.append(tr)

    return kept


def filter_tests(
    tests: Sequence[TestExecution],
    status: Optional[str] = None,
    package: Optional[str] = None,
    suite: Optional[str] = None,
    thread: Optional[str] = None,
) -> List[TestExecution]:
    return [
        tr for tr in tests
        if (status is None or tr.status == status)
        and (package is None or tr.package_name == package)
        and (suite is None or tr.suite_name == suite)
        and (thread is None or tr.thread_id == thread)
    ]


def format_duration(milliseconds: float) -> str:
    seconds = int(milliseconds // 1000)
    minutes = seconds // 60
    hours = minutes // 60

    if hours > 0:
        return f"{hours}h {minutes % 60}m {seconds % 60}s"
    if minutes > 0:
        return f"{minutes}m {seconds % 60}s"
    return f"{seconds}s"

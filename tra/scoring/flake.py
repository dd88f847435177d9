from typing import Dict, List, Sequence
from tra.models import TestExecution, FlakyTest, Flakiness, PASSED, FAILURE_STATUSES, ms_to_datetime


def group_by_identity(
    tests: Sequence[TestExecution],
    include_parameters: bool = False,
) -> Dict[str, List[TestExecution]]:
    groups: Dict[str, List[TestExecution]] = {}
    for tr in tests:
        groups.setdefault(tr.identity_key(include_parameters), []).append(tr)
    return groups


def compute_flakiness(
    tests: Sequence[TestExecution],
    include_parameters: bool = False,
) -> Flakiness:
    """Score tests that both passed and failed across repeated executions.

    The score is the failing share of non-skipped runs, so a test failing
    once in many runs scores close to 0.
    """
    flaky_tests = []

    for test_name, group in group_by_identity(tests, include_parameters).items():
        if len(group) < 2:
            continue

        pass_count = sum(1 for tr in group if tr.status == PASSED)
        fail_count = sum(1 for tr in group if tr.status in FAILURE_STATUSES)

        if pass_count == 0 or fail_count == 0:
            continue

        flakiness_score = fail_count / (pass_count + fail_count)

        starts = [tr.time.start for tr in group if tr.time.start is not None]
        last_execution = ms_to_datetime(max(starts)) if starts else None

        flaky_tests.append(FlakyTest(
            test_name=test_name,
            pass_count=pass_count,
            fail_count=fail_count,
            flakiness_score=flakiness_score,
            last_execution=last_execution,
        ))

    flaky_tests.sort(key=lambda ft: ft.flakiness_score, reverse=True)

    overall = 0.0
    if flaky_tests:
        overall = sum(ft.flakiness_score for ft in flaky_tests) / len(flaky_tests)

    return Flakiness(
        flaky_tests=tuple(flaky_tests),
        overall_flakiness_score=overall,
    )

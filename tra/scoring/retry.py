from typing import Dict, Sequence
from tra.models import TestExecution, RetryAnalysis, RetriedTest, PASSED


def compute_retry_analysis(
    tests: Sequence[TestExecution],
    top_n: int = 10,
    include_parameters: bool = False,
) -> RetryAnalysis:
    total_retries = 0
    retried_count = 0
    successful_count = 0
    max_retries: Dict[str, int] = {}

    for tr in tests:
        total_retries += tr.retry_count

        if tr.retry_count > 0:
            retried_count += 1
            if tr.status == PASSED:
                successful_count += 1

            key = tr.identity_key(include_parameters)
            max_retries[key] = max(max_retries.get(key, 0), tr.retry_count)

    success_rate = successful_count / retried_count if retried_count > 0 else 0.0

    most_retried = [RetriedTest(test_name=name, retry_count=count) for name, count in max_retries.items()]
    most_retried.sort(key=lambda rt: rt.retry_count, reverse=True)

    return RetryAnalysis(
        total_retries=total_retries,
        retried_test_count=retried_count,
        successful_retry_count=successful_count,
        success_rate=success_rate,
        most_retried_tests=tuple(most_retried[:max(top_n, 0)]),
    )

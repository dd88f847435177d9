"""Stateful access to the most recent analytics result.

The analytics core is a pure function of its input; this service is the
place that remembers the latest result so callers can query it later.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from tra.config import AnalyticsConfig
from tra.filters import filter_tests
from tra.models import AnalyticsResult, FAILURE_STATUSES, to_jsonable

NO_DATA = "No test data available"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ApiResponse:
    success: bool
    data: Any = None
    error: Optional[str] = None
    timestamp: str = field(default_factory=_now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "data": to_jsonable(self.data),
            "error": self.error,
            "timestamp": self.timestamp,
        }


class ResultsService:
    def __init__(self, result: Optional[AnalyticsResult] = None):
        self._result = result

    @property
    def result(self) -> Optional[AnalyticsResult]:
        return self._result

    def set_result(self, result: AnalyticsResult):
        self._result = result

    def _missing(self) -> ApiResponse:
        return ApiResponse(success=False, error=NO_DATA)

    def get_summary(self) -> ApiResponse:
        if self._result is None:
            return self._missing()

        summary = self._result.summary
        return ApiResponse(success=True, data={
            "total_tests": summary.total_tests,
            "passed_tests": summary.passed_tests,
            "failed_tests": summary.failed_tests,
            "broken_tests": summary.broken_tests,
            "skipped_tests": summary.skipped_tests,
            "total_duration": summary.total_duration,
            "pass_rate": summary.pass_rate,
            "avg_duration": summary.average_duration,
        })

    def get_tests(
        self,
        status: Optional[str] = None,
        package: Optional[str] = None,
        suite: Optional[str] = None,
        thread: Optional[str] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> ApiResponse:
        if self._result is None:
            return self._missing()

        tests = filter_tests(self._result.tests, status=status, package=package, suite=suite, thread=thread)
        if offset:
            tests = tests[offset:]
        if limit is not None:
            tests = tests[:limit]

        return ApiResponse(success=True, data=[tr.to_dict() for tr in tests])

    def get_failed_tests(self) -> ApiResponse:
        if self._result is None:
            return self._missing()

        failed = [tr.to_dict() for tr in self._result.tests if tr.status in FAILURE_STATUSES]
        return ApiResponse(success=True, data=failed)

    def get_flaky_tests(self) -> ApiResponse:
        if self._result is None:
            return self._missing()
        return ApiResponse(success=True, data=self._result.flakiness.to_dict())

    def get_performance_metrics(self) -> ApiResponse:
        if self._result is None:
            return self._missing()
        return ApiResponse(success=True, data=self._result.performance_metrics.to_dict())

    def get_retry_analysis(self) -> ApiResponse:
        if self._result is None:
            return self._missing()
        return ApiResponse(success=True, data=self._result.retry_analysis.to_dict())

    def get_failure_clusters(self) -> ApiResponse:
        if self._result is None:
            return self._missing()
        return ApiResponse(success=True, data=self._result.failure_clusters.to_dict())

    def get_health_status(self, config: Optional[AnalyticsConfig] = None) -> ApiResponse:
        if self._result is None:
            return self._missing()

        config = config or AnalyticsConfig.from_dict({})
        summary = self._result.summary
        pass_rate = summary.pass_rate
        flaky_count = len(self._result.flakiness.flaky_tests)
        failed_count = summary.failed_tests + summary.broken_tests

        status = "healthy"
        if pass_rate < config.get_critical_pass_rate() or failed_count > config.get_critical_failed_count():
            status = "critical"
        elif (
            pass_rate < config.get_warning_pass_rate()
            or flaky_count > config.get_warning_flaky_count()
            or failed_count > 0
        ):
            status = "warning"

        return ApiResponse(success=True, data={
            "status": status,
            "pass_rate": pass_rate,
            "flaky_test_count": flaky_count,
            "failed_test_count": failed_count,
            "last_update": _now_iso(),
        })

    def build_webhook_payload(self, include_tests: bool = False) -> Dict[str, Any]:
        if self._result is None:
            return {"error": NO_DATA}

        payload = {
            "timestamp": _now_iso(),
            "summary": self.get_summary().data,
            "analytics": {
                "flakiness": self._result.flakiness.to_dict(),
                "retry_analysis": self._result.retry_analysis.to_dict(),
                "failure_clusters": self._result.failure_clusters.to_dict(),
                "performance_metrics": self._result.performance_metrics.to_dict(),
            },
            "date_range": to_jsonable({
                "earliest": self._result.summary.date_range.earliest,
                "latest": self._result.summary.date_range.latest,
            }),
        }
        if include_tests:
            payload["tests"] = [tr.to_dict() for tr in self._result.tests]

        return payload

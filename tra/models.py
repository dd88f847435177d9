from dataclasses import dataclass, field, asdict
from typing import Optional, Tuple, Dict, Any
from datetime import datetime, timezone
import json


PASSED = "passed"
FAILED = "failed"
BROKEN = "broken"
SKIPPED = "skipped"

STATUSES = (PASSED, FAILED, BROKEN, SKIPPED)
FAILURE_STATUSES = (FAILED, BROKEN)


def to_jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


def ms_to_datetime(ms: int) -> datetime:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc)


@dataclass(frozen=True)
class TestTime:
    __test__ = False

    start: Optional[int] = None
    stop: Optional[int] = None
    duration: int = 0


@dataclass(frozen=True)
class StatusDetails:
    message: Optional[str] = None
    trace: Optional[str] = None


@dataclass(frozen=True)
class TestParameter:
    __test__ = False

    name: str = ""
    value: str = ""


@dataclass(frozen=True)
class TestExecution:
    __test__ = False

    name: str
    status: str
    time: TestTime
    full_name: str = ""
    status_details: Optional[StatusDetails] = None
    retry_count: int = 0
    flaky: bool = False
    uid: str = ""
    package_name: str = ""
    suite_name: str = ""
    thread_id: str = ""
    tags: Tuple[str, ...] = ()
    parameters: Tuple[TestParameter, ...] = ()
    error_text: str = ""

    @property
    def duration(self) -> int:
        return self.time.duration

    @property
    def message(self) -> Optional[str]:
        if self.status_details is None:
            return None
        return self.status_details.message

    def identity_key(self, include_parameters: bool = False) -> str:
        """Grouping key for repeated executions of the same logical test.

        Parameters are ignored unless ``include_parameters`` is set, so
        parameterized runs sharing a name are treated as one test.
        """
        key = self.name or self.full_name or "unknown"
        if include_parameters and self.parameters:
            params = ", ".join(f"{p.name}={p.value}" if p.name else p.value for p in self.parameters)
            key = f"{key}[{params}]"
        return key

    def to_dict(self):
        return to_jsonable(asdict(self))


@dataclass(frozen=True)
class DateRange:
    earliest: datetime
    latest: datetime


@dataclass(frozen=True)
class AggregateSummary:
    total_tests: int
    passed_tests: int
    failed_tests: int
    broken_tests: int
    skipped_tests: int
    total_duration: int
    date_range: DateRange
    thread_count: int
    flaky_flagged_tests: int = 0
    retried_tests: int = 0
    pass_rate: float = 0.0
    average_duration: float = 0.0

    def to_dict(self):
        return to_jsonable(asdict(self))


@dataclass(frozen=True)
class FlakyTest:
    test_name: str
    pass_count: int
    fail_count: int
    flakiness_score: float
    last_execution: Optional[datetime] = None


@dataclass(frozen=True)
class Flakiness:
    flaky_tests: Tuple[FlakyTest, ...] = ()
    overall_flakiness_score: float = 0.0

    def to_dict(self):
        return to_jsonable(asdict(self))


@dataclass(frozen=True)
class RetriedTest:
    test_name: str
    retry_count: int


@dataclass(frozen=True)
class RetryAnalysis:
    total_retries: int = 0
    retried_test_count: int = 0
    successful_retry_count: int = 0
    success_rate: float = 0.0
    most_retried_tests: Tuple[RetriedTest, ...] = ()

    def to_dict(self):
        return to_jsonable(asdict(self))


@dataclass(frozen=True)
class FailureCluster:
    error_signature: str
    member_test_names: Tuple[str, ...]
    occurrence_count: int
    similarity: float


@dataclass(frozen=True)
class FailureClusterData:
    clusters: Tuple[FailureCluster, ...] = ()
    total_clusters: int = 0
    total_failures: int = 0

    def to_dict(self):
        return to_jsonable(asdict(self))


@dataclass(frozen=True)
class TestDuration:
    __test__ = False

    name: str
    duration: int


@dataclass(frozen=True)
class PerformanceMetrics:
    average_duration: float = 0.0
    slowest_test: Optional[TestDuration] = None
    fastest_test: Optional[TestDuration] = None
    duration_distribution: Dict[str, int] = field(default_factory=dict)

    def to_dict(self):
        return to_jsonable(asdict(self))


@dataclass(frozen=True)
class AnalyticsResult:
    tests: Tuple[TestExecution, ...]
    summary: AggregateSummary
    flakiness: Flakiness
    retry_analysis: RetryAnalysis
    failure_clusters: FailureClusterData
    performance_metrics: PerformanceMetrics

    def to_dict(self, include_tests: bool = True) -> Dict[str, Any]:
        d = {
            "summary": self.summary.to_dict(),
            "flakiness": self.flakiness.to_dict(),
            "retry_analysis": self.retry_analysis.to_dict(),
            "failure_clusters": self.failure_clusters.to_dict(),
            "performance_metrics": self.performance_metrics.to_dict(),
        }
        if include_tests:
            d["tests"] = [t.to_dict() for t in self.tests]
        return d

    def to_json(self, indent=2):
        return json.dumps(self.to_dict(), indent=indent)

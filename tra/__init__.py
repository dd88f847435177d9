from tra.models import AnalyticsResult, TestExecution
from tra.normalize import normalize_records
from tra.aggregate import aggregate_test_data, analyze_batches, compute_summary

__version__ = "0.1.0"

__all__ = [
    "AnalyticsResult",
    "TestExecution",
    "aggregate_test_data",
    "analyze_batches",
    "compute_summary",
    "normalize_records",
]

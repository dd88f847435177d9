from tra.scoring.flake import compute_flakiness, group_by_identity
from tra.scoring.retry import compute_retry_analysis
from tra.scoring.performance import compute_performance_metrics

__all__ = ["compute_flakiness", "group_by_identity", "compute_retry_analysis", "compute_performance_metrics"]

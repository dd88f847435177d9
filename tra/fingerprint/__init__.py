from tra.fingerprint.signature import classify_error, extract_error_info, match_category, build_rules
from tra.fingerprint.clusters import compute_failure_clusters

__all__ = ["classify_error", "extract_error_info", "match_category", "build_rules", "compute_failure_clusters"]

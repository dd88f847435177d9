from typing import Dict, List, Sequence, Tuple, Optional
from tra.models import TestExecution, FailureCluster, FailureClusterData, FAILURE_STATUSES
from tra.fingerprint.signature import classify_error, SIGNATURE_RULES


def compute_failure_clusters(
    tests: Sequence[TestExecution],
    rules: Optional[Sequence[Tuple[str, str]]] = None,
) -> FailureClusterData:
    """Group failed and broken runs by classified error signature.

    Only signatures shared by at least two distinct test names become
    clusters. ``similarity`` is the share of failing runs carrying the
    signature, counted per run before names are deduplicated.
    """
    rules = rules if rules is not None else SIGNATURE_RULES
    failures = [tr for tr in tests if tr.status in FAILURE_STATUSES]

    occurrences: Dict[str, List[str]] = {}
    for tr in failures:
        signature = classify_error(tr.message, rules)
        occurrences.setdefault(signature, []).append(tr.identity_key())

    total_failures = len(failures)
    clusters = []

    for signature, names in occurrences.items():
        members = tuple(dict.fromkeys(names))
        if len(members) < 2:
            continue

        similarity = len(names) / total_failures if total_failures > 0 else 0.0
        clusters.append(FailureCluster(
            error_signature=signature,
            member_test_names=members,
            occurrence_count=len(names),
            similarity=similarity,
        ))

    clusters.sort(key=lambda c: len(c.member_test_names), reverse=True)

    return FailureClusterData(
        clusters=tuple(clusters),
        total_clusters=len(clusters),
        total_failures=total_failures,
    )

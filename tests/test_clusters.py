"""Tests for error signatures and failure clustering."""

import pytest

from tra.fingerprint import build_rules, classify_error, compute_failure_clusters, match_category


@pytest.mark.parametrize(
    "message, signature",
    [
        ("AssertionError: expected 1", "Assertion Error"),
        ("selenium TimeoutError after 30s", "Timeout Error"),
        ("java.lang.NullPointerException", "Null Pointer"),
        ("ConnectionError: refused", "Connection Error"),
        ("ElementNotFound: #login", "Element Not Found"),
        ("ValueError: bad", "Other Error"),
        (None, "Other Error"),
        ("", "Other Error"),
    ],
)
def test_classify_error(message, signature) -> None:
    assert classify_error(message) == signature


def test_first_matching_rule_wins() -> None:
    assert classify_error("TimeoutError raised AssertionError") == "Assertion Error"


def test_custom_rules_run_first() -> None:
    rules = build_rules([{"contains": "AssertionError: flaky", "signature": "Known Flake"}])

    assert classify_error("AssertionError: flaky widget", rules) == "Known Flake"
    assert classify_error("AssertionError: other", rules) == "Assertion Error"


def test_incomplete_custom_rule_is_rejected() -> None:
    with pytest.raises(ValueError):
        build_rules([{"contains": "x"}])


def test_singleton_signatures_are_not_clusters(execution) -> None:
    tests = [
        execution("a", "failed", message="AssertionError: 1"),
        execution("b", "failed", message="AssertionError: 2"),
        execution("c", "broken", message="AssertionError: 3"),
        execution("d", "failed", message="TimeoutError"),
        execution("e", "failed"),
        execution("f", "passed", message="AssertionError: ignored"),
    ]

    data = compute_failure_clusters(tests)

    assert data.total_failures == 5
    assert data.total_clusters == 1
    cluster = data.clusters[0]
    assert cluster.error_signature == "Assertion Error"
    assert cluster.member_test_names == ("a", "b", "c")
    assert cluster.similarity == pytest.approx(3 / 5)


def test_repeated_runs_count_in_similarity_but_not_members(execution) -> None:
    """Similarity counts every failing run; members are deduplicated names."""
    tests = [
        execution("a", "failed", message="TimeoutError"),
        execution("a", "failed", message="TimeoutError"),
        execution("a", "failed", message="TimeoutError"),
        execution("b", "failed", message="TimeoutError"),
    ]

    cluster = compute_failure_clusters(tests).clusters[0]

    assert cluster.member_test_names == ("a", "b")
    assert cluster.occurrence_count == 4
    assert cluster.similarity == 1.0


def test_same_name_failures_do_not_form_cluster(execution) -> None:
    tests = [execution("a", "failed", message="TimeoutError"), execution("a", "failed", message="TimeoutError")]

    assert compute_failure_clusters(tests).clusters == ()


def test_missing_messages_cluster_as_other_error(execution) -> None:
    tests = [execution("a", "broken"), execution("b", "failed", message="weird")]

    cluster = compute_failure_clusters(tests).clusters[0]

    assert cluster.error_signature == "Other Error"


def test_clusters_sorted_by_member_count(execution) -> None:
    tests = [
        execution("a", "failed", message="TimeoutError"),
        execution("b", "failed", message="TimeoutError"),
        execution("c", "failed", message="AssertionError"),
        execution("d", "failed", message="AssertionError"),
        execution("e", "failed", message="AssertionError"),
    ]

    signatures = [c.error_signature for c in compute_failure_clusters(tests).clusters]

    assert signatures == ["Assertion Error", "Timeout Error"]
    for cluster in compute_failure_clusters(tests).clusters:
        assert len(cluster.member_test_names) >= 2


def test_equal_member_counts_keep_first_seen_order(execution) -> None:
    tests = [
        execution("a", "failed", message="TimeoutError"),
        execution("c", "failed", message="AssertionError"),
        execution("b", "failed", message="TimeoutError"),
        execution("d", "failed", message="AssertionError"),
        execution("d", "failed", message="AssertionError"),
    ]

    clusters = compute_failure_clusters(tests).clusters

    assert [c.error_signature for c in clusters] == ["Timeout Error", "Assertion Error"]
    assert [c.occurrence_count for c in clusters] == [2, 3]


def test_no_failures() -> None:
    data = compute_failure_clusters([])

    assert data.clusters == ()
    assert data.total_failures == 0


CATEGORIES = {
    "children": [
        {"name": "Product defects", "children": [{"name": "AssertionError"}]},
        {"name": "Test defects"},
        {"name": "Broken tests"},
    ]
}


def test_match_category_by_child_name() -> None:
    assert match_category("AssertionError: x", "failed", CATEGORIES) == "Category: Product defects > AssertionError"


def test_match_category_by_status_fallback() -> None:
    assert match_category("Socket closed", "broken", CATEGORIES) == "Category: Broken tests"


def test_match_category_without_categories() -> None:
    assert match_category("Socket closed", "failed", None) == "Error: Socket closed"
    assert match_category(None, "failed", None) is None

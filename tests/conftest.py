"""Shared fixtures for tra tests."""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import pytest

from tra.models import TestExecution
from tra.normalize import normalize_record

RawFactory = Callable[..., Dict[str, Any]]


def build_raw(
    name: str = "test_example",
    status: str = "passed",
    start: Optional[int] = 1_700_000_000_000,
    duration: Optional[int] = 1000,
    message: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    time: Dict[str, Any] = {}
    if start is not None:
        time["start"] = start
        if duration is not None:
            time["stop"] = start + duration
    if duration is not None:
        time["duration"] = duration

    record: Dict[str, Any] = {"name": name, "status": status, "time": time}
    if message is not None:
        record["statusDetails"] = {"message": message}
    record.update(extra)
    return record


@pytest.fixture
def raw() -> RawFactory:
    """Factory for raw report records."""
    return build_raw


@pytest.fixture
def execution() -> Callable[..., TestExecution]:
    """Factory for normalized execution records."""

    def factory(*args: Any, **kwargs: Any) -> TestExecution:
        return normalize_record(build_raw(*args, **kwargs))

    return factory


@pytest.fixture
def report_dir(tmp_path: Path) -> Path:
    """Report directory with behaviors, packages, suites, timeline and categories files."""
    behaviors = {
        "children": [
            build_raw("test_login", "passed", start=1_700_000_000_000, duration=1200, uid="u1"),
            build_raw("test_login", "failed", start=1_700_000_100_000, duration=1500, uid="u2",
                      message="AssertionError: expected 200"),
            build_raw("test_checkout", "broken", start=1_700_000_200_000, duration=70_000, uid="u3",
                      message="AssertionError: cart empty", retryCount=2),
            build_raw("test_search", "skipped", start=1_700_000_300_000, duration=0, uid="u4"),
        ]
    }
    packages = {
        "uid": "p",
        "name": "packages",
        "children": [
            {"name": "com.shop.auth", "uid": "pa", "children": [{"name": "test_login", "uid": "u1"},
                                                                  {"name": "test_login", "uid": "u2"}]},
            {"name": "com.shop.cart", "uid": "pc", "children": [{"name": "test_checkout", "uid": "u3"}]},
        ],
    }
    suites = {
        "uid": "s",
        "name": "suites",
        "children": [
            {"name": "AuthSuite", "uid": "sa", "children": [{"name": "test_login", "uid": "u1"},
                                                             {"name": "test_login", "uid": "u2"}]},
        ],
    }
    timeline = {
        "children": [
            {"uid": "u1", "name": "test_login", "thread": "worker-1"},
            {"uid": "u2", "name": "test_login", "thread": "worker-2"},
            {"uid": "u3", "name": "test_checkout", "thread": "worker-1"},
        ]
    }
    categories = {
        "uid": "c",
        "name": "categories",
        "children": [
            {"name": "Product defects", "uid": "c1", "children": [{"name": "AssertionError", "uid": "c1a"}]},
        ],
    }

    data = tmp_path / "report" / "data"
    data.mkdir(parents=True)
    for file_name, content in (
        ("behaviors.json", behaviors),
        ("packages.json", packages),
        ("suites.json", suites),
        ("timeline.json", timeline),
        ("categories.json", categories),
    ):
        (data / file_name).write_text(json.dumps(content), encoding="utf-8")

    return tmp_path / "report"

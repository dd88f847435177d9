import logging
from datetime import datetime
from glob import glob
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
from tra.models import AnalyticsResult, TestExecution
from tra.config import AnalyticsConfig, load_config
from tra.parsers import ReportBundle, load_report_dir, collect_batches, parse_junit_xml
from tra.normalize import normalize_records
from tra.filters import filter_by_date_range
from tra.aggregate import aggregate_test_data
from tra.output import write_result_json, write_summary

log = logging.getLogger(__name__)


def _junit_batches(report_dir: str, config: AnalyticsConfig, junit_paths: Sequence[str]):
    paths = [Path(p) for p in junit_paths]
    for junit_glob in config.get_junit_globs():
        paths.extend(Path(p) for p in sorted(glob(str(Path(report_dir) / junit_glob), recursive=True)))

    batches = []
    for path in paths:
        if not path.exists():
            raise FileNotFoundError(f"JUnit report not found: {path}")
        batches.append(parse_junit_xml(path))
    return batches


def load_tests(
    report_dir: str,
    config: AnalyticsConfig,
    junit_paths: Sequence[str] = (),
) -> Tuple[ReportBundle, List[TestExecution]]:
    """Load the report directory and any JUnit files into normalized executions."""
    bundle = load_report_dir(report_dir, config)
    batches = collect_batches(bundle, extra_batches=_junit_batches(report_dir, config, junit_paths))
    return bundle, normalize_records(batches, deduplicate=config.deduplicate_uids())


def build_result(
    report_dir: str,
    config: AnalyticsConfig,
    junit_paths: Sequence[str] = (),
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
) -> AnalyticsResult:
    _, tests = load_tests(report_dir, config, junit_paths)
    if since or until:
        tests = filter_by_date_range(tests, start=since, end=until)

    log.debug("Analyzing %d test executions from %s", len(tests), report_dir)
    return aggregate_test_data(tests, config=config)


def analyze_report(
    report_dir: str,
    config_path: str = "tra.yml",
    output_dir: str = "tra-out",
    junit_paths: Sequence[str] = (),
    since: Optional[datetime] = None,
    until: Optional[datetime] = None,
) -> AnalyticsResult:
    config = load_config(config_path)
    result = build_result(report_dir, config, junit_paths=junit_paths, since=since, until=until)

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    write_result_json(result, output_path / "analytics.json")
    write_summary(result, output_path / "summary.md")

    return result

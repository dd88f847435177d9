from tra.parsers.allure import (
    ReportBundle,
    annotate_records,
    collect_batches,
    extract_tree_records,
    load_json_document,
    load_report_dir,
)
from tra.parsers.junit import parse_junit_xml

__all__ = [
    "ReportBundle",
    "annotate_records",
    "collect_batches",
    "extract_tree_records",
    "load_json_document",
    "load_report_dir",
    "parse_junit_xml",
]

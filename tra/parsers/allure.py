import json
import logging
from dataclasses import dataclass, field
from glob import glob
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from tra.config import AnalyticsConfig
from tra.errors import ReportLoadError

log = logging.getLogger(__name__)


@dataclass
class ReportBundle:
    behaviors: List[Dict[str, Any]] = field(default_factory=list)
    categories: List[Dict[str, Any]] = field(default_factory=list)
    packages: List[Dict[str, Any]] = field(default_factory=list)
    suites: List[Dict[str, Any]] = field(default_factory=list)
    timeline: List[Dict[str, Any]] = field(default_factory=list)


def load_json_document(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ReportLoadError(f"Invalid JSON in {path}: {e}")

    if not isinstance(data, dict):
        raise ReportLoadError(f"Expected a JSON object in {path}")

    return data


def _load_documents(root: Path, globs: Sequence[str]) -> List[Dict[str, Any]]:
    documents = []
    seen = set()

    for pattern in globs:
        for match in sorted(glob(str(root / pattern), recursive=True)):
            path = Path(match)
            if path in seen or not path.is_file():
                continue
            seen.add(path)
            try:
                documents.append(load_json_document(path))
            except (ReportLoadError, OSError) as e:
                log.warning("Failed to load %s: %s", path, e)

    return documents


def load_report_dir(root: str, config: AnalyticsConfig) -> ReportBundle:
    root_path = Path(root)
    if not root_path.is_dir():
        raise FileNotFoundError(f"Report directory not found: {root}")

    bundle = ReportBundle(
        behaviors=_load_documents(root_path, config.get_report_globs()),
        categories=_load_documents(root_path, config.get_categories_globs()),
        packages=_load_documents(root_path, config.get_packages_globs()),
        suites=_load_documents(root_path, config.get_suites_globs()),
        timeline=_load_documents(root_path, config.get_timeline_globs()),
    )
    log.debug(
        "Loaded %d report, %d package, %d suite and %d timeline documents from %s",
        len(bundle.behaviors), len(bundle.packages), len(bundle.suites), len(bundle.timeline), root,
    )
    return bundle


def _index_tree(documents: Sequence[Mapping[str, Any]]) -> Dict[str, str]:
    """Map each uid to the name of the tree node that directly contains it."""
    index: Dict[str, str] = {}

    def walk(children: Sequence[Any], parent_name: str):
        for child in children:
            if not isinstance(child, Mapping):
                continue
            uid = child.get("uid")
            if uid and uid not in index:
                index[uid] = parent_name
            if child.get("children"):
                walk(child["children"], child.get("name") or "")

    for doc in documents:
        walk(doc.get("children") or [], doc.get("name") or "")

    return index


def _index_timeline(documents: Sequence[Mapping[str, Any]]) -> Dict[str, str]:
    index: Dict[str, str] = {}
    for doc in documents:
        for item in doc.get("children") or []:
            if isinstance(item, Mapping) and item.get("uid") and item.get("thread"):
                index.setdefault(item["uid"], item["thread"])
    return index


def annotate_records(
    records: Sequence[Any],
    packages: Sequence[Mapping[str, Any]] = (),
    suites: Sequence[Mapping[str, Any]] = (),
    timeline: Sequence[Mapping[str, Any]] = (),
) -> List[Any]:
    """Fill packageName, suiteName and threadId from the auxiliary report files.

    Returns new record mappings; values already present on a record are kept.
    """
    package_index = _index_tree(packages)
    suite_index = _index_tree(suites)
    thread_index = _index_timeline(timeline)

    annotated = []
    for record in records:
        if not isinstance(record, Mapping) or not record.get("uid"):
            annotated.append(record)
            continue

        uid = record["uid"]
        updated = dict(record)
        for key, index in (("packageName", package_index), ("suiteName", suite_index), ("threadId", thread_index)):
            if not updated.get(key) and uid in index:
                updated[key] = index[uid]
        annotated.append(updated)

    return annotated


def extract_tree_records(documents: Sequence[Mapping[str, Any]], source: str) -> List[Dict[str, Any]]:
    """Pull leaf test nodes out of a package, suite or category tree."""
    records = []

    def walk(children: Sequence[Any], parent_name: str):
        for child in children:
            if not isinstance(child, Mapping):
                continue
            if child.get("children"):
                walk(child["children"], child.get("name") or parent_name)
            elif child.get("uid") and child.get("status"):
                name = child.get("name") or "Unknown Test"
                record = dict(child)
                record.update({
                    "name": name,
                    "time": child.get("time") or {},
                    "fullName": f"{parent_name}.{name}" if parent_name else name,
                    "packageName": source,
                    "suiteName": parent_name,
                })
                records.append(record)

    for doc in documents:
        walk(doc.get("children") or [], "")

    return records


def collect_batches(bundle: ReportBundle, extra_batches: Optional[Sequence[Sequence[Any]]] = None) -> List[List[Any]]:
    """Build the raw record batches handed to the normalizer."""
    batches = []
    for doc in bundle.behaviors:
        children = doc.get("children") or []
        batches.append(annotate_records(children, bundle.packages, bundle.suites, bundle.timeline))

    if not any(batches):
        for source, documents in (
            ("categories", bundle.categories),
            ("packages", bundle.packages),
            ("suites", bundle.suites),
        ):
            records = extract_tree_records(documents, source)
            if records:
                batches.append(records)

    for batch in extra_batches or []:
        batches.append(list(batch))

    return batches

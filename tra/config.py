from pathlib import Path
import yaml
from typing import Dict, Any, List
from dataclasses import dataclass, field


@dataclass
class AnalyticsConfig:
    version: int = 1
    inputs: Dict[str, List[str]] = field(default_factory=dict)
    identity: Dict[str, Any] = field(default_factory=dict)
    normalization: Dict[str, Any] = field(default_factory=dict)
    retries: Dict[str, Any] = field(default_factory=dict)
    clustering: Dict[str, Any] = field(default_factory=dict)
    health: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AnalyticsConfig":
        return cls(
            version=d.get("version", 1),
            inputs=d.get("inputs") or {},
            identity=d.get("identity") or {},
            normalization=d.get("normalization") or {},
            retries=d.get("retries") or {},
            clustering=d.get("clustering") or {},
            health=d.get("health") or {},
        )

    def get_report_globs(self) -> List[str]:
        return self.inputs.get("report_globs", ["**/behaviors.json"])

    def get_packages_globs(self) -> List[str]:
        return self.inputs.get("packages_globs", ["**/packages.json"])

    def get_suites_globs(self) -> List[str]:
        return self.inputs.get("suites_globs", ["**/suites.json"])

    def get_timeline_globs(self) -> List[str]:
        return self.inputs.get("timeline_globs", ["**/timeline.json"])

    def get_categories_globs(self) -> List[str]:
        return self.inputs.get("categories_globs", ["**/categories.json"])

    def get_junit_globs(self) -> List[str]:
        return self.inputs.get("junit_globs", [])

    def include_parameters(self) -> bool:
        return bool(self.identity.get("include_parameters", False))

    def deduplicate_uids(self) -> bool:
        return bool(self.normalization.get("deduplicate_uids", True))

    def get_retry_top_n(self) -> int:
        return int(self.retries.get("top_n", 10))

    def get_signature_rules(self) -> List[Dict[str, str]]:
        return self.clustering.get("rules", [])

    def get_critical_pass_rate(self) -> float:
        return float(self.health.get("critical_pass_rate", 80))

    def get_warning_pass_rate(self) -> float:
        return float(self.health.get("warning_pass_rate", 95))

    def get_critical_failed_count(self) -> int:
        return int(self.health.get("critical_failed_count", 10))

    def get_warning_flaky_count(self) -> int:
        return int(self.health.get("warning_flaky_count", 5))


def load_config(config_path: str = "tra.yml") -> AnalyticsConfig:
    path = Path(config_path)
    if not path.exists():
        return AnalyticsConfig.from_dict({})

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {config_path}")

    return AnalyticsConfig.from_dict(data)

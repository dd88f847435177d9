from typing import Optional, List, Dict, Any, Mapping, Sequence, Tuple


UNKNOWN_ERROR = "Unknown error"
OTHER_ERROR = "Other Error"

# Checked in order, first match wins.
SIGNATURE_RULES: Tuple[Tuple[str, str], ...] = (
    ("AssertionError", "Assertion Error"),
    ("TimeoutError", "Timeout Error"),
    ("NullPointerException", "Null Pointer"),
    ("ConnectionError", "Connection Error"),
    ("ElementNotFound", "Element Not Found"),
)

# Key paths probed for diagnostic text, in priority order.
ERROR_TEXT_PATHS: Tuple[Tuple[str, ...], ...] = (
    ("statusDetails", "message"),
    ("statusDetails", "trace"),
    ("message",),
    ("errorMessage",),
    ("failureMessage",),
    ("exception",),
    ("trace",),
    ("stackTrace",),
    ("errorTrace",),
    ("failure",),
    ("error",),
    ("statusMessage",),
    ("statusTrace",),
    ("description",),
    ("result", "message"),
    ("result", "trace"),
)


def build_rules(custom_rules: Optional[Sequence[Mapping[str, str]]] = None) -> Tuple[Tuple[str, str], ...]:
    """Prepend configured ``{contains, signature}`` rules to the built-in set."""
    rules = []
    for rule in custom_rules or []:
        contains = rule.get("contains")
        signature = rule.get("signature")
        if not contains or not signature:
            raise ValueError(f"Signature rule needs 'contains' and 'signature': {rule!r}")
        rules.append((contains, signature))
    return tuple(rules) + SIGNATURE_RULES


def classify_error(message: Optional[str], rules: Sequence[Tuple[str, str]] = SIGNATURE_RULES) -> str:
    if message is None or message == "":
        message = UNKNOWN_ERROR

    for needle, signature in rules:
        if needle in message:
            return signature

    return OTHER_ERROR


def _lookup(raw: Mapping[str, Any], path: Tuple[str, ...]) -> Any:
    value: Any = raw
    for key in path:
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def extract_error_info(raw: Mapping[str, Any]) -> Optional[str]:
    for path in ERROR_TEXT_PATHS:
        value = _lookup(raw, path)
        if isinstance(value, str) and value:
            return value
    return None


def match_category(
    error_text: Optional[str],
    status: str,
    categories: Optional[Mapping[str, Any]] = None,
) -> Optional[str]:
    """Describe a failure by the report category it belongs to.

    A category (or one of its children) matches when its name occurs in the
    error text. Failing that, failed and broken tests fall back to the first
    category whose name mentions their status. Without any category match the
    raw error text is returned, or ``None`` when there is none.
    """
    fallback = f"Error: {error_text}" if error_text else None
    if not categories:
        return fallback

    children: List[Dict[str, Any]] = [c for c in categories.get("children") or [] if isinstance(c, Mapping)]
    lowered = (error_text or "").lower()

    if lowered:
        for category in children:
            category_name = category.get("name") or ""
            if category_name and category_name.lower() in lowered:
                return f"Category: {category_name}"

            for child in category.get("children") or []:
                child_name = child.get("name") if isinstance(child, Mapping) else None
                if child_name and child_name.lower() in lowered:
                    return f"Category: {category_name} > {child_name}"

    status_hint = {"failed": "fail", "broken": "broken"}.get(status)
    if status_hint:
        for category in children:
            category_name = category.get("name") or ""
            if status_hint in category_name.lower():
                return f"Category: {category_name}"

    return fallback

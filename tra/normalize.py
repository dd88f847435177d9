import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from tra.errors import MalformedRecordError
from tra.fingerprint.signature import extract_error_info
from tra.models import (
    STATUSES,
    StatusDetails,
    TestExecution,
    TestParameter,
    TestTime,
    ms_to_datetime,
)

log = logging.getLogger(__name__)

RETRY_COUNT_KEYS = ("retryCount", "retriesCount")


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    return None


def _optional_timestamp(value: Any) -> Optional[int]:
    """Epoch ms, or None when the value cannot be represented as a datetime."""
    ms = _optional_int(value)
    if ms is None:
        return None
    try:
        ms_to_datetime(ms)
    except (OverflowError, OSError, ValueError):
        log.warning("Ignoring out of range timestamp: %d", ms)
        return None
    return ms


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _resolve_duration(raw: Mapping[str, Any], start: Optional[int], stop: Optional[int]) -> int:
    """Pick the duration in ms; explicit values win over start/stop arithmetic."""
    explicit = _optional_int(raw["time"].get("duration"))
    if explicit is None:
        explicit = _optional_int(raw.get("duration"))
    if explicit is not None:
        return max(explicit, 0)

    if start is not None and stop is not None and stop >= start:
        return stop - start

    return 0


def _parse_retry_count(raw: Mapping[str, Any]) -> int:
    for key in RETRY_COUNT_KEYS:
        value = _optional_int(raw.get(key))
        if value is not None:
            return max(value, 0)
    return 0


def _parse_parameters(value: Any) -> Tuple[TestParameter, ...]:
    if not isinstance(value, (list, tuple)):
        return ()

    params = []
    for param in value:
        if isinstance(param, Mapping):
            params.append(TestParameter(
                name=_string(param.get("name")),
                value="" if param.get("value") is None else str(param.get("value")),
            ))
        elif param is not None:
            params.append(TestParameter(name="", value=str(param)))
    return tuple(params)


def _parse_status_details(value: Any) -> Optional[StatusDetails]:
    if not isinstance(value, Mapping):
        return None
    message = value.get("message")
    trace = value.get("trace")
    return StatusDetails(
        message=message if isinstance(message, str) else None,
        trace=trace if isinstance(trace, str) else None,
    )


def normalize_record(raw: Any) -> TestExecution:
    if not isinstance(raw, Mapping):
        raise MalformedRecordError(f"Record is not a mapping: {type(raw).__name__}")

    status = raw.get("status")
    if status not in STATUSES:
        raise MalformedRecordError(f"Record {raw.get('name')!r} has invalid status: {status!r}")

    time = raw.get("time")
    if not isinstance(time, Mapping):
        raise MalformedRecordError(f"Record {raw.get('name')!r} has no time block")

    start = _optional_timestamp(time.get("start"))
    stop = _optional_timestamp(time.get("stop"))
    duration = _resolve_duration(raw, start, stop)

    tags = raw.get("tags")
    flaky = raw.get("flaky")

    return TestExecution(
        name=_string(raw.get("name")),
        full_name=_string(raw.get("fullName")),
        status=status,
        time=TestTime(start=start, stop=stop, duration=duration),
        status_details=_parse_status_details(raw.get("statusDetails")),
        retry_count=_parse_retry_count(raw),
        flaky=flaky if isinstance(flaky, bool) else False,
        uid=_string(raw.get("uid")),
        package_name=_string(raw.get("packageName")),
        suite_name=_string(raw.get("suiteName")),
        thread_id=_string(raw.get("threadId")),
        tags=tuple(t for t in tags if isinstance(t, str)) if isinstance(tags, (list, tuple)) else (),
        parameters=_parse_parameters(raw.get("parameters")),
        error_text=extract_error_info(raw) or "",
    )


def _batch_records(batch: Any) -> List[Any]:
    if isinstance(batch, Mapping):
        children = batch.get("children")
        return list(children) if isinstance(children, (list, tuple)) else []
    if isinstance(batch, (list, tuple)):
        return list(batch)
    raise TypeError(f"Unsupported batch type: {type(batch).__name__}")


def _deduplicate(records: List[TestExecution]) -> List[TestExecution]:
    # Last occurrence wins, kept at the position of the first one.
    positions: Dict[str, int] = {}
    result: List[TestExecution] = []

    for record in records:
        if record.uid and record.uid in positions:
            result[positions[record.uid]] = record
            continue
        if record.uid:
            positions[record.uid] = len(result)
        result.append(record)

    dropped = len(records) - len(result)
    if dropped:
        log.debug("Collapsed %d records with duplicate uids", dropped)

    return result


def normalize_records(batches: Iterable[Any], deduplicate: bool = True) -> Tuple[TestExecution, ...]:
    """Flatten raw record batches into uniform execution records.

    Batches are report documents with a ``children`` array or plain record
    lists. Malformed records are skipped with a warning instead of failing
    the whole batch.
    """
    records: List[TestExecution] = []
    skipped = 0

    for batch_index, batch in enumerate(batches):
        for raw in _batch_records(batch):
            try:
                records.append(normalize_record(raw))
            except MalformedRecordError as e:
                skipped += 1
                log.warning("Skipping record in batch %d: %s", batch_index, e)

    if skipped:
        log.info("Excluded %d malformed records", skipped)

    if deduplicate:
        records = _deduplicate(records)

    return tuple(records)

from __future__ import annotations

import json
import logging
from collections import Counter
from datetime import date, datetime
from enum import Enum
from threading import Lock
from typing import Any


logger = logging.getLogger("engagement_engine")

_metrics_lock = Lock()
_metrics_counter: Counter[str] = Counter()


def _normalize(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Enum):
        return _normalize(value.value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_normalize(v) for v in value]
    return str(value)


def metric_key(name: str, **labels: Any) -> str:
    if not labels:
        return name
    ordered = ",".join(f"{k}={labels[k]}" for k in sorted(labels))
    return f"{name}|{ordered}"


def incr_metric(name: str, value: int = 1, **labels: Any) -> None:
    key = metric_key(name, **{k: _normalize(v) for k, v in labels.items()})
    with _metrics_lock:
        _metrics_counter[key] += value


def metrics_snapshot() -> dict[str, int]:
    with _metrics_lock:
        return dict(_metrics_counter)


def reset_metrics() -> None:
    with _metrics_lock:
        _metrics_counter.clear()


def log_event(
    event: str,
    *,
    level: int = logging.INFO,
    request_id: str | None = None,
    **fields: Any,
) -> None:
    payload = {"event": event}
    if request_id:
        payload["request_id"] = request_id
    for key, value in fields.items():
        payload[key] = _normalize(value)
    logger.log(level, json.dumps(payload, sort_keys=True))


def record_analytics_view(
    view: str,
    *,
    event_id: str,
    reference_time: datetime,
    request_id: str | None = None,
    **fields: Any,
) -> None:
    """Count one served analytics view and emit the matching structured log line."""
    incr_metric("analytics.views", view=view)
    log_event(
        "analytics_view_served",
        request_id=request_id,
        view=view,
        event_id=event_id,
        reference_time=reference_time,
        **fields,
    )


def record_rejected_input(
    view: str,
    *,
    event_id: str,
    field: str,
    message: str,
    request_id: str | None = None,
) -> None:
    incr_metric("analytics.rejected_inputs", view=view, field=field)
    log_event(
        "analytics_input_rejected",
        level=logging.WARNING,
        request_id=request_id,
        view=view,
        event_id=event_id,
        field=field,
        error=message,
    )

"""In-process telemetry for story mode progress and training sessions.

Events are fanned out to registered listeners and mirrored to the
``shadowcoach.telemetry`` logger as one JSON line each.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from threading import RLock
from typing import Any, Callable, Dict, List

from pydantic import BaseModel

logger = logging.getLogger("shadowcoach.telemetry")


@dataclass(frozen=True)
class TelemetryEvent:
    name: str
    payload: Dict[str, Any]
    emitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


TelemetryListener = Callable[[TelemetryEvent], None]

_listeners: List[TelemetryListener] = []
_lock = RLock()


def register_listener(listener: TelemetryListener) -> None:
    """Register an in-process listener (used by tests and UI bridges)."""
    with _lock:
        _listeners.append(listener)


def unregister_listener(listener: TelemetryListener) -> None:
    with _lock:
        if listener in _listeners:
            _listeners.remove(listener)


def clear_listeners() -> None:
    """Remove all registered listeners. Mainly used to reset test state."""
    with _lock:
        _listeners.clear()


def emit_event(name: str, **fields: Any) -> TelemetryEvent:
    """Emit a structured event, fan it out to listeners and log it."""
    event = TelemetryEvent(name=name, payload=_sanitize(fields))

    with _lock:
        listeners = list(_listeners)

    for listener in listeners:
        try:
            listener(event)
        except Exception:  # noqa: BLE001
            logger.exception("Telemetry listener failed for %s", name)

    structured = {"event": name, "emitted_at": event.emitted_at.isoformat(), **event.payload}
    logger.info("TELEMETRY %s", json.dumps(structured, default=_json_default))
    return event


def _sanitize(fields: Dict[str, Any]) -> Dict[str, Any]:
    sanitized: Dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, datetime):
            sanitized[key] = value.isoformat()
        elif isinstance(value, Enum):
            sanitized[key] = value.value
        elif isinstance(value, BaseModel):
            sanitized[key] = value.model_dump(mode="json", by_alias=True)
        elif isinstance(value, (set, frozenset, tuple)):
            sanitized[key] = list(value)
        else:
            sanitized[key] = value
    return sanitized


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


__all__ = [
    "TelemetryEvent",
    "TelemetryListener",
    "clear_listeners",
    "emit_event",
    "register_listener",
    "unregister_listener",
]

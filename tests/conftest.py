from __future__ import annotations

import logging
from typing import Iterator, List

import pytest

from shadowcoach import telemetry
from shadowcoach.config import get_settings

_CONFIGURED_LOGGERS = ("shadowcoach.telemetry", "shadowcoach.combos")


def _reset_loggers() -> None:
    root = logging.getLogger()
    for handler in list(root.handlers):
        # Only the plain stream handler installed by configure_logging();
        # pytest's capture handlers are subclasses and stay put.
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)
    for name in _CONFIGURED_LOGGERS:
        configured = logging.getLogger(name)
        configured.handlers.clear()
        configured.propagate = True
        configured.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _reset_globals() -> Iterator[None]:
    telemetry.clear_listeners()
    get_settings.cache_clear()
    root_level = logging.getLogger().level
    yield
    telemetry.clear_listeners()
    get_settings.cache_clear()
    logging.getLogger().setLevel(root_level)
    _reset_loggers()


@pytest.fixture()
def captured_events() -> List[telemetry.TelemetryEvent]:
    events: List[telemetry.TelemetryEvent] = []
    telemetry.register_listener(events.append)
    return events

"""Telemetry channels: where finished items are handed off.

Channels are deliberately trivial: batching and transport are someone
else's job. A channel must not block the caller for long.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Callable, List, Optional, Protocol

from opcorr.telemetry.items import Telemetry

logger = logging.getLogger(__name__)


class TelemetryChannel(Protocol):
    name: str

    def send(self, telemetry: Telemetry) -> None: ...
    def flush(self) -> None: ...
    def close(self) -> None: ...


class InMemoryChannel:
    """Keeps every sent item, in order. Mostly useful for tests and debugging."""

    name = "memory"

    def __init__(self, *, on_send: Optional[Callable[[Telemetry], None]] = None) -> None:
        self.on_send = on_send
        self._items: List[Telemetry] = []
        self._lock = threading.Lock()

    @property
    def items(self) -> List[Telemetry]:
        with self._lock:
            return list(self._items)

    def send(self, telemetry: Telemetry) -> None:
        with self._lock:
            self._items.append(telemetry)
        if self.on_send is not None:
            self.on_send(telemetry)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def flush(self) -> None:
        return

    def close(self) -> None:
        return


class LoggingChannel:
    """Writes one JSON line per item to a logger."""

    name = "log"

    def __init__(self, *, logger_name: str = "opcorr.telemetry.items", level: int = logging.INFO) -> None:
        self._logger = logging.getLogger(logger_name)
        self._level = level

    def send(self, telemetry: Telemetry) -> None:
        self._logger.log(
            self._level,
            "[telemetry] %s",
            json.dumps(telemetry.to_dict(), ensure_ascii=False, separators=(",", ":"), default=str),
        )

    def flush(self) -> None:
        return

    def close(self) -> None:
        return


class NullChannel:
    name = "off"

    def send(self, telemetry: Telemetry) -> None:
        return

    def flush(self) -> None:
        return

    def close(self) -> None:
        return


def _normalize_mode(v: str) -> str:
    m = (v or "").strip().lower()
    if m in ("off", "disabled", "false", "0", "none"):
        return "off"
    if m in ("memory", "log"):
        return m
    # Be permissive; treat unknown as log.
    return "log"


def create_channel(mode: str) -> TelemetryChannel:
    m = _normalize_mode(mode)
    if m == "off":
        logger.info("[telemetry] channel disabled (mode=off)")
        return NullChannel()
    if m == "memory":
        return InMemoryChannel()
    return LoggingChannel()

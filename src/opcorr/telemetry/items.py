"""Telemetry items tracked by the client.

Only the fields the correlation layer and the channels need are modelled.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

MAX_NAME_LENGTH = 1024


def new_operation_id() -> str:
    return uuid.uuid4().hex


@dataclass
class OperationFields:
    """Correlation fields of a telemetry item."""

    id: str = ""
    parent_id: str = ""
    root_id: str = ""
    root_name: str = ""


@dataclass
class TelemetryContext:
    instrumentation_key: str = ""
    operation: OperationFields = field(default_factory=OperationFields)
    properties: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["operation"] = {k: v for k, v in d["operation"].items() if v}
        if not d["properties"]:
            d.pop("properties")
        return d


class Telemetry:
    """Base telemetry item."""

    telemetry_type = "Telemetry"

    def __init__(self, *, properties: Optional[Dict[str, Any]] = None) -> None:
        self.timestamp: Optional[datetime] = None
        self.context = TelemetryContext()
        self.properties: Dict[str, Any] = dict(properties or {})

    def sanitize(self) -> None:
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "type": self.telemetry_type,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
            "context": self.context.to_dict(),
        }
        if self.properties:
            d["properties"] = dict(self.properties)
        return d


class OperationTelemetry(Telemetry):
    """Telemetry item with a name, an operation id and a duration."""

    telemetry_type = "Operation"

    def __init__(
        self,
        name: str = "",
        *,
        id: str = "",
        properties: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(properties=properties)
        self.name = name or ""
        self.duration: Optional[timedelta] = None
        self.success: Optional[bool] = None
        self._started_at: Optional[float] = None
        if id:
            self.context.operation.id = id

    @property
    def id(self) -> str:
        return self.context.operation.id

    @id.setter
    def id(self, value: str) -> None:
        self.context.operation.id = value or ""

    @property
    def started(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        """Mark start time and timestamp. Values already set are kept."""
        if self.timestamp is None:
            self.timestamp = datetime.now(timezone.utc)
        if self._started_at is None:
            self._started_at = time.perf_counter()

    def stop(self) -> None:
        if self.duration is not None:
            return
        if self._started_at is None:
            self.duration = timedelta(0)
            return
        self.duration = timedelta(seconds=max(0.0, time.perf_counter() - self._started_at))

    def generate_operation_id(self) -> str:
        if not self.id:
            self.id = new_operation_id()
        return self.id

    def sanitize(self) -> None:
        super().sanitize()
        if len(self.name) > MAX_NAME_LENGTH:
            self.name = self.name[:MAX_NAME_LENGTH]

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["name"] = self.name
        d["id"] = self.id
        if self.duration is not None:
            d["duration_ms"] = round(self.duration.total_seconds() * 1000, 3)
        if self.success is not None:
            d["success"] = self.success
        return d


class RequestTelemetry(OperationTelemetry):
    """An inbound request handled by this process."""

    telemetry_type = "Request"

    def __init__(
        self,
        name: str = "",
        *,
        id: str = "",
        url: str = "",
        response_code: str = "",
        properties: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(name, id=id, properties=properties)
        self.url = url
        self.response_code = response_code

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        if self.url:
            d["url"] = self.url
        if self.response_code:
            d["response_code"] = self.response_code
        return d


class DependencyTelemetry(OperationTelemetry):
    """An outbound call (HTTP, SQL, queue...) made by this process."""

    telemetry_type = "Dependency"

    def __init__(
        self,
        name: str = "",
        *,
        id: str = "",
        dependency_type: str = "",
        target: str = "",
        data: str = "",
        result_code: str = "",
        properties: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(name, id=id, properties=properties)
        self.dependency_type = dependency_type
        self.target = target
        self.data = data
        self.result_code = result_code

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        for key in ("dependency_type", "target", "data", "result_code"):
            value = getattr(self, key)
            if value:
                d[key] = value
        return d


class EventTelemetry(Telemetry):
    telemetry_type = "Event"

    def __init__(self, name: str = "", *, properties: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(properties=properties)
        self.name = name or ""

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["name"] = self.name
        return d


class TraceTelemetry(Telemetry):
    telemetry_type = "Trace"

    def __init__(
        self,
        message: str = "",
        *,
        severity_level: str = "INFO",
        properties: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(properties=properties)
        self.message = message or ""
        self.severity_level = severity_level

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["message"] = self.message
        d["severity_level"] = self.severity_level
        return d

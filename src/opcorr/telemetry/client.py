from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Type, Union

from opcorr.errors import InvalidArgumentError
from opcorr.telemetry.channel import InMemoryChannel, TelemetryChannel, create_channel
from opcorr.telemetry.context_store import OperationContextStore, default_context_store
from opcorr.telemetry.initializers import OperationCorrelationTelemetryInitializer, TelemetryInitializer
from opcorr.telemetry.items import EventTelemetry, Telemetry, TraceTelemetry
from opcorr.telemetry.operation import OperationHolder, T, start_operation, stop_operation

logger = logging.getLogger(__name__)


class TelemetryConfiguration:
    """Instrumentation key, channel, initializers and context store for a client."""

    def __init__(
        self,
        *,
        instrumentation_key: str = "",
        channel: Optional[TelemetryChannel] = None,
        telemetry_initializers: Optional[List[TelemetryInitializer]] = None,
        context_store: Optional[OperationContextStore] = None,
    ) -> None:
        self.instrumentation_key = str(instrumentation_key or "").strip()
        self.channel: TelemetryChannel = channel if channel is not None else InMemoryChannel()
        self.telemetry_initializers: List[TelemetryInitializer] = list(telemetry_initializers or [])
        self.context_store: OperationContextStore = context_store or default_context_store

    @classmethod
    def from_settings(
        cls,
        settings: Any = None,
        *,
        context_store: Optional[OperationContextStore] = None,
    ) -> "TelemetryConfiguration":
        if settings is None:
            from opcorr.config import get_settings

            settings = get_settings()
        store = context_store or default_context_store
        initializers: List[TelemetryInitializer] = []
        if getattr(settings, "enable_operation_correlation", True):
            initializers.append(OperationCorrelationTelemetryInitializer(store))
        return cls(
            instrumentation_key=str(getattr(settings, "instrumentation_key", "") or ""),
            channel=create_channel(str(getattr(settings, "channel_mode", "log") or "log")),
            telemetry_initializers=initializers,
            context_store=store,
        )


class TelemetryClient:
    """Initializes telemetry items and hands them to the configured channel."""

    def __init__(self, configuration: Optional[TelemetryConfiguration] = None) -> None:
        self.configuration = configuration or TelemetryConfiguration.from_settings()

    @property
    def context_store(self) -> OperationContextStore:
        return self.configuration.context_store

    @property
    def channel(self) -> TelemetryChannel:
        return self.configuration.channel

    def initialize(self, telemetry: Telemetry) -> None:
        if telemetry is None:
            raise InvalidArgumentError("telemetry cannot be None")
        if not telemetry.context.instrumentation_key:
            telemetry.context.instrumentation_key = self.configuration.instrumentation_key
        for initializer in list(self.configuration.telemetry_initializers):
            try:
                initializer.initialize(telemetry)
            except Exception:
                logger.error(
                    "[telemetry] initializer failed: %s", type(initializer).__name__, exc_info=True
                )

    def submit(self, telemetry: Telemetry) -> None:
        """Hand an already initialized item to the channel."""
        if telemetry is None:
            raise InvalidArgumentError("telemetry cannot be None")
        telemetry.sanitize()
        try:
            self.channel.send(telemetry)
        except Exception as e:
            logger.error(
                "[telemetry] channel send failed: %s err=%s",
                getattr(self.channel, "name", "unknown"),
                e,
                exc_info=True,
            )

    def track(self, telemetry: Telemetry) -> None:
        self.initialize(telemetry)
        self.submit(telemetry)

    def track_event(self, name: str, properties: Optional[Dict[str, Any]] = None) -> EventTelemetry:
        event = EventTelemetry(name, properties=properties)
        self.track(event)
        return event

    def track_trace(
        self,
        message: str,
        severity_level: str = "INFO",
        properties: Optional[Dict[str, Any]] = None,
    ) -> TraceTelemetry:
        trace = TraceTelemetry(message, severity_level=severity_level, properties=properties)
        self.track(trace)
        return trace

    def start_operation(
        self,
        telemetry: Union[Type[T], T],
        operation_name: Optional[str] = None,
        *,
        operation_id: Optional[str] = None,
        parent_operation_id: Optional[str] = None,
    ) -> OperationHolder[T]:
        return start_operation(
            self,
            telemetry,
            operation_name,
            operation_id=operation_id,
            parent_operation_id=parent_operation_id,
        )

    def stop_operation(self, operation: Optional[OperationHolder]) -> None:
        stop_operation(self, operation)

    def flush(self) -> None:
        try:
            self.channel.flush()
        except Exception:
            logger.error("[telemetry] channel flush failed", exc_info=True)


_global_telemetry: Optional[TelemetryClient] = None


def set_telemetry(client: TelemetryClient | None) -> None:
    global _global_telemetry
    _global_telemetry = client


def get_telemetry() -> TelemetryClient | None:
    return _global_telemetry

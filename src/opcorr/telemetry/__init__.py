"""Telemetry correlation core.

- Operations are started with `start_operation(...)` and completed with
  `stop_operation(...)` or by leaving a `with` / `async with` block.
- The current operation context lives in a contextvars-backed store, so it
  follows asyncio tasks and threads without being passed around.
- Finished items go to a channel; transport is out of scope here.
"""

from .channel import InMemoryChannel, LoggingChannel, NullChannel, TelemetryChannel, create_channel
from .client import TelemetryClient, TelemetryConfiguration, get_telemetry, set_telemetry
from .context_store import (
    ContextVarOperationContextStore,
    OperationContextStore,
    default_context_store,
    get_current_operation_context,
    save_operation_context,
)
from .initializers import OperationCorrelationTelemetryInitializer, TelemetryInitializer
from .items import (
    DependencyTelemetry,
    EventTelemetry,
    OperationTelemetry,
    RequestTelemetry,
    Telemetry,
    TraceTelemetry,
)
from .operation import OperationHolder, OperationState, start_operation, stop_operation
from .operation_context import OperationContextSnapshot, OperationLink

__all__ = [
    "ContextVarOperationContextStore",
    "DependencyTelemetry",
    "EventTelemetry",
    "InMemoryChannel",
    "LoggingChannel",
    "NullChannel",
    "OperationContextSnapshot",
    "OperationContextStore",
    "OperationCorrelationTelemetryInitializer",
    "OperationLink",
    "OperationHolder",
    "OperationState",
    "OperationTelemetry",
    "RequestTelemetry",
    "Telemetry",
    "TelemetryChannel",
    "TelemetryClient",
    "TelemetryConfiguration",
    "TelemetryInitializer",
    "TraceTelemetry",
    "create_channel",
    "default_context_store",
    "get_current_operation_context",
    "get_telemetry",
    "save_operation_context",
    "set_telemetry",
    "start_operation",
    "stop_operation",
]

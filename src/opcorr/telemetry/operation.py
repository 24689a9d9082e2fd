"""Start/stop protocol for correlated operations.

`start_operation` publishes a new operation context into the client's
context store and returns an `OperationHolder`; completing the holder (via
`stop_operation`, `with` or `async with`, whichever comes first) restores the
context that was current when it started and tracks its telemetry item.

Callers must complete every holder they start. An abandoned holder leaves its
item untracked and its context in the store until something overwrites it.
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Generic, Optional, Type, TypeVar, Union

from opcorr.errors import InvalidArgumentError
from opcorr.telemetry.items import OperationTelemetry
from opcorr.telemetry.operation_context import OperationContextSnapshot, OperationLink

if TYPE_CHECKING:
    from opcorr.telemetry.client import TelemetryClient

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=OperationTelemetry)


class OperationState(str, enum.Enum):
    CREATED = "created"
    ACTIVE = "active"
    COMPLETED = "completed"


class OperationHolder(Generic[T]):
    """Handle for a started operation; completes exactly once."""

    def __init__(self, telemetry_client: "TelemetryClient", telemetry: T) -> None:
        if telemetry_client is None:
            raise InvalidArgumentError("telemetry_client cannot be None")
        if telemetry is None:
            raise InvalidArgumentError("telemetry cannot be None")
        self.telemetry_client = telemetry_client
        self.telemetry: T = telemetry
        self._link = OperationLink()
        self.context: Optional[OperationContextSnapshot] = None

    @property
    def parent_context(self) -> Optional[OperationContextSnapshot]:
        """Context that was current before this operation started; only used to restore it."""
        return self._link.parent_context

    @parent_context.setter
    def parent_context(self, value: Optional[OperationContextSnapshot]) -> None:
        self._link.parent_context = value

    @property
    def disposed(self) -> bool:
        return self._link.disposed

    @property
    def state(self) -> OperationState:
        if self.disposed:
            return OperationState.COMPLETED
        if self.context is not None:
            return OperationState.ACTIVE
        return OperationState.CREATED

    def activate(self) -> OperationContextSnapshot:
        op = self.telemetry.context.operation
        self.context = OperationContextSnapshot(
            parent_operation_id=op.id,
            root_operation_id=op.root_id,
            operation_name=op.root_name,
            link=self._link,
        )
        self.telemetry_client.context_store.save(self.context)
        return self.context

    def dispose(self) -> None:
        if self._link.disposed:
            return
        self._link.disposed = True

        # Restore unconditionally, even if a nested operation is still running.
        self.telemetry_client.context_store.save(_restore_target(self.parent_context))

        item = self.telemetry
        item.stop()
        if item.success is None:
            item.success = True
        self.telemetry_client.submit(item)

    def __enter__(self) -> "OperationHolder[T]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None and not self.disposed and self.telemetry.success is None:
            self.telemetry.success = False
        self.dispose()

    async def __aenter__(self) -> "OperationHolder[T]":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.__exit__(exc_type, exc, tb)

    def __repr__(self) -> str:
        return (
            f"<OperationHolder {type(self.telemetry).__name__} "
            f"name={self.telemetry.name!r} id={self.telemetry.id!r} state={self.state.value}>"
        )


def _restore_target(snapshot: Optional[OperationContextSnapshot]) -> Optional[OperationContextSnapshot]:
    # Skip contexts of operations that were stopped out of order, so that a
    # chain always unwinds to the value it started from.
    while snapshot is not None and snapshot.owner_completed():
        snapshot = snapshot.link.parent_context
    return snapshot


def start_operation(
    telemetry_client: "TelemetryClient",
    telemetry: Union[Type[T], T],
    operation_name: Optional[str] = None,
    *,
    operation_id: Optional[str] = None,
    parent_operation_id: Optional[str] = None,
) -> OperationHolder[T]:
    """Start an operation and make it the current operation context.

    `telemetry` is either an OperationTelemetry subclass (a fresh item is
    created) or an existing item. Explicit `operation_id` and
    `parent_operation_id` win over ambient and generated values.
    """
    if telemetry_client is None:
        raise InvalidArgumentError("telemetry_client cannot be None")
    if telemetry is None:
        raise InvalidArgumentError("telemetry cannot be None")

    if isinstance(telemetry, type):
        if not issubclass(telemetry, OperationTelemetry):
            raise InvalidArgumentError(f"{telemetry.__name__} is not an OperationTelemetry type")
        item = telemetry()
    elif isinstance(telemetry, OperationTelemetry):
        item = telemetry
    else:
        raise InvalidArgumentError(f"cannot start an operation for {type(telemetry).__name__}")

    operation: OperationHolder = OperationHolder(telemetry_client, item)
    item.start()

    operation.parent_context = telemetry_client.context_store.get()

    if not item.name and operation_name:
        item.name = operation_name

    op = item.context.operation
    if operation_id:
        op.id = operation_id
    if parent_operation_id:
        op.parent_id = parent_operation_id

    telemetry_client.initialize(item)

    item.generate_operation_id()
    if not op.root_id:
        op.root_id = op.id
    if not op.root_name:
        op.root_name = item.name

    operation.activate()
    logger.debug(
        "[operation] started %s name=%s id=%s parent_id=%s root_id=%s",
        item.telemetry_type,
        item.name,
        op.id,
        op.parent_id,
        op.root_id,
    )
    return operation


def stop_operation(telemetry_client: "TelemetryClient", operation: Optional[OperationHolder]) -> None:
    """Complete `operation`. Stopping None or an already stopped operation is a no-op."""
    if telemetry_client is None:
        raise InvalidArgumentError("telemetry_client cannot be None")
    if operation is None:
        logger.warning("[operation] stop_operation called with operation=None; nothing to stop")
        return
    operation.dispose()

"""Ambient storage for the current operation context.

The store is backed by `contextvars`, so a saved snapshot:
  - survives `await` suspension points within the same task,
  - is isolated per thread and per asyncio task,
  - is inherited by a child task at creation time, while the child's own
    writes never leak back into the parent.

Clients hold an explicit store instance; `default_context_store` is only what
they fall back to when none is configured.
"""

from __future__ import annotations

import itertools
from contextvars import ContextVar
from typing import Optional, Protocol

from opcorr.telemetry.operation_context import OperationContextSnapshot

_store_ids = itertools.count(1)


class OperationContextStore(Protocol):
    def get(self) -> Optional[OperationContextSnapshot]: ...
    def save(self, snapshot: Optional[OperationContextSnapshot]) -> None: ...


class ContextVarOperationContextStore:
    """OperationContextStore on top of a per-instance ContextVar."""

    def __init__(self, name: str = "operation_context") -> None:
        # One ContextVar per store so independent stores never share a slot.
        self._var: ContextVar[Optional[OperationContextSnapshot]] = ContextVar(
            f"opcorr.{name}.{next(_store_ids)}", default=None
        )

    def get(self) -> Optional[OperationContextSnapshot]:
        return self._var.get()

    def save(self, snapshot: Optional[OperationContextSnapshot]) -> None:
        # Full replacement only; snapshots are immutable so no read-modify-write.
        self._var.set(snapshot)

    def clear(self) -> None:
        self._var.set(None)


default_context_store = ContextVarOperationContextStore()


def get_current_operation_context() -> Optional[OperationContextSnapshot]:
    return default_context_store.get()


def save_operation_context(snapshot: Optional[OperationContextSnapshot]) -> None:
    default_context_store.save(snapshot)

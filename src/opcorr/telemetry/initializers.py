from __future__ import annotations

import logging
from typing import Optional, Protocol

from opcorr.telemetry.context_store import OperationContextStore, default_context_store
from opcorr.telemetry.items import Telemetry

logger = logging.getLogger(__name__)


class TelemetryInitializer(Protocol):
    def initialize(self, telemetry: Telemetry) -> None: ...


class OperationCorrelationTelemetryInitializer:
    """Copies the ambient operation context onto items that don't carry one yet.

    Fields that are already set are never overwritten, so running it twice
    (or after explicit overrides) is harmless.
    """

    def __init__(self, context_store: Optional[OperationContextStore] = None) -> None:
        self.context_store = context_store or default_context_store

    def initialize(self, telemetry: Telemetry) -> None:
        current = self.context_store.get()
        if current is None:
            logger.debug("[telemetry] no operation context; %s left uncorrelated", telemetry.telemetry_type)
            return
        op = telemetry.context.operation
        if not op.parent_id:
            op.parent_id = current.parent_operation_id
        if not op.root_id:
            op.root_id = current.root_operation_id
        if not op.root_name:
            op.root_name = current.operation_name

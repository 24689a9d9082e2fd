"""Inbound request tracking for FastAPI / Starlette apps.

Every request runs inside a RequestTelemetry operation, so operations
started by endpoint code (dependency calls, background steps awaited in the
request) are correlated to it.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from opcorr.telemetry import RequestTelemetry, TelemetryClient, get_telemetry

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "Request-Id"


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        *,
        telemetry_client: Optional[TelemetryClient] = None,
        client_factory: Callable[[], Optional[TelemetryClient]] = get_telemetry,
    ) -> None:
        super().__init__(app)
        self._telemetry_client = telemetry_client
        self._client_factory = client_factory

    def _client(self) -> Optional[TelemetryClient]:
        if self._telemetry_client is not None:
            return self._telemetry_client
        return self._client_factory()

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        client = self._client()
        if client is None:
            logger.debug("[telemetry] no client configured; request not tracked: %s", request.url.path)
            return await call_next(request)

        parent_id = (request.headers.get(REQUEST_ID_HEADER) or "").strip() or None
        item = RequestTelemetry(
            f"{request.method} {request.url.path}",
            url=str(request.url),
        )
        async with client.start_operation(item, parent_operation_id=parent_id) as operation:
            try:
                response = await call_next(request)
            except Exception:
                item.response_code = "500"
                item.success = False
                raise
            item.response_code = str(response.status_code)
            item.success = response.status_code < 400
            response.headers[REQUEST_ID_HEADER] = operation.telemetry.id
            return response

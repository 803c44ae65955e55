"""FastAPI middleware: request correlation ids and per-route latency metrics"""

import re
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from proximity_gateway.infrastructure.observability.metrics import request_duration_histogram

REQUEST_ID_HEADER = "X-Request-ID"

# Caller-supplied ids are echoed into logs and headers, so keep them short and printable
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

# Health checks and scrapes are not user traffic
UNTIMED_PATHS = frozenset({"/health", "/metrics"})


def resolve_request_id(incoming: str | None) -> str:
    """Reuse the caller's correlation id when it is well-formed, otherwise mint one"""
    if incoming and _VALID_REQUEST_ID.match(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate a correlation id from the mobile client / gateway into logs and the response"""

    async def dispatch(self, request: Request, call_next):
        request.state.request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request.state.request_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Latency histogram per route template.

    Paths that match no route share one "unmatched" label so scanners cannot
    blow up label cardinality.
    """

    async def dispatch(self, request: Request, call_next):
        if request.url.path in UNTIMED_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            route = request.scope.get("route")
            request_duration_histogram.labels(
                method=request.method,
                endpoint=getattr(route, "path", "unmatched"),
                status=status,
            ).observe(time.perf_counter() - start)

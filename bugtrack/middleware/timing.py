"""
Per-request id and access logging.

Every response carries ``X-Request-ID`` (echoed from the client when
supplied) and ``X-Request-Duration-Ms``. API calls are logged at DEBUG,
or at WARNING once they exceed ``SLOW_REQUEST_MS``. Health probes are
not logged.
"""

import logging
import time
import uuid

from flask import Flask, g, request

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 1000
REQUEST_ID_HEADER = "X-Request-ID"


def _should_log(path: str) -> bool:
    return path.startswith("/api/") and not path.startswith("/api/health")


def init_request_timing(app: Flask) -> None:
    @app.before_request
    def _stamp_request():
        g.request_started = time.perf_counter()
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]

    @app.after_request
    def _finish_request(response):
        started = g.get("request_started")
        if started is None:
            return response

        elapsed = (time.perf_counter() - started) * 1000
        response.headers[REQUEST_ID_HEADER] = g.request_id
        response.headers["X-Request-Duration-Ms"] = f"{elapsed:.1f}"

        if _should_log(request.path):
            level = logging.WARNING if elapsed > SLOW_REQUEST_MS else logging.DEBUG
            logger.log(
                level, "%s %s -> %s in %.0fms", request.method, request.path,
                response.status_code, elapsed,
                extra={
                    "method": request.method,
                    "path": request.path,
                    "status": response.status_code,
                    "duration_ms": round(elapsed, 1),
                },
            )
        return response

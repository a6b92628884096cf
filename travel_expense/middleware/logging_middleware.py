"""
Logging Middleware
Tags every call with a request id and logs who made it, what it did to
which request, and how it ended
"""

import re
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from travel_expense.utils.logger import setup_logger

logger = setup_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# /api/travel/12/status, /api/expense/7/status
REVIEW_PATH = re.compile(r"^/api/(?P<kind>travel|expense)/(?P<request_id>\d+)/status$")


def describe_call(method: str, path: str) -> str:
    """Short action label for the approval endpoints, the raw route otherwise"""
    match = REVIEW_PATH.match(path)
    if match and method == "PATCH":
        return f"review {match.group('kind')} #{match.group('request_id')}"
    if method == "POST" and path in ("/api/travel", "/api/expense"):
        return f"submit {path.rsplit('/', 1)[-1]}"
    return f"{method} {path}"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Binds ``request_id`` and ``principal`` to every log record of a call

    The authenticated user id and the approval error code are read back from
    ``request.state``, where the auth dependency and the error handler put
    them.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:12]
        action = describe_call(request.method, request.url.path)

        request.state.principal_id = None
        request.state.error_code = None
        start_time = time.perf_counter()

        with logger.contextualize(request_id=request_id):
            try:
                response = await call_next(request)
            except Exception:
                logger.bind(principal=request.state.principal_id or "-").exception(
                    f"{action} failed after {(time.perf_counter() - start_time) * 1000:.0f}ms"
                )
                raise

            duration_ms = (time.perf_counter() - start_time) * 1000
            principal = request.state.principal_id or "anonymous"
            summary = f"{action} -> {response.status_code} ({duration_ms:.0f}ms)"
            if request.state.error_code:
                summary += f" error={request.state.error_code}"

            log = logger.bind(principal=principal)
            if response.status_code >= 500:
                log.error(summary)
            elif response.status_code >= 400:
                log.warning(summary)
            else:
                log.info(summary)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

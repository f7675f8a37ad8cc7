from __future__ import annotations

import logging
import time
import traceback
import uuid
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from ipm_packager.core.errors import PackagingError

log = logging.getLogger("ipm.request")
err_log = logging.getLogger("ipm.errors")

REQUEST_ID_HEADER = "X-Request-Id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Adds request.state.request_id, echoes it as X-Request-Id and writes one
    structured log line per /api/ request.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = rid

        start = time.time()
        resp = await call_next(request)
        dur_ms = int((time.time() - start) * 1000)

        resp.headers[REQUEST_ID_HEADER] = rid
        if request.url.path.startswith("/api/"):
            log.info(
                "%s",
                {
                    "event": "request",
                    "request_id": rid,
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": resp.status_code,
                    "duration_ms": dur_ms,
                },
            )
        return resp


class SafeErrorMiddleware(BaseHTTPMiddleware):
    """
    Tracebacks stay server-side. Packaging errors that escape a handler are
    client errors (400); anything else is a 500.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except PackagingError as e:
            rid = getattr(request.state, "request_id", None)
            err_log.warning("Packaging error rid=%s path=%s: %s", rid, request.url.path, e)
            return JSONResponse(status_code=400, content={"detail": str(e), "request_id": rid})
        except Exception as e:
            rid = getattr(request.state, "request_id", None)
            err_log.error(
                "Unhandled error: %s rid=%s path=%s\n%s",
                str(e),
                rid,
                request.url.path,
                traceback.format_exc(),
            )
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": rid},
            )

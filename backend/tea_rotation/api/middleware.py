"""HTTP Middleware — CORS preflight answer and the last-resort 500 inside the CORS layer.

Invariants:
    - UnhandledErrorMiddleware is installed before (inside) the CORS middleware, so even
      an unexpected 500 carries the CORS headers and the {"error": message} body
    - A successful preflight is answered 200 with an empty body
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware

from tea_rotation.api.error_handlers import internal_error_response

logger = logging.getLogger(__name__)

_BODY_HEADERS = ("content-length", "content-type")


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Turn any exception that escaped the route handlers into the generic 500."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                f"Unhandled exception on {request.url.path}: {exc}",
                exc_info=True,
                extra={"path": request.url.path},
            )
            return JSONResponse(status_code=500, content=internal_error_response())


class PreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose accepted preflight carries no body."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            key: value for key, value in response.headers.items()
            if key not in _BODY_HEADERS
        }
        return Response(status_code=200, headers=headers)

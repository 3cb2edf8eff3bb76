"""Middleware for request context."""

import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.request_context import clear_request_id, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware that tags each request with an ID for log correlation."""

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with a request ID in context.

        Args:
            request: FastAPI request
            call_next: Next middleware/handler

        Returns:
            Response carrying the X-Request-ID header
        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            clear_request_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

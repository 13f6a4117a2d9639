"""Request ID middleware."""

import re
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from typing import Callable

from shortlink.common.request_context import generate_request_id, request_id_var, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"

# Accept client-supplied IDs only if they are short and log-safe
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._-]{1,64}$")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID, expose it to logging, and echo it back."""

    async def dispatch(self, request: Request, call_next: Callable):
        incoming = request.headers.get(REQUEST_ID_HEADER)
        request_id = incoming if incoming and _VALID_REQUEST_ID.match(incoming) else generate_request_id()

        request.state.request_id = request_id
        token = set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

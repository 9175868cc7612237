# src/bookstore/core/logging/middleware.py
"""
Request ID middleware for FastAPI / Starlette.

Each request is bound to a request id: the incoming `X-Request-ID` header when it
looks safe, otherwise a fresh UUID4. The id is stored in the logging contextvar
(see filters.py) for the duration of the request and echoed back in the
`X-Request-ID` response header so clients can correlate responses with logs.
"""

import re
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from .filters import set_request_id, reset_request_id

REQUEST_ID_HEADER = "X-Request-ID"

# Incoming ids end up in log lines; reject anything that could inject newlines or flood a line.
_SAFE_REQUEST_ID = re.compile(r"^[A-Za-z0-9._\-]{1,128}$")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Starlette / FastAPI middleware that sets a request id for each incoming request.
    """

    async def dispatch(self, request: Request, call_next):
        incoming = request.headers.get(REQUEST_ID_HEADER)
        rid = incoming if incoming and _SAFE_REQUEST_ID.match(incoming) else str(uuid.uuid4())

        # request.state lives in the ASGI scope, so handlers running outside this
        # middleware (the catch-all 500 handler) can still read the id.
        request.state.request_id = rid
        token = set_request_id(rid)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            reset_request_id(token)

"""
Request ID middleware for FastAPI / Starlette.

For every request:
  1. take `X-Request-ID` from the incoming headers if it looks sane,
     otherwise generate a UUID4;
  2. store it in the request-id contextvar (see filters.py) so every log
     line emitted while serving the request carries it;
  3. echo it back in the `X-Request-ID` response header;
  4. restore the previous contextvar value afterwards.
"""

import re
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from .filters import set_request_id, reset_request_id

REQUEST_ID_HEADER = "X-Request-ID"

# Client-supplied ids end up in logs: allow a conservative charset and length only.
_VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def resolve_request_id(incoming: str | None) -> str:
    if incoming and _VALID_REQUEST_ID.match(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = set_request_id(rid)
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = rid
            return response
        finally:
            reset_request_id(token)

"""Request correlation ids.

Every response carries ``X-Request-ID``. A client-supplied id is echoed when
it is short printable text; anything else is replaced with a fresh UUID so
log lines can't be forged or bloated through the header.
"""

import uuid

from asgi_correlation_id import CorrelationIdMiddleware
from asgi_correlation_id.context import correlation_id
from fastapi import FastAPI

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 128


def is_acceptable_request_id(value: str) -> bool:
    return 0 < len(value) <= MAX_REQUEST_ID_LENGTH and value.isprintable()


def setup_correlation_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name=REQUEST_ID_HEADER,
        generator=lambda: uuid.uuid4().hex,
        validator=is_acceptable_request_id,
        transformer=str.strip,
    )


def get_correlation_id() -> str | None:
    """Correlation id of the request being handled, None outside a request."""
    return correlation_id.get(None)

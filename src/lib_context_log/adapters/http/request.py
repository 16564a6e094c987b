"""Request-scoped context establishment.

Purpose
-------
Create one :class:`ContextRecord` per inbound request: identity resolved from a
dotted path into the request, correlation id taken from an inbound header or
generated, and the resolved id echoed on the response so clients can
correlate. Everything downstream of the entry point runs inside the record.

Contents
--------
* :data:`RESPONSE_HEADER` – fixed outbound header name.
* :class:`RequestContextOptions` – identity path, inbound header, id generator.
* :func:`resolve_path` – total dotted-path lookup over mappings and attributes.
* :func:`resolve_request_record` – build the record for a request.
* :func:`establish_from_request` – framework-agnostic entry point.
* :class:`RequestContextMiddleware` – Starlette/FastAPI middleware.

System Role
-----------
Install the middleware after (inside) any authentication middleware so the
identity field is populated; otherwise identity resolves to ``None``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Final, TypeVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from ...application.store import bind_record, run
from ...domain.record import ContextRecord, new_correlation_id
from ...observability import log_debug

T = TypeVar("T")

RESPONSE_HEADER: Final[str] = "x-transaction-id"
DEFAULT_IDENTITY_PATH: Final[str] = "user.id"
DEFAULT_CORRELATION_HEADER: Final[str] = "x-transaction-id"


@dataclass(frozen=True, slots=True)
class RequestContextOptions:
    """How identity and correlation id are derived from a request.

    Attributes
    ----------
    identity_path:
        Dotted path resolved against the request (``"user.id"`` reads
        ``request["user"].id`` for Starlette requests).
    correlation_header:
        Inbound header carrying a caller-supplied correlation id.
    generate_correlation_id:
        Factory used when the header is absent or empty.
    """

    identity_path: str = DEFAULT_IDENTITY_PATH
    correlation_header: str = DEFAULT_CORRELATION_HEADER
    generate_correlation_id: Callable[[], str] = new_correlation_id


DEFAULT_OPTIONS: Final[RequestContextOptions] = RequestContextOptions()


def resolve_path(source: Any, dotted: str) -> Any:
    """Resolve *dotted* within *source*, returning ``None`` on any missing step.

    Mappings are read by key, other objects by attribute.

    Examples
    --------
    >>> from types import SimpleNamespace
    >>> resolve_path({"user": SimpleNamespace(id="alex_123")}, "user.id")
    'alex_123'
    >>> resolve_path({"user": None}, "user.id") is None
    True
    """

    current = source
    for part in dotted.split("."):
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        else:
            current = getattr(current, part, None)
    return current


def _lookup_header(headers: Any, name: str) -> str | None:
    """Case-insensitive header lookup over Starlette headers or plain mappings."""

    if headers is None:
        return None
    value = headers.get(name)
    if value is None and isinstance(headers, Mapping):
        lowered = name.lower()
        value = next((item for key, item in headers.items() if str(key).lower() == lowered), None)
    return value or None


def resolve_request_record(request: Any, options: RequestContextOptions = DEFAULT_OPTIONS) -> ContextRecord:
    """Build the record for *request*; never raises on missing data."""

    user_id = resolve_path(request, options.identity_path)
    tx_id = _lookup_header(getattr(request, "headers", None), options.correlation_header)
    if tx_id is None:
        tx_id = options.generate_correlation_id()
    return ContextRecord(user_id=user_id, tx_id=tx_id)


def _tag_response(response: Any, tx_id: str | None) -> None:
    headers = getattr(response, "headers", None)
    if headers is None or tx_id is None:
        log_debug("response_not_tagged", header=RESPONSE_HEADER)
        return
    headers[RESPONSE_HEADER] = tx_id


def establish_from_request(
    request: Any,
    response: Any,
    call_next: Callable[[], T],
    options: RequestContextOptions | None = None,
) -> T:
    """Tag *response* and run ``call_next()`` inside the request's record.

    Why
    ----
    Frameworks that expose the response object before the handler runs
    (WSGI-style hooks, custom servers) can establish context with one call.

    Examples
    --------
    >>> from types import SimpleNamespace
    >>> from lib_context_log.application.store import current_context
    >>> request = SimpleNamespace(user=SimpleNamespace(id="alex_123"), headers={"X-Transaction-Id": "abc-789"})
    >>> response = SimpleNamespace(headers={})
    >>> establish_from_request(request, response, lambda: current_context().user_id)
    'alex_123'
    >>> response.headers
    {'x-transaction-id': 'abc-789'}
    """

    record = resolve_request_record(request, options or DEFAULT_OPTIONS)
    _tag_response(response, record.tx_id)
    return run(record, call_next)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Starlette middleware establishing one context record per request.

    Examples
    --------
    ``app.add_middleware(RequestContextMiddleware, identity_path="user.id")``
    """

    def __init__(
        self,
        app: ASGIApp,
        options: RequestContextOptions | None = None,
        *,
        identity_path: str | None = None,
        correlation_header: str | None = None,
        generate_correlation_id: Callable[[], str] | None = None,
    ) -> None:
        super().__init__(app)
        base = options or DEFAULT_OPTIONS
        self.options = RequestContextOptions(
            identity_path=identity_path or base.identity_path,
            correlation_header=correlation_header or base.correlation_header,
            generate_correlation_id=generate_correlation_id or base.generate_correlation_id,
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        record = resolve_request_record(request, self.options)
        with bind_record(record):
            response = await call_next(request)
        _tag_response(response, record.tx_id)
        return response


def add_request_context(app: Any, **options: Any) -> None:
    """Install :class:`RequestContextMiddleware` on a Starlette/FastAPI *app*."""

    app.add_middleware(RequestContextMiddleware, **options)


__all__ = [
    "DEFAULT_CORRELATION_HEADER",
    "DEFAULT_IDENTITY_PATH",
    "RESPONSE_HEADER",
    "RequestContextMiddleware",
    "RequestContextOptions",
    "add_request_context",
    "establish_from_request",
    "resolve_path",
    "resolve_request_record",
]

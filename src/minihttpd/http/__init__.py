"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

Translates between bytes on the wire and the objects handlers work with.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   header block ──► RequestParser ──► HTTPRequest ──► Router         │
    │                                                         │            │
    │   bytes ◄── HTTPResponse.to_bytes() ◄── HTTPResponse ◄──┘            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    request.py       Request line and header parsing, typed header values
    response.py      Closed set of responses and their serialization
    router.py        Ordered first-match routing table
    status_codes.py  The three status codes the server emits

=============================================================================
"""

from .request import (
    HTTPRequest,
    RequestParser,
    HTTPParseError,
    HeaderValue,
    classify_header_value,
    parse_request,
)
from .response import (
    HTTPResponse,
    BodyKind,
    ok,             # 200 OK, optional text body
    ok_stream,      # 200 OK, binary body
    created,        # 201 CREATED
    not_found,      # 404 NOT FOUND
)
from .router import Router, Route
from .status_codes import HTTPStatus

__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "HeaderValue",
    "classify_header_value",
    "parse_request",

    # Responses
    "HTTPResponse",
    "BodyKind",
    "ok",
    "ok_stream",
    "created",
    "not_found",

    # Routing
    "Router",
    "Route",

    # Status codes
    "HTTPStatus",
]

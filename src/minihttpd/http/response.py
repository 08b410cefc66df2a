"""
=============================================================================
HTTP RESPONSE MODEL
=============================================================================

Responses form a small closed set. Handlers never build header maps by
hand; they pick one of four factory functions and the model serializes it:

    ok()                 HTTP/1.1 200 OK\r\n\r\n
    ok("abc")            HTTP/1.1 200 OK\r\n
                         Content-Type: text/plain\r\n
                         Content-Length: 3\r\n
                         \r\n
                         abc
    ok_stream(b"\x00")   HTTP/1.1 200 OK\r\n
                         Content-Type: application/octet-stream\r\n
                         Content-Length: 1\r\n
                         \r\n
                         \x00
    not_found()          HTTP/1.1 404 NOT FOUND\r\n\r\n
    created()            HTTP/1.1 201 CREATED\r\n\r\n

=============================================================================
ONE SUCCESS VARIANT, TWO BODY KINDS
=============================================================================

A text body and a binary body only differ in the Content-Type they
advertise. Instead of two parallel "ok" types, a response carries a
BodyKind discriminant and a single serialization path handles both:

    HTTPResponse(status=OK, body=b"abc",  body_kind=TEXT)
    HTTPResponse(status=OK, body=b"\x00", body_kind=BINARY)

Text is encoded to UTF-8 when the response is built, so Content-Length
is always the exact byte count that goes out on the socket.

=============================================================================
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .status_codes import HTTPStatus


HTTP_VERSION = "HTTP/1.1"


class BodyKind(Enum):
    """How a response body is advertised to the client."""
    TEXT = "text/plain"
    BINARY = "application/octet-stream"

    @property
    def content_type(self) -> str:
        return self.value


@dataclass(frozen=True)
class HTTPResponse:
    """
    A response ready to be written to the client.

    Building a response performs no I/O; to_bytes() is a pure function of
    the fields below. Use the module-level factories rather than the
    constructor.

    Attributes:
        status: Status code and reason phrase.
        body: Encoded body bytes, or None for a header-only response.
        body_kind: Content-Type advertised when a body is present.
    """

    status: HTTPStatus
    body: Optional[bytes] = None
    body_kind: BodyKind = BodyKind.TEXT

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 404 NOT FOUND"
        """
        return f"{HTTP_VERSION} {int(self.status)} {self.status.phrase}"

    @property
    def content_length(self) -> int:
        """Exact number of body bytes this response carries."""
        return len(self.body) if self.body is not None else 0

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

        Header-only responses (no body) carry neither Content-Type nor
        Content-Length. A binary response without a body cannot be
        serialized and yields empty bytes; the router never produces one.

        Returns:
            Complete HTTP response as bytes.
        """
        if self.body is None:
            if self.body_kind is BodyKind.BINARY:
                return b""
            return f"{self.status_line}\r\n\r\n".encode("ascii")

        lines = [
            self.status_line,
            f"Content-Type: {self.body_kind.content_type}",
            f"Content-Length: {self.content_length}",
            "",
        ]
        header_bytes = "\r\n".join(lines).encode("ascii") + b"\r\n"
        return header_bytes + self.body


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Examples:
#     return ok()
#     return ok("abc")
#     return ok_stream(path.read_bytes())
#     return not_found()
#
# =============================================================================

def ok(text: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response with an optional plain-text body.

    Args:
        text: Body text, encoded as UTF-8. None sends no body at all.

    Returns:
        HTTPResponse with 200 status
    """
    body = text.encode("utf-8") if text is not None else None
    return HTTPResponse(HTTPStatus.OK, body, BodyKind.TEXT)


def ok_stream(data: Optional[bytes]) -> HTTPResponse:
    """
    Create a 200 OK response with a binary body.

    The bytes are sent untouched as application/octet-stream.

    Args:
        data: Raw body bytes.

    Returns:
        HTTPResponse with 200 status
    """
    return HTTPResponse(HTTPStatus.OK, bytes(data) if data is not None else None, BodyKind.BINARY)


def created() -> HTTPResponse:
    """Create a 201 CREATED response (no body)."""
    return HTTPResponse(HTTPStatus.CREATED)


def not_found() -> HTTPResponse:
    """
    Create a 404 NOT FOUND response (no body).

    This is the default outcome for anything the router cannot satisfy:
    unknown paths, missing headers, missing files and filesystem errors.
    """
    return HTTPResponse(HTTPStatus.NOT_FOUND)

"""
=============================================================================
HTTP REQUEST PARSING
=============================================================================

This module turns the header block read off the socket into an
HTTPRequest object.

    ┌─────────────────────────────────────────────────────────────────┐
    │  REQUEST LINE                                                   │
    │  GET /echo/abc HTTP/1.1\r\n                                     │
    │  └─┘ └───────┘ └──────┘                                         │
    │  Method  Path   Version (only HTTP/1.1 is accepted)             │
    ├─────────────────────────────────────────────────────────────────┤
    │  HEADERS                                                        │
    │  User-Agent: curl/8.4.0\r\n        → "user-agent": "curl/8.4.0" │
    │  Content-Length: 5\r\n             → "content-length": 5        │
    │  \r\n                              ← end of header block        │
    ├─────────────────────────────────────────────────────────────────┤
    │  BODY (raw bytes, attached separately)                          │
    └─────────────────────────────────────────────────────────────────┘

=============================================================================
TYPED HEADER VALUES
=============================================================================

Every header value is classified once, at parse time:

    "42"      → 42        (int)
    "-7"      → -7        (int)
    "42a"     → "42a"     (str)
    "1_000"   → "1_000"   (str, Python's int() would accept this)

The classification is purely syntactic. A Content-Length of "abc" is
still stored, as the string "abc". Integers are limited to the signed
32-bit range; anything wider stays a string.

=============================================================================
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Union
import re


HeaderValue = Union[int, str]

SUPPORTED_VERSION = "HTTP/1.1"

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT32_MIN = -(2 ** 31)
_INT32_MAX = 2 ** 31 - 1


class HTTPParseError(ValueError):
    """
    Raised when the request line does not have the expected shape.

    The connection loop logs these as unsupported requests. No response
    is written for them.
    """

    def __init__(self, message: str, request_text: str = ""):
        super().__init__(message)
        self.request_text = request_text


def classify_header_value(raw: str) -> HeaderValue:
    """
    Classify a trimmed header value as int or str.

    Args:
        raw: Header value with surrounding whitespace already removed.

    Returns:
        The value as an int when it is a base-10 signed 32-bit integer,
        otherwise the original string.
    """
    if _INT_PATTERN.fullmatch(raw):
        number = int(raw)
        if _INT32_MIN <= number <= _INT32_MAX:
            return number
    return raw


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method: Request method exactly as sent ("GET", "POST", ...).
        path: Request target with its leading slash removed ("" for "/").
        headers: Lower-cased header name → typed value.
        body: Raw body bytes, or None until with_body() attaches them.
    """

    method: str
    path: str
    headers: Dict[str, HeaderValue] = field(default_factory=dict)
    body: Optional[bytes] = None

    def get_header(self, name: str, default: Optional[HeaderValue] = None) -> Optional[HeaderValue]:
        """Get a header by name (case-insensitive)."""
        return self.headers.get(name.strip().lower(), default)

    @property
    def user_agent(self) -> Optional[str]:
        """The User-Agent header, only when it was stored as a string."""
        value = self.headers.get("user-agent")
        return value if isinstance(value, str) else None

    @property
    def content_length(self) -> Optional[int]:
        """Declared body length, or None when absent or not a number."""
        value = self.headers.get("content-length")
        return value if isinstance(value, int) else None

    def with_body(self, data: bytes) -> "HTTPRequest":
        """
        Attach the bytes that followed the header block.

        The request keeps its own copy, independent of the receive buffer.

        Args:
            data: Everything after the frame boundary.

        Returns:
            A new HTTPRequest carrying the body.
        """
        return replace(self, body=bytes(data))


class RequestParser:
    """
    Parses the decoded header block of a request.

    The block is scanned line by line:

        1. Split on CRLF.
        2. First line: exactly three whitespace-separated tokens,
           METHOD SP /PATH SP HTTP/1.1. Anything else is rejected.
        3. Following lines, up to the first blank line: split on the
           first colon, trim both sides, lower-case the name. Lines
           without a colon or with an empty name are skipped. A repeated
           header overwrites the earlier one.
    """

    def parse(self, text: str) -> HTTPRequest:
        """
        Parse a header block into an HTTPRequest.

        Args:
            text: Decoded bytes up to and including the frame boundary.

        Returns:
            HTTPRequest with body=None.

        Raises:
            HTTPParseError: If the request line is malformed.
        """
        lines = text.split("\r\n")
        method, path = self._parse_request_line(lines[0], text)
        headers = self._parse_headers(lines[1:])

        return HTTPRequest(method=method, path=path, headers=headers)

    def _parse_request_line(self, line: str, text: str) -> tuple[str, str]:
        tokens = line.split()
        if len(tokens) != 3:
            raise HTTPParseError(f"Invalid request line: {line!r}", text)

        method, target, version = tokens
        if not target.startswith("/"):
            raise HTTPParseError(f"Request target must start with '/': {target!r}", text)
        if version != SUPPORTED_VERSION:
            raise HTTPParseError(f"Unsupported HTTP version: {version!r}", text)

        return method, target[1:]

    def _parse_headers(self, lines: list[str]) -> Dict[str, HeaderValue]:
        headers: Dict[str, HeaderValue] = {}

        for line in lines:
            if not line:
                break  # blank line terminates the header block

            name, sep, value = line.partition(":")
            name = name.strip()
            if not sep or not name:
                continue  # lenient: skip malformed header lines

            headers[name.lower()] = classify_header_value(value.strip())

        return headers


def decode_header_block(buffer: bytes, body_offset: int) -> str:
    """Lossy UTF-8 decoding of the header block (boundary included)."""
    return buffer[:body_offset].decode("utf-8", errors="replace")


def parse_request(buffer: bytes, body_offset: int) -> HTTPRequest:
    """
    Parse a framed request and attach its body.

    Convenience for the connection loop and for tests: decodes the header
    block, parses it, then binds buffer[body_offset:] as the body.

    Args:
        buffer: Everything read from the connection.
        body_offset: Index just past the \\r\\n\\r\\n boundary.

    Returns:
        Parsed HTTPRequest with its body attached.

    Raises:
        HTTPParseError: If the request line is malformed.
    """
    request = RequestParser().parse(decode_header_block(buffer, body_offset))
    return request.with_body(buffer[body_offset:])

"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

This module wraps one accepted client socket: it reads a framed request
off it, writes exactly one response back, and closes it.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP only guarantees that bytes arrive IN ORDER and INTACT. It does not
preserve message boundaries, so one request may show up in any number
of recv() chunks:

    Client sends:   "GET /echo/abc HTTP/1.1\r\nHost: x\r\n\r\n"

    Server might receive:
        recv() → "GET /echo/a"
        recv() → "bc HTTP/1.1\r\nHo"
        recv() → "st: x\r\n\r\n"

We therefore accumulate chunks until the frame boundary \r\n\r\n shows
up. Everything before it is the header block; everything after it is
body.

    ┌──────────────────────────────────────────────────────────────────┐
    │  buffer                                                           │
    │  GET /files/a HTTP/1.1\r\nContent-Length: 5\r\n\r\nhello          │
    │  └──────────────── header block ───────────────┘└body┘           │
    │                                                 ▲                 │
    │                                            body_offset            │
    └──────────────────────────────────────────────────────────────────┘

If the header block declares a Content-Length, reading continues until
that many body bytes are buffered or the client closes, so a body that
arrives in its own packet is not lost.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

One request, one response, then close. There is no keep-alive.

    ACCEPTED ──► READING ──► PARSED ──► ROUTED ──► WRITING ──► WRITTEN
                    │           │                                 │
                    │           └──► PARSE_FAILED                 │
                    │                     │                       │
                    ▼                     ▼                       ▼
                  CLOSED ◄────────────────┴───────────────────────┘

READING failures (peer closed early, header too large, timeout) and
PARSE_FAILED close the connection without writing a single byte.

=============================================================================
"""

import socket
import time
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional

from ..http.request import classify_header_value


logger = logging.getLogger(__name__)


FRAME_BOUNDARY = b"\r\n\r\n"


class FrameError(ConnectionError):
    """The request could not be framed; the connection is abandoned."""


class UnexpectedEof(FrameError):
    """The peer closed the connection before the end of the headers."""


class HeaderTooLarge(FrameError):
    """The header block grew past the configured limit."""


class FrameTimeout(FrameError):
    """The peer sent nothing for longer than the read timeout."""


class Frame(NamedTuple):
    """
    A framed request as read off the socket.

    Attributes:
        buffer: Every byte received.
        body_offset: Index just past the first \\r\\n\\r\\n.
    """
    buffer: bytes
    body_offset: int

    @property
    def header_block(self) -> bytes:
        return self.buffer[:self.body_offset]

    @property
    def body(self) -> bytes:
        return self.buffer[self.body_offset:]


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and in tests."""
    ACCEPTED = "accepted"          # Just accepted, nothing read yet
    READING = "reading"            # Reading the request frame
    PARSED = "parsed"              # Request line and headers understood
    PARSE_FAILED = "parse_failed"  # Unsupported request, nothing will be sent
    ROUTED = "routed"              # Handler produced a response
    WRITING = "writing"            # Sending response bytes
    WRITTEN = "written"            # Response fully handed to the OS
    CLOSED = "closed"              # Socket released


def declared_body_length(header_block: bytes) -> Optional[int]:
    """
    Find the Content-Length declared in a raw header block.

    Done with a plain scan because framing happens before the request is
    parsed. Only a non-negative integer value counts.

    Args:
        header_block: Raw bytes of the request line and headers.

    Returns:
        The declared length, or None.
    """
    text = header_block.decode("utf-8", errors="replace")
    length = None
    for line in text.split("\r\n")[1:]:
        name, sep, value = line.partition(":")
        if sep and name.strip().lower() == "content-length":
            length = classify_header_value(value.strip())
    if isinstance(length, int) and length >= 0:
        return length
    return None


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short unique connection identifier (for logging).
        state: Current connection state.
        buffer_size: Bytes requested per recv() call.
        read_timeout: Seconds to wait for data, None to block forever.
        max_header_size: Limit on bytes buffered before the boundary.
    """

    socket: socket.socket
    address: tuple

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)

    buffer_size: int = 1024
    read_timeout: Optional[float] = None
    max_header_size: Optional[int] = None

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.read_timeout:
            self.socket.settimeout(self.read_timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0] if self.address else ""

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING: the frame reader
    # =========================================================================

    def read_frame(self) -> Frame:
        """
        Read one request frame from the socket.

        ┌──────────────────────────────────────────────────────────────┐
        │   while "\\r\\n\\r\\n" not in buffer:                           │
        │       recv() → buffer          (empty recv → UnexpectedEof)  │
        │                                                              │
        │   body_offset = boundary + 4                                 │
        │                                                              │
        │   while body shorter than Content-Length:                    │
        │       recv() → buffer          (empty recv → stop, no error) │
        └──────────────────────────────────────────────────────────────┘

        The whole buffer is searched after every chunk. That is quadratic
        in the header size, which is what max_header_size bounds.

        A client that declares more body than it sends and then keeps the
        connection open is waited for. With read_timeout unset that wait
        never ends; set read_timeout to turn it into FrameTimeout.

        Returns:
            Frame(buffer, body_offset).

        Raises:
            UnexpectedEof: Peer closed before the boundary arrived.
            HeaderTooLarge: Buffer exceeded max_header_size first.
            FrameTimeout: read_timeout elapsed.
        """
        self.state = ConnectionState.READING
        buffer = b""

        try:
            while True:
                chunk = self._recv()
                if not chunk:
                    raise UnexpectedEof(f"End of stream after {len(buffer)} bytes")
                buffer += chunk

                boundary = buffer.find(FRAME_BOUNDARY)
                if boundary != -1:
                    break

                if self.max_header_size is not None and len(buffer) > self.max_header_size:
                    raise HeaderTooLarge(
                        f"Header block exceeds {self.max_header_size} bytes"
                    )

            body_offset = boundary + len(FRAME_BOUNDARY)

            expected = declared_body_length(buffer[:boundary])
            while expected is not None and len(buffer) - body_offset < expected:
                chunk = self._recv()
                if not chunk:
                    break  # Peer closed mid-body; keep what arrived
                buffer += chunk

        except socket.timeout:
            raise FrameTimeout(f"No data for {self.read_timeout}s") from None

        logger.debug(
            f"[{self.id}] Framed {len(buffer)} bytes (body starts at {body_offset})"
        )
        return Frame(buffer, body_offset)

    def _recv(self) -> bytes:
        """
        Receive one chunk, treating an abrupt reset as end of stream.

        Returns:
            Received bytes, or empty bytes if the peer is gone.
        """
        try:
            return self.socket.recv(self.buffer_size)
        except ConnectionResetError:
            return b""

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send the whole response.

        Uses sendall(), which keeps writing until every byte is handed to
        the OS.

        Returns:
            True if the response was sent, False if the client is gone.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

        self.state = ConnectionState.WRITTEN
        return True

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR) sends FIN so the client sees end of response.
        2. Drain anything the client still sends, so unread bytes do not
           turn the close into a reset.
        3. close() releases the file descriptor.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError:
            pass  # Includes socket.timeout

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False

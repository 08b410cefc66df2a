"""
=============================================================================
CORE SERVER COMPONENTS
=============================================================================

The networking plumbing underneath the HTTP layer.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         SOCKET SERVER                                │
    │  • Binds host:port and runs the accept() loop                       │
    │  • Wraps each client socket in a Connection                         │
    │  • Stops on SIGTERM/SIGINT or shutdown()                            │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ one Connection per client
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                          CONNECTION                                  │
    │  • Frames the request (reads until \r\n\r\n, then the body)         │
    │  • Sends the response with sendall()                                │
    │  • Closes gracefully (FIN, drain, close)                            │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .socket_server import SocketServer
from .connection import (
    Connection,
    ConnectionState,
    Frame,
    FrameError,
    UnexpectedEof,
    HeaderTooLarge,
    FrameTimeout,
)

__all__ = [
    "SocketServer",     # Accepts connections
    "Connection",       # Client socket wrapper - framing and I/O
    "ConnectionState",  # Connection lifecycle states
    "Frame",            # Framed request bytes + body offset
    "FrameError",       # Base class of framing failures
    "UnexpectedEof",
    "HeaderTooLarge",
    "FrameTimeout",
]

"""
=============================================================================
MINIHTTPD - A MINIMAL HTTP/1.1 SERVER ON RAW SOCKETS
=============================================================================

A small HTTP/1.1 server built directly on the socket module: it frames
requests off TCP, parses them, routes them through a fixed table and
writes one response per connection.

=============================================================================
ENDPOINTS
=============================================================================

    GET  /                  200, empty body
    GET  /echo/<text>       200, text/plain body <text>
    GET  /user-agent        200, text/plain body = User-Agent header
    GET  /files/<name>      200, application/octet-stream file contents
    POST /files/<name>      201, request body written to <directory>/<name>
    anything else           404

=============================================================================
PROJECT STRUCTURE
=============================================================================

    minihttpd/
    ├── __init__.py          # Package exports
    ├── __main__.py          # CLI entry point
    ├── config.py            # Server configuration
    ├── server.py            # Per-connection loop
    ├── core/
    │   ├── socket_server.py # Listener (accept loop)
    │   └── connection.py    # Frame reader, send, close
    ├── http/
    │   ├── request.py       # Request parsing, typed header values
    │   ├── response.py      # Response variants and serialization
    │   ├── router.py        # Ordered routing table
    │   └── status_codes.py  # Status codes and reason phrases
    └── handlers/
        ├── basic.py         # /, /echo, /user-agent
        └── files.py         # /files/<name>

=============================================================================
QUICK START
=============================================================================

    from minihttpd import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(port=4221, directory="/tmp/data"))
    server.run()

or from a shell:

    python -m minihttpd --directory /tmp/data

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]

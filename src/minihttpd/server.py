"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together. For every accepted connection:

    SocketServer.accept()
        │
        └──► new thread: _process_connection(conn)
                 │
                 ├──► conn.read_frame()          bytes until \r\n\r\n (+ body)
                 ├──► parse_request()            HTTPRequest, body attached
                 ├──► router.handle()            HTTPResponse
                 ├──► conn.send_response()       response.to_bytes()
                 └──► conn.close()

=============================================================================
CONCURRENCY
=============================================================================

One thread per connection, started and forgotten. There is no pool and
no cap on concurrent connections. Threads are daemons and are never
joined. Each one owns its socket, buffers, request and response, so no
locking is needed.

A bounded worker pool (or an async reactor) with a queue and
backpressure is the natural next step if this ever faces real traffic.

=============================================================================
ERRORS
=============================================================================

    Framing failure (peer closed early, ...)  → logged, nothing sent
    Unparseable request line                  → logged, nothing sent
    No route / missing file / missing header  → 404 NOT FOUND
    Handler crash                             → logged, nothing sent

Nothing that goes wrong on one connection reaches the listener or any
other connection.

=============================================================================
"""

import logging
import threading
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ConnectionState, FrameError
from .http import HTTPParseError, Router, parse_request
from .handlers import build_router


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Minimal HTTP/1.1 server.

    Usage:
        server = HTTPServer(ServerConfig(directory="/tmp/data"))
        server.run()   # Blocks until Ctrl+C / SIGTERM

    A custom Router can be passed in; by default the server answers the
    built-in routes (/, /echo/<text>, /user-agent, /files/<name>).
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)
        self._router = router or build_router(self.config.directory)

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); see SocketServer.address."""
        return self._socket_server.address

    def run(self, setup_logging: bool = True):
        """
        Start the server (blocking).

        Args:
            setup_logging: Configure the root logger from config.log_level.
                           Embedders with their own logging pass False.
        """
        if setup_logging:
            self._setup_logging()

        logger.info(f"Starting HTTP server on {self.config.host}:{self.config.port}")
        if self.config.directory:
            logger.info(f"Serving files from {self.config.directory}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections; in-flight connections finish alone."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("minihttpd").setLevel(level)

    def _handle_connection(self, conn: Connection):
        """
        Start a thread for the connection (called by SocketServer).

        The thread is never joined; it ends when its connection closes.
        """
        thread = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )
        thread.start()

    def _process_connection(self, conn: Connection):
        """
        Serve exactly one request on the connection, then close it.

        Args:
            conn: The client connection.
        """
        with conn:
            try:
                frame = conn.read_frame()
            except FrameError as e:
                logger.warning(f"[{conn.id}] Abandoning connection: {e}")
                return
            except OSError as e:
                logger.warning(f"[{conn.id}] Read failed: {e}")
                return

            try:
                request = parse_request(frame.buffer, frame.body_offset)
            except HTTPParseError as e:
                # No response at all, not even a 400.
                conn.state = ConnectionState.PARSE_FAILED
                logger.info(f"[{conn.id}] Server does not support the http request {e.request_text!r} ({e})")
                return

            conn.state = ConnectionState.PARSED

            try:
                response = self._router.handle(request)
            except Exception as e:
                logger.exception(f"[{conn.id}] Handler error: {e}")
                return

            conn.state = ConnectionState.ROUTED
            logger.info(f"[{conn.id}] {request.method} /{request.path} -> {int(response.status)}")

            conn.send_response(response.to_bytes())

"""
=============================================================================
TCP LISTENER
=============================================================================

Owns the listening socket. Everything past accept() belongs to someone
else: each client socket is wrapped in a Connection and passed to the
callback given to start(), which is expected to return immediately.

    start(handler)
        │
        ├── bind(host, port)      port 0 → the OS picks; see .address
        ├── listen(backlog)
        ├── ready event set       wait_until_ready() returns
        │
        └── loop while running:
                accept()  ──timeout(1s)──► re-check running flag
                    │
                    └──► handler(Connection(client, ...))

=============================================================================
SHUTDOWN
=============================================================================

shutdown() only clears the running flag; the accept loop notices within
a second, closes the listening socket and sets the shutdown event.
SIGINT/SIGTERM call shutdown() when the listener runs on the main
thread. Connections already handed off are not waited for.

=============================================================================
"""

import socket
import signal
import logging
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


ConnectionHandler = Callable[[Connection], None]


class SocketServer:
    """
    TCP listener that hands every accepted client to a callback.

    Usage:
        def handle_connection(conn: Connection):
            ...

        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    def __init__(self, config: ServerConfig):
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._bound_address: Optional[Tuple[str, int]] = None
        self._running = False

        self._ready_event = threading.Event()
        self._shutdown_event = threading.Event()

        self._previous_handlers: dict = {}

    @property
    def is_running(self) -> bool:
        """True between a successful bind and the end of the accept loop."""
        return self._running

    @property
    def address(self) -> Tuple[str, int]:
        """
        The server's address.

        After start() this is the address actually bound, so a port of 0
        in the config is replaced by the port the OS picked.
        """
        return self._bound_address or (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Rebind immediately after a restart instead of waiting out TIME_WAIT
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Lets the accept loop poll self._running
        sock.settimeout(1.0)

        return sock

    def _setup_signals(self):
        """
        Install SIGTERM/SIGINT handlers that stop the accept loop.

        Python only allows this from the main thread; a server started
        from any other thread (tests, embedding) keeps the existing
        handlers.
        """
        if threading.current_thread() is not threading.main_thread():
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, stopping")
            self.shutdown()

        self._previous_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._previous_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._previous_handlers.clear()

    def start(self, connection_handler: ConnectionHandler):
        """
        Bind, listen and accept connections until shutdown() is called.

        This method BLOCKS.

        Args:
            connection_handler: Called with each accepted Connection. It
                                must not block; the HTTP server starts a
                                thread for it and returns.

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._shutdown_event.clear()
        self._setup_signals()

        host, port = self.address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: ConnectionHandler):
        """
        Accept clients until self._running becomes False.

        A failure while handling one connection is logged and the loop
        keeps going; only a failing accept() ends it.
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue  # Periodic check of self._running
            except OSError as e:
                if self._running:
                    logger.error(f"Accept error: {e}")
                break

            conn = Connection(
                socket=client_socket,
                address=client_address,
                buffer_size=self.config.buffer_size,
                read_timeout=self.config.read_timeout,
                max_header_size=self.config.max_header_size,
            )
            logger.info(f"[{conn.id}] Accepted new connection from {conn.client_ip}")

            try:
                connection_handler(conn)
            except Exception:
                logger.exception(f"[{conn.id}] Failed to dispatch connection")
                conn.close()

    def shutdown(self):
        """
        Stop accepting connections.

        Safe to call multiple times and from any thread.
        """
        logger.info("Stopping listener")
        self._running = False

    def _cleanup(self):
        self._running = False
        self._restore_signals()

        if self._socket:
            try:
                self._socket.close()
            except OSError:
                pass
            self._socket = None

        self._shutdown_event.set()
        logger.info("Listener closed")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Wait until the socket is bound and listening.

        Returns:
            True if the server is ready, False on timeout.
        """
        return self._ready_event.wait(timeout)

    def wait_for_shutdown(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for the server to shut down.

        Returns:
            True if shutdown completed, False if timeout.
        """
        return self._shutdown_event.wait(timeout)

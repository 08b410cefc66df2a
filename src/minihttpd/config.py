"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All tunables live in one dataclass. It can be built three ways:

    ServerConfig(directory="/tmp/data")          # in code
    ServerConfig.from_env()                      # MINIHTTPD_* variables
    python -m minihttpd --directory /tmp/data    # CLI (see __main__.py)

Validation happens once, at startup, so a bad port or log level fails
immediately instead of on the first request.

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _optional_float(value: Optional[str]) -> Optional[float]:
    return float(value) if value else None


def _optional_int(value: Optional[str]) -> Optional[int]:
    return int(value) if value else None


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size

    HARDENING (both off by default: no limits, block forever)
    - read_timeout, max_header_size

    FILES
    - directory

    LOGGING
    - log_level

    =========================================================================
    """

    host: str = "127.0.0.1"
    """The IP address to bind to."""

    port: int = 4221
    """
    The port number to listen on.
    0 asks the OS for a free port (handy in tests).
    """

    backlog: int = 128
    """Maximum number of queued connections."""

    buffer_size: int = 1024
    """Bytes requested from the socket per recv() call."""

    directory: Optional[str] = None
    """
    Base directory for GET/POST /files/<name>.
    None disables the file routes (they answer 404).
    """

    read_timeout: Optional[float] = None
    """
    Seconds to wait for request bytes before abandoning the connection.
    None = blocking, a silent client holds its thread forever.
    """

    max_header_size: Optional[int] = None
    """
    Maximum bytes buffered while looking for the end of the headers.
    None = unbounded.
    """

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        MINIHTTPD_HOST             Server host (default: 127.0.0.1)
        MINIHTTPD_PORT             Server port (default: 4221)
        MINIHTTPD_DIRECTORY        Files directory (default: None)
        MINIHTTPD_READ_TIMEOUT     Read timeout in seconds (default: None)
        MINIHTTPD_MAX_HEADER_SIZE  Header size limit in bytes (default: None)
        MINIHTTPD_LOG_LEVEL        Logging level (default: INFO)

        =====================================================================
        """
        return cls(
            host=os.getenv("MINIHTTPD_HOST", "127.0.0.1"),
            port=int(os.getenv("MINIHTTPD_PORT", "4221")),
            directory=os.getenv("MINIHTTPD_DIRECTORY") or None,
            read_timeout=_optional_float(os.getenv("MINIHTTPD_READ_TIMEOUT")),
            max_header_size=_optional_int(os.getenv("MINIHTTPD_MAX_HEADER_SIZE")),
            log_level=os.getenv("MINIHTTPD_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: On the first invalid setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.read_timeout is not None and self.read_timeout <= 0:
            raise ValueError("read_timeout must be > 0")

        if self.max_header_size is not None and self.max_header_size <= 0:
            raise ValueError("max_header_size must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")

        # Not fatal: the file routes already answer 404 when reads fail.
        if self.directory is not None and not Path(self.directory).is_dir():
            logger.warning(f"Files directory does not exist: {self.directory}")

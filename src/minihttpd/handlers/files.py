"""
=============================================================================
FILE READ/WRITE ENDPOINTS
=============================================================================

    GET  /files/<name>   → 200 application/octet-stream with the file bytes
    POST /files/<name>   → 201 CREATED after writing the request body

Files live in a single base directory given by --directory. The file
name is whatever follows the first "files/" in the path, up to
whitespace.

=============================================================================
SECURITY
=============================================================================

The name comes straight from the client. Joining it onto the base
directory unchecked would let these through:

    GET /files/../../etc/passwd     → climbs out with ".."
    GET /files//etc/passwd          → absolute name replaces the base

So every name is resolved (following ".." and symlinks) and must still
be inside the base directory. Refused names are answered like missing
files: 404 NOT FOUND.

=============================================================================
CONCURRENCY
=============================================================================

Reads and writes are not synchronized. Two POSTs to the same name race
and the last writer wins; a GET running during a POST may see a
partially written file.

=============================================================================
"""

from pathlib import Path
from typing import Optional, Union
import logging
import os
import re

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok_stream, created, not_found


logger = logging.getLogger(__name__)


FILES_SEGMENT = "files"

_FILE_NAME_PATTERN = re.compile(r"files/(\S*)")


def extract_file_name(path: str) -> Optional[str]:
    """Text following the first "files/" in the path, up to whitespace."""
    match = _FILE_NAME_PATTERN.search(path)
    return match.group(1) if match else None


def is_files(path: str) -> bool:
    return FILES_SEGMENT in path


class PathOutsideRoot(PermissionError):
    """Raised when a file name resolves outside the store's directory."""


class FileStore:
    """
    Reads and writes files inside one base directory.

    read() raises FileNotFoundError for anything that is not a regular
    file; write() creates or truncates. Both raise PathOutsideRoot for
    names that escape the directory, and let other OSErrors propagate.
    """

    def __init__(self, directory: Union[str, os.PathLike]):
        self.root = Path(directory).resolve()

    def resolve(self, name: str) -> Path:
        """
        Map a client-supplied name to a path inside the store.

        Raises:
            PathOutsideRoot: If the resolved path escapes the directory.
            FileNotFoundError: If the name runs into a symlink loop.
        """
        try:
            full_path = (self.root / name).resolve()
        except RuntimeError as e:
            # Symlink loops raise RuntimeError before Python 3.13
            raise FileNotFoundError(f"cannot resolve {name!r}: {e}") from None

        try:
            full_path.relative_to(self.root)
        except ValueError:
            raise PathOutsideRoot(f"{name!r} resolves outside {self.root}") from None
        return full_path

    def read(self, name: str) -> bytes:
        path = self.resolve(name)
        if not path.is_file():
            raise FileNotFoundError(f"the file was not found at path {path}")
        return path.read_bytes()

    def write(self, name: str, data: bytes) -> int:
        """Write data to the named file, replacing any previous content."""
        path = self.resolve(name)
        with open(path, "wb") as f:
            f.write(data)
            f.flush()
        return len(data)


class FileHandler:
    """
    Route handlers for GET and POST on /files/<name>.

    With no directory configured both endpoints always answer 404.

    Usage:
        files = FileHandler("/tmp/data")
        router.add_route("GET", is_files, files.read)
        router.add_route("POST", is_files, files.write)
    """

    def __init__(self, directory: Optional[Union[str, os.PathLike]] = None):
        self.store = FileStore(directory) if directory is not None else None

    def read(self, request: HTTPRequest) -> HTTPResponse:
        """GET /files/<name> → file contents as octet-stream, or 404."""
        name = extract_file_name(request.path)
        if self.store is None or name is None:
            return not_found()

        try:
            contents = self.store.read(name)
        except PathOutsideRoot as e:
            logger.warning(f"Path traversal attempt: {e}")
            return not_found()
        except (OSError, ValueError) as e:
            logger.debug(f"Read of {name!r} failed: {e}")
            return not_found()

        return ok_stream(contents)

    def write(self, request: HTTPRequest) -> HTTPResponse:
        """POST /files/<name> → write the body, 201 on success, else 404."""
        name = extract_file_name(request.path)
        if self.store is None or name is None:
            return not_found()

        try:
            written = self.store.write(name, request.body or b"")
        except PathOutsideRoot as e:
            logger.warning(f"Path traversal attempt: {e}")
            return not_found()
        except (OSError, ValueError) as e:
            logger.debug(f"Write of {name!r} failed: {e}")
            return not_found()

        logger.debug(f"Wrote {written} bytes to {name!r}")
        return created()

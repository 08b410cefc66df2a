"""
=============================================================================
REQUEST HANDLERS
=============================================================================

Handlers take an HTTPRequest and return an HTTPResponse. They never
raise for ordinary misses (no such file, no User-Agent); they answer
404 NOT FOUND instead.

    basic.py    GET /, GET /echo/<text>, GET /user-agent
    files.py    GET /files/<name>, POST /files/<name>

build_router() wires them into the routing table in priority order.

=============================================================================
"""

import os
from typing import Optional, Union

from ..http.router import Router
from .basic import root, echo, user_agent, is_root, is_echo, is_user_agent
from .files import FileHandler, FileStore, PathOutsideRoot, is_files


def build_router(directory: Optional[Union[str, os.PathLike]] = None) -> Router:
    """
    Build the server's routing table.

    The registration order is the match priority; see http/router.py.

    Args:
        directory: Base directory for the /files routes. None disables
                   them (they answer 404).

    Returns:
        A Router ready to handle requests.
    """
    files = FileHandler(directory)
    router = Router()

    router.add_route("GET", is_root, root)
    router.add_route("GET", is_echo, echo)
    router.add_route("GET", is_user_agent, user_agent)
    router.add_route("GET", is_files, files.read, name="files.read")
    router.add_route("POST", is_files, files.write, name="files.write")

    return router


__all__ = [
    "build_router",
    "FileHandler",
    "FileStore",
    "PathOutsideRoot",
    "root",
    "echo",
    "user_agent",
]

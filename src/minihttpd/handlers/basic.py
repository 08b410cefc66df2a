"""
Plain GET endpoints: the root path, echo and User-Agent reflection.
"""

from typing import Optional
import re

from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ok, not_found


ECHO_PREFIX = "echo/"
USER_AGENT_PATH = "user-agent"

# Unanchored: "fooecho/x" is an echo request too.
_ECHO_PATTERN = re.compile(r"echo/(\S*)")


def extract_echo(path: str) -> Optional[str]:
    """Text following the first "echo/" in the path, up to whitespace."""
    match = _ECHO_PATTERN.search(path)
    return match.group(1) if match else None


def is_root(path: str) -> bool:
    return path == ""


def is_echo(path: str) -> bool:
    return extract_echo(path) is not None


def is_user_agent(path: str) -> bool:
    return path == USER_AGENT_PATH


def root(request: HTTPRequest) -> HTTPResponse:
    """GET / → 200 with no body."""
    return ok()


def echo(request: HTTPRequest) -> HTTPResponse:
    """GET /echo/<text> → 200 with <text> as a text/plain body."""
    text = extract_echo(request.path)
    if text is None:
        return not_found()
    return ok(text)


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """
    GET /user-agent → 200 with the client's User-Agent as the body.

    A missing header, or one that parsed as an integer, is a 404.
    """
    agent = request.user_agent
    if agent is None:
        return not_found()
    return ok(agent)

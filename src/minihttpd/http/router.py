"""
=============================================================================
REQUEST ROUTING
=============================================================================

The router is an ordered table. Each entry pairs an HTTP method with a
predicate over the request path:

    ┌────────┬──────────────────────────────┬─────────────────────┐
    │ Method │ Predicate                    │ Handler             │
    ├────────┼──────────────────────────────┼─────────────────────┤
    │ GET    │ path == ""                   │ root                │
    │ GET    │ "echo/..." found in path     │ echo                │
    │ GET    │ path == "user-agent"         │ user_agent          │
    │ GET    │ "files" in path              │ FileHandler.read    │
    │ POST   │ "files" in path              │ FileHandler.write   │
    └────────┴──────────────────────────────┴─────────────────────┘

Order matters: first-registered, first-matched. The predicates overlap
("/echo/files/x" satisfies both the echo and the files predicate), so
routes are never reordered or matched independently. A request that no
route accepts gets the default response, 404 NOT FOUND.

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, List, Optional
import logging

from .request import HTTPRequest
from .response import HTTPResponse, not_found


logger = logging.getLogger(__name__)


Handler = Callable[[HTTPRequest], HTTPResponse]
PathPredicate = Callable[[str], bool]


@dataclass(frozen=True)
class Route:
    """
    A registered route.

    Attributes:
        method: HTTP method the route answers ("GET", "POST").
        matches: Predicate over the request path (leading slash stripped).
        handler: Produces the response once the route is selected.
        name: Label used in logs.
    """

    method: str
    matches: PathPredicate
    handler: Handler
    name: str = ""


class Router:
    """
    Ordered first-match request router.

    Usage:
        router = Router()
        router.add_route("GET", lambda path: path == "", root)
        response = router.handle(request)
    """

    def __init__(self, default: Callable[[], HTTPResponse] = not_found):
        self._routes: List[Route] = []
        self._default = default

    def add_route(
        self,
        method: str,
        matches: PathPredicate,
        handler: Handler,
        name: Optional[str] = None,
    ) -> Route:
        """
        Append a route to the end of the table.

        Args:
            method: HTTP method, compared exactly with the request method.
            matches: Path predicate.
            handler: Response-producing function.
            name: Optional label (defaults to the handler's name).

        Returns:
            The created Route.
        """
        route = Route(
            method=method,
            matches=matches,
            handler=handler,
            name=name or getattr(handler, "__name__", "handler"),
        )
        self._routes.append(route)
        return route

    def get(self, matches: PathPredicate, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Decorator registering a GET route."""
        def decorator(handler: Handler) -> Handler:
            self.add_route("GET", matches, handler, name)
            return handler
        return decorator

    def post(self, matches: PathPredicate, name: Optional[str] = None) -> Callable[[Handler], Handler]:
        """Decorator registering a POST route."""
        def decorator(handler: Handler) -> Handler:
            self.add_route("POST", matches, handler, name)
            return handler
        return decorator

    def match(self, method: str, path: str) -> Optional[Route]:
        """
        Find the first route accepting this method and path.

        Args:
            method: HTTP method of the request.
            path: Request path without its leading slash.

        Returns:
            The matching Route, or None.
        """
        for route in self._routes:
            if route.method == method and route.matches(path):
                return route
        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler.

        Returns:
            The handler's response, or the default (404) if nothing matched.
        """
        route = self.match(request.method, request.path)
        if route is None:
            logger.debug(f"No route for {request.method} /{request.path}")
            return self._default()

        logger.debug(f"{request.method} /{request.path} matched route {route.name!r}")
        return route.handler(request)

    @property
    def routes(self) -> List[Route]:
        """Registered routes in match order."""
        return list(self._routes)

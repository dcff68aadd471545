"""
Method + path dispatch with ``:param`` segments and a composable middleware chain.

Routes are registered at startup and the table is frozen before the first
request. Lookup first tries the exact ``"METHOD:path"`` key (routes without
parameters), then scans parameterized routes of the same method in
registration order.

Middlewares have the signature ``async (ctx, call_next) -> Response``. Global
middlewares wrap route middlewares, which wrap the handler; within each group
the first registered runs outermost. A middleware short-circuits by returning
a response without awaiting ``call_next``.
"""
import re
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from functools import reduce

from starlette.responses import Response

from core.error_handler import Handler, with_error_handling
from core.request_context import RequestContext
from services.exceptions import NotFoundError

Middleware = Callable[[RequestContext, Handler], Awaitable[Response]]

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE", "PATCH")


def _route_key(method: str, path: str) -> str:
    return f"{method.upper()}:{path}"


@dataclass
class Route:
    """A registered route and its compiled path matcher."""

    method: str
    path: str
    handler: Handler
    middlewares: tuple[Middleware, ...] = ()
    param_names: dict[int, str] = field(default_factory=dict)
    pattern: re.Pattern[str] | None = None

    @classmethod
    def build(
        cls,
        method: str,
        path: str,
        handler: Handler,
        middlewares: Iterable[Middleware] = (),
    ) -> "Route":
        segments = path.split("/")
        param_names = {
            index: segment[1:]
            for index, segment in enumerate(segments)
            if segment.startswith(":")
        }
        pattern = None
        if param_names:
            regex = "/".join(
                "[^/]+" if index in param_names else re.escape(segment)
                for index, segment in enumerate(segments)
            )
            pattern = re.compile(f"^{regex}$")
        return cls(
            method=method.upper(),
            path=path,
            handler=handler,
            middlewares=tuple(middlewares),
            param_names=param_names,
            pattern=pattern,
        )

    def match(self, path: str) -> dict[str, str] | None:
        """Return extracted params when path matches this route, else None."""
        if self.pattern is None:
            return {} if path == self.path else None
        if not self.pattern.match(path):
            return None
        segments = path.split("/")
        return {name: segments[index] for index, name in self.param_names.items()}


async def _route_not_found(ctx: RequestContext) -> Response:  # noqa: ARG001
    raise NotFoundError("Route not found")


def _bind(middleware: Middleware, call_next: Handler) -> Handler:
    async def handler(ctx: RequestContext) -> Response:
        return await middleware(ctx, call_next)

    return handler


def compose(middlewares: Iterable[Middleware], handler: Handler) -> Handler:
    """Fold middlewares around handler so that the first one runs outermost."""
    return reduce(
        lambda call_next, middleware: _bind(middleware, call_next),
        reversed(tuple(middlewares)),
        handler,
    )


class Router:
    """Route table plus global middlewares."""

    def __init__(self) -> None:
        self._exact: dict[str, Route] = {}
        self._routes: list[Route] = []
        self._middlewares: list[Middleware] = []
        self._frozen = False

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError("Router is frozen; routes must be registered at startup")

    def use(self, middleware: Middleware) -> None:
        """Append a global middleware."""
        self._check_mutable()
        self._middlewares.append(middleware)

    def add_route(
        self,
        method: str,
        path: str,
        handler: Handler,
        middlewares: Iterable[Middleware] = (),
    ) -> Route:
        """
        Register a handler for method and path.

        Raises:
            ValueError: If the method is unsupported or the route already exists.
            RuntimeError: If the router has been frozen.
        """
        self._check_mutable()
        if method.upper() not in SUPPORTED_METHODS:
            raise ValueError(f"Unsupported method: {method}")
        key = _route_key(method, path)
        if any(_route_key(r.method, r.path) == key for r in self._routes):
            raise ValueError(f"Route already registered: {key}")

        route = Route.build(method, path, handler, middlewares)
        self._routes.append(route)
        if route.pattern is None:
            self._exact[key] = route
        return route

    def get(self, path: str, handler: Handler, middlewares: Iterable[Middleware] = ()) -> Route:
        return self.add_route("GET", path, handler, middlewares)

    def post(self, path: str, handler: Handler, middlewares: Iterable[Middleware] = ()) -> Route:
        return self.add_route("POST", path, handler, middlewares)

    def put(self, path: str, handler: Handler, middlewares: Iterable[Middleware] = ()) -> Route:
        return self.add_route("PUT", path, handler, middlewares)

    def delete(self, path: str, handler: Handler, middlewares: Iterable[Middleware] = ()) -> Route:
        return self.add_route("DELETE", path, handler, middlewares)

    def freeze(self) -> "Router":
        """Disallow further registration."""
        self._frozen = True
        return self

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    def resolve(self, method: str, path: str) -> tuple[Route, dict[str, str]] | None:
        """Find the route for method and path along with its extracted params."""
        method = method.upper()
        route = self._exact.get(_route_key(method, path))
        if route is not None:
            return route, {}
        for route in self._routes:
            if route.method != method or route.pattern is None:
                continue
            params = route.match(path)
            if params is not None:
                return route, params
        return None

    async def dispatch(self, ctx: RequestContext) -> Response:
        """
        Run the request through the middleware chain and the matched handler.

        Unmatched requests still pass through the global middlewares so that
        404 responses carry the same headers and count against the rate limit.
        """
        resolved = self.resolve(ctx.method, ctx.path)
        if resolved is None:
            chain = compose(self._middlewares, with_error_handling(_route_not_found))
            return await chain(ctx)

        route, params = resolved
        handler = compose(
            [*self._middlewares, *route.middlewares],
            with_error_handling(route.handler),
        )
        return await handler(ctx.with_params(params))

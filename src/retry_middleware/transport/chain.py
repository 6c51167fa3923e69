"""
Middleware chain for httpx.

httpx has no interceptor concept of its own, so the chain lives at the
transport layer: MiddlewareTransport wraps a real transport and runs each
request through its middlewares in insertion order (first added is
outermost) before it reaches the wrapped transport.

    client = build_client(RetryMiddleware.default())
    response = await client.get("https://example.api")
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Optional, Protocol, runtime_checkable

import httpx
import structlog

from retry_middleware.config import Settings, settings as default_settings

logger = structlog.get_logger(__name__)

# Downstream send operation: next middleware or the wrapped transport
SendFn = Callable[[httpx.Request], Awaitable[httpx.Response]]


@runtime_checkable
class Middleware(Protocol):
    """
    Protocol for request/response interceptors.

    `handle` receives the request plus `next`, the remainder of the chain.
    Calling `next(request)` may happen zero, one or several times.
    """

    async def handle(self, request: httpx.Request, next: "Next") -> httpx.Response:
        ...


class Next:
    """
    The remainder of a middleware chain.

    Immutable and reusable: awaiting it twice sends twice, which is what
    retrying middlewares rely on.
    """

    def __init__(self, middlewares: Sequence[Middleware], endpoint: SendFn):
        self._middlewares = tuple(middlewares)
        self._endpoint = endpoint

    async def run(self, request: httpx.Request) -> httpx.Response:
        if not self._middlewares:
            return await self._endpoint(request)
        current, rest = self._middlewares[0], self._middlewares[1:]
        return await current.handle(request, Next(rest, self._endpoint))

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        return await self.run(request)


class MiddlewareTransport(httpx.AsyncBaseTransport):
    """
    httpx transport that runs middlewares before the wrapped transport.

    Attributes:
        transport: Underlying transport doing the actual I/O
        middlewares: Middlewares in execution order
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport,
        middlewares: Sequence[Middleware] = (),
    ):
        self.transport = transport
        self.middlewares: tuple[Middleware, ...] = tuple(middlewares)

    def with_middleware(self, middleware: Middleware) -> "MiddlewareTransport":
        """Return a new transport with `middleware` appended (innermost)."""
        return MiddlewareTransport(self.transport, (*self.middlewares, middleware))

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        chain = Next(self.middlewares, self.transport.handle_async_request)
        return await chain.run(request)

    async def aclose(self) -> None:
        await self.transport.aclose()


def build_client(
    *middlewares: Middleware,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    settings: Optional[Settings] = None,
    **client_kwargs,
) -> httpx.AsyncClient:
    """
    Create an AsyncClient whose requests pass through `middlewares`.

    Args:
        *middlewares: Middlewares, outermost first
        transport: Transport to wrap (default: pooled AsyncHTTPTransport)
        settings: Settings for timeout and pool limits (default: global settings)
        **client_kwargs: Passed through to httpx.AsyncClient

    Returns:
        Configured httpx.AsyncClient
    """
    settings = settings or default_settings

    if transport is None:
        transport = httpx.AsyncHTTPTransport(
            limits=httpx.Limits(
                max_keepalive_connections=settings.HTTP_MAX_KEEPALIVE_CONNECTIONS,
                max_connections=settings.HTTP_MAX_CONNECTIONS,
                keepalive_expiry=30.0,
            )
        )
    client_kwargs.setdefault("timeout", httpx.Timeout(settings.HTTP_TIMEOUT))

    logger.debug(
        "Building HTTP client",
        middlewares=[type(m).__name__ for m in middlewares],
        transport=type(transport).__name__,
    )

    return httpx.AsyncClient(
        transport=MiddlewareTransport(transport, middlewares),
        **client_kwargs,
    )

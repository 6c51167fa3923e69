"""Transport module - middleware chain on top of httpx transports."""

from retry_middleware.transport.chain import (
    Middleware,
    MiddlewareTransport,
    Next,
    SendFn,
    build_client,
)

__all__ = [
    "Middleware",
    "MiddlewareTransport",
    "Next",
    "SendFn",
    "build_client",
]

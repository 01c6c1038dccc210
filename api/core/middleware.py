"""ASGI middleware: request context and security headers."""

from __future__ import annotations

import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.logger import bind_contextvars, clear_contextvars, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = b"x-request-id"
SLOW_REQUEST_MS = 1000
_MAX_REQUEST_ID_LENGTH = 128


def _incoming_request_id(scope: Scope) -> str | None:
    for name, value in scope.get("headers", []):
        if name == REQUEST_ID_HEADER:
            request_id = value.decode("latin-1").strip()
            if request_id and len(request_id) <= _MAX_REQUEST_ID_LENGTH:
                return request_id
    return None


class RequestContextMiddleware:
    """Assigns a request id and emits one ``request.completed`` line.

    - Reuses an incoming ``X-Request-ID`` or generates a UUID4
    - Exposes it as ``request.state.request_id`` and in structlog contextvars
    - Adds ``X-Request-ID`` and ``X-Request-Duration-Ms`` response headers
    - Logs errors and slow requests; fast successes are not logged
    """

    def __init__(self, app: ASGIApp, slow_request_ms: int = SLOW_REQUEST_MS):
        self.app = app
        self.slow_request_ms = slow_request_ms

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "")
        request_id = _incoming_request_id(scope) or str(uuid.uuid4())

        scope.setdefault("state", {})["request_id"] = request_id
        clear_contextvars()
        bind_contextvars(request_id=request_id)

        response_status: int | None = None

        async def send_wrapper(message: Message) -> None:
            nonlocal response_status

            if message.get("type") == "http.response.start":
                response_status = int(message.get("status", 0))
                headers: list[tuple[bytes, bytes]] = list(message.get("headers", []))
                duration_ms = (time.perf_counter() - start_time) * 1000
                headers.append(
                    (b"x-request-duration-ms", f"{duration_ms:.2f}".encode())
                )
                headers.append((REQUEST_ID_HEADER, request_id.encode("latin-1")))
                message["headers"] = headers

            elif message.get("type") == "http.response.body" and not message.get(
                "more_body", False
            ):
                duration_ms = (time.perf_counter() - start_time) * 1000
                route = scope.get("route")
                route_path = getattr(route, "path", None) or path

                if (
                    response_status is None
                    or response_status >= 400
                    or duration_ms > self.slow_request_ms
                ):
                    logger.info(
                        "request.completed",
                        http_method=method,
                        http_route=route_path,
                        http_status_code=response_status,
                        duration_ms=round(duration_ms, 2),
                        outcome=(
                            "success"
                            if response_status and response_status < 400
                            else "error"
                        ),
                    )

            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "request.completed",
                http_method=method,
                http_route=path,
                duration_ms=round(duration_ms, 2),
                outcome="exception",
                exception_type=type(exc).__name__,
            )
            raise
        finally:
            clear_contextvars()


class SecurityHeadersMiddleware:
    """Adds security headers suited to a JSON API."""

    SECURITY_HEADERS: list[tuple[bytes, bytes]] = [
        (b"x-content-type-options", b"nosniff"),
        (b"x-frame-options", b"DENY"),
        (b"referrer-policy", b"strict-origin-when-cross-origin"),
        (b"content-security-policy", b"default-src 'none'; frame-ancestors 'none'"),
        (b"strict-transport-security", b"max-age=31536000; includeSubDomains"),
    ]

    # /docs serves Swagger UI assets, which a default-src 'none' policy blocks
    DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        is_docs = scope.get("path", "").startswith(self.DOCS_PATHS)

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start" and not is_docs:
                headers = list(message.get("headers", []))
                headers.extend(self.SECURITY_HEADERS)
                message["headers"] = headers
            await send(message)

        await self.app(scope, receive, send_wrapper)

"""Request hooks: CORS, error responses, token checks, logging and rate limits."""

from __future__ import annotations

import functools
import logging
import math
import threading
import time
from collections.abc import Callable
from typing import Any

from flask import Response, g, jsonify, make_response, request

from .api import respond_with_error
from .auth import TokenError, parse_jwt

logger = logging.getLogger(__name__)

ALLOW_ORIGINS = "*"
ALLOW_METHODS = "GET,POST,PUT,DELETE,OPTIONS"
ALLOW_HEADERS = "*"
EXPOSE_HEADERS = "Link"
MAX_AGE_SECONDS = 5 * 60


def cors_preflight() -> Response | None:
    """Answer a CORS preflight request with 204."""
    if request.method != "OPTIONS" or not request.headers.get("Origin"):
        return None
    response = make_response("", 204)
    for name in ("Origin", "Access-Control-Request-Method", "Access-Control-Request-Headers"):
        response.vary.add(name)
    response.headers["Access-Control-Allow-Origin"] = ALLOW_ORIGINS
    response.headers["Access-Control-Allow-Methods"] = ALLOW_METHODS
    response.headers["Access-Control-Allow-Headers"] = ALLOW_HEADERS
    response.headers["Access-Control-Max-Age"] = str(MAX_AGE_SECONDS)
    return response


def add_cors_headers(response: Response) -> Response:
    if not request.headers.get("Origin"):
        response.vary.add("Origin")
    elif request.method != "OPTIONS":
        response.headers["Access-Control-Allow-Origin"] = ALLOW_ORIGINS
        response.headers["Access-Control-Expose-Headers"] = EXPOSE_HEADERS
    return response


def error_handler(err: BaseException) -> Response:
    """JSON ``{"error": ...}``; HTTP errors keep their code, anything else is 500."""
    code = getattr(err, "code", None)
    if isinstance(code, int) and hasattr(err, "get_response"):
        if code == 404:
            message = f"Cannot {request.method} {request.path}"
        else:
            message = str(getattr(err, "name", "") or err)
    else:
        code, message = 500, str(err)
    response = jsonify({"error": message})
    response.status_code = code
    return response


def authenticate_token(view: Callable[..., Any]) -> Callable[..., Any]:
    """Require ``Authorization: Bearer <token>``; the user id goes to ``g.user_id``."""

    @functools.wraps(view)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        auth_header = request.headers.get("Authorization", "")
        if not auth_header:
            return respond_with_error(401, "No authentication info found")
        parts = auth_header.split(" ")
        if len(parts) != 2 or parts[0].lower() != "bearer":
            return respond_with_error(
                401, "Invalid Authorization format. Expected 'Bearer <token>'"
            )
        try:
            g.user_id = parse_jwt(parts[1])
        except TokenError as exc:
            return respond_with_error(401, f"Invalid token: {exc}")
        return view(*args, **kwargs)

    return wrapper


def start_timer() -> None:
    g.request_started = time.perf_counter()


def _format_duration(seconds: float) -> str:
    if seconds < 1e-3:
        return f"{seconds * 1e6:.3f}µs"
    if seconds < 1.0:
        return f"{seconds * 1e3:.6g}ms"
    return f"{seconds:.6g}s"


def log_request(response: Response) -> Response:
    elapsed = time.perf_counter() - g.get("request_started", time.perf_counter())
    logger.info(
        "[%s] %s %s (%s)",
        request.method, request.path, request.remote_addr, _format_duration(elapsed),
    )
    return response


class RateLimiter:
    """Fixed-window limit on requests per client address."""

    def __init__(
        self,
        max_requests: int = 20,
        expiration: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.expiration = expiration
        self._clock = clock
        self._windows: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()

    def _hit(self, key: str) -> tuple[bool, float]:
        now = self._clock()
        with self._lock:
            hits, expires = self._windows.get(key, (0, now + self.expiration))
            if now > expires:
                hits, expires = 0, now + self.expiration
            self._windows[key] = (hits + 1, expires)
        return hits + 1 <= self.max_requests, max(expires - now, 0.0)

    def allow(self, key: str) -> bool:
        """Count a request from ``key``; return whether it is within the limit."""
        return self._hit(key)[0]

    def check(self) -> Response | None:
        """Request hook: answer 429 once the client has used up its window."""
        allowed, reset = self._hit(request.remote_addr or "")
        if allowed:
            return None
        response = jsonify({"error": "Too many requests"})
        response.status_code = 429
        response.headers["Retry-After"] = str(math.ceil(reset))
        return response
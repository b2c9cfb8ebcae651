"""
Per-request tracing for the TaskHub API.

Each request gets a short id (returned as X-Request-ID), a start and a
finish log line with the duration, and user/role logging context read from
the bearer token. The token is only peeked at here; routes.deps does the
real authentication.
"""

import time
import uuid
from typing import Tuple
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response, JSONResponse
from logging_config import get_logger, request_id_var, user_id_var, role_var
from jose import JWTError, jwt
from config import config

logger = get_logger("http")

REQUEST_ID_HEADER = "X-Request-ID"


def _claims_for_logging(request: Request) -> Tuple[str, str]:
    """(sub, role) from a valid bearer token, otherwise ("-", "-")."""
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return "-", "-"
    try:
        claims = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except JWTError:
        return "-", "-"
    return claims.get("sub", "-"), claims.get("role", "-")


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 1)


class RequestLifecycleMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        req_id = uuid.uuid4().hex[:8]
        user_id, role = _claims_for_logging(request)
        tokens = (
            request_id_var.set(req_id),
            user_id_var.set(user_id),
            role_var.set(role),
        )

        started = time.perf_counter()
        route = f"{request.method} {request.url.path}"
        logger.info(f"→ {route}", extra={"data": {"query": str(request.query_params) or None}})

        try:
            response = await call_next(request)
            elapsed = _elapsed_ms(started)
            level = logger.info if response.status_code < 400 else logger.warning
            level(
                f"← {route} {response.status_code} ({elapsed}ms)",
                extra={"data": {"status": response.status_code, "duration_ms": elapsed}},
            )
            response.headers[REQUEST_ID_HEADER] = req_id
            return response
        except Exception as exc:
            # Anything the app exception handlers did not turn into a response
            elapsed = _elapsed_ms(started)
            logger.error(
                f"✖ {route} unhandled ({elapsed}ms): {exc}",
                exc_info=True,
                extra={"data": {"duration_ms": elapsed}},
            )
            return JSONResponse(
                status_code=500,
                content={"error": True, "message": "Internal server error", "request_id": req_id},
                headers={REQUEST_ID_HEADER: req_id},
            )
        finally:
            for var, token in zip((request_id_var, user_id_var, role_var), tokens):
                var.reset(token)

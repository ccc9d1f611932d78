"""Read-through response cache for GET requests on cached resources.

Flow:
    1. Resolve the caller from the Bearer token (signature, expiry, blacklist).
       A token that is present but unusable bypasses the cache entirely; the
       handler then rejects the request with the proper error.
    2. HIT  → stored body is replayed with a fresh request_id, handler skipped.
    3. MISS → handler runs; a 2xx JSON response is stored after it has been
       sent (background task), the response itself is never altered.

Responses carry `X-Cache: HIT | MISS | BYPASS`.
"""

import json
import logging
from collections.abc import Mapping

from starlette.background import BackgroundTask
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from src.mn_cache.application.service import ResponseCache
from src.mn_cache.domain.keys import DEFAULT_RESOURCE_ROUTES, build_cache_key, resource_for_path
from src.mn_common.errors import AppError
from src.mn_gateway.auth.jwt_handler import decode_token
from src.mn_gateway.auth.token_store import TokenStore

logger = logging.getLogger(__name__)

CACHE_HEADER = "X-Cache"

_ANONYMOUS = (False, None)
_BYPASS = (True, None)


async def resolve_identity(request: Request, tokens: TokenStore | None) -> tuple[bool, str | None]:
    """Return (bypass, identity) for the request's Bearer token."""
    header = request.headers.get("authorization")
    if not header:
        return _ANONYMOUS
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return _BYPASS
    try:
        payload = decode_token(token, expected_type="access")
    except AppError:
        return _BYPASS
    if tokens is None:
        return _BYPASS
    try:
        if await tokens.is_blacklisted(token):
            return _BYPASS
    except AppError:
        # Revocation status unknown: let the handler fail closed
        return _BYPASS
    return False, str(payload["sub"])


class ReadThroughCacheMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, routes: Mapping[str, str] = DEFAULT_RESOURCE_ROUTES) -> None:
        super().__init__(app)
        self._routes = routes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method != "GET":
            return await call_next(request)
        resource = resource_for_path(request.url.path, self._routes)
        cache: ResponseCache | None = getattr(request.app.state, "response_cache", None)
        if resource is None or cache is None:
            return await call_next(request)

        bypass, identity = await resolve_identity(
            request, getattr(request.app.state, "token_store", None)
        )
        if bypass:
            response = await call_next(request)
            response.headers[CACHE_HEADER] = "BYPASS"
            return response

        key = build_cache_key(
            cache.prefix,
            resource,
            request.url.path,
            request.query_params.multi_items(),
            identity,
        )

        cached = await cache.lookup(key)
        if cached is not None:
            logger.debug("Cache HIT %s", key)
            body = cached.body
            if isinstance(body, dict) and "request_id" in body:
                body = {**body, "request_id": getattr(request.state, "request_id", body["request_id"])}
            return JSONResponse(body, status_code=cached.status_code, headers={CACHE_HEADER: "HIT"})

        logger.debug("Cache MISS %s", key)
        response = await call_next(request)
        if not 200 <= response.status_code < 300:
            response.headers[CACHE_HEADER] = "MISS"
            return response
        if not response.headers.get("content-type", "").startswith("application/json"):
            response.headers[CACHE_HEADER] = "MISS"
            return response

        raw = b"".join([chunk async for chunk in response.body_iterator])
        try:
            payload = json.loads(raw)
        except ValueError:
            payload = None
        # Stored after the body is sent: a write that lands in between can have
        # this pre-write body cached after its invalidation. Such staleness is
        # bounded by the cache TTL.
        task = BackgroundTask(cache.save, key, response.status_code, payload) if payload is not None else None

        replay = Response(
            content=raw,
            status_code=response.status_code,
            headers=dict(response.headers),
            background=task,
        )
        replay.headers[CACHE_HEADER] = "MISS"
        return replay

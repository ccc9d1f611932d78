"""Write-invalidation hook for cached resources.

After a successful POST/PUT/PATCH/DELETE on a cached resource path, every
cached read of that resource type by the acting account is deleted before
the response is returned, so the caller's next read cannot see pre-write
data. Invalidation failures are logged inside ResponseCache and never change
the response.

The acting account is the one get_current_user resolved for the handler
(request.state.user_id).
"""

import logging
from collections.abc import Mapping

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from src.mn_cache.application.service import ResponseCache
from src.mn_cache.domain.keys import DEFAULT_RESOURCE_ROUTES, resource_for_path

logger = logging.getLogger(__name__)

WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class CacheInvalidationMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, routes: Mapping[str, str] = DEFAULT_RESOURCE_ROUTES) -> None:
        super().__init__(app)
        self._routes = routes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method not in WRITE_METHODS:
            return await call_next(request)
        resource = resource_for_path(request.url.path, self._routes)
        if resource is None:
            return await call_next(request)

        response = await call_next(request)
        if not 200 <= response.status_code < 300:
            return response

        cache: ResponseCache | None = getattr(request.app.state, "response_cache", None)
        identity: str | None = getattr(request.state, "user_id", None)
        if cache is not None and identity is not None:
            removed = await cache.invalidate(identity, resource)
            logger.info(
                "[%s] %s invalidated %d cached %s read(s) of account %s",
                request.method,
                request.url.path,
                removed,
                resource,
                identity,
            )
        return response

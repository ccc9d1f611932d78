"""Cache key derivation.

Key layout:
    {prefix}:{resource}:{identity}:{path}:{digest}     authenticated reads
    {prefix}:{resource}:{path}:{digest}                anonymous reads

The identity segment sits directly after the resource type so that one glob
(`{prefix}:{resource}:{identity}:*`) addresses every cached read of one
account for one resource type, and nothing else.
"""

import hashlib
from collections.abc import Iterable, Mapping
from urllib.parse import urlencode

DIGEST_LENGTH = 32

# Longest prefix wins, so nested routes can be mapped separately later.
DEFAULT_RESOURCE_ROUTES: dict[str, str] = {
    "/api/notes": "notes",
    "/api/todos": "todos",
}


def query_digest(query_items: Iterable[tuple[str, str]]) -> str:
    """Order-independent digest of the query string; repeated names are kept."""
    canonical = urlencode(sorted(query_items))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:DIGEST_LENGTH]


def build_cache_key(
    prefix: str,
    resource: str,
    path: str,
    query_items: Iterable[tuple[str, str]],
    identity: str | None,
) -> str:
    digest = query_digest(query_items)
    if identity is None:
        return f"{prefix}:{resource}:{path}:{digest}"
    return f"{prefix}:{resource}:{identity}:{path}:{digest}"


def invalidation_pattern(prefix: str, resource: str, identity: str) -> str:
    return f"{prefix}:{resource}:{identity}:*"


def resource_for_path(
    path: str, routes: Mapping[str, str] = DEFAULT_RESOURCE_ROUTES
) -> str | None:
    """Map a request path onto its cached resource type, or None if uncached."""
    for route in sorted(routes, key=len, reverse=True):
        if path == route or path.startswith(route + "/"):
            return routes[route]
    return None

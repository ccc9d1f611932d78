"""FastAPI dependency for the response cache.

The cache is built by the application factory and lives on app.state;
tests swap it by constructing the app with an InMemoryStore.
"""

from fastapi import Request

from src.mn_cache.application.service import ResponseCache


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache

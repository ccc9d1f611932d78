"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import settings
from src.mn_cache.application.service import ResponseCache
from src.mn_cache.domain.store import KeyValueStore
from src.mn_cache.infrastructure.memory_store import InMemoryStore
from src.mn_cache.infrastructure.redis_store import RedisStore
from src.mn_cache.middleware.invalidation import CacheInvalidationMiddleware
from src.mn_cache.middleware.read_through import ReadThroughCacheMiddleware
from src.mn_common.database import engine
from src.mn_common.errors import AppError, ErrorKind
from src.mn_common.redis_client import create_redis
from src.mn_common.response import Err, FieldError, render
from src.mn_gateway.api.router import router as auth_router
from src.mn_gateway.auth.token_store import TokenStore
from src.mn_gateway.middleware.request_log import RequestLogMiddleware
from src.mn_notes.api.router import router as notes_router
from src.mn_todos.api.router import router as todos_router

VERSION = "0.1.0"

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

_KIND_BY_STATUS: dict[int, ErrorKind] = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    405: ErrorKind.VALIDATION,
    503: ErrorKind.UNAVAILABLE,
}


def build_store(backend: str | None = None) -> KeyValueStore:
    """Pick the key-value backend from CACHE_BACKEND ("redis" | "memory")."""
    backend = (backend or settings.CACHE_BACKEND).lower()
    if backend == "memory":
        logger.warning("Using in-memory key-value store: cache and sessions are per process")
        return InMemoryStore()
    if backend != "redis":
        raise ValueError(f"Unknown CACHE_BACKEND: {backend!r}")
    return RedisStore(create_redis())


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _envelope(request: Request, err: Err, status_code: int | None = None) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if err.kind is ErrorKind.UNAUTHORIZED else None
    return JSONResponse(
        status_code=status_code or err.http_status,
        content=render(err, _request_id(request)).model_dump(),
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return _envelope(request, Err.from_error(exc))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        FieldError(
            # ("body", "title") → "title"; ("query", "page") → "page"
            field=".".join(str(p) for p in err.get("loc", ())[1:]) or "body",
            message=err.get("msg", "Invalid value"),
        )
        for err in exc.errors()
    ]
    return _envelope(
        request,
        Err(kind=ErrorKind.VALIDATION, code=1000, message="Validation failed", errors=errors),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = _KIND_BY_STATUS.get(exc.status_code, ErrorKind.INTERNAL)
    err = Err(kind=kind, code=exc.status_code, message=str(exc.detail))
    return _envelope(request, err, status_code=exc.status_code)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    err = Err(kind=ErrorKind.INTERNAL, code=9002, message="Internal server error")
    return _envelope(request, err)


def create_app(store: KeyValueStore | None = None) -> FastAPI:
    """Build the application around one key-value store.

    The store backs both the response cache and the session store. Tests
    pass an InMemoryStore; otherwise CACHE_BACKEND decides.
    """
    kv_store = store if store is not None else build_store()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup: verify DB + key-value store. Shutdown: dispose."""
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        if not await kv_store.ping():
            logger.warning("Key-value store unreachable at startup; cache will be bypassed")
        yield
        await engine.dispose()
        await kv_store.close()

    app = FastAPI(
        title=settings.APP_NAME,
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.kv_store = kv_store
    app.state.response_cache = ResponseCache(
        kv_store, settings.CACHE_TTL_SECONDS, settings.CACHE_KEY_PREFIX
    )
    app.state.token_store = TokenStore(kv_store)

    # Last added runs first: CORS → request log → invalidation → read-through
    app.add_middleware(ReadThroughCacheMiddleware)
    app.add_middleware(CacheInvalidationMiddleware)
    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Cache", "X-Request-ID"],
    )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(auth_router, prefix="/api")
    app.include_router(notes_router, prefix="/api")
    app.include_router(todos_router, prefix="/api")

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        database = "connected"
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error("Health check: database unreachable: %s", e)
            database = "disconnected"
        store_ok = await request.app.state.kv_store.ping()
        healthy = database == "connected" and store_ok
        return JSONResponse(
            status_code=200 if healthy else 503,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "version": VERSION,
                "database": database,
                "store": "connected" if store_ok else "disconnected",
                "cache": request.app.state.response_cache.stats(),
            },
        )

    return app


app = create_app()

"""Auth API router: register, login, demo, refresh, logout and /me.

All endpoints return ApiResponse. request_id is read from request.state
(injected by RequestLogMiddleware).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mn_cache.application.service import ResponseCache
from src.mn_cache.dependencies import get_response_cache
from src.mn_common.database import get_db_session
from src.mn_common.response import ApiResponse, success_response
from src.mn_gateway.account.models import Account
from src.mn_gateway.account.repository import AccountRepositoryProtocol
from src.mn_gateway.account.schemas import (
    AccountOut,
    AuthResponse,
    ChangePasswordRequest,
    DeleteAccountRequest,
    LoginRequest,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
)
from src.mn_gateway.account.service import AccountService, Session
from src.mn_gateway.auth.dependencies import (
    get_account_repository,
    get_current_user,
    get_token_store,
)
from src.mn_gateway.auth.token_store import TokenStore

router = APIRouter(prefix="/auth", tags=["auth"])


def get_account_service(
    repo: Annotated[AccountRepositoryProtocol, Depends(get_account_repository)],
) -> AccountService:
    return AccountService(repo)


def _get_request_id(request: Request) -> str:
    """Read request_id injected by RequestLogMiddleware, fallback if absent."""
    return getattr(request.state, "request_id", "req_unknown")


def _respond(request: Request, data: object, message: str) -> ApiResponse:
    resp = success_response(data, message)
    resp.request_id = _get_request_id(request)
    return resp


def _session_data(session: Session) -> dict:
    return AuthResponse(
        user=AccountOut.from_domain(session.account),
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    ).model_dump(mode="json")


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="Account registration",
)
async def register(
    request: Request,
    body: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    tokens: Annotated[TokenStore, Depends(get_token_store)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse:
    session = await service.register(
        db, tokens, body.name, body.email, body.username, body.password
    )
    return _respond(request, _session_data(session), "User registered successfully")


@router.post("/login", response_model=ApiResponse, summary="Login with username or email")
async def login(
    request: Request,
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    tokens: Annotated[TokenStore, Depends(get_token_store)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse:
    session = await service.login(db, tokens, body.username, body.password)
    return _respond(request, _session_data(session), "Login successful")


@router.post("/demo", response_model=ApiResponse, summary="Demo account login")
async def demo(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    tokens: Annotated[TokenStore, Depends(get_token_store)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse:
    session = await service.demo_login(db, tokens)
    return _respond(request, _session_data(session), "Demo login successful")


@router.post("/refresh", response_model=ApiResponse, summary="Refresh access token")
async def refresh_token(
    request: Request,
    body: RefreshRequest,
    tokens: Annotated[TokenStore, Depends(get_token_store)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse:
    refreshed = await service.refresh(tokens, body.refresh_token)
    data = RefreshResponse(
        access_token=refreshed.access_token,
        refresh_token=refreshed.refresh_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )
    return _respond(request, data.model_dump(), "Token refreshed")


@router.post("/logout", response_model=ApiResponse, summary="Logout")
async def logout(
    request: Request,
    current_user: Annotated[Account, Depends(get_current_user)],
    tokens: Annotated[TokenStore, Depends(get_token_store)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse:
    await service.logout(tokens, current_user.id, request.state.access_token)
    return _respond(request, None, "Logout successful")


@router.get("/me", response_model=ApiResponse, summary="Current account")
async def me(
    request: Request,
    current_user: Annotated[Account, Depends(get_current_user)],
) -> ApiResponse:
    data = {"user": AccountOut.from_domain(current_user).model_dump(mode="json")}
    return _respond(request, data, "success")


@router.put("/me/password", response_model=ApiResponse, summary="Change password")
async def change_password(
    request: Request,
    body: ChangePasswordRequest,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    tokens: Annotated[TokenStore, Depends(get_token_store)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse:
    await service.change_password(
        db, tokens, current_user.id, body.current_password, body.new_password
    )
    return _respond(request, None, "Password updated successfully")


@router.delete("/me", response_model=ApiResponse, summary="Delete account")
async def delete_me(
    request: Request,
    body: DeleteAccountRequest,
    current_user: Annotated[Account, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    tokens: Annotated[TokenStore, Depends(get_token_store)],
    cache: Annotated[ResponseCache, Depends(get_response_cache)],
    service: Annotated[AccountService, Depends(get_account_service)],
) -> ApiResponse:
    await service.delete_account(
        db, tokens, cache, current_user.id, body.password, request.state.access_token
    )
    return _respond(request, None, "Account deleted successfully")

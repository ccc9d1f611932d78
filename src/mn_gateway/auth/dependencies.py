"""FastAPI dependencies: get_current_user and the session store handle.

Usage in any protected router:
    from src.mn_gateway.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected(user: Annotated[Account, Depends(get_current_user)]):
        ...
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.mn_common.database import get_db_session
from src.mn_common.errors import InvalidTokenError, TokenRevokedError
from src.mn_gateway.account.models import Account
from src.mn_gateway.account.persistence import AccountRepository
from src.mn_gateway.account.repository import AccountRepositoryProtocol
from src.mn_gateway.auth.jwt_handler import decode_token
from src.mn_gateway.auth.token_store import TokenStore

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

_account_repo = AccountRepository()


def get_token_store(request: Request) -> TokenStore:
    return request.app.state.token_store


def get_account_repository() -> AccountRepositoryProtocol:
    return _account_repo


async def get_current_user(
    request: Request,
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    tokens: Annotated[TokenStore, Depends(get_token_store)],
    repo: Annotated[AccountRepositoryProtocol, Depends(get_account_repository)],
) -> Account:
    """Resolve the Bearer access token to its Account.

    Raises 401 if the token is missing, invalid, expired or revoked, or the
    account no longer exists. Raises 503 if the blacklist cannot be checked:
    a revoked token must never pass because the store is down.

    The account id and raw token are left on request.state for the cache
    invalidation middleware and for logout.
    """
    payload = decode_token(token, expected_type="access")

    if await tokens.is_blacklisted(token):
        raise TokenRevokedError()

    try:
        account_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise InvalidTokenError() from None

    account = await repo.get_by_id(db, account_id)
    if account is None:
        raise InvalidTokenError("Account no longer exists")

    request.state.user_id = str(account.id)
    request.state.access_token = token
    return account

"""AccountService: register, login, refresh, logout and account maintenance.

The service commits its own writes (`try: ... commit / except: rollback`).
Session-store side effects happen after the database commit, so a store
outage never leaves a half-created account behind.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mn_cache.application.service import ResponseCache
from src.mn_cache.domain.keys import DEFAULT_RESOURCE_ROUTES
from src.mn_common.errors import (
    AccountNotFoundError,
    EmailExistsError,
    IncorrectPasswordError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    SessionStoreUnavailableError,
    UsernameExistsError,
    ValidationFailedError,
)
from src.mn_gateway.account.models import Account
from src.mn_gateway.account.persistence import AccountRepository
from src.mn_gateway.account.repository import AccountRepositoryProtocol
from src.mn_gateway.auth.jwt_handler import (
    REFRESH_TOKEN_TTL_SECONDS,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.mn_gateway.auth.password import hash_password, verify_password
from src.mn_gateway.auth.token_store import TokenStore

logger = logging.getLogger(__name__)

DEMO_USERNAME = "demo"
DEMO_EMAIL = "demo@micronote.com"
DEMO_PASSWORD = "demo123"
DEMO_NAME = "Demo User"


@dataclass
class Session:
    account: Account
    access_token: str
    refresh_token: str


@dataclass
class RefreshedTokens:
    access_token: str
    refresh_token: str | None = None


class AccountService:
    def __init__(self, repo: AccountRepositoryProtocol | None = None) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()

    async def register(
        self,
        db: AsyncSession,
        tokens: TokenStore,
        name: str,
        email: str,
        username: str,
        password: str,
    ) -> Session:
        email = email.lower()
        # DB UNIQUE constraints are the final guard; these give precise messages
        if await self._repo.get_by_email(db, email) is not None:
            raise EmailExistsError()
        if await self._repo.get_by_username(db, username) is not None:
            raise UsernameExistsError()

        try:
            account = await self._repo.create(db, name, email, username, hash_password(password))
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ValidationFailedError("Username or email already registered") from None
        except Exception:
            await db.rollback()
            raise

        logger.info("Registered account %s (%s)", account.id, account.username)
        return await self._open_session(tokens, account)

    async def login(
        self, db: AsyncSession, tokens: TokenStore, login: str, password: str
    ) -> Session:
        """Authenticate by username or email.

        Unknown account and wrong password both raise InvalidCredentialsError,
        so the response does not reveal which accounts exist.
        """
        account = await self._repo.get_by_login(db, login)
        if account is None or not verify_password(password, account.password_hash):
            logger.warning("Failed login attempt for %r", login)
            raise InvalidCredentialsError()
        return await self._open_session(tokens, account)

    async def demo_login(self, db: AsyncSession, tokens: TokenStore) -> Session:
        """Log into the shared demo account, creating it on first use."""
        account = await self._repo.get_by_username(db, DEMO_USERNAME)
        if account is None:
            try:
                account = await self._repo.create(
                    db, DEMO_NAME, DEMO_EMAIL, DEMO_USERNAME, hash_password(DEMO_PASSWORD)
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
            logger.info("Created demo account %s", account.id)
        return await self._open_session(tokens, account)

    async def refresh(self, tokens: TokenStore, refresh_token: str) -> RefreshedTokens:
        """Exchange a refresh token for a new access token.

        Only the most recently issued refresh token of an account is accepted.
        When it is close to expiry it is rotated: a new one is issued, stored
        and returned alongside the access token.
        """
        payload = decode_token(refresh_token, expected_type="refresh")
        account_id = str(payload["sub"])

        check = await tokens.validate_refresh_token(account_id, refresh_token)
        if not check.valid:
            raise InvalidRefreshTokenError()

        result = RefreshedTokens(access_token=create_access_token(account_id))
        if check.remaining_ttl is not None and check.remaining_ttl < settings.REFRESH_ROTATE_THRESHOLD_SECONDS:
            rotated = create_refresh_token(account_id)
            await tokens.store_refresh_token(account_id, rotated, REFRESH_TOKEN_TTL_SECONDS)
            result.refresh_token = rotated
            logger.info("Rotated refresh token for account %s", account_id)
        return result

    async def logout(self, tokens: TokenStore, account_id: int, access_token: str) -> None:
        await tokens.blacklist_access_token(access_token)
        await tokens.revoke_refresh_token(account_id)
        logger.info("Account %s logged out", account_id)

    async def get_account(self, db: AsyncSession, account_id: int) -> Account:
        account = await self._repo.get_by_id(db, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def change_password(
        self,
        db: AsyncSession,
        tokens: TokenStore,
        account_id: int,
        current_password: str,
        new_password: str,
    ) -> None:
        account = await self.get_account(db, account_id)
        if not verify_password(current_password, account.password_hash):
            raise IncorrectPasswordError()

        try:
            await self._repo.update_password(db, account_id, hash_password(new_password))
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        # Existing refresh token must not outlive the old password
        try:
            await tokens.revoke_refresh_token(account_id)
        except SessionStoreUnavailableError:
            logger.warning("Password changed but refresh token of %s not revoked", account_id)

    async def delete_account(
        self,
        db: AsyncSession,
        tokens: TokenStore,
        cache: ResponseCache,
        account_id: int,
        password: str,
        access_token: str,
    ) -> None:
        """Delete an account and everything it owns (FK cascade)."""
        account = await self.get_account(db, account_id)
        if not verify_password(password, account.password_hash):
            raise IncorrectPasswordError("Password is incorrect")

        try:
            await self._repo.delete(db, account_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        await cache.invalidate_identity(str(account_id), DEFAULT_RESOURCE_ROUTES.values())
        try:
            await tokens.blacklist_access_token(access_token)
            await tokens.revoke_refresh_token(account_id)
        except SessionStoreUnavailableError:
            # The account row is gone, so these tokens can no longer authenticate
            logger.warning("Account %s deleted but its tokens were not revoked", account_id)
        logger.info("Deleted account %s", account_id)

    async def _open_session(self, tokens: TokenStore, account: Account) -> Session:
        access_token = create_access_token(account.id)
        refresh_token = create_refresh_token(account.id)
        try:
            await tokens.store_refresh_token(account.id, refresh_token, REFRESH_TOKEN_TTL_SECONDS)
        except SessionStoreUnavailableError:
            # Login still succeeds; the client cannot refresh until the store is back
            logger.warning("Session store unavailable, refresh token for %s not stored", account.id)
        return Session(account=account, access_token=access_token, refresh_token=refresh_token)

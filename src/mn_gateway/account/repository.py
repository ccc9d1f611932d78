"""Repository Protocol for accounts.

Unit tests inject an in-memory implementation that conforms to this Protocol.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mn_gateway.account.models import Account


class AccountRepositoryProtocol(Protocol):
    async def get_by_id(self, db: AsyncSession, account_id: int) -> Account | None: ...

    async def get_by_username(self, db: AsyncSession, username: str) -> Account | None: ...

    async def get_by_email(self, db: AsyncSession, email: str) -> Account | None: ...

    async def get_by_login(self, db: AsyncSession, login: str) -> Account | None:
        """Match `login` against the username, or the lower-cased email."""
        ...

    async def create(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        username: str,
        password_hash: str,
    ) -> Account: ...

    async def update_password(
        self, db: AsyncSession, account_id: int, password_hash: str
    ) -> None: ...

    async def delete(self, db: AsyncSession, account_id: int) -> bool: ...

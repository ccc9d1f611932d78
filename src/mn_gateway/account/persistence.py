"""AccountRepository — ORM implementation of AccountRepositoryProtocol.

Writes are flushed, not committed; the service owns the transaction.
"""

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.mn_gateway.account.db_models import AccountModel
from src.mn_gateway.account.models import Account


def _to_domain(row: AccountModel) -> Account:
    return Account(
        id=row.id,
        name=row.name,
        email=row.email,
        username=row.username,
        password_hash=row.password_hash,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class AccountRepository:
    async def _one(self, db: AsyncSession, *criteria: object) -> Account | None:
        result = await db.execute(select(AccountModel).where(*criteria))
        row = result.scalar_one_or_none()
        return _to_domain(row) if row is not None else None

    async def get_by_id(self, db: AsyncSession, account_id: int) -> Account | None:
        return await self._one(db, AccountModel.id == account_id)

    async def get_by_username(self, db: AsyncSession, username: str) -> Account | None:
        return await self._one(db, AccountModel.username == username)

    async def get_by_email(self, db: AsyncSession, email: str) -> Account | None:
        return await self._one(db, AccountModel.email == email.lower())

    async def get_by_login(self, db: AsyncSession, login: str) -> Account | None:
        return await self._one(
            db,
            or_(AccountModel.username == login, AccountModel.email == login.lower()),
        )

    async def create(
        self,
        db: AsyncSession,
        name: str,
        email: str,
        username: str,
        password_hash: str,
    ) -> Account:
        row = AccountModel(
            name=name,
            email=email,
            username=username,
            password_hash=password_hash,
        )
        db.add(row)
        await db.flush()  # assigns id
        await db.refresh(row)  # loads server-side timestamps
        return _to_domain(row)

    async def update_password(
        self, db: AsyncSession, account_id: int, password_hash: str
    ) -> None:
        await db.execute(
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(password_hash=password_hash, updated_at=func.now())
        )

    async def delete(self, db: AsyncSession, account_id: int) -> bool:
        result = await db.execute(delete(AccountModel).where(AccountModel.id == account_id))
        return bool(result.rowcount)

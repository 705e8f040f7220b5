from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.infrastructure.persistence.models.user import User
from backoffice.infrastructure.persistence.repositories.versioned_repo import VersionedRepository


class UserRepository(VersionedRepository[User]):
    """User repository. Accounts compare case-insensitively."""

    resource_type = "User"
    unique_field = "account"

    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def get_by_account(self, account: str) -> User | None:
        result = await self.db.execute(
            select(User).where(func.lower(User.account) == account.lower(), self._active())
        )
        return result.scalar_one_or_none()

    async def account_exists(self, account: str) -> bool:
        result = await self.db.execute(
            select(func.count())
            .select_from(User)
            .where(func.lower(User.account) == account.lower(), self._active())
        )
        return result.scalar_one() > 0

    async def search(
        self, keyword: str | None = None, skip: int = 0, limit: int = 20
    ) -> tuple[list[User], int]:
        """Page through active users, optionally filtered by account or display name"""
        conditions = [self._active()]
        if keyword:
            pattern = f"%{keyword.lower()}%"
            conditions.append(
                or_(
                    func.lower(User.account).like(pattern),
                    func.lower(User.display_name).like(pattern),
                )
            )

        total = (
            await self.db.execute(select(func.count()).select_from(User).where(*conditions))
        ).scalar_one()
        result = await self.db.execute(
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc(), User.id)
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all()), total

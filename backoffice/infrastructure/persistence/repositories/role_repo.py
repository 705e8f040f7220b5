from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.infrastructure.persistence.models.role import Role
from backoffice.infrastructure.persistence.repositories.versioned_repo import VersionedRepository


class RoleRepository(VersionedRepository[Role]):
    resource_type = "Role"
    unique_field = "role_name"

    def __init__(self, db: AsyncSession):
        super().__init__(db, Role)

    async def get_by_name(self, role_name: str) -> Role | None:
        """Get an active role by its name"""
        result = await self.db.execute(
            select(Role).where(Role.role_name == role_name, self._active())
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Role]:
        result = await self.db.execute(select(Role).where(self._active()).order_by(Role.role_name))
        return list(result.scalars().all())

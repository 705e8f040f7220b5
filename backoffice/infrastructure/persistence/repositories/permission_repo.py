from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.infrastructure.persistence.models.permission import Permission
from backoffice.infrastructure.persistence.repositories.versioned_repo import VersionedRepository


class PermissionRepository(VersionedRepository[Permission]):
    resource_type = "Permission"
    unique_field = "permission_code"

    def __init__(self, db: AsyncSession):
        super().__init__(db, Permission)

    async def get_by_code(self, permission_code: str) -> Permission | None:
        """Get an active permission by its exact code"""
        result = await self.db.execute(
            select(Permission).where(
                Permission.permission_code == permission_code, self._active()
            )
        )
        return result.scalar_one_or_none()

    async def search(
        self, keyword: str | None = None, permission_type: str | None = None
    ) -> list[Permission]:
        """List active permissions filtered by code/name keyword and type"""
        query = select(Permission).where(self._active())
        if keyword:
            pattern = f"%{keyword}%"
            query = query.where(
                or_(Permission.permission_code.like(pattern), Permission.name.like(pattern))
            )
        if permission_type:
            query = query.where(Permission.permission_type == permission_type)

        result = await self.db.execute(query.order_by(Permission.permission_code))
        return list(result.scalars().all())

"""Shared test fixtures for pytest"""

import os

# Settings are read at import time; point them at throwaway values first.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["REDIS_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from backoffice.application.services.audit_service import AuditService
from backoffice.application.services.authorization_service import AuthorizationService
from backoffice.infrastructure.cache.redis_cache import CacheService
from backoffice.infrastructure.persistence.database import (
    Base,
    discard_after_commit,
    get_db,
    get_db_transactional,
    run_after_commit,
)
from backoffice.infrastructure.persistence.models import (
    Permission,
    Role,
    RolePermission,
    User,
    UserRole,
)
from backoffice.infrastructure.persistence.repositories.assignment_repo import (
    AssignmentRepository,
)
from backoffice.infrastructure.security.jwt import create_access_token
from backoffice.infrastructure.security.password import get_password_hash
from backoffice.main import app
from backoffice.presentation.api.dependencies import set_cache_service
from backoffice.shared.context import clear_context

ADMIN_PERMISSION_CODES = [
    "account.create",
    "account.read",
    "account.update",
    "account.delete",
    "role.create",
    "role.read",
    "role.update",
    "role.delete",
    "role.assignPermission",
    "permission.create",
    "permission.read",
    "permission.update",
    "permission.delete",
    "userRole.assign",
    "userRole.read",
    "customer.create",
    "customer.read",
    "customer.update",
    "customer.delete",
    "serviceOrder.buyback.create",
    "serviceOrder.buyback.read",
    "serviceOrder.buyback.update",
    "serviceOrder.buyback.delete",
    "auditLog.read",
]


@pytest.fixture(autouse=True)
def reset_request_context():
    """Request context is a contextvar; keep tests from leaking actors"""
    clear_context()
    yield
    clear_context()


@pytest.fixture
async def test_engine(tmp_path):
    """File-backed SQLite database, one per test, with the full schema"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'backoffice_test.db'}", poolclass=NullPool
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
        autocommit=False,
    )


@pytest.fixture
async def test_db(session_factory):
    """Create test database session"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def audit_service(test_db):
    return AuditService(test_db)


@pytest.fixture
def authz_service(test_db):
    return AuthorizationService(AssignmentRepository(test_db))


class Seeder:
    """Inserts fixture rows directly, bypassing services and auditing"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _add(self, obj):
        self.db.add(obj)
        await self.db.flush()
        await self.db.refresh(obj)
        return obj

    async def user(
        self, account: str = "alice", display_name: str | None = None, password: str = "secret123"
    ) -> User:
        return await self._add(
            User(
                account=account,
                display_name=display_name or account.title(),
                password_hash=get_password_hash(password),
            )
        )

    async def role(self, role_name: str) -> Role:
        return await self._add(Role(role_name=role_name))

    async def permission(
        self,
        permission_code: str,
        permission_type: str = "function",
        route_path: str | None = None,
    ) -> Permission:
        return await self._add(
            Permission(
                permission_code=permission_code,
                name=permission_code,
                permission_type=permission_type,
                route_path=route_path,
            )
        )

    async def grant(self, role: Role, *permissions: Permission) -> None:
        for permission in permissions:
            await self._add(RolePermission(role_id=role.id, permission_id=permission.id))

    async def assign(self, user: User, *roles: Role) -> None:
        for role in roles:
            await self._add(UserRole(user_id=user.id, role_id=role.id))

    async def user_with_permissions(self, account: str, codes: list[str]) -> User:
        """A user holding one role that grants ``codes``"""
        user = await self.user(account)
        role = await self.role(f"{account}-role")
        for code in codes:
            await self.grant(role, await self.permission(code))
        await self.assign(user, role)
        return user


@pytest.fixture
def seed(test_db):
    return Seeder(test_db)


@pytest.fixture
async def admin_user(test_db, seed):
    """Committed principal holding every permission the API guards with"""
    user = await seed.user_with_permissions("admin", ADMIN_PERMISSION_CODES)
    await test_db.commit()
    return user


def bearer_for(user: User) -> dict[str, str]:
    token = create_access_token(data={"sub": user.id, "name": user.display_name})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    """Build auth headers for any seeded user"""
    return bearer_for


@pytest.fixture
def auth_headers(admin_user):
    """Generate auth headers with JWT token"""
    return bearer_for(admin_user)


@pytest.fixture
async def client(session_factory):
    """HTTP client for API testing"""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_get_db_transactional():
        async with session_factory() as session:
            try:
                async with session.begin():
                    yield session
            except BaseException:
                discard_after_commit(session)
                raise
            await run_after_commit(session)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_db_transactional] = override_get_db_transactional
    set_cache_service(CacheService())

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
    set_cache_service(None)

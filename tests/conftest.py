"""Pytest configuration and fixtures."""

import os
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from uuid import UUID, uuid4

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base, ProfileModel

# Test database URL (SQLite in memory, one shared connection)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Fixed test user ID for consistency
TEST_USER_ID = uuid4()

ClientFactory = Callable[[TokenUser], Awaitable[AsyncClient]]


@pytest.fixture(scope="session")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield engine
    await engine.dispose()


@pytest.fixture(scope="session")
async def setup_database(engine: AsyncEngine) -> AsyncGenerator[None, None]:
    """Create all tables once per session."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(scope="session")
async def session_factory(
    engine: AsyncEngine, setup_database: None
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Create session factory."""
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    yield factory


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


async def ensure_profile(
    session_factory: async_sessionmaker[AsyncSession],
    user_id: UUID,
    email: str | None = None,
    display_name: str | None = None,
) -> None:
    """Insert a profile row unless one already exists."""
    async with session_factory() as session:
        stmt = select(ProfileModel).where(ProfileModel.id == user_id)
        result = await session.execute(stmt)
        if not result.scalar_one_or_none():
            session.add(
                ProfileModel(
                    id=user_id,
                    email=email or f"{user_id.hex[:12]}@example.com",
                    display_name=display_name,
                )
            )
            await session.commit()


@pytest.fixture
def test_user() -> TokenUser:
    """Create a test user with fixed ID."""
    return TokenUser(
        id=TEST_USER_ID,
        email="test@example.com",
        display_name="Test User",
    )


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key="test-secret-key",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def auth_token(auth_provider: JWTAuthProvider, test_user: TokenUser) -> str:
    """Create auth token for test user."""
    return str(auth_provider.create_token(test_user))


@pytest.fixture
def auth_headers(auth_token: str) -> dict[str, str]:
    """Create authorization headers."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client (no auth)."""
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
async def app_factory(
    session_factory: async_sessionmaker[AsyncSession],
    auth_provider: JWTAuthProvider,
) -> AsyncGenerator[ClientFactory, None]:
    """
    Build test clients that act as a given user.

    Every client shares the in-memory SQLite database, so one test can drive
    an owner and a joiner against the same group. Services are wired to a
    UoW factory on the test session factory.
    """
    from api.dependencies.auth import get_auth_provider, get_current_user
    from api.v1.dependencies import (
        get_group_service,
        get_join_request_service,
        get_membership_service,
        get_message_service,
        get_user_service,
    )
    from domain.services.encryption_service import EncryptionService
    from domain.services.group_service import GroupService
    from domain.services.join_request_service import JoinRequestService
    from domain.services.membership_service import MembershipService
    from domain.services.message_service import MessageService
    from domain.services.user_service import UserService
    from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
    from main import create_app

    def test_uow_factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    encryption = EncryptionService()
    clients: list[AsyncClient] = []

    async def make_client(user: TokenUser) -> AsyncClient:
        await ensure_profile(session_factory, user.id, user.email, user.display_name)

        app = create_app()

        async def override_get_user() -> TokenUser:
            return user

        app.dependency_overrides[get_current_user] = override_get_user
        app.dependency_overrides[get_auth_provider] = lambda: auth_provider
        app.dependency_overrides[get_group_service] = lambda: GroupService(
            test_uow_factory, encryption_service=encryption
        )
        app.dependency_overrides[get_membership_service] = lambda: MembershipService(
            test_uow_factory
        )
        app.dependency_overrides[get_join_request_service] = lambda: JoinRequestService(
            test_uow_factory
        )
        app.dependency_overrides[get_message_service] = lambda: MessageService(
            test_uow_factory, encryption_service=encryption
        )
        app.dependency_overrides[get_user_service] = lambda: UserService(test_uow_factory)

        c = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(c)
        return c

    yield make_client

    for c in clients:
        await c.aclose()


@pytest.fixture
async def authenticated_client(
    app_factory: ClientFactory, test_user: TokenUser
) -> AsyncClient:
    """Test client acting as the fixed test user."""
    return await app_factory(test_user)

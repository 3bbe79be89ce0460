import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["COOKIE_SECURE"] = "False"

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from core.auth import generate_token, password_helper  # noqa: E402
from db.database import Base, get_async_session  # noqa: E402
from db.users import User, UserRole  # noqa: E402
from main import app  # noqa: E402

PASSWORD = "secret123"


@pytest.fixture
async def session_maker():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    maker = async_sessionmaker(engine, expire_on_commit=False)

    async def _override_session():
        async with maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = _override_session
    try:
        yield maker
    finally:
        app.dependency_overrides.pop(get_async_session, None)
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest.fixture
def make_user(session_maker):
    async def _make(email, role=UserRole.STAFF, password=PASSWORD, is_active=True, full_name=None):
        async with session_maker() as session:
            user = User(
                email=email,
                full_name=full_name or email.split("@")[0].title(),
                role=role,
                hashed_password=password_helper.hash(password) if password else None,
                is_active=is_active,
                is_superuser=False,
                is_verified=False,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    return _make


@pytest.fixture
async def admin_user(make_user):
    return await make_user("admin@acme.io", role=UserRole.ADMIN, full_name="Ada Admin")


@pytest.fixture
async def staff_user(make_user):
    return await make_user("staff@acme.io", role=UserRole.STAFF, full_name="Sam Staff")


def bearer(user):
    return {"Authorization": f"Bearer {generate_token(user)}"}


def _client(headers=None):
    return httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
        headers=headers,
    )


@pytest.fixture
async def client(session_maker):
    async with _client() as c:
        yield c


@pytest.fixture
async def admin_client(session_maker, admin_user):
    async with _client(bearer(admin_user)) as c:
        yield c


@pytest.fixture
async def staff_client(session_maker, staff_user):
    async with _client(bearer(staff_user)) as c:
        yield c


@pytest.fixture
def create_item(staff_client):
    async def _create(**fields):
        payload = {"baseName": "Cola"}
        payload.update(fields)
        resp = await staff_client.post("/api/items", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create

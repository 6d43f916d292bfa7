"""
Aquarium Log Backend: Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db_engine:       in-memory aiosqlite engine with every table created
    ├── db_session:      AsyncSession bound to db_engine
    ├── make_user / make_aquarium / make_visit / make_wishlist_item /
    │   make_attachment: entity factories writing through db_session
    ├── temp_storage:    temporary directory for file operations
    ├── sample_image_bytes / sample_video_bytes
    ├── api_client:      HTTPX AsyncClient talking to the app, with
    │                    get_db_session overridden to use db_engine
    └── login:           signs api_client in as a given user
"""

import os
import tempfile
from datetime import date
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any package imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-not-real"
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="aquarium_log_test_")
os.environ["PUBLIC_BASE_URL"] = "http://test"
os.environ["LOG_LEVEL"] = "WARNING"

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import aquarium_log.models  # noqa: E402,F401
from aquarium_log.database import Base, build_engine, get_db_session  # noqa: E402
from aquarium_log.models.aquarium import Aquarium  # noqa: E402
from aquarium_log.models.attachment import Attachment, RECORD_VISIT, SLOT_PHOTOS  # noqa: E402
from aquarium_log.models.user import ROLE_ADMIN, ROLE_USER, User  # noqa: E402
from aquarium_log.models.visit import Visit  # noqa: E402
from aquarium_log.models.wishlist_item import WishlistItem  # noqa: E402
from aquarium_log.services.auth_service import hash_password  # noqa: E402

TEST_PASSWORD = "password123"

# Low iteration count keeps the suite fast; verify_password reads it from the hash
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD, iterations=1000)


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    """
    A fresh in-memory database per test.

    StaticPool keeps the single connection alive, so every session sees
    the same in-memory database.
    """
    engine = build_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# Entity Factories
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    async def factory(name=None, username=None, email=None, role=ROLE_USER, **extra) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=email or f"user{n}@example.com",
            password_hash=TEST_PASSWORD_HASH,
            name=name or f"User {n}",
            username=username or f"user{n}",
            role=role,
            favorite_aquarium_ids=extra.pop("favorite_aquarium_ids", []),
            **extra,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return factory


@pytest.fixture
def make_admin(make_user):
    async def factory(**kwargs) -> User:
        return await make_user(role=ROLE_ADMIN, **kwargs)

    return factory


@pytest.fixture
def make_aquarium(db_session):
    counter = {"n": 0}

    async def factory(
        name=None,
        address=None,
        prefecture="東京都",
        latitude=35.6812,
        longitude=139.7671,
        **extra,
    ) -> Aquarium:
        counter["n"] += 1
        aquarium = Aquarium(
            name=name or f"Aquarium {counter['n']}",
            address=address or f"{prefecture or ''}1-{counter['n']}",
            prefecture=prefecture,
            latitude=latitude,
            longitude=longitude,
            **extra,
        )
        db_session.add(aquarium)
        await db_session.commit()
        return aquarium

    return factory


@pytest.fixture
def make_visit(db_session):
    async def factory(user, aquarium, visited_at=None, rating=None, **extra) -> Visit:
        visit = Visit(
            user_id=user.id,
            aquarium_id=aquarium.id,
            visited_at=visited_at or date.today(),
            rating=rating,
            good_exhibits=extra.pop("good_exhibits", []),
            **extra,
        )
        db_session.add(visit)
        await db_session.commit()
        return visit

    return factory


@pytest.fixture
def make_wishlist_item(db_session):
    async def factory(user, aquarium, priority=None, memo=None) -> WishlistItem:
        item = WishlistItem(user_id=user.id, aquarium_id=aquarium.id, priority=priority, memo=memo)
        db_session.add(item)
        await db_session.commit()
        return item

    return factory


@pytest.fixture
def make_attachment(db_session):
    """Attachment rows without files on disk (enough for URL projections)."""
    counter = {"n": 0}

    async def factory(record_id, record_type=RECORD_VISIT, name=SLOT_PHOTOS, storage_path=None) -> Attachment:
        counter["n"] += 1
        attachment = Attachment(
            record_type=record_type,
            record_id=record_id,
            name=name,
            storage_path=storage_path or f"2025/07/06/photo-{counter['n']}.jpg",
            filename=f"photo-{counter['n']}.jpg",
            content_type="image/jpeg",
            byte_size=10,
        )
        db_session.add(attachment)
        await db_session.commit()
        return attachment

    return factory


# ══════════════════════════════════════════════════════════════════════════
# File Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """
    Minimal JPEG bytes: Start of Image (FFD8) + JFIF marker + End of Image (FFD9).
    Not a real photograph, but python-magic reports it as image/jpeg.
    """
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def sample_video_bytes():
    """
    Minimal MP4 bytes: a single ftyp box (brand mp42), enough for
    python-magic to report video/mp4.
    """
    return b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom"


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def api_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient routed straight into the app (no server).

    Each request gets its own session on the test engine, committed on
    success like get_db_session does. Cookies (the login session) persist
    across requests of one client.
    """
    from aquarium_log.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_get_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def login(api_client):
    async def sign_in(user: User):
        response = await api_client.post(
            "/api/v1/login",
            json={"email": user.email, "password": TEST_PASSWORD},
        )
        assert response.status_code == 200, response.text
        return response

    return sign_in

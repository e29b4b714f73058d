"""
Little Application: Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the test suite.
How:   Every test that needs a database gets its own SQLite file under
       tmp_path (aiosqlite driver); the app is built with create_app(settings)
       and driven through httpx.AsyncClient + ASGITransport.

Fixture Hierarchy:
    ├── mock_db_session: AsyncMock session for pure service unit tests
    ├── settings:        Settings pointing at a temporary database and upload dir
    ├── app:             FastAPI app with tables created
    ├── client:          HTTPX AsyncClient bound to the app
    ├── seeded:          users, posts, courses and reviews with fixed timestamps
    └── tokens:          Bearer headers for each seeded user

Seed Data:
    Devworks Bootcamp    (pub1) 2024-01-01  average_cost 10000  average_rating 9.0  housing
        Front End Web Development  8000  beginner      2024-02-01
        Full Stack Web Development 12000 intermediate  2024-02-02
        Review "Learned a ton"      8   by user   2024-03-01
        Review "Great bootcamp"     10  by admin  2024-03-02
    ModernTech Bootcamp  (pub1) 2024-01-02  average_cost 5000
        UI/UX                      5000  beginner      2024-02-03
    Codemasters          (pub2) 2024-01-03  average_cost 12000  average_rating 7.0
        Data Science Program       12000 advanced      2024-02-04
        Review "Too fast"           7   by user   2024-03-03
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from littleapp.config import Settings
from littleapp.main import create_app
from littleapp.models import Course, Post, Review, User
from littleapp.models.post import slugify
from littleapp.security import hash_password
from littleapp.services.auth_service import auth_service

PASSWORD = "123456"


def _ts(month: int, day: int) -> datetime:
    return datetime(2024, month, day, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = post
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.get = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b'\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00'
        b'\xff\xd9'
    )


@pytest.fixture
def settings(tmp_path, temp_storage):
    return Settings(
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret="test-secret-key",
        file_upload_path=temp_storage,
        log_level="WARNING",
        rate_limit_requests=10_000,
    )


@pytest_asyncio.fixture
async def app(settings):
    application = create_app(settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.drop_all()
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


@pytest_asyncio.fixture
async def seeded(app):
    """Insert the seed data above; returns the rows keyed by short name."""
    password_hash = hash_password(PASSWORD)
    users = {
        "admin": User(name="Admin", email="admin@example.com", role="admin", password_hash=password_hash),
        "pub1": User(name="Publisher One", email="pub1@example.com", role="publisher", password_hash=password_hash),
        "pub2": User(name="Publisher Two", email="pub2@example.com", role="publisher", password_hash=password_hash),
        "user": User(name="Regular User", email="user@example.com", role="user", password_hash=password_hash),
    }

    def post(name, owner, created, cost, rating=None, housing=False):
        return Post(
            name=name,
            slug=slugify(name),
            description=f"{name} description",
            address="233 Bay State Rd Boston MA 02215",
            average_cost=cost,
            average_rating=rating,
            housing=housing,
            created_at=created,
            user_id=owner.id,
        )

    async with app.state.database.session() as db:
        db.add_all(users.values())
        await db.flush()

        posts = {
            "devworks": post("Devworks Bootcamp", users["pub1"], _ts(1, 1), 10000, 9.0, housing=True),
            "moderntech": post("ModernTech Bootcamp", users["pub1"], _ts(1, 2), 5000),
            "codemasters": post("Codemasters", users["pub2"], _ts(1, 3), 12000, 7.0),
        }
        db.add_all(posts.values())
        await db.flush()

        def course(title, parent, tuition, skill, created):
            return Course(
                title=title,
                description=f"{title} description",
                weeks="8",
                tuition=tuition,
                minimum_skill=skill,
                created_at=created,
                post_id=parent.id,
                user_id=parent.user_id,
            )

        courses = {
            "frontend": course("Front End Web Development", posts["devworks"], 8000, "beginner", _ts(2, 1)),
            "fullstack": course("Full Stack Web Development", posts["devworks"], 12000, "intermediate", _ts(2, 2)),
            "uiux": course("UI/UX", posts["moderntech"], 5000, "beginner", _ts(2, 3)),
            "datascience": course("Data Science Program", posts["codemasters"], 12000, "advanced", _ts(2, 4)),
        }
        db.add_all(courses.values())

        def review(title, parent, author, rating, created):
            return Review(
                title=title,
                text=f"{title} text",
                rating=rating,
                created_at=created,
                post_id=parent.id,
                user_id=author.id,
            )

        reviews = {
            "learned": review("Learned a ton", posts["devworks"], users["user"], 8, _ts(3, 1)),
            "great": review("Great bootcamp", posts["devworks"], users["admin"], 10, _ts(3, 2)),
            "fast": review("Too fast", posts["codemasters"], users["user"], 7, _ts(3, 3)),
        }
        db.add_all(reviews.values())
        await db.commit()

    return {"users": users, "posts": posts, "courses": courses, "reviews": reviews}


@pytest.fixture
def tokens(seeded, settings):
    """Authorization headers per seeded user name."""
    return {
        name: {"Authorization": f"Bearer {auth_service.issue_token(user, settings)}"}
        for name, user in seeded["users"].items()
    }

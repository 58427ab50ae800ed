# ============================================================================
# Test Configuration & Fixtures
# ============================================================================
import os

# Must be set before the app (and its cached settings) is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("DEBUG", "false")

import pytest
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from unittest.mock import AsyncMock, MagicMock

from app.main import app
from app.core.database import Base, get_db
from app.core.redis import RedisCache
from app.api.deps import get_session_store
from app.models.question import Category, Question
from app.services.revision import RevisionSessionStore

# Test database URL (use SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"

# Create test engine
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    poolclass=NullPool,
)

test_session_maker = async_sessionmaker(
    test_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

class FakeClock:
    """Controllable wall clock"""
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += timedelta(seconds=seconds)

@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_session_maker() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

@pytest.fixture
def mock_redis_client():
    """Mock async Redis client backed by a dict"""
    data = {}

    async def _get(key):
        return data.get(key)

    async def _setex(key, ttl, value):
        data[key] = value

    async def _set(key, value, nx=False, ex=None):
        if nx and key in data:
            return None
        data[key] = value
        return True

    async def _delete(key):
        return 1 if data.pop(key, None) is not None else 0

    client = MagicMock()
    client.get = AsyncMock(side_effect=_get)
    client.setex = AsyncMock(side_effect=_setex)
    client.set = AsyncMock(side_effect=_set)
    client.delete = AsyncMock(side_effect=_delete)
    client.data = data
    return client

@pytest.fixture
def session_store(mock_redis_client) -> RevisionSessionStore:
    return RevisionSessionStore(RedisCache(mock_redis_client), ttl=600)

@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 1, 9, 0, 0, tzinfo=timezone.utc))

@pytest.fixture(scope="function")
async def client(db_session: AsyncSession, session_store: RevisionSessionStore) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with overridden database and session store"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_store] = lambda: session_store

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

@pytest.fixture
async def signalling_category(db_session: AsyncSession) -> Category:
    """One category holding a single-answer and a multi-answer question"""
    category = Category(name="Signalling", icon="traffic-cone", category_type="operations")
    db_session.add_all([
        category,
        Question(
            title="What does a red aspect on a main signal require?",
            answers=[
                {"id": "A", "type": "text", "text": "Stop before the signal"},
                {"id": "B", "type": "text", "text": "Proceed at reduced speed"},
            ],
            correct_answers=["A"],
            categories=[category],
        ),
        Question(
            title="Which aspects authorise the train to pass the signal?",
            answers=[
                {"id": "A", "type": "text", "text": "Green"},
                {"id": "B", "type": "text", "text": "Double yellow"},
                {"id": "C", "type": "image", "image": "/uploads/red.webp"},
            ],
            correct_answers=["A", "B"],
            categories=[category],
        ),
    ])
    await db_session.commit()
    return category

@pytest.fixture
async def single_question_category(db_session: AsyncSession) -> Category:
    category = Category(name="Track safety", icon="hard-hat", category_type="safety")
    db_session.add_all([
        category,
        Question(
            title="What must a lookout carry when protecting a work site?",
            answers=[
                {"id": "A", "type": "text", "text": "A whistle or horn"},
                {"id": "B", "type": "text", "text": "A timetable"},
            ],
            correct_answers=["A"],
            categories=[category],
        ),
    ])
    await db_session.commit()
    return category

@pytest.fixture
def make_question_payload():
    """Public question payload as produced by QuestionRepository"""
    def _make(question_id: str, title: str = "Sample question") -> dict:
        return {
            "id": question_id,
            "title": title,
            "illustration": None,
            "answers": [
                {"id": "A", "type": "text", "text": "First", "image": None},
                {"id": "B", "type": "text", "text": "Second", "image": None},
                {"id": "C", "type": "text", "text": "Third", "image": None},
            ],
            "categories": [],
            "has_multiple_correct_answers": False,
        }
    return _make

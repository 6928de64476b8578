"""
Pytest configuration and fixtures for backend testing
"""

import os
from typing import Dict, List, Optional
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.pool import StaticPool

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["AUTO_MIGRATE"] = "false"

from prephub.auth import create_access_token
from prephub.db.config import build_engine, build_session_factory, get_session
from prephub.main import app
from prephub.models.persisted_course import Base
from prephub.services.llm_client import TextGenerator, get_text_generator

AUTHOR = "author-1"
STUDENT = "student-1"
OTHER = "student-2"


@pytest.fixture
async def engine():
    """Fresh in-memory database per test"""
    engine = build_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def text_generator():
    """Stub text generator; tests set ``generate.return_value`` / ``side_effect``"""
    generator = AsyncMock(spec=TextGenerator)
    generator.generate.return_value = "# Generated"
    return generator


@pytest.fixture
async def test_app(session_factory, text_generator):
    async def override_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_text_generator] = lambda: text_generator
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
async def client(test_app):
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# Helper functions for tests
def auth_headers(user_id: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}


def course_payload(
    chapters: int = 3,
    is_public: bool = True,
    title: str = "Graph Algorithms",
    topic: str = "graphs",
) -> dict:
    return {
        "title": title,
        "description": f"A course about {topic}",
        "topic": topic,
        "isPublic": is_public,
        "chapters": [
            {"title": f"Chapter {i}", "description": f"Part {i}"}
            for i in range(1, chapters + 1)
        ],
    }


async def create_course(
    client: AsyncClient,
    author: str = AUTHOR,
    chapters: int = 3,
    is_public: bool = True,
    **kwargs,
) -> dict:
    r = await client.post(
        "/api/v1/courses",
        json=course_payload(chapters=chapters, is_public=is_public, **kwargs),
        headers=auth_headers(author),
    )
    assert r.status_code == 201, r.text
    return r.json()


async def enroll(client: AsyncClient, course_id: int, user: str = STUDENT):
    return await client.post(
        f"/api/v1/courses/{course_id}/enroll", headers=auth_headers(user)
    )


async def set_progress(
    client: AsyncClient,
    course_id: int,
    chapter_id: int,
    is_completed: bool = True,
    user: str = STUDENT,
):
    return await client.patch(
        f"/api/v1/courses/{course_id}/chapters/{chapter_id}/progress",
        json={"isCompleted": is_completed},
        headers=auth_headers(user),
    )


def chapter_ids(course: dict) -> List[int]:
    return [c["id"] for c in course["chapters"]]


def assert_error(response, status: int, kind: Optional[str] = None):
    assert response.status_code == status, response.text
    body = response.json()
    assert body["success"] is False
    if kind is not None:
        assert body["kind"] == kind
    return body

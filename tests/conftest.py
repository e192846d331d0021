"""
Test configuration and fixtures.

Provides:
- SQLite database (fresh tables per test)
- Students and an admin with JWT tokens
- A scripted classifier standing in for Gemini
- HTTPX AsyncClient against the ASGI app
"""
import asyncio
import os
import tempfile
import uuid
from dataclasses import dataclass, field
from typing import AsyncGenerator, Dict, List, Optional

import pytest
from httpx import AsyncClient, ASGITransport

# Settings are read at import time
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), f"hostel_complaints_test_{uuid.uuid4().hex}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["GEMINI_API_KEY"] = ""
os.environ["DEBUG"] = "False"

from hostel_complaints.main import app
from hostel_complaints.core.database import AsyncSessionLocal, Base, async_engine
from hostel_complaints.core.security import create_access_token, get_password_hash
from hostel_complaints.models import User, UserRole
from hostel_complaints.schemas.classification import ClassificationOutcome
from hostel_complaints.services.complaint_ai_service import get_classifier
from hostel_complaints.services.drafts import DraftRegistry, get_draft_registry

DEFAULT_PASSWORD = "secret123"


def pytest_sessionfinish(session, exitstatus):
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


# =============================================================================
# Classifier
# =============================================================================

def _failed(source: str = "text") -> ClassificationOutcome:
    return ClassificationOutcome(source=source, succeeded=False, error="AI classification service is unavailable")


@dataclass
class FakeClassifier:
    """Scripted stand-in for ComplaintClassifier; records every call."""
    text_outcome: ClassificationOutcome = field(default_factory=_failed)
    image_outcome: ClassificationOutcome = field(default_factory=lambda: _failed("image"))
    text_replies: Dict[str, ClassificationOutcome] = field(default_factory=dict)
    gate: Optional[asyncio.Event] = None
    text_calls: List[str] = field(default_factory=list)
    image_calls: List[bytes] = field(default_factory=list)

    async def classify_text(self, description: str) -> ClassificationOutcome:
        self.text_calls.append(description)
        if self.gate is not None:
            await self.gate.wait()
        return self.text_replies.get(description, self.text_outcome)

    async def classify_image(self, image: bytes, mime_type: str = "image/jpeg") -> ClassificationOutcome:
        self.image_calls.append(image)
        return self.image_outcome


@pytest.fixture
def fake_classifier() -> FakeClassifier:
    return FakeClassifier()


@pytest.fixture
async def registry(fake_classifier: FakeClassifier) -> AsyncGenerator[DraftRegistry, None]:
    """Draft registry with a short quiet period"""
    reg = DraftRegistry(classifier=fake_classifier, debounce_seconds=0.05, min_length=20)
    yield reg
    await reg.shutdown()


# =============================================================================
# Database
# =============================================================================

@pytest.fixture
async def db_tables() -> AsyncGenerator[None, None]:
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await async_engine.dispose()


@pytest.fixture
async def db_session(db_tables) -> AsyncGenerator:
    async with AsyncSessionLocal() as session:
        yield session


async def _create_user(
    email: str,
    name: str,
    room: Optional[str] = "A-101",
    role: UserRole = UserRole.STUDENT,
) -> User:
    async with AsyncSessionLocal() as session:
        user = User(
            email=email,
            hashed_password=get_password_hash(DEFAULT_PASSWORD),
            name=name,
            room=room,
            role=role,
            is_active=True,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest.fixture
async def student(db_tables) -> User:
    return await _create_user("ada@hostel.edu", "Ada Student", room="A-101")


@pytest.fixture
async def other_student(db_tables) -> User:
    return await _create_user("ben@hostel.edu", "Ben Student", room="C-303")


@pytest.fixture
async def admin(db_tables) -> User:
    return await _create_user("warden@hostel.edu", "Warden", room=None, role=UserRole.ADMIN)


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture
async def client(
    db_tables,
    fake_classifier: FakeClassifier,
    registry: DraftRegistry,
) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated client with the scripted classifier wired in"""
    app.dependency_overrides[get_classifier] = lambda: fake_classifier
    app.dependency_overrides[get_draft_registry] = lambda: registry

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as c:
        yield c

    app.dependency_overrides.clear()


# =============================================================================
# Auth Fixtures
# =============================================================================

def _auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(data={"sub": str(user.id), "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_headers(student: User) -> Dict[str, str]:
    return _auth_headers(student)


@pytest.fixture
def other_headers(other_student: User) -> Dict[str, str]:
    return _auth_headers(other_student)


@pytest.fixture
def admin_headers(admin: User) -> Dict[str, str]:
    return _auth_headers(admin)

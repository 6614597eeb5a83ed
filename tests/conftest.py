"""
Shared fixtures: in-memory SQLite database, API client with overridden
dependencies, and a scripted AI provider.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import ats_portal.db.models  # noqa: F401
from ats_portal.core.auth_dependency import get_db
from ats_portal.core.security import hash_password, create_access_token
from ats_portal.db.base import Base
from ats_portal.db.models.job_posting import JobPosting
from ats_portal.db.models.user import User
from ats_portal.llm.provider import LLMProvider, LLMResponse
from ats_portal.main import app
from ats_portal.services.resume_analysis import ResumeAnalysisService, get_analysis_service


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


class FakeProvider(LLMProvider):
    """Replays scripted replies in order; an Exception instance is raised instead."""

    default_model = "fake-model"

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls = []

    def chat(self, messages, model=None, temperature=0.7, max_tokens=None, **kwargs):
        self.calls.append({"messages": messages, "model": model})
        if not self.replies:
            raise RuntimeError("No scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(content=reply, model=model or self.default_model)

    @property
    def prompts(self):
        return [call["messages"][-1]["content"] for call in self.calls]


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def analysis_service():
    """Rule-based service: no provider configured."""
    return ResumeAnalysisService(provider=None)


@pytest.fixture
def client(db, analysis_service):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_analysis_service] = lambda: analysis_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def make_user(db, email, role="applicant", password="testpass123", name="Test User"):
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token({'sub': user.email})}"}


@pytest.fixture
def recruiter(db):
    return make_user(db, "hr@example.com", role="hr", name="Grace Hopper")


@pytest.fixture
def applicant(db):
    return make_user(db, "ada@example.com", name="Ada Lovelace")


@pytest.fixture
def job(db, recruiter):
    job = JobPosting(
        created_by=recruiter.id,
        title="Backend Engineer",
        description="Build APIs in Python.",
        skills=["Python", "Kubernetes"],
        requirements=["3+ years of backend work"],
        experience_level="mid",
        slug="backend-engineer",
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job

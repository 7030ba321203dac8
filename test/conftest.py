"""
Shared pytest fixtures for the TruthLine test suite.

Every test runs against a fresh in-memory SQLite database.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from auth import create_access_token, get_password_hash
from core.config import settings
from database import Base, SessionLocal, engine
from models import NewsReport, Profile, User, UserRole, Verdict, Verification


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def default_policy(monkeypatch):
    """Every test starts from the default policy flags"""
    monkeypatch.setattr(settings, "ENFORCE_FINALIZATION_GUARD", True)
    monkeypatch.setattr(settings, "REJECT_DUPLICATE_VERIFICATIONS", False)
    monkeypatch.setattr(settings, "REJECT_SELF_VERIFICATION", False)
    monkeypatch.setattr(settings, "TRUST_UPDATE_MAX_RETRIES", 3)
    monkeypatch.setattr(settings, "SERVICE_ROLE_KEY", "test-service-key")


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_profile(db):
    """Create a user with its profile and return the profile"""
    counter = {"n": 0}

    def _make(full_name=None, trust_score=0, role=None):
        counter["n"] += 1
        name = full_name or f"Tester {counter['n']}"
        user = User(
            email=f"user{counter['n']}@example.com",
            hashed_password=get_password_hash("password123"),
        )
        db.add(user)
        db.flush()
        if role is None:
            role = UserRole.MODERATOR if trust_score >= 25 else UserRole.USER
        profile = Profile(id=user.id, full_name=name, trust_score=trust_score, role=role)
        db.add(profile)
        db.commit()
        return profile

    return _make


@pytest.fixture
def make_report(db):
    def _make(reporter, title="Local council approves new park", content="The vote passed 7-2."):
        report = NewsReport(title=title, content=content, reported_by=reporter.id, suspicion_score=0)
        db.add(report)
        db.commit()
        return report

    return _make


@pytest.fixture
def add_vote(db):
    def _add(report, voter, verdict, comment=None):
        verification = Verification(
            news_id=report.id,
            verified_by=voter.id,
            verdict=Verdict(verdict),
            comment=comment,
        )
        db.add(verification)
        db.commit()
        return verification

    return _add


@pytest.fixture
def client():
    from main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(db):
    def _headers(profile):
        user = db.get(User, profile.id)
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _headers

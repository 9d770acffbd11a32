"""Shared fixtures: an in-memory sqlite database and a TestClient bound to it."""

import os

# Must be set before any src module reads its configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_JWT_SECRET"] = "test-admin-secret"
os.environ["ALLOWED_ORIGIN"] = "https://fynda.com"

import pytest
from fastapi.testclient import TestClient

from src.app import app
from src.shared.auth.database import AdminUser, Base, SessionLocal, engine, init_db
from src.shared.auth.identity import DatabaseIdentityProvider
from src.shared.security.rate_limit import FixedWindowRateLimiter, RateLimiters

def _employer_payload(**overrides):
    payload = {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "industry": "Technology",
        "company_size": "11-50",
        "early_career_hires_per_year": 12,
    }
    payload.update(overrides)
    return payload


def _candidate_payload(**overrides):
    payload = {
        "name": "Sam Lee",
        "email": "sam@example.com",
        "current_state": "final_year",
        "field_of_study": "Computer Science",
        "field_description": "Distributed systems",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def employer_payload():
    """Factory for a valid employer sign-up body."""
    return _employer_payload


@pytest.fixture
def candidate_payload():
    return _candidate_payload


@pytest.fixture(autouse=True)
def fresh_database():
    """Every test starts from empty tables."""
    Base.metadata.drop_all(bind=engine)
    init_db()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def limiters():
    """Generous limits so only tests that care about limits hit them."""
    return RateLimiters(
        waitlist=FixedWindowRateLimiter(100, 60),
        admin_login=FixedWindowRateLimiter(100, 900),
        admin_data=FixedWindowRateLimiter(100, 60),
    )


@pytest.fixture
def client(limiters):
    previous = app.state.rate_limiters
    app.state.rate_limiters = limiters
    with TestClient(app) as test_client:
        yield test_client
    app.state.rate_limiters = previous


@pytest.fixture
def admin_account(db):
    """An identity on the admin allow-list; returns (email, password)."""
    email, password = "admin@fynda.com", "correct horse battery"
    user = DatabaseIdentityProvider(db).create_user(email, password)
    db.add(AdminUser(email=email, user_id=user.id, is_super_admin=True))
    db.commit()
    return email, password


@pytest.fixture
def admin_token(client, admin_account):
    email, password = admin_account
    response = client.post("/api/admin/auth", json={"email": email, "password": password})
    assert response.status_code == 200
    return response.json()["token"]

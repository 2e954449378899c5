"""
Pytest configuration and fixtures.

Provides shared fixtures for all tests including:
- In-memory database session
- Provider / organization factories
- Test clients for both services with bearer tokens
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ["SUPER_ADMIN_PHONES"] = "723119356"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shared.core.auth import create_access_token
from shared.core.database import Base, get_db
from community_service.app.main import app as community_app
from auth_service.app.main import app as auth_app
from community_service.app.crud.membership import providers_crud
from community_service.app.schemas.membership.providers_schemas import (
    LeadersIn, OrganizationCreate, ProviderCreate
)

LEADERS = {
    "chairperson": "0700000001",
    "secretary": "0700000002",
    "treasurer": "0700000003",
}
ORG_COVER = "https://img.example/sacco-cover.jpg"


@pytest.fixture(scope="function")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_provider(db):
    counter = {"n": 0}

    def _make(name=None, phone=None, service="Plumbing", **kwargs):
        counter["n"] += 1
        n = counter["n"]
        return providers_crud.create_provider(db, ProviderCreate(
            name=name or f"Provider {n}",
            phone=phone or f"07110000{n:02d}",
            service=service,
            avatar_url=f"https://img.example/avatar-{n}.jpg",
            cover_image_url=f"https://img.example/cover-{n}.jpg",
            rating=4.5,
            distance_km=1.2,
            hourly_rate=500,
            **kwargs,
        ))
    return _make


@pytest.fixture
def leaders(make_provider):
    """Provider profiles for the three leaders, keyed by role."""
    return {
        role: make_provider(name=f"{role.title()} Leader", phone=phone)
        for role, phone in LEADERS.items()
    }


@pytest.fixture
def organization(db, leaders):
    return providers_crud.create_organization(db, OrganizationCreate(
        name="Umoja Boda SACCO",
        phone="0720000000",
        service="Transport",
        cover_image_url=ORG_COVER,
        leaders=LeadersIn(**LEADERS),
    ))


def token_for(phone, user_id=None, name=None, is_super_admin=False):
    return create_access_token({
        "user_id": user_id,
        "phone": phone,
        "name": name,
        "is_super_admin": is_super_admin,
    })


def auth_headers(phone, user_id=None, is_super_admin=False):
    return {"Authorization": f"Bearer {token_for(phone, user_id, is_super_admin=is_super_admin)}"}


@pytest.fixture
def override_db(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    community_app.dependency_overrides[get_db] = _get_db
    auth_app.dependency_overrides[get_db] = _get_db
    yield
    community_app.dependency_overrides.clear()
    auth_app.dependency_overrides.clear()


@pytest.fixture
def client(override_db):
    with TestClient(community_app) as test_client:
        yield test_client


@pytest.fixture
def auth_client(override_db):
    with TestClient(auth_app) as test_client:
        yield test_client

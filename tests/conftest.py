# tests/conftest.py
"""
Shared fixtures: in-memory SQLite database, FastAPI TestClient wired to it,
and a seeded city / zone / signed-in user.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_DIR"] = ""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, create_tables, get_db
from app.main import app
from app.models import City, Zone, User, AuthSession

SESSION_TOKEN = "test-session-token"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seeded(db):
    """City c1 with zone z1 and a signed-in user assigned to it."""
    city = City(id="c1", name="Springfield")
    other_city = City(id="c2", name="Shelbyville")
    db.add_all([city, other_city])
    db.flush()
    zone = Zone(id="z1", name="Downtown", city_id="c1", status="ACTIVE")
    other_zone = Zone(id="z2", name="Harbor", city_id="c2", status="ACTIVE")
    user = User(id="u1", name="Dana Operator", email="operator@example.com", city_id="c1")
    db.add_all([zone, other_zone, user])
    db.flush()
    db.add(AuthSession(session_token=SESSION_TOKEN, user_id="u1",
                       expires=datetime.utcnow() + timedelta(days=1)))
    db.commit()
    return {"city": city, "zone": zone, "user": user}


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {SESSION_TOKEN}"}

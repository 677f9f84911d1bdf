import os

# Point the app at SQLite before app.database builds its engine
os.environ["DATABASE_URL"] = "sqlite://"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.models import Client, InventoryItem, Profile
from app.main import app as api
from app.services.editor_sessions import editor_sessions


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(db_session):
    """Create a test client."""
    def override_get_db():
        yield db_session

    api.dependency_overrides[get_db] = override_get_db
    with TestClient(api) as test_client:
        yield test_client
    api.dependency_overrides.clear()
    editor_sessions.clear()


@pytest.fixture
def profile(db_session):
    profile = Profile(first_name="Ada", last_name="Obi", email="ada@example.com")
    db_session.add(profile)
    db_session.commit()
    return profile


@pytest.fixture
def other_profile(db_session):
    profile = Profile(first_name="Ben", last_name="Cole", email="ben@example.com")
    db_session.add(profile)
    db_session.commit()
    return profile


@pytest.fixture
def auth_headers(profile):
    return {"X-User-Id": str(profile.id)}


@pytest.fixture
def acme(db_session, profile):
    client = Client(
        user_id=profile.id,
        company_name="Acme Fabrication",
        contact_name="Jane Doe",
        email="jane@acme.test",
        phone="555-0100",
        address="1 Foundry Road",
    )
    db_session.add(client)
    db_session.commit()
    return client


@pytest.fixture
def steel_beam(db_session):
    item = InventoryItem(
        name="Steel Beam",
        description="I-beam, 6m",
        category="Structural",
        unit_price=Decimal("100.00"),
        quantity=5,
    )
    db_session.add(item)
    db_session.commit()
    return item


@pytest.fixture
def anchor_bolts(db_session):
    item = InventoryItem(
        name="Anchor Bolts",
        description="M16 galvanised",
        category="Fasteners",
        unit_price=Decimal("2.50"),
        quantity=50,
    )
    db_session.add(item)
    db_session.commit()
    return item

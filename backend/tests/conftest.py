"""
Shared fixtures: an in-memory SQLite database per test, a gateway with the
settings row in place, and a TestClient wired to both. No real API calls:
the quote generator is always a fake.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tinigom.core.config import Settings
from tinigom.database import Base, get_db, make_engine
from tinigom.deps import get_quote_generator, get_settings
from tinigom.main import app
from tinigom.services.gateway import PersistenceGateway


class FakeQuoteGenerator:
    """Stands in for QuoteGenerator; records every prompt it receives."""

    def __init__(self, configured=True, replies=None, error=None):
        self.configured = configured
        self.replies = list(replies or [])
        self.error = error
        self.prompts = []

    def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return f'"Quote number {len(self.prompts)}"'


@pytest.fixture
def db_session():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app_settings():
    return Settings(
        GEMINI_API_KEY="test-gemini-key",
        OPENAI_API_KEY="",
        QUOTE_STRATEGY="single",
        DEFAULT_SAVINGS_GOAL=150000,
        INVOICE_START_NUMBER=19,
    )


@pytest.fixture
def gateway(db_session, app_settings):
    gw = PersistenceGateway(db_session)
    gw.ensure_settings(app_settings.DEFAULT_SAVINGS_GOAL, app_settings.INVOICE_START_NUMBER)
    return gw


@pytest.fixture
def fake_generator():
    return FakeQuoteGenerator()


@pytest.fixture
def client(db_session, gateway, app_settings, fake_generator):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: app_settings
    app.dependency_overrides[get_quote_generator] = lambda: fake_generator
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

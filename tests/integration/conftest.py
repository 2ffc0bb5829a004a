"""
Integration test fixtures. Overrides get_db and the content generator for API tests.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


@pytest.fixture
def override_get_db():
    """Create in-memory engine and session factory for API tests."""
    from api.config import Base
    import api.models.models  # noqa: F401

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    return _get_db


@pytest.fixture
def api_client(override_get_db, fake_generator):
    """FastAPI TestClient with in-memory DB, canned content and a fresh session registry."""
    from fastapi.testclient import TestClient
    from api.api import app
    from api.config import get_db
    from api.routes.plan_routes import get_assessment_registry, get_content_generator
    from api.services.assessment import AssessmentRegistry

    registry = AssessmentRegistry()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_content_generator] = lambda: fake_generator
    app.dependency_overrides[get_assessment_registry] = lambda: registry
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def learner_headers():
    return {"X-Learner-Id": "ada@example.com", "X-Learner-Name": "Ada Lovelace"}

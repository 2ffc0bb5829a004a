"""
Pytest configuration and shared fixtures for the test suite.
Ensures proper Python path and provides common fixtures for unit and integration tests.
"""
import os
import sys
from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Keep the test run off the real database file and the console.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("PLAN_STORE", "sql")
os.environ.setdefault("LOG_CONSOLE", "0")

from api.errors import GenerationFailure, PersistenceFailure  # noqa: E402
from api.schemas.assessment_schemas import Question  # noqa: E402
from api.schemas.plan_schemas import ConceptExplanation, CurriculumPlan, Module  # noqa: E402
from api.services.content_generator import ContentGenerator, FinalScope, WeeklyScope  # noqa: E402
from api.services.plan_store import LocalPlanStore  # noqa: E402


def build_modules(numbers=(1, 2, 3, 4)) -> tuple[Module, ...]:
    return tuple(
        Module(
            number=n,
            title=f"Week {n}",
            description=f"What week {n} covers.",
            key_concepts=(f"concept {n}a", f"concept {n}b"),
        )
        for n in numbers
    )


def build_questions(count: int) -> list[Question]:
    """`count` questions whose correct option is always index 1."""
    return [
        Question(
            id=i + 1,
            question=f"Question {i + 1}?",
            options=("A", "B", "C", "D"),
            correct_option_index=1,
            explanation="B is right.",
        )
        for i in range(count)
    ]


class FakeContentGenerator(ContentGenerator):
    """Canned content; records every request it receives."""

    def __init__(self, modules=None, question_count: int = 10, fail: bool = False):
        self.modules = list(modules if modules is not None else build_modules())
        self.question_count = question_count
        self.fail = fail
        self.calls: list[tuple] = []

    async def generate_curriculum(self, topic, difficulty_tier):
        self.calls.append(("curriculum", topic, difficulty_tier))
        if self.fail:
            raise GenerationFailure("model offline")
        return list(self.modules)

    async def generate_assessment(self, scope):
        self.calls.append(("assessment", scope))
        if self.fail:
            raise GenerationFailure("model offline")
        count = 20 if isinstance(scope, FinalScope) else self.question_count
        return build_questions(count)

    async def explain_concept(self, concept, topic):
        self.calls.append(("explain", concept, topic))
        if self.fail:
            raise GenerationFailure("model offline")
        return ConceptExplanation(
            concept=concept,
            definition=f"{concept} in {topic}.",
            example="An example.",
            practical_tip="Practice daily.",
        )


class FlakyPlanStore(LocalPlanStore):
    """In-memory store whose field writes can be switched to fail."""

    def __init__(self):
        super().__init__(None)
        self.fail_writes = False
        self.completion_writes: list[tuple[str, list[int]]] = []
        self.credential_writes: list[tuple[str, str]] = []

    async def update_completion(self, plan_id, completed_module_numbers):
        numbers = sorted(completed_module_numbers)
        self.completion_writes.append((plan_id, numbers))
        if self.fail_writes:
            raise PersistenceFailure("disk full")
        await super().update_completion(plan_id, numbers)

    async def update_credential(self, plan_id, credential):
        self.credential_writes.append((plan_id, credential.id))
        if self.fail_writes:
            raise PersistenceFailure("disk full")
        return await super().update_credential(plan_id, credential)


@pytest.fixture
def fake_generator():
    return FakeContentGenerator()


@pytest.fixture
def flaky_store():
    return FlakyPlanStore()


@pytest.fixture
def make_plan():
    """Factory for in-memory plans: make_plan(numbers=(1, 2, 3), completed={1})."""

    def _make(numbers=(1, 2, 3, 4), completed=(), credential=None, plan_id="plan-1", owner="ada@example.com"):
        return CurriculumPlan(
            id=plan_id,
            owner=owner,
            topic="Rust",
            difficulty_tier="Beginner",
            modules=build_modules(numbers),
            completed_module_numbers=frozenset(completed),
            credential=credential,
            created_at=datetime(2026, 10, 1, 9, 0, 0),
        )

    return _make


# ----- In-memory DB (for tests that need DB without touching real DB) -----
@pytest.fixture
def in_memory_engine():
    """Create an in-memory SQLite engine shared across threads for tests."""
    return create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def db_session(in_memory_engine):
    """Create an in-memory database session. Uses api.config.Base for schema."""
    from api.config import Base
    import api.models.models  # noqa: F401

    Base.metadata.create_all(in_memory_engine)
    SessionLocal = sessionmaker(bind=in_memory_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_questions():
    return build_questions


@pytest.fixture
def weekly_scope():
    return WeeklyScope(topic="Rust", title="Ownership", concepts=("borrowing", "lifetimes"))

"""
Unit test fixtures. Use fakes and mocks; no database file or LLM.
"""
import pytest

from api.services.assessment import AssessmentRegistry
from api.services.skillforge_service import SkillForgeService
from api.ws.progress_broadcast import ProgressBroadcaster


@pytest.fixture
def broadcaster():
    return ProgressBroadcaster()


@pytest.fixture
def recorded_events(broadcaster):
    """Subscribe to plan-1 events and collect them."""
    events = []

    async def _record(event):
        events.append(event)

    broadcaster.subscribe("plan-1", _record)
    return events


@pytest.fixture
def seed(flaky_store):
    """Put a plan into the in-memory store as-is and return it."""

    def _seed(plan):
        flaky_store._write([plan.model_dump(mode="json"), *flaky_store._read()])
        return plan

    return _seed


@pytest.fixture
def service(fake_generator, flaky_store, broadcaster):
    return SkillForgeService(fake_generator, flaky_store, events=broadcaster)


@pytest.fixture
def registry():
    return AssessmentRegistry()

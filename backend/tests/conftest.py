import pytest

from app.llm.client import LLMClient
from app.llm.composer import EmailComposer
from app.llm.generator import SuggestionGenerator
from app.llm.tools.calendar_tool import CalendarTool
from app.models.schemas import UserPreferences
from app.services.planning_service import PlanningSession
from app.storage.repository import InMemoryRepository
from support import StubBackend


@pytest.fixture
def preferences() -> UserPreferences:
    return UserPreferences(
        origin_city="San Francisco",
        preferred_airport="sfo",
        budget=2500,
        currency="USD",
        activity_level="Active",
        interests=["Hiking", "Food"],
        excluded_destinations=["Paris"],
    )


@pytest.fixture
def make_session():
    def _make(backend=None, repository=None, failure_rate=0.0) -> PlanningSession:
        client = LLMClient(backend=backend or StubBackend())
        return PlanningSession(
            repository=repository if repository is not None else InMemoryRepository(),
            calendar=CalendarTool(failure_rate=failure_rate, latency_seconds=0),
            generator=SuggestionGenerator(client),
            composer=EmailComposer(client),
            clock=lambda: 1_767_225_600.0,
        )

    return _make


@pytest.fixture
def ready_session(make_session, preferences):
    """A session with preferences saved, calendar connected and the travel event selected."""

    def _ready(backend=None, repository=None) -> PlanningSession:
        session = make_session(backend=backend, repository=repository)
        session.save_preferences(preferences)
        session.connect_calendar()
        session.select_event("2")
        return session

    return _ready

import pytest

from app.core.errors import ConfigurationError
from app.llm.backends.mock_backend import MockGenerationBackend
from app.llm.client import LLMClient, build_backend
from app.llm.generator import SuggestionGenerator
from app.llm.tools.calendar_tool import MOCK_EVENTS
from app.models.domain import ActivityLevel
from app.models.schemas import TripFeedback


def test_mock_backend_skips_excluded_and_declined(preferences):
    prefs = preferences.model_copy(update={"excluded_destinations": ["cancun"]})
    history = [
        TripFeedback(
            trip_id="lisbon-2026-02-01",
            accepted=False,
            timestamp=1,
            feedback_text="been there",
            reason="Destination",
        )
    ]
    generator = SuggestionGenerator(LLMClient(MockGenerationBackend()))

    suggestions = generator.generate(prefs, MOCK_EVENTS[1], history)

    assert [s.destination for s in suggestions] == ["Bali", "Barcelona", "Reykjavik", "Rome", "Amsterdam"]
    assert all(s.flight.departure_airport == "SFO" for s in suggestions)
    assert suggestions[0].total_price == 900.0 + 120.0 * 7
    assert suggestions[0].dates == "2026-02-01 to 2026-02-08"


def test_build_backend_rejects_unknown_provider():
    class FakeSettings:
        llm_provider = "carrier-pigeon"

    with pytest.raises(ConfigurationError):
        build_backend(FakeSettings())


def test_activity_level_and_interests_change_the_ranking(preferences):
    generator = SuggestionGenerator(LLMClient(MockGenerationBackend()))
    beach = preferences.model_copy(
        update={"activity_level": ActivityLevel.relaxed, "interests": ["Beaches"]}
    )
    hiking = preferences.model_copy(update={"interests": ["Hiking"]})

    relaxed = [s.destination for s in generator.generate(beach, MOCK_EVENTS[1], [])]
    active = [s.destination for s in generator.generate(hiking, MOCK_EVENTS[1], [])]

    assert relaxed == ["Cancun", "Bali", "Lisbon", "Barcelona", "Rome"]
    assert active[0] == "Reykjavik"
    assert relaxed != active


def test_declined_trip_only_excludes_its_own_destination(preferences):
    history = [
        TripFeedback(
            trip_id="romeo-2026-02-01",
            accepted=False,
            timestamp=1,
            feedback_text="not for me",
            reason="Destination",
        )
    ]
    generator = SuggestionGenerator(LLMClient(MockGenerationBackend()))

    suggestions = generator.generate(preferences, MOCK_EVENTS[1], history)

    assert "Rome" in [s.destination for s in suggestions]

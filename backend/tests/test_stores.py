import json

import pytest

from app.core.errors import InputValidationError
from app.models.schemas import TripSuggestion, UserPreferences
from app.storage.repository import (
    FEEDBACK_KEY,
    PREFERENCES_KEY,
    InMemoryRepository,
    JsonFileRepository,
)
from app.storage.stores import FeedbackLedger, PreferenceStore, TripBoard
from support import ReadOnlyFeedbackRepository, make_trip

DENVER = {
    "origin_city": "Denver",
    "preferred_airport": "DEN",
    "budget": 1200,
    "currency": "USD",
    "activity_level": "Moderate",
    "interests": [],
    "excluded_destinations": [],
}


def test_preferences_round_trip(preferences):
    repository = InMemoryRepository()
    saved = PreferenceStore(repository).save(preferences)

    loaded = PreferenceStore(repository).load()

    assert loaded == saved
    assert loaded.preferred_airport == "SFO"
    stored = json.loads(repository.get(PREFERENCES_KEY))
    assert stored["originCity"] == "San Francisco"
    assert stored["activityLevel"] == "Active"


def test_preferences_accept_wire_names():
    store = PreferenceStore(InMemoryRepository())
    saved = store.save(
        {
            "originCity": " Boston ",
            "preferredAirport": "bos",
            "budget": 900,
            "currency": "eur",
            "activityLevel": "Relaxed",
            "interests": ["Art", " "],
            "excludedDestinations": [],
        }
    )
    assert saved.origin_city == "Boston"
    assert saved.preferred_airport == "BOS"
    assert saved.interests == ["Art"]
    assert saved.currency == "EUR"


@pytest.mark.parametrize(
    "missing",
    ["preferred_airport", "budget", "currency", "activity_level", "interests", "excluded_destinations"],
)
def test_missing_preference_field_is_rejected(missing):
    repository = InMemoryRepository()
    payload = {k: v for k, v in DENVER.items() if k != missing}

    with pytest.raises(InputValidationError):
        PreferenceStore(repository).save(payload)

    assert repository.get(PREFERENCES_KEY) is None


def test_origin_only_is_not_enough():
    with pytest.raises(InputValidationError):
        PreferenceStore(InMemoryRepository()).save({"originCity": "Boston"})


@pytest.mark.parametrize(
    "overrides",
    [
        {"budget": 50},
        {"origin_city": "   "},
        {"preferred_airport": ""},
        {"preferred_airport": "J1"},
    ],
)
def test_invalid_preferences_do_not_touch_store(overrides):
    repository = InMemoryRepository()
    store = PreferenceStore(repository)
    payload = dict(DENVER)
    payload.update(overrides)

    with pytest.raises(InputValidationError):
        store.save(payload)

    assert store.current is None
    assert repository.get(PREFERENCES_KEY) is None


@pytest.mark.parametrize("raw", ["{not json", "[]", '{"originCity": ""}'])
def test_corrupt_preferences_load_as_first_run(raw):
    repository = InMemoryRepository()
    repository.set(PREFERENCES_KEY, raw)
    assert PreferenceStore(repository).load() is None


@pytest.mark.parametrize("text", [None, "", "   \n"])
def test_decline_requires_feedback_text(text):
    ledger = FeedbackLedger(InMemoryRepository())
    with pytest.raises(InputValidationError, match="Please provide some feedback"):
        ledger.append(
            {"trip_id": "t1", "accepted": False, "timestamp": 1, "feedback_text": text, "reason": "Price"}
        )
    assert len(ledger) == 0


@pytest.mark.parametrize("text", [None, "", "   ", "room with a view"])
def test_accept_allows_any_feedback_text(text):
    ledger = FeedbackLedger(InMemoryRepository())
    entry = ledger.append({"trip_id": "t1", "accepted": True, "timestamp": 1, "feedback_text": text})
    assert entry.accepted
    assert len(ledger) == 1


def test_accept_with_reason_is_rejected():
    ledger = FeedbackLedger(InMemoryRepository())
    with pytest.raises(InputValidationError):
        ledger.append({"trip_id": "t1", "accepted": True, "timestamp": 1, "reason": "Price"})


def test_ledger_appends_in_order_and_persists():
    repository = InMemoryRepository()
    ledger = FeedbackLedger(repository)
    first = ledger.append({"trip_id": "t0", "accepted": True, "timestamp": 10})
    for i in range(1, 4):
        ledger.append(
            {
                "trip_id": f"t{i}",
                "accepted": False,
                "timestamp": 10 + i,
                "feedback_text": "too far",
                "reason": "Destination",
            }
        )

    entries = ledger.snapshot()
    assert [e.trip_id for e in entries] == ["t0", "t1", "t2", "t3"]
    assert entries[0] == first

    reloaded = FeedbackLedger(repository).load()
    assert reloaded == entries
    assert json.loads(repository.get(FEEDBACK_KEY))[1]["reason"] == "Destination"


def test_ledger_snapshot_is_a_copy():
    ledger = FeedbackLedger(InMemoryRepository())
    snapshot = ledger.snapshot()
    ledger.append({"trip_id": "t1", "accepted": True, "timestamp": 1})
    assert snapshot == []


def test_failed_write_leaves_ledger_unchanged():
    ledger = FeedbackLedger(ReadOnlyFeedbackRepository())

    with pytest.raises(OSError):
        ledger.append({"trip_id": "t1", "accepted": True, "timestamp": 1})

    assert len(ledger) == 0
    assert ledger.snapshot() == []


def test_corrupt_feedback_history_starts_empty():
    repository = InMemoryRepository()
    repository.set(FEEDBACK_KEY, '[{"tripId": 3}]')
    assert FeedbackLedger(repository).load() == []


def test_board_remove_is_idempotent():
    board = TripBoard()
    board.replace([TripSuggestion.model_validate(make_trip(t)) for t in ("a", "b")])

    assert board.remove("a") is True
    assert board.remove("a") is False
    assert board.remove("missing") is False
    assert [t.id for t in board.list()] == ["b"]


def test_board_replace_rejects_duplicate_ids():
    board = TripBoard()
    trip = TripSuggestion.model_validate(make_trip("a"))
    with pytest.raises(ValueError):
        board.replace([trip, trip])


def test_json_file_repository_survives_restart(tmp_path, preferences):
    path = tmp_path / "store" / "wanderlust.json"
    PreferenceStore(JsonFileRepository(path)).save(preferences)

    loaded = PreferenceStore(JsonFileRepository(path)).load()

    assert loaded == UserPreferences.model_validate(preferences.model_dump())
    assert path.exists()


def test_json_file_repository_ignores_garbage(tmp_path):
    path = tmp_path / "wanderlust.json"
    path.write_text("not json", encoding="utf-8")
    repository = JsonFileRepository(path)

    assert repository.get(PREFERENCES_KEY) is None
    repository.set(PREFERENCES_KEY, "{}")
    assert repository.get(PREFERENCES_KEY) == "{}"

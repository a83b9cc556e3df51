from __future__ import annotations

import json
import logging
from typing import Iterable, List, Optional

from pydantic import TypeAdapter, ValidationError

from app.core.errors import InputValidationError
from app.models.schemas import TripFeedback, TripSuggestion, UserPreferences
from app.storage.repository import FEEDBACK_KEY, PREFERENCES_KEY, KeyValueStore

logger = logging.getLogger(__name__)

_feedback_list = TypeAdapter(List[TripFeedback])


def _validation_message(exc: ValidationError) -> str:
    messages = []
    for err in exc.errors():
        msg = err.get("msg", "")
        messages.append(msg.removeprefix("Value error, "))
    return "; ".join(messages)


class PreferenceStore:
    def __init__(self, repository: KeyValueStore):
        self.repository = repository
        self.current: Optional[UserPreferences] = None

    def save(self, prefs: UserPreferences | dict) -> UserPreferences:
        try:
            validated = UserPreferences.model_validate(
                prefs.model_dump() if isinstance(prefs, UserPreferences) else prefs
            )
        except ValidationError as exc:
            raise InputValidationError(_validation_message(exc)) from exc
        self.current = validated
        self.repository.set(PREFERENCES_KEY, json.dumps(validated.to_wire()))
        return validated

    def load(self) -> Optional[UserPreferences]:
        """Read saved preferences; absent or corrupt data means first run."""
        raw = self.repository.get(PREFERENCES_KEY)
        if raw is None:
            self.current = None
            return None
        try:
            self.current = UserPreferences.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("Failed to parse preferences, treating as unset: %s", exc)
            self.current = None
        return self.current


class FeedbackLedger:
    """Append-only feedback history mirrored to the repository."""

    def __init__(self, repository: KeyValueStore):
        self.repository = repository
        self._entries: List[TripFeedback] = []

    def load(self) -> List[TripFeedback]:
        raw = self.repository.get(FEEDBACK_KEY)
        self._entries = []
        if raw is None:
            return self.snapshot()
        try:
            self._entries = list(_feedback_list.validate_json(raw))
        except ValidationError as exc:
            logger.warning("Failed to parse feedback history, starting empty: %s", exc)
        return self.snapshot()

    def append(self, feedback: TripFeedback | dict) -> TripFeedback:
        try:
            entry = TripFeedback.model_validate(
                feedback.model_dump() if isinstance(feedback, TripFeedback) else feedback
            )
        except ValidationError as exc:
            raise InputValidationError(_validation_message(exc)) from exc
        entries = self._entries + [entry]
        self._persist(entries)
        self._entries = entries
        logger.info(
            "Recorded %s for trip %s",
            "acceptance" if entry.accepted else "decline",
            entry.trip_id,
        )
        return entry

    def snapshot(self) -> List[TripFeedback]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def _persist(self, entries: List[TripFeedback]) -> None:
        payload = [entry.to_wire() for entry in entries]
        self.repository.set(FEEDBACK_KEY, json.dumps(payload))


class TripBoard:
    def __init__(self) -> None:
        self._trips: List[TripSuggestion] = []

    def replace(self, suggestions: Iterable[TripSuggestion]) -> None:
        trips = list(suggestions)
        ids = [t.id for t in trips]
        if len(set(ids)) != len(ids):
            raise ValueError("Trip suggestion ids must be unique")
        self._trips = trips

    def remove(self, trip_id: str) -> bool:
        before = len(self._trips)
        self._trips = [t for t in self._trips if t.id != trip_id]
        return len(self._trips) != before

    def get(self, trip_id: str) -> Optional[TripSuggestion]:
        return next((t for t in self._trips if t.id == trip_id), None)

    def list(self) -> List[TripSuggestion]:
        return list(self._trips)

    def __len__(self) -> int:
        return len(self._trips)

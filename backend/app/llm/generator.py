"""Turns preferences, a travel window and feedback history into trip suggestions.

The service is asked for JSON matching ``TRIP_RESPONSE_SCHEMA``. Its reply is
decoded strictly: either every suggestion validates or the whole batch is
rejected with ``SuggestionDecodeError``. An explicit empty list is returned
as-is so callers can tell "nothing found" apart from a failure.
"""

import json
import logging
import re
from typing import List, Sequence

from pydantic import ValidationError

from app.core.errors import (
    ConfigurationError,
    GenerationError,
    InputValidationError,
    ServiceError,
    SuggestionDecodeError,
)
from app.llm.client import CompletionRequest, LLMClient, SuggestionContext
from app.llm.prompts import SUGGESTION_SYSTEM_INSTRUCTION, build_suggestion_prompt
from app.models.schemas import CalendarEvent, SuggestionBatch, TripFeedback, TripSuggestion, UserPreferences

logger = logging.getLogger(__name__)

_FLIGHT_SCHEMA = {
    "type": "object",
    "properties": {
        "airline": {"type": "string"},
        "flightNumber": {"type": "string"},
        "departureAirport": {"type": "string"},
        "arrivalAirport": {"type": "string"},
        "departureTime": {"type": "string"},
        "arrivalTime": {"type": "string"},
        "price": {"type": "number"},
    },
    "required": [
        "airline",
        "flightNumber",
        "departureAirport",
        "arrivalAirport",
        "departureTime",
        "arrivalTime",
        "price",
    ],
}

_HOTEL_SCHEMA = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "rating": {"type": "number"},
        "address": {"type": "string"},
        "pricePerNight": {"type": "number"},
    },
    "required": ["name", "pricePerNight"],
}

TRIP_RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "suggestions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "destination": {"type": "string"},
                    "dates": {"type": "string", "description": "Format: YYYY-MM-DD to YYYY-MM-DD"},
                    "totalPrice": {"type": "number"},
                    "currency": {"type": "string"},
                    "summary": {"type": "string"},
                    "highlights": {"type": "array", "items": {"type": "string"}},
                    "flight": _FLIGHT_SCHEMA,
                    "hotel": _HOTEL_SCHEMA,
                },
                "required": [
                    "id",
                    "destination",
                    "totalPrice",
                    "currency",
                    "summary",
                    "highlights",
                    "flight",
                    "hotel",
                ],
            },
        }
    },
    "required": ["suggestions"],
}

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```$")


def strip_code_fences(text: str) -> str:
    cleaned = text.strip()
    cleaned = _FENCE_OPEN.sub("", cleaned)
    return _FENCE_CLOSE.sub("", cleaned)


def decode_suggestions(raw: str) -> List[TripSuggestion]:
    cleaned = strip_code_fences(raw or "")
    if not cleaned:
        raise SuggestionDecodeError("AI service returned an empty response.")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.error("Invalid JSON from model: %s", cleaned[:500])
        raise SuggestionDecodeError("AI service returned invalid JSON.") from exc

    try:
        batch = SuggestionBatch.model_validate(data)
    except ValidationError as exc:
        logger.error("Suggestion batch failed validation: %s", exc)
        raise SuggestionDecodeError(
            f"AI response did not match the trip schema ({exc.error_count()} problems)."
        ) from exc

    ids = [s.id for s in batch.suggestions]
    if len(set(ids)) != len(ids):
        raise SuggestionDecodeError("AI response contained duplicate trip ids.")
    return batch.suggestions


class SuggestionGenerator:
    def __init__(self, client: LLMClient):
        self.client = client

    def generate(
        self,
        prefs: UserPreferences,
        travel_event: CalendarEvent,
        feedback_history: Sequence[TripFeedback],
    ) -> List[TripSuggestion]:
        if prefs is None:
            raise InputValidationError("User preferences are missing. Please return to settings.")
        if not travel_event.start.strip() or not travel_event.end.strip():
            raise InputValidationError("The selected event has no start or end date.")

        history = list(feedback_history)
        request = CompletionRequest(
            prompt=build_suggestion_prompt(prefs, travel_event, history),
            response_schema=TRIP_RESPONSE_SCHEMA,
            system_instruction=SUGGESTION_SYSTEM_INSTRUCTION,
            context=SuggestionContext(
                preferences=prefs, travel_event=travel_event, feedback_history=history
            ),
        )
        try:
            raw = self.client.complete(request)
        except (ConfigurationError, GenerationError):
            raise
        except ServiceError as exc:
            raise GenerationError(f"Failed to generate recommendations: {exc}") from exc

        suggestions = decode_suggestions(raw)
        logger.info(
            "Generated %d suggestions for event %s (%d feedback entries)",
            len(suggestions),
            travel_event.id,
            len(history),
        )
        return suggestions

import json
from typing import Callable, List, Optional

from app.llm.client import CompletionRequest
from app.storage.repository import FEEDBACK_KEY, InMemoryRepository

SAMPLE_HTML = "<!DOCTYPE html><html><body><h1>Hi Traveler</h1></body></html>"


def make_trip(trip_id: str, destination: str = "Lisbon", total: float = 1450.0) -> dict:
    return {
        "id": trip_id,
        "destination": destination,
        "dates": "2026-02-01 to 2026-02-08",
        "totalPrice": total,
        "currency": "USD",
        "summary": f"A week in {destination}.",
        "highlights": ["Old town walk", "Food market"],
        "flight": {
            "airline": "TAP Air Portugal",
            "flightNumber": "TP238",
            "departureAirport": "SFO",
            "arrivalAirport": "LIS",
            "departureTime": "2026-02-01T08:30",
            "arrivalTime": "2026-02-01T19:30",
            "price": 620.0,
        },
        "hotel": {
            "name": "Lisbon Central",
            "rating": 4.3,
            "address": "Rua Augusta 120",
            "pricePerNight": 160.0,
        },
    }


def batch(*trip_ids: str) -> str:
    return json.dumps({"suggestions": [make_trip(t) for t in trip_ids]})


FIVE_TRIPS = batch("t1", "t2", "t3", "t4", "t5")


class StubBackend:
    """Answers structured requests with ``structured`` and free-form ones with ``text``."""

    def __init__(
        self,
        structured: str = FIVE_TRIPS,
        text: str = SAMPLE_HTML,
        structured_error: Optional[Exception] = None,
        text_error: Optional[Exception] = None,
        on_structured: Optional[Callable[[CompletionRequest], None]] = None,
    ):
        self.structured = structured
        self.text = text
        self.structured_error = structured_error
        self.text_error = text_error
        self.on_structured = on_structured
        self.requests: List[CompletionRequest] = []

    def complete(self, request: CompletionRequest) -> str:
        self.requests.append(request)
        if request.structured:
            if self.on_structured:
                self.on_structured(request)
            if self.structured_error:
                raise self.structured_error
            return self.structured
        if self.text_error:
            raise self.text_error
        return self.text


class ReadOnlyFeedbackRepository(InMemoryRepository):
    """Accepts every write except the feedback history, which fails like a full disk."""

    def set(self, key: str, value: str) -> None:
        if key == FEEDBACK_KEY:
            raise OSError(28, "No space left on device")
        super().set(key, value)

import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.models.domain import ActivityLevel, DeclineReason, SessionStage

AIRPORT_CODE = re.compile(r"^[A-Z]{3,5}$")
DECLINE_FEEDBACK_REQUIRED = "Please provide some feedback so we can improve next time."


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire and in persisted JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _clean_list(values: List[str]) -> List[str]:
    return [v.strip() for v in values if v and v.strip()]


class UserPreferences(CamelModel):
    origin_city: str
    preferred_airport: str
    budget: float = Field(ge=100)
    currency: str
    activity_level: ActivityLevel
    interests: List[str]
    excluded_destinations: List[str]

    @field_validator("origin_city")
    @classmethod
    def _origin_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Origin city is required.")
        return value

    @field_validator("preferred_airport")
    @classmethod
    def _airport_code(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("Preferred airport is required.")
        if not AIRPORT_CODE.match(value):
            raise ValueError("Airport code must be 3-5 letters.")
        return value

    @field_validator("currency")
    @classmethod
    def _currency_code(cls, value: str) -> str:
        value = value.strip().upper()
        if not value:
            raise ValueError("Currency is required.")
        return value

    @field_validator("interests", "excluded_destinations")
    @classmethod
    def _strip_entries(cls, values: List[str]) -> List[str]:
        return _clean_list(values)


class CalendarEvent(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    start: str
    end: str


class FlightDetails(CamelModel):
    model_config = ConfigDict(frozen=True)

    airline: str
    flight_number: str
    departure_airport: str
    arrival_airport: str
    departure_time: str
    arrival_time: str
    price: float


class HotelDetails(CamelModel):
    model_config = ConfigDict(frozen=True)

    name: str
    rating: Optional[float] = Field(None, ge=0, le=5)
    address: str = ""
    price_per_night: float


class TripSuggestion(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    destination: str
    dates: str = ""
    total_price: float
    currency: str
    summary: str
    highlights: List[str]
    flight: FlightDetails
    hotel: HotelDetails


class SuggestionBatch(CamelModel):
    suggestions: List[TripSuggestion]


class TripFeedback(CamelModel):
    model_config = ConfigDict(frozen=True)

    trip_id: str
    accepted: bool
    timestamp: int
    feedback_text: Optional[str] = None
    reason: Optional[DeclineReason] = None

    @model_validator(mode="after")
    def _decline_rules(self) -> "TripFeedback":
        if self.accepted and self.reason is not None:
            raise ValueError("A reason can only be given when declining a trip.")
        if not self.accepted and not (self.feedback_text or "").strip():
            raise ValueError(DECLINE_FEEDBACK_REQUIRED)
        return self


class FeedbackRequest(CamelModel):
    accepted: bool
    feedback_text: Optional[str] = None
    reason: Optional[DeclineReason] = None


class SelectEventRequest(CamelModel):
    event_id: str


class SessionSnapshot(CamelModel):
    stage: SessionStage
    preferences: Optional[UserPreferences] = None
    calendar_connected: bool
    calendar_events: List[CalendarEvent]
    travel_windows: List[CalendarEvent]
    selected_event_id: Optional[str] = None
    trips: List[TripSuggestion]
    feedback_count: int
    connection_error: Optional[str] = None
    generation_error: Optional[str] = None
    email_error: Optional[str] = None
    email_available: bool

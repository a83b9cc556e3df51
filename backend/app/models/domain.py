from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from app.models.schemas import CalendarEvent


class ActivityLevel(str, Enum):
    relaxed = "Relaxed"
    moderate = "Moderate"
    active = "Active"


class DeclineReason(str, Enum):
    price = "Price"
    dates = "Dates"
    destination = "Destination"
    activity = "Activity"
    other = "Other"


class SessionStage(str, Enum):
    no_preferences = "no_preferences"
    preferences_set = "preferences_set"
    calendar_pending = "calendar_pending"
    calendar_connected = "calendar_connected"
    event_selected = "event_selected"
    generating = "generating"
    suggestions_ready = "suggestions_ready"


@dataclass
class SessionState:
    stage: SessionStage = SessionStage.no_preferences
    calendar_connected: bool = False
    calendar_events: List["CalendarEvent"] = field(default_factory=list)
    selected_event_id: Optional[str] = None
    connection_error: Optional[str] = None
    generation_error: Optional[str] = None
    email_error: Optional[str] = None
    last_email_html: Optional[str] = None
import itertools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from app.core.errors import (
    CalendarConnectionError,
    CompositionError,
    GenerationError,
    InputValidationError,
    InvalidTransitionError,
    NoSuitableTripsError,
    PlannerError,
)
from app.llm.client import LLMClient, build_backend
from app.llm.composer import EmailComposer
from app.llm.generator import SuggestionGenerator
from app.llm.tools.calendar_tool import CalendarConnector, build_calendar_connector, travel_windows
from app.models.domain import SessionStage, SessionState
from app.models.schemas import (
    CalendarEvent,
    SessionSnapshot,
    TripFeedback,
    TripSuggestion,
    UserPreferences,
)
from app.storage.repository import KeyValueStore, build_repository
from app.storage.stores import FeedbackLedger, PreferenceStore, TripBoard

logger = logging.getLogger(__name__)

MISSING_PREFERENCES = "User preferences are missing. Please return to settings."
NO_EVENT_SELECTED = "Please select a travel event first."
EVENT_NOT_FOUND = "Selected event not found."


class RequestTokens:
    """
    Hands out one token per logical slot. Issuing a new token for a slot makes
    every earlier token for it stale, so late results can be recognized and
    dropped.
    """

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._current: Dict[str, int] = {}

    def issue(self, slot: str) -> int:
        token = next(self._counter)
        self._current[slot] = token
        return token

    def invalidate(self, slot: str) -> None:
        self._current.pop(slot, None)

    def is_current(self, slot: str, token: int) -> bool:
        return self._current.get(slot) == token


@dataclass
class GenerationOutcome:
    suggestions: List[TripSuggestion]
    email_html: Optional[str]
    email_error: Optional[str] = None
    applied: bool = True


class PlanningSession:
    """
    Single owner of the session state: preferences, calendar, trip board,
    feedback ledger and the last composed email. Mutations happen under one
    lock that is never held across a network call.
    """

    def __init__(
        self,
        repository: KeyValueStore,
        calendar: CalendarConnector,
        generator: SuggestionGenerator,
        composer: EmailComposer,
        clock: Callable[[], float] = time.time,
    ):
        self.calendar = calendar
        self.generator = generator
        self.composer = composer
        self.clock = clock
        self.preferences = PreferenceStore(repository)
        self.ledger = FeedbackLedger(repository)
        self.board = TripBoard()
        self.state = SessionState()
        self._lock = threading.Lock()
        self._tokens = RequestTokens()
        self._restore()

    def _restore(self) -> None:
        if self.preferences.load() is not None:
            self.state.stage = SessionStage.preferences_set
        self.ledger.load()
        logger.info(
            "Session restored (preferences=%s, feedback=%d)",
            self.preferences.current is not None,
            len(self.ledger),
        )

    # preferences

    def save_preferences(self, prefs: UserPreferences | dict) -> UserPreferences:
        with self._lock:
            saved = self.preferences.save(prefs)
            if self.state.stage == SessionStage.no_preferences:
                self.state.stage = SessionStage.preferences_set
            return saved

    # calendar

    def connect_calendar(self) -> List[CalendarEvent]:
        with self._lock:
            if self.preferences.current is None:
                raise InvalidTransitionError(MISSING_PREFERENCES)
            token = self._tokens.issue("connect")
            self.state.connection_error = None

        try:
            events = self.calendar.connect()
        except CalendarConnectionError as exc:
            with self._lock:
                if self._tokens.is_current("connect", token) and not self.state.calendar_connected:
                    self.state.stage = SessionStage.calendar_pending
                    self.state.connection_error = str(exc)
            raise

        with self._lock:
            if not self._tokens.is_current("connect", token):
                logger.info("Discarding stale calendar connect result")
                return list(self.state.calendar_events)
            self.state.calendar_events = list(events)
            self.state.calendar_connected = True
            self.state.connection_error = None
            if self.state.selected_event_id and not self._travel_event(self.state.selected_event_id):
                self.state.selected_event_id = None
                if self.state.stage == SessionStage.event_selected:
                    self.state.stage = SessionStage.calendar_connected
            if self.state.stage in (SessionStage.preferences_set, SessionStage.calendar_pending):
                self.state.stage = SessionStage.calendar_connected
            return list(events)

    def travel_windows(self) -> List[CalendarEvent]:
        return travel_windows(self.state.calendar_events)

    def _travel_event(self, event_id: str) -> Optional[CalendarEvent]:
        return next((e for e in self.travel_windows() if e.id == event_id), None)

    def select_event(self, event_id: str) -> CalendarEvent:
        with self._lock:
            if not self.state.calendar_connected:
                raise InvalidTransitionError("Connect your calendar first.")
            event = self._travel_event(event_id)
            if event is None:
                if any(e.id == event_id for e in self.state.calendar_events):
                    raise InputValidationError("Only travel events can be used to plan a trip.")
                raise InputValidationError(EVENT_NOT_FOUND)
            if event_id != self.state.selected_event_id:
                self._tokens.invalidate("generate")
            self.state.selected_event_id = event_id
            self.state.generation_error = None
            if self.state.stage != SessionStage.suggestions_ready or not len(self.board):
                self.state.stage = SessionStage.event_selected
            return event

    # generation

    def generate(self, recipient_name: Optional[str] = None) -> GenerationOutcome:
        with self._lock:
            self.state.generation_error = None
            if not self.state.selected_event_id:
                raise InputValidationError(NO_EVENT_SELECTED)
            prefs = self.preferences.current
            if prefs is None:
                raise InputValidationError(MISSING_PREFERENCES)
            event = self._travel_event(self.state.selected_event_id)
            if event is None:
                raise InputValidationError(EVENT_NOT_FOUND)
            history = self.ledger.snapshot()
            token = self._tokens.issue("generate")
            self.state.stage = SessionStage.generating

        try:
            suggestions = self.generator.generate(prefs, event, history)
            if not suggestions:
                raise NoSuitableTripsError()
        except Exception as exc:
            error = exc if isinstance(exc, PlannerError) else GenerationError(
                f"Failed to generate recommendations: {exc}"
            )
            logger.error("Generation failed: %s", error)
            with self._lock:
                if self._tokens.is_current("generate", token):
                    self.state.stage = SessionStage.event_selected
                    self.state.generation_error = str(error)
            if error is exc:
                raise
            raise error from exc

        email_html: Optional[str] = None
        email_error: Optional[str] = None
        try:
            email_html = self.composer.compose(suggestions, recipient_name)
        except Exception as exc:
            error = exc if isinstance(exc, PlannerError) else CompositionError(
                f"Failed to compose email: {exc}"
            )
            logger.warning("Email composition failed, keeping suggestions: %s", error)
            email_error = str(error)

        with self._lock:
            if not self._tokens.is_current("generate", token):
                logger.info("Discarding stale generation result (%d trips)", len(suggestions))
                return GenerationOutcome(suggestions, email_html, email_error, applied=False)
            self.board.replace(suggestions)
            self.state.last_email_html = email_html
            self.state.email_error = email_error
            self.state.stage = SessionStage.suggestions_ready
        return GenerationOutcome(suggestions, email_html, email_error)

    # feedback

    def submit_feedback(
        self,
        trip_id: str,
        accepted: bool,
        feedback_text: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> TripFeedback:
        with self._lock:
            entry = self.ledger.append(
                {
                    "trip_id": trip_id,
                    "accepted": accepted,
                    "timestamp": int(self.clock() * 1000),
                    "feedback_text": feedback_text,
                    "reason": reason,
                }
            )
            self.board.remove(trip_id)
            return entry

    # views

    def email_preview(self) -> Optional[str]:
        return self.state.last_email_html

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return SessionSnapshot(
                stage=self.state.stage,
                preferences=self.preferences.current,
                calendar_connected=self.state.calendar_connected,
                calendar_events=list(self.state.calendar_events),
                travel_windows=self.travel_windows(),
                selected_event_id=self.state.selected_event_id,
                trips=self.board.list(),
                feedback_count=len(self.ledger),
                connection_error=self.state.connection_error,
                generation_error=self.state.generation_error,
                email_error=self.state.email_error,
                email_available=self.state.last_email_html is not None,
            )


def build_session(settings) -> PlanningSession:
    client = LLMClient(backend=build_backend(settings))
    return PlanningSession(
        repository=build_repository(settings.storage_path),
        calendar=build_calendar_connector(settings),
        generator=SuggestionGenerator(client),
        composer=EmailComposer(client, default_recipient=settings.default_recipient_name),
    )

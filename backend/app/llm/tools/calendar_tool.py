from __future__ import annotations

import logging
import random
import time
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, List, Optional, Protocol

import requests

from app.core.errors import CalendarConnectionError
from app.models.schemas import CalendarEvent

logger = logging.getLogger(__name__)

MOCK_EVENTS: List[CalendarEvent] = [
    CalendarEvent(id="1", title="Weekly Team Sync", start="2026-11-10", end="2026-11-10"),
    CalendarEvent(id="2", title="Travel to Europe", start="2026-02-01", end="2026-02-08"),
    CalendarEvent(id="3", title="Dentist Appointment", start="2026-11-15", end="2026-11-15"),
]

CONNECTION_FAILED_MESSAGE = (
    "We couldn't connect to your calendar. Please check your connection and try again."
)


def is_travel_window(event: CalendarEvent) -> bool:
    return event.title.lower().startswith("travel")


def travel_windows(events: Iterable[CalendarEvent]) -> List[CalendarEvent]:
    return [e for e in events if is_travel_window(e)]


class CalendarConnector(Protocol):
    def connect(self) -> List[CalendarEvent]:
        ...


class CalendarTool:
    """
    Mock calendar connection standing in for an OAuth flow. Each call waits
    ``latency_seconds`` and fails with probability ``failure_rate``; callers
    retry by calling again.
    """

    def __init__(
        self,
        failure_rate: float = 0.3,
        latency_seconds: float = 1.5,
        events: Optional[List[CalendarEvent]] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.failure_rate = failure_rate
        self.latency_seconds = latency_seconds
        self.events = list(events) if events is not None else list(MOCK_EVENTS)
        self.rng = rng or random.Random()
        self.sleep = sleep

    def connect(self) -> List[CalendarEvent]:
        if self.latency_seconds:
            self.sleep(self.latency_seconds)
        if self.rng.random() < self.failure_rate:
            logger.warning("Simulated calendar connection failure")
            raise CalendarConnectionError(CONNECTION_FAILED_MESSAGE)
        logger.info("Calendar connected with %d events", len(self.events))
        return list(self.events)


class IcsCalendarTool:
    """Reads events from a public ICS feed instead of the mock list."""

    def __init__(self, url: str, timeout: int = 10) -> None:
        self.url = url
        self.timeout = timeout

    def connect(self) -> List[CalendarEvent]:
        try:
            resp = requests.get(self.url, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Failed to load ICS calendar: %s", exc)
            raise CalendarConnectionError(CONNECTION_FAILED_MESSAGE) from exc
        events = self.parse_ics_events(resp.text)
        logger.info("Loaded %d events from ICS feed", len(events))
        return events

    @staticmethod
    def parse_ics_events(content: str) -> List[CalendarEvent]:
        """
        Minimal VEVENT parser. All-day DTEND is non-inclusive, so one day is
        subtracted; timed events keep their own end date.
        """

        def _parse(value: str) -> tuple[date, bool]:
            value = value.strip()
            try:
                return datetime.strptime(value, "%Y%m%d").date(), True
            except ValueError:
                pass
            try:
                return datetime.strptime(value.rstrip("Z"), "%Y%m%dT%H%M%S").date(), False
            except ValueError:
                return date.fromisoformat(value[:10]), len(value) <= 10

        # unfold continuation lines
        lines: List[str] = []
        for line in content.splitlines():
            if line[:1] in (" ", "\t") and lines:
                lines[-1] += line[1:]
            else:
                lines.append(line)

        events: List[CalendarEvent] = []
        current: dict = {}
        for line in lines:
            if line.startswith("BEGIN:VEVENT"):
                current = {}
            elif line.startswith(("DTSTART", "DTEND", "SUMMARY", "UID")) and ":" in line:
                name, value = line.split(":", 1)
                current[name.split(";", 1)[0]] = value
            elif line.startswith("END:VEVENT"):
                if "DTSTART" in current:
                    start, all_day = _parse(current["DTSTART"])
                    end = start
                    if "DTEND" in current:
                        end, end_all_day = _parse(current["DTEND"])
                        if end_all_day and end > start:
                            end -= timedelta(days=1)
                    events.append(
                        CalendarEvent(
                            id=current.get("UID") or str(len(events) + 1),
                            title=current.get("SUMMARY", "").strip(),
                            start=start.isoformat(),
                            end=end.isoformat(),
                        )
                    )
                current = {}
        return events


def build_calendar_connector(settings) -> CalendarConnector:
    if settings.calendar_ics_url:
        return IcsCalendarTool(settings.calendar_ics_url)
    return CalendarTool(
        failure_rate=settings.calendar_failure_rate,
        latency_seconds=settings.calendar_latency_seconds,
    )

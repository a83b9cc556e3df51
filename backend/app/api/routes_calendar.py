from typing import List

from fastapi import APIRouter, Depends

from app.api import get_session
from app.models.schemas import SelectEventRequest
from app.services.planning_service import PlanningSession

router = APIRouter()


@router.post("/connect")
def connect_calendar(session: PlanningSession = Depends(get_session)) -> List[dict]:
    return [event.to_wire() for event in session.connect_calendar()]


@router.get("/events")
def list_events(session: PlanningSession = Depends(get_session)) -> List[dict]:
    return [event.to_wire() for event in session.state.calendar_events]


@router.get("/travel-windows")
def list_travel_windows(session: PlanningSession = Depends(get_session)) -> List[dict]:
    return [event.to_wire() for event in session.travel_windows()]


@router.post("/select")
def select_event(
    body: SelectEventRequest, session: PlanningSession = Depends(get_session)
) -> dict:
    return session.select_event(body.event_id).to_wire()

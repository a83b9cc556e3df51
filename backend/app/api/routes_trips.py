from typing import List, Optional

from fastapi import APIRouter, Depends

from app.api import get_session
from app.models.schemas import FeedbackRequest
from app.services.planning_service import PlanningSession

router = APIRouter()


@router.post("/trips/generate")
def generate_trips(
    recipient_name: Optional[str] = None, session: PlanningSession = Depends(get_session)
) -> dict:
    outcome = session.generate(recipient_name=recipient_name)
    return {
        "trips": [trip.to_wire() for trip in outcome.suggestions],
        "emailAvailable": outcome.email_html is not None,
        "emailError": outcome.email_error,
        "applied": outcome.applied,
    }


@router.get("/trips")
def list_trips(session: PlanningSession = Depends(get_session)) -> List[dict]:
    return [trip.to_wire() for trip in session.board.list()]


@router.post("/trips/{trip_id}/feedback")
def submit_feedback(
    trip_id: str, body: FeedbackRequest, session: PlanningSession = Depends(get_session)
) -> dict:
    entry = session.submit_feedback(
        trip_id=trip_id,
        accepted=body.accepted,
        feedback_text=body.feedback_text,
        reason=body.reason,
    )
    return entry.to_wire()


@router.get("/feedback")
def list_feedback(session: PlanningSession = Depends(get_session)) -> List[dict]:
    return [entry.to_wire() for entry in session.ledger.snapshot()]

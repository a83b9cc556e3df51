from fastapi import APIRouter, Depends

from app.api import get_session
from app.services.planning_service import PlanningSession

router = APIRouter()


@router.get("/session")
def get_session_snapshot(session: PlanningSession = Depends(get_session)) -> dict:
    return session.snapshot().to_wire()

from fastapi import HTTPException
from starlette.requests import Request

from app.services.planning_service import PlanningSession


def get_session(request: Request) -> PlanningSession:
    session = getattr(request.app.state, "session", None)
    if session is None:
        raise HTTPException(status_code=500, detail="Planning session not initialized")
    return session

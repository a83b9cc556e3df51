from fastapi import APIRouter, Depends, HTTPException

from app.api import get_session
from app.models.schemas import UserPreferences
from app.services.planning_service import PlanningSession

router = APIRouter()


@router.get("")
def get_preferences(session: PlanningSession = Depends(get_session)) -> dict:
    prefs = session.preferences.current
    if prefs is None:
        raise HTTPException(status_code=404, detail="No preferences set")
    return prefs.to_wire()


@router.put("")
def save_preferences(
    preferences: UserPreferences, session: PlanningSession = Depends(get_session)
) -> dict:
    return session.save_preferences(preferences).to_wire()

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse

from app.api import get_session
from app.services.planning_service import PlanningSession

router = APIRouter()


@router.get("/preview", response_class=HTMLResponse)
def email_preview(session: PlanningSession = Depends(get_session)) -> HTMLResponse:
    html = session.email_preview()
    if html is None:
        raise HTTPException(status_code=404, detail="Email preview unavailable")
    return HTMLResponse(content=html)

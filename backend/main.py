from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import (
    routes_calendar,
    routes_email,
    routes_health,
    routes_preferences,
    routes_session,
    routes_trips,
)
from app.core.config import settings
from app.core.errors import PlannerError
from app.core.logging import configure_logging
from app.services.planning_service import PlanningSession, build_session


async def planner_error_handler(request: Request, exc: PlannerError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


def create_app(session: PlanningSession | None = None) -> FastAPI:
    configure_logging()
    app = FastAPI(title=settings.app_name, version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(PlannerError, planner_error_handler)

    app.include_router(routes_health.router, tags=["health"])
    app.include_router(routes_session.router, tags=["session"])
    app.include_router(routes_preferences.router, prefix="/preferences", tags=["preferences"])
    app.include_router(routes_calendar.router, prefix="/calendar", tags=["calendar"])
    app.include_router(routes_trips.router, tags=["trips"])
    app.include_router(routes_email.router, prefix="/email", tags=["email"])

    # One session per process; routes reach it through app.state
    app.state.session = session or build_session(settings)
    app.state.settings = settings
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)

from fastapi import APIRouter

from app.core.config import settings

router = APIRouter()


@router.get("/health")
def healthcheck() -> dict:
    return {
        "status": "ok",
        "environment": settings.environment,
        "llmProvider": settings.llm_provider,
    }

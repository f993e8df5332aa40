from fastapi import APIRouter, Depends
from ....core.config import Settings, get_settings

router = APIRouter(tags=["health"])


def missing_call_settings(settings: Settings) -> list[str]:
    missing = []
    if not settings.GENERATE_WORKFLOW_ID:
        missing.append("GENERATE_WORKFLOW_ID")
    if not settings.INTERVIEWER_ASSISTANT_ID:
        missing.append("INTERVIEWER_ASSISTANT_ID")
    if not settings.FEEDBACK_SERVICE_URL:
        missing.append("FEEDBACK_SERVICE_URL")
    return missing


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """Report service status and any call settings that still need values."""
    missing = missing_call_settings(settings)
    return {
        "status": "ok" if not missing else "degraded",
        "environment": settings.ENVIRONMENT,
        "app_name": settings.APP_NAME,
        "missing": missing,
    }

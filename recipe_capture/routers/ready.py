from fastapi import APIRouter, Depends

from ..core.ai_client import AIClient
from ..deps import get_ai_client

router = APIRouter()


@router.get("/ready")
async def ready(ai_client: AIClient = Depends(get_ai_client)):
    return {
        "ok": True,
        "ai_available": ai_client.is_available(),
        "ai_last_error": ai_client.last_error,
    }

import logging

from fastapi import APIRouter, Depends

from ..acquisition.orchestrator import ContentAcquisitionOrchestrator
from ..deps import get_orchestrator
from ..models import AcquisitionResult
from ..schemas import ParseUrlRequest

logger = logging.getLogger("recipe_capture.api")

router = APIRouter()


@router.post("/parse-url", response_model=AcquisitionResult)
async def parse_url(
    req: ParseUrlRequest,
    orchestrator: ContentAcquisitionOrchestrator = Depends(get_orchestrator),
):
    """
    Acquire a recipe from a video/recipe URL.

    Fast mode reads captions only; when they hold no recipe the response has
    needs_full_analysis=true. UnsupportedPlatform and AcquisitionFailed are
    mapped to 400/422 by the app's exception handlers.
    """
    return await orchestrator.acquire_and_extract(req.url, req.mode)

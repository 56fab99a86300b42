from fastapi import APIRouter, Depends

from ..deps import get_normalizer
from ..models import MergedIngredient, ParsedIngredient
from ..parsing.dedup import deduplicate_ingredients
from ..parsing.ingredient_parser import parse_ingredients
from ..schemas import DedupeRequest, IngredientLinesRequest, MergeRequest
from ..services.ingredient_normalize import IngredientNormalizer
from ..services.merge import merge_ingredient_lists

router = APIRouter()


@router.post("/parse", response_model=list[ParsedIngredient])
def parse(req: IngredientLinesRequest):
    """Rule-based parse of free-text ingredient lines."""
    return parse_ingredients(req.lines)


@router.post("/normalize", response_model=list[ParsedIngredient])
async def normalize(
    req: IngredientLinesRequest,
    normalizer: IngredientNormalizer = Depends(get_normalizer),
):
    return await normalizer.normalize(req.lines)


@router.post("/merge", response_model=list[MergedIngredient])
def merge(req: MergeRequest):
    return merge_ingredient_lists(req.list_a, req.list_b)


@router.post("/dedupe", response_model=list[str])
def dedupe(req: DedupeRequest):
    return deduplicate_ingredients(req.lines, debug=req.debug)

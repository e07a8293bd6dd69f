"""
Interaction Routes - likes, ratings, comments and stats for a recipe
"""
from fastapi import APIRouter, Depends

from core.auth.dependencies import get_current_user
from core.interactions.service import InteractionService, get_interaction_service
from models.interaction_model import (
    CommentIn,
    InteractionStatsOut,
    LikeStatusOut,
    LikeToggleOut,
    RatingIn,
    WriteResult,
)
from models.user_model import CurrentUser

router = APIRouter(prefix="/interactions", tags=["Interactions"])


@router.post("/{recipe_id}/like", response_model=LikeToggleOut)
async def toggle_like(recipe_id: str,
                      user: CurrentUser = Depends(get_current_user),
                      service: InteractionService = Depends(get_interaction_service)):
    return await service.toggle_like(recipe_id, user.id)


@router.post("/{recipe_id}/rate", response_model=WriteResult)
async def rate_recipe(recipe_id: str, payload: RatingIn,
                      user: CurrentUser = Depends(get_current_user),
                      service: InteractionService = Depends(get_interaction_service)):
    record = await service.set_rating(recipe_id, user.id, payload.rating)
    return WriteResult(success=True, data=[record])


@router.post("/{recipe_id}/comment", response_model=WriteResult, status_code=201)
async def add_comment(recipe_id: str, payload: CommentIn,
                      user: CurrentUser = Depends(get_current_user),
                      service: InteractionService = Depends(get_interaction_service)):
    record = await service.add_comment(recipe_id, user.id, payload.comment)
    return WriteResult(success=True, data=[record])


@router.get("/{recipe_id}/stats", response_model=InteractionStatsOut)
async def get_stats(recipe_id: str, service: InteractionService = Depends(get_interaction_service)):
    return await service.get_stats(recipe_id)


@router.get("/{recipe_id}/like/status", response_model=LikeStatusOut)
async def get_like_status(recipe_id: str,
                          user: CurrentUser = Depends(get_current_user),
                          service: InteractionService = Depends(get_interaction_service)):
    return await service.get_like_status(recipe_id, user.id)

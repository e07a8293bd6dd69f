"""
Recipe Routes - CRUD, listings and comments for recipes
Handlers delegate to core.recipes.service / core.interactions.service
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError as PydanticValidationError

from core.auth.dependencies import get_current_user
from core.errors import ValidationError
from core.interactions.service import InteractionService, get_interaction_service
from core.recipes.service import RecipeService, get_recipe_service
from models.interaction_model import CommentOut, LikeStatusOut
from models.recipe_model import (
    MessageOut,
    RecipeCardOut,
    RecipeCreatedOut,
    RecipeDetailOut,
    RecipeIn,
)
from models.user_model import CurrentUser
from utils.validation import first_error_message, error_details

router = APIRouter(prefix="/recipes", tags=["Recipes"])


# POST routes first
@router.post("", response_model=RecipeCreatedOut, status_code=201)
async def create_recipe(
    title: str = Form(...),
    description: str = Form(""),
    prep_time: Optional[str] = Form(None),
    cook_time: Optional[str] = Form(None),
    servings: Optional[str] = Form(None),
    difficulty: Optional[str] = Form(None),
    ingredients: str = Form(""),
    instructions: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    user: CurrentUser = Depends(get_current_user),
    service: RecipeService = Depends(get_recipe_service),
):
    try:
        data = RecipeIn(
            title=title,
            description=description,
            prep_time=prep_time,
            cook_time=cook_time,
            servings=servings,
            difficulty=difficulty,
            ingredients=ingredients,
            instructions=instructions,
            image_url=image_url,
        )
    except PydanticValidationError as e:
        raise ValidationError(first_error_message(e.errors()), details=error_details(e.errors()))

    image_bytes = await image.read() if image is not None else None
    return await service.create(
        user.id, data,
        image_bytes=image_bytes,
        image_filename=image.filename if image is not None else None,
    )


# ============= GET ROUTES (SPECIFIC FIRST, DYNAMIC LAST) =============

@router.get("/cards", response_model=List[RecipeCardOut])
async def get_recipe_cards(service: RecipeService = Depends(get_recipe_service)):
    return await service.cards()


@router.get("/search", response_model=List[RecipeCardOut])
async def search_recipes(query: Optional[str] = None, service: RecipeService = Depends(get_recipe_service)):
    return await service.search(query)


@router.get("/me", response_model=List[RecipeCardOut])
async def get_my_recipes(user: CurrentUser = Depends(get_current_user),
                         service: RecipeService = Depends(get_recipe_service)):
    return await service.mine(user.id)


@router.get("/{recipe_id}/details", response_model=RecipeDetailOut)
async def get_recipe_details(recipe_id: str, service: RecipeService = Depends(get_recipe_service)):
    return await service.details(recipe_id)


@router.get("/{recipe_id}/comments", response_model=List[CommentOut])
async def get_recipe_comments(recipe_id: str, service: InteractionService = Depends(get_interaction_service)):
    return await service.list_comments(recipe_id)


@router.get("/{recipe_id}/like/status", response_model=LikeStatusOut)
async def get_like_status(recipe_id: str,
                          user: CurrentUser = Depends(get_current_user),
                          service: InteractionService = Depends(get_interaction_service)):
    return await service.get_like_status(recipe_id, user.id)


@router.delete("/{recipe_id}", response_model=MessageOut)
async def delete_recipe(recipe_id: str,
                        user: CurrentUser = Depends(get_current_user),
                        service: RecipeService = Depends(get_recipe_service)):
    return await service.delete(recipe_id, user.id)

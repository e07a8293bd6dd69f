"""
Recipe Service - create, list, search, details and owner-only delete
"""
import logging
import re
from typing import Dict, List, Optional

from fastapi import Depends

from core.errors import AuthorizationError, NotFoundError, StoreError
from core.interactions.service import InteractionService
from core.user_management.service import ProfileService
from database.mongo import (
    RECIPE_COMMENTS,
    RECIPE_INGREDIENTS,
    RECIPE_INSTRUCTIONS,
    RECIPE_LIKES,
    RECIPE_RATINGS,
    RECIPES,
)
from database.store import MongoStore, gather_all, get_store, utcnow
from models.recipe_model import RecipeIn
from utils.image_storage import ImageStorage, get_image_storage

logger = logging.getLogger(__name__)

NEWEST_FIRST = [("created_at", -1)]

RECIPE_CHILDREN = (RECIPE_INGREDIENTS, RECIPE_INSTRUCTIONS, RECIPE_LIKES, RECIPE_RATINGS, RECIPE_COMMENTS)

CARD_FIELDS = {
    "_id": 1, "title": 1, "description": 1, "image_path": 1, "image_url": 1,
    "prep_time": 1, "cook_time": 1, "servings": 1, "difficulty": 1,
    "user_id": 1, "created_at": 1,
}


class RecipeService:

    def __init__(self, store: MongoStore, images: ImageStorage,
                 interactions: Optional[InteractionService] = None,
                 profiles: Optional[ProfileService] = None):
        self.store = store
        self.images = images
        self.profiles = profiles or ProfileService(store)
        self.interactions = interactions or InteractionService(store, self.profiles)

    # ==================== CREATE ====================

    async def create(self, user_id: str, data: RecipeIn,
                     image_bytes: Optional[bytes] = None, image_filename: Optional[str] = None) -> Dict:
        """
        Recipe, then ingredients, then instructions. No rollback: a failed
        ingredient/instruction insert leaves the recipe in place.
        """
        stored_image = None
        if image_bytes:
            stored_image = await self.images.upload_file(image_bytes, image_filename)
        elif data.image_url:
            stored_image = await self.images.upload_from_url(data.image_url)

        now = utcnow()
        recipe = await self.store.insert(RECIPES, {
            "user_id": user_id,
            "title": data.title,
            "description": data.description,
            "prep_time": data.prep_time,
            "cook_time": data.cook_time,
            "servings": data.servings,
            "difficulty": data.difficulty,
            "image_path": stored_image["path"] if stored_image else None,
            "image_url": stored_image["url"] if stored_image else None,
            "created_at": now,
            "updated_at": now,
        })

        await self.store.insert_many(RECIPE_INGREDIENTS, [
            {"recipe_id": recipe["id"], "ingredient": ingredient, "quantity": "1", "unit": "unit"}
            for ingredient in data.ingredients
        ])
        await self.store.insert_many(RECIPE_INSTRUCTIONS, [
            {"recipe_id": recipe["id"], "step_number": index + 1, "instruction": instruction}
            for index, instruction in enumerate(data.instructions)
        ])

        logger.info(f"Recipe {recipe['id']} created by user {user_id}")
        return {**recipe, "ingredients": data.ingredients, "instructions": data.instructions}

    # ==================== LISTINGS ====================

    async def _card(self, recipe: Dict) -> Dict:
        username, likes_count = await gather_all(
            self._username_or_none(recipe["user_id"]),
            self.interactions.likes_count(recipe["id"]),
        )
        return {
            **recipe,
            "user": {"username": username} if username else None,
            "likes_count": likes_count,
        }

    async def _username_or_none(self, user_id: str) -> Optional[str]:
        # cards and details show no owner rather than failing
        try:
            return await self.profiles.get_username(user_id)
        except StoreError as e:
            logger.warning(f"User fetch error for {user_id}: {e.message}")
            return None

    async def _cards(self, recipes: List[Dict]) -> List[Dict]:
        return await gather_all(*(self._card(r) for r in recipes))

    async def cards(self) -> List[Dict]:
        recipes = await self.store.find(RECIPES, sort=NEWEST_FIRST, projection=CARD_FIELDS)
        return await self._cards(recipes)

    async def search(self, query: Optional[str]) -> List[Dict]:
        """Case-insensitive substring match on title or description"""
        pattern = {"$regex": re.escape((query or "").strip()), "$options": "i"}
        recipes = await self.store.find(
            RECIPES,
            {"$or": [{"title": pattern}, {"description": pattern}]},
            sort=NEWEST_FIRST,
            projection=CARD_FIELDS,
        )
        return await self._cards(recipes)

    async def mine(self, user_id: str) -> List[Dict]:
        recipes, username = await gather_all(
            self.store.find(RECIPES, {"user_id": user_id}, sort=NEWEST_FIRST),
            self.profiles.require_username(user_id),
        )
        likes = await gather_all(*(self.interactions.likes_count(r["id"]) for r in recipes))
        return [
            {**recipe, "user": {"username": username}, "likes_count": count}
            for recipe, count in zip(recipes, likes)
        ]

    # ==================== DETAILS ====================

    async def details(self, recipe_id: str) -> Dict:
        recipe = await self.store.find_one(RECIPES, {"id": recipe_id})
        if not recipe:
            raise NotFoundError("Recipe not found")

        username, ingredients, instructions, likes_count, rating = await gather_all(
            self._username_or_none(recipe["user_id"]),
            self.store.find(RECIPE_INGREDIENTS, {"recipe_id": recipe_id}),
            self.store.find(RECIPE_INSTRUCTIONS, {"recipe_id": recipe_id}, sort=[("step_number", 1)]),
            self.interactions.likes_count(recipe_id),
            self.interactions.rating_summary(recipe_id),
        )
        return {
            **recipe,
            "user": {"username": username} if username else None,
            "ingredients": ingredients,
            "instructions": instructions,
            "interactions": {"likes_count": likes_count, "rating": rating},
        }

    # ==================== DELETE ====================

    async def delete(self, recipe_id: str, user_id: str) -> Dict:
        recipe = await self.store.find_one(RECIPES, {"id": recipe_id}, {"_id": 1, "user_id": 1, "image_path": 1})
        if not recipe:
            raise NotFoundError("Recipe not found")

        if recipe.get("user_id") != user_id:
            logger.warning(f"Unauthorized delete attempt: User {user_id} tried to delete recipe {recipe_id} owned by {recipe.get('user_id')}")
            raise AuthorizationError("Not authorized to delete this recipe")

        await self.store.delete(RECIPES, {"id": recipe_id})
        logger.info(f"Recipe {recipe_id} deleted by user {user_id}")

        removed = await gather_all(*(
            self.store.delete(collection, {"recipe_id": recipe_id})
            for collection in RECIPE_CHILDREN
        ))
        logger.info(f"🗑️ Removed {sum(removed)} related records for recipe {recipe_id}")

        if recipe.get("image_path"):
            await self.images.delete(recipe["image_path"])

        return {"message": "Recipe deleted successfully"}


def get_recipe_service(store: MongoStore = Depends(get_store),
                       images: ImageStorage = Depends(get_image_storage)) -> RecipeService:
    return RecipeService(store, images)

"""
Interaction Service - likes, ratings and comments on recipes

Aggregates (likes count, rating average/count, comments count) are computed
on read from the interaction collections. Independent sub-queries are issued
concurrently and joined; any failure fails the whole call.
"""
import logging
from typing import Dict, List, Optional

from fastapi import Depends

from core.errors import DuplicateRecordError, NotFoundError
from core.user_management.service import ProfileService
from database.mongo import RECIPE_COMMENTS, RECIPE_LIKES, RECIPE_RATINGS, RECIPES
from database.store import MongoStore, gather_all, get_store, utcnow

logger = logging.getLogger(__name__)


def average_rating(ratings: List[int]) -> float:
    """Arithmetic mean; exactly 0 for no ratings."""
    if not ratings:
        return 0
    return sum(ratings) / len(ratings)


class InteractionService:

    def __init__(self, store: MongoStore, profiles: Optional[ProfileService] = None):
        self.store = store
        self.profiles = profiles or ProfileService(store)

    async def require_recipe(self, recipe_id: str) -> Dict:
        recipe = await self.store.find_one(RECIPES, {"id": recipe_id}, {"_id": 1, "user_id": 1})
        if not recipe:
            raise NotFoundError("Recipe not found")
        return recipe

    # ==================== AGGREGATES ====================

    async def likes_count(self, recipe_id: str) -> int:
        return await self.store.count(RECIPE_LIKES, {"recipe_id": recipe_id})

    async def comments_count(self, recipe_id: str) -> int:
        return await self.store.count(RECIPE_COMMENTS, {"recipe_id": recipe_id})

    async def rating_summary(self, recipe_id: str) -> Dict:
        rows = await self.store.find(RECIPE_RATINGS, {"recipe_id": recipe_id}, projection={"rating": 1})
        ratings = [r["rating"] for r in rows if r.get("rating") is not None]
        return {"average": average_rating(ratings), "count": len(ratings)}

    async def get_stats(self, recipe_id: str) -> Dict:
        """
        Stats do not check that the recipe exists; an unknown id reports zeros.
        """
        likes, rating, comments = await gather_all(
            self.likes_count(recipe_id),
            self.rating_summary(recipe_id),
            self.comments_count(recipe_id),
        )
        return {"likes_count": likes, "rating": rating, "comments_count": comments}

    async def get_like_status(self, recipe_id: str, user_id: str) -> Dict:
        # find_one -> None is "not liked"; a store failure raises StoreError
        like, likes = await gather_all(
            self.store.find_one(RECIPE_LIKES, {"recipe_id": recipe_id, "user_id": user_id}, {"_id": 1}),
            self.likes_count(recipe_id),
        )
        return {"liked": like is not None, "likes_count": likes}

    # ==================== LIKE TOGGLE ====================

    async def toggle_like(self, recipe_id: str, user_id: str) -> Dict:
        """
        Liked -> delete the like; not liked -> insert one. A concurrent toggle that
        inserted first trips the unique (recipe_id, user_id) index: still liked.
        """
        await self.require_recipe(recipe_id)

        key = {"recipe_id": recipe_id, "user_id": user_id}
        existing = await self.store.find_one(RECIPE_LIKES, key, {"_id": 1})

        if existing:
            await self.store.delete(RECIPE_LIKES, key)
            logger.info(f"➖ User {user_id} unliked recipe {recipe_id}")
            return {"liked": False}

        try:
            await self.store.insert(RECIPE_LIKES, {**key, "created_at": utcnow()})
        except DuplicateRecordError:
            logger.info(f"Like for recipe {recipe_id} by {user_id} already present")
        else:
            logger.info(f"➕ User {user_id} liked recipe {recipe_id}")
        return {"liked": True}

    # ==================== RATING ====================

    async def set_rating(self, recipe_id: str, user_id: str, rating: int) -> Dict:
        await self.require_recipe(recipe_id)

        now = utcnow()
        record = await self.store.upsert(
            RECIPE_RATINGS,
            {"recipe_id": recipe_id, "user_id": user_id},
            {"rating": int(rating), "updated_at": now},
            on_insert={"created_at": now},
        )
        logger.info(f"⭐ User {user_id} rated recipe {recipe_id}: {rating}")
        return record

    # ==================== COMMENTS ====================

    async def add_comment(self, recipe_id: str, user_id: str, comment: str) -> Dict:
        await self.require_recipe(recipe_id)

        record = await self.store.insert(RECIPE_COMMENTS, {
            "recipe_id": recipe_id,
            "user_id": user_id,
            "comment": comment,
            "created_at": utcnow(),
        })
        logger.info(f"💬 Comment {record['id']} added to recipe {recipe_id} by {user_id}")
        return record

    async def list_comments(self, recipe_id: str) -> List[Dict]:
        comments = await self.store.find(
            RECIPE_COMMENTS, {"recipe_id": recipe_id}, sort=[("created_at", 1)]
        )
        usernames = await gather_all(
            *(self.profiles.username_or_placeholder(c["user_id"]) for c in comments)
        )
        return [
            {
                "id": c["id"],
                "comment": c.get("comment"),
                "created_at": c.get("created_at"),
                "username": username,
                "user_id": c["user_id"],
            }
            for c, username in zip(comments, usernames)
        ]


def get_interaction_service(store: MongoStore = Depends(get_store)) -> InteractionService:
    return InteractionService(store)

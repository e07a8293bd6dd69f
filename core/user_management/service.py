"""
User Profile Service - usernames shown next to recipes and comments
"""
import logging
from typing import Dict, Optional

from fastapi import Depends

from core.errors import NotFoundError, StoreError
from database.mongo import USER_PROFILES
from database.store import MongoStore, get_store, utcnow
from models.user_model import CurrentUser

logger = logging.getLogger(__name__)

UNKNOWN_USER = "Unknown User"


class ProfileService:

    def __init__(self, store: MongoStore):
        self.store = store

    async def get_profile(self, user_id: str) -> Optional[Dict]:
        return await self.store.find_one(USER_PROFILES, {"user_id": user_id})

    async def get_username(self, user_id: str) -> Optional[str]:
        profile = await self.get_profile(user_id)
        return profile.get("username") if profile else None

    async def username_or_placeholder(self, user_id: str) -> str:
        """
        Lookup used while assembling lists: a missing profile or a failed lookup
        yields the placeholder instead of failing the whole list.
        """
        try:
            username = await self.get_username(user_id)
        except StoreError as e:
            logger.warning(f"User fetch error for {user_id}: {e.message}")
            return UNKNOWN_USER
        if not username:
            logger.warning(f"No profile for user {user_id}")
            return UNKNOWN_USER
        return username

    async def require_username(self, user_id: str) -> str:
        username = await self.get_username(user_id)
        if not username:
            raise NotFoundError("Profile not found")
        return username

    async def save_profile(self, user_id: str, username: str) -> Dict:
        now = utcnow()
        profile = await self.store.upsert(
            USER_PROFILES,
            {"user_id": user_id},
            {"username": username.strip(), "updated_at": now},
            on_insert={"created_at": now},
        )
        logger.info(f"Profile saved for user {user_id}")
        return profile

    async def me(self, user: CurrentUser) -> Dict:
        username = await self.get_username(user.id)
        if not username:
            username = user.email.split("@")[0] if user.email else UNKNOWN_USER
        return {"id": user.id, "email": user.email, "username": username}


def get_profile_service(store: MongoStore = Depends(get_store)) -> ProfileService:
    return ProfileService(store)

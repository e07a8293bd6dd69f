"""
Profile Routes - the username record for a verified identity.
Sign-up, login and password flows belong to the identity provider.
"""
from fastapi import APIRouter, Depends

from core.auth.dependencies import get_current_user
from core.user_management.service import ProfileService, get_profile_service
from models.user_model import CurrentUser, MeResponse, ProfileIn, ProfileSavedOut

auth_router = APIRouter(prefix="/auth", tags=["Authentication"])


@auth_router.post("/profile", response_model=ProfileSavedOut)
async def save_profile(payload: ProfileIn,
                       user: CurrentUser = Depends(get_current_user),
                       service: ProfileService = Depends(get_profile_service)):
    profile = await service.save_profile(user.id, payload.username)
    return {"message": "Profile saved", "profile": profile}


@auth_router.get("/me", response_model=MeResponse)
async def me(user: CurrentUser = Depends(get_current_user),
             service: ProfileService = Depends(get_profile_service)):
    return {"user": await service.me(user)}

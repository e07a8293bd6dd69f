from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime


class RatingIn(BaseModel):
    """Body for POST /interactions/{id}/rate"""
    rating: int = Field(..., ge=1, le=5, description="Rating must be between 1 and 5 stars")


class CommentIn(BaseModel):
    """Body for POST /interactions/{id}/comment - no length or emptiness rule"""
    comment: str


class LikeToggleOut(BaseModel):
    liked: bool


class LikeStatusOut(BaseModel):
    liked: bool
    likes_count: int = 0


class RatingSummary(BaseModel):
    average: float = 0
    count: int = 0


class InteractionStatsOut(BaseModel):
    likes_count: int = 0
    rating: RatingSummary = Field(default_factory=RatingSummary)
    comments_count: int = 0


class WriteResult(BaseModel):
    """``data`` holds the written record(s), as a list"""
    success: bool = True
    data: List[Dict[str, Any]] = []


class CommentOut(BaseModel):
    id: str
    comment: Optional[str] = None
    created_at: Optional[datetime] = None
    username: str
    user_id: str

import json
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime

Difficulty = Literal["easy", "medium", "hard"]


class RecipeIn(BaseModel):
    """Model for creating a recipe - fields arrive as multipart form strings"""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    prep_time: Optional[int] = Field(None, ge=0, le=1440, description="Minutes")
    cook_time: Optional[int] = Field(None, ge=0, le=1440, description="Minutes")
    servings: Optional[int] = Field(None, ge=0, le=100)
    difficulty: Optional[Difficulty] = None
    ingredients: List[str] = []
    instructions: List[str] = []
    image_url: Optional[str] = None

    @field_validator("title")
    @classmethod
    def strip_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator("prep_time", "cook_time", "servings", "image_url", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        # Empty form fields come through as ""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("difficulty", mode="before")
    @classmethod
    def normalize_difficulty(cls, v):
        if isinstance(v, str):
            return v.strip().lower() or None
        return v

    @field_validator("ingredients", mode="before")
    @classmethod
    def split_ingredients(cls, v):
        # "flour, eggs , ,milk" -> ["flour", "eggs", "milk"]
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [i.strip() for i in v if isinstance(i, str) and i.strip()]

    @field_validator("instructions", mode="before")
    @classmethod
    def parse_instructions(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return []
        if isinstance(v, str):
            try:
                v = json.loads(v)
            except json.JSONDecodeError:
                raise ValueError("Instructions must be a JSON array of steps")
        if not isinstance(v, list):
            raise ValueError("Instructions must be a JSON array of steps")
        return [str(step) for step in v]


class RecipeUser(BaseModel):
    username: str


class RecipeCardOut(BaseModel):
    id: str
    title: str
    description: Optional[str] = ""
    image_path: Optional[str] = None
    image_url: Optional[str] = None
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    servings: Optional[int] = None
    difficulty: Optional[str] = None
    user_id: str
    created_at: Optional[datetime] = None
    user: Optional[RecipeUser] = None
    likes_count: int = 0


class RecipeCreatedOut(BaseModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = ""
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    servings: Optional[int] = None
    difficulty: Optional[str] = None
    image_path: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    ingredients: List[str] = []
    instructions: List[str] = []


class RecipeDetailOut(BaseModel):
    id: str
    user_id: str
    title: str
    description: Optional[str] = ""
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    servings: Optional[int] = None
    difficulty: Optional[str] = None
    image_path: Optional[str] = None
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    user: Optional[RecipeUser] = None
    ingredients: List[Dict[str, Any]] = []
    instructions: List[Dict[str, Any]] = []
    interactions: Dict[str, Any] = {}


class MessageOut(BaseModel):
    message: str

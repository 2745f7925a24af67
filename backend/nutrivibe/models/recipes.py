"""Recipe Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from .meal_plans import PrepTime


class SkillLevel(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class RecipeOptions(BaseModel):
    """Parameters for a single recipe recommendation."""

    recipe_request: str
    cuisine: Optional[str] = None
    dietary_restrictions: list[str] = Field(default_factory=list)
    cooking_time: PrepTime = PrepTime.MODERATE
    skill_level: SkillLevel = SkillLevel.MEDIUM
    ingredients: list[str] = Field(default_factory=list)


class RecipeRecord(BaseModel):
    """A row of the recipes table."""

    id: str
    user_id: str
    title: str
    description: Optional[str] = None
    calories: Optional[int] = None
    image_url: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

"""Nutrition education Pydantic models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class Difficulty(str, Enum):
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class NutritionEducationOptions(BaseModel):
    """Parameters for a nutrition lesson."""

    topic: str
    difficulty: Difficulty = Difficulty.BASIC
    cultural_context: bool = True
    practical_examples: bool = True

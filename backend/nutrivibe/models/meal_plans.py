"""Meal plan Pydantic models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class BudgetTier(str, Enum):
    """Daily food budget bands."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class PrepTime(str, Enum):
    """How much cooking time the user is willing to spend."""

    QUICK = "quick"
    MODERATE = "moderate"
    EXTENSIVE = "extensive"


class MealPlanOptions(BaseModel):
    """Parameters for a generated meal plan."""

    days: int = Field(default=7, ge=1, le=31)
    goal: Optional[str] = None
    dietary_restrictions: list[str] = Field(default_factory=list)
    cultural_preferences: list[str] = Field(default_factory=list)
    budget: BudgetTier = BudgetTier.MEDIUM
    meal_prep_time: PrepTime = PrepTime.MODERATE


class MealPlanRecord(BaseModel):
    """A row of the meal_plans table."""

    id: str
    user_id: str
    title: str
    summary: Optional[str] = None
    plan_date: Optional[str] = None
    total_days: Optional[int] = None
    estimated_calories: Optional[int] = None
    data: Optional[dict[str, Any]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def is_structured(self) -> bool:
        return bool(self.data and self.data.get("days"))

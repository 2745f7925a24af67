"""AI generation request/response models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from .profiles import UserProfile


class AIFeature(str, Enum):
    """The generation use-cases the service knows how to prompt for."""

    MEAL_PLAN_GENERATION = "meal_plan_generation"
    MEAL_PLAN_CUSTOMIZATION = "meal_plan_customization"
    RECIPE_RECOMMENDATION = "recipe_recommendation"
    NUTRITION_EDUCATION = "nutrition_education"
    CULTURAL_FOOD_UNDERSTANDING = "cultural_food_understanding"
    SHOPPING_LIST_GENERATION = "shopping_list_generation"
    SHOPPING_LIST_CUSTOMIZATION = "shopping_list_customization"
    BUDGET_OPTIMIZATION = "budget_optimization"


# Features whose builder output is sent as-is, without the advisor preamble
VERBATIM_FEATURES = frozenset({
    AIFeature.RECIPE_RECOMMENDATION,
    AIFeature.SHOPPING_LIST_GENERATION,
    AIFeature.SHOPPING_LIST_CUSTOMIZATION,
    AIFeature.BUDGET_OPTIMIZATION,
})


class GenerationRequest(BaseModel):
    """Input to the generation pipeline. Never persisted."""

    user_id: str
    feature: AIFeature
    prompt: str
    user_profile: UserProfile
    additional_context: Optional[dict[str, Any]] = None


class TokenUsage(BaseModel):
    """Token counts reported by the upstream API."""

    prompt: int = 0
    completion: int = 0
    total: int = 0


class UsageSnapshot(BaseModel):
    """Counters after a generation attempt."""

    daily_used: int = 0
    daily_limit: int = 0
    monthly_used: int = 0
    monthly_limit: int = 0


class UsageStatus(UsageSnapshot):
    """Quota state for a user."""

    can_generate: bool
    next_reset: str

    def snapshot(self) -> UsageSnapshot:
        return UsageSnapshot(
            daily_used=self.daily_used,
            daily_limit=self.daily_limit,
            monthly_used=self.monthly_used,
            monthly_limit=self.monthly_limit,
        )


class GenerationResult(BaseModel):
    """A successful upstream call."""

    content: str
    tokens: TokenUsage
    cost: float
    model: str
    attempts: int = 1


class GenerationResponse(BaseModel):
    """What callers of the pipeline get back."""

    success: bool
    content: str = ""
    tokens: TokenUsage = Field(default_factory=TokenUsage)
    cost: float = 0
    usage: UsageSnapshot = Field(default_factory=UsageSnapshot)
    error: Optional[str] = None
    error_code: Optional[str] = None  # quota_exceeded, profile_not_found, generation_failed

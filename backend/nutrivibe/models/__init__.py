"""Pydantic models for the NutriVibe API."""

from .profiles import (
    FitnessGoal,
    DietaryPreference,
    SubscriptionPlan,
    SubscriptionStatus,
    UserProfile,
    PlanDetails,
    SubscriptionSummary,
    UsageStats,
)
from .generation import (
    AIFeature,
    GenerationRequest,
    GenerationResponse,
    GenerationResult,
    TokenUsage,
    UsageSnapshot,
    UsageStatus,
)
from .meal_plans import (
    BudgetTier,
    PrepTime,
    MealPlanOptions,
    MealPlanRecord,
)
from .recipes import (
    SkillLevel,
    RecipeOptions,
    RecipeRecord,
)
from .nutrition import (
    Difficulty,
    NutritionEducationOptions,
)
from .shopping import (
    ShoppingListOptions,
    BudgetShoppingListOptions,
    ShoppingItem,
    ShoppingListRecord,
)

__all__ = [
    # Profiles
    "FitnessGoal",
    "DietaryPreference",
    "SubscriptionPlan",
    "SubscriptionStatus",
    "UserProfile",
    "PlanDetails",
    "SubscriptionSummary",
    "UsageStats",
    # Generation
    "AIFeature",
    "GenerationRequest",
    "GenerationResponse",
    "GenerationResult",
    "TokenUsage",
    "UsageSnapshot",
    "UsageStatus",
    # Meal plans
    "BudgetTier",
    "PrepTime",
    "MealPlanOptions",
    "MealPlanRecord",
    # Recipes
    "SkillLevel",
    "RecipeOptions",
    "RecipeRecord",
    # Nutrition
    "Difficulty",
    "NutritionEducationOptions",
    # Shopping
    "ShoppingListOptions",
    "BudgetShoppingListOptions",
    "ShoppingItem",
    "ShoppingListRecord",
]

"""AI endpoints - meal plans, recipes, nutrition education, shopping lists."""

from typing import Any, Awaitable, Optional

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel, Field

from nutrivibe.api.deps import get_current_user_id, get_user_profile
from nutrivibe.models.generation import AIFeature, GenerationResponse, UsageStatus
from nutrivibe.models.meal_plans import MealPlanOptions
from nutrivibe.models.nutrition import Difficulty, NutritionEducationOptions
from nutrivibe.models.profiles import UserProfile
from nutrivibe.models.recipes import RecipeOptions
from nutrivibe.models.shopping import BudgetShoppingListOptions, ShoppingListOptions
from nutrivibe.services import meal_plans, nutrition, recipes, shopping_lists
from nutrivibe.services.ai import AIService, get_ai_service
from nutrivibe.services.usage import ProfileNotFoundError, check_user_usage

router = APIRouter()

ERROR_STATUS = {
    "quota_exceeded": 429,
    "profile_not_found": 404,
    "usage_conflict": 409,
    "generation_failed": 502,
}


# ============================================================================
# Request Models
# ============================================================================

class MealPlanCustomizationRequest(BaseModel):
    current_meal_plan: str
    customization_request: str


class RecipeAlternativesRequest(BaseModel):
    original_recipe: str
    reason: str


class IngredientsRequest(BaseModel):
    ingredients: list[str] = Field(min_length=1)


class RecipeCustomizationRequest(BaseModel):
    original_recipe: str
    customization_request: str


class CulturalFoodsRequest(BaseModel):
    foods: list[str] = Field(min_length=1)


class HealthQuestionRequest(BaseModel):
    question: str


class MealTimingRequest(BaseModel):
    schedule: str


class SupplementsRequest(BaseModel):
    current_supplements: list[str] = []


class QuizRequest(BaseModel):
    level: Difficulty = Difficulty.BASIC


class ShoppingListCustomizationRequest(BaseModel):
    current_list: Any
    feedback: str


# ============================================================================
# Helpers
# ============================================================================

async def _run(generation: Awaitable[GenerationResponse]) -> GenerationResponse:
    """Await a generation and map failures onto HTTP errors."""
    try:
        response = await generation
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

    if not response.success:
        raise HTTPException(
            status_code=ERROR_STATUS.get(response.error_code, 500),
            detail={
                "error_code": response.error_code,
                "message": response.error,
                "usage": response.usage.model_dump(),
            },
        )
    return response


def _require(text: str, field: str) -> None:
    if not text.strip():
        raise HTTPException(status_code=400, detail=f"Missing {field}")


# ============================================================================
# Meal plans
# ============================================================================

@router.post("/meal-plan", response_model=GenerationResponse)
async def generate_meal_plan(
    body: MealPlanOptions,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    """Generate a multi-day meal plan."""
    return await _run(meal_plans.generate_meal_plan(user_id, profile, body))


@router.post("/meal-plan/customize", response_model=GenerationResponse)
async def customize_meal_plan(
    body: MealPlanCustomizationRequest,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    _require(body.customization_request, "customization_request")
    return await _run(meal_plans.customize_meal_plan(
        user_id, profile, body.current_meal_plan, body.customization_request
    ))


@router.post("/meal-plan/budget", response_model=GenerationResponse)
async def generate_budget_meal_plan(
    body: MealPlanOptions,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    return await _run(meal_plans.generate_budget_meal_plan(user_id, profile, body))


@router.post("/meal-plan/quick", response_model=GenerationResponse)
async def generate_quick_meal_plan(
    body: MealPlanOptions,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    return await _run(meal_plans.generate_quick_meal_plan(user_id, profile, body))


# ============================================================================
# Recipes
# ============================================================================

@router.post("/recipe", response_model=GenerationResponse)
async def recommend_recipe(
    body: RecipeOptions,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    """Generate one recipe for the requested dish."""
    _require(body.recipe_request, "recipe_request")
    return await _run(recipes.get_recipe_recommendation(user_id, profile, body))


@router.post("/recipe/alternatives", response_model=GenerationResponse)
async def recipe_alternatives(
    body: RecipeAlternativesRequest,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    _require(body.original_recipe, "original_recipe")
    return await _run(recipes.get_recipe_alternatives(user_id, profile, body.original_recipe, body.reason))


@router.post("/recipe/by-ingredients", response_model=GenerationResponse)
async def recipe_by_ingredients(
    body: IngredientsRequest,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    return await _run(recipes.get_recipes_by_ingredients(user_id, profile, body.ingredients))


@router.post("/recipe/customize", response_model=GenerationResponse)
async def customize_recipe(
    body: RecipeCustomizationRequest,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    _require(body.customization_request, "customization_request")
    return await _run(recipes.customize_recipe(
        user_id, profile, body.original_recipe, body.customization_request
    ))


@router.post("/cultural-foods", response_model=GenerationResponse)
async def cultural_foods(
    body: CulturalFoodsRequest,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    return await _run(recipes.get_cultural_food_understanding(user_id, profile, body.foods))


# ============================================================================
# Nutrition education
# ============================================================================

@router.post("/nutrition/education", response_model=GenerationResponse)
async def nutrition_education(
    body: NutritionEducationOptions,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    _require(body.topic, "topic")
    return await _run(nutrition.get_nutrition_education(user_id, profile, body))


@router.post("/nutrition/health-advice", response_model=GenerationResponse)
async def health_advice(
    body: HealthQuestionRequest,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    _require(body.question, "question")
    return await _run(nutrition.get_health_advice(user_id, profile, body.question))


@router.post("/nutrition/meal-timing", response_model=GenerationResponse)
async def meal_timing(
    body: MealTimingRequest,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    _require(body.schedule, "schedule")
    return await _run(nutrition.get_meal_timing_advice(user_id, profile, body.schedule))


@router.post("/nutrition/supplements", response_model=GenerationResponse)
async def supplement_advice(
    body: SupplementsRequest,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    return await _run(nutrition.get_supplement_advice(user_id, profile, body.current_supplements))


@router.post("/nutrition/quiz", response_model=GenerationResponse)
async def nutrition_quiz(
    body: QuizRequest,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    return await _run(nutrition.get_nutrition_quiz(user_id, profile, body.level))


# ============================================================================
# Shopping lists
# ============================================================================

@router.post("/shopping-list", response_model=GenerationResponse)
async def generate_shopping_list(
    body: ShoppingListOptions,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    return await _run(shopping_lists.generate_shopping_list(user_id, profile, body))


@router.post("/shopping-list/customize", response_model=GenerationResponse)
async def customize_shopping_list(
    body: ShoppingListCustomizationRequest,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    _require(body.feedback, "feedback")
    return await _run(shopping_lists.customize_shopping_list(
        user_id, profile, body.current_list, body.feedback
    ))


@router.post("/shopping-list/budget", response_model=GenerationResponse)
async def generate_budget_shopping_list(
    body: BudgetShoppingListOptions,
    user_id: str = Depends(get_current_user_id),
    profile: UserProfile = Depends(get_user_profile),
):
    return await _run(shopping_lists.generate_budget_shopping_list(user_id, profile, body))


# ============================================================================
# Usage and history
# ============================================================================

@router.get("/usage", response_model=UsageStatus)
async def get_usage(
    feature: Optional[AIFeature] = None,
    user_id: str = Depends(get_current_user_id),
):
    """Current quota state for the user."""
    try:
        return await check_user_usage(user_id, feature)
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/generations", response_model=list[dict])
async def get_generations(
    feature: Optional[AIFeature] = None,
    limit: int = 50,
    user_id: str = Depends(get_current_user_id),
    ai: AIService = Depends(get_ai_service),
):
    """Recorded generations (only populated when history recording is on)."""
    try:
        return await ai.get_user_generations(user_id, feature, limit)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))

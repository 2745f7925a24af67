"""
Saved artifact endpoints.

Persists generated meal plans, recipes and shopping lists, and exposes the
parser so clients can preview what a save would store.
"""

from enum import Enum
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from nutrivibe.models.meal_plans import MealPlanRecord
from nutrivibe.models.recipes import RecipeRecord
from nutrivibe.models.shopping import ShoppingListRecord
from nutrivibe.services.markdown_parser import (
    Parsed,
    parse_meal_plan,
    parse_recipe,
    parse_shopping_list,
)
from nutrivibe.services.persistence import (
    save_meal_plan,
    get_meal_plans,
    get_meal_plan,
    delete_meal_plan,
    save_recipe,
    save_recipes,
    get_recipes,
    get_recipe,
    delete_recipe,
    save_shopping_list,
    get_shopping_lists,
    get_shopping_list,
    update_shopping_item_checked,
    delete_shopping_list,
)

router = APIRouter(prefix="/api/artifacts", tags=["artifacts"])


# ============================================================================
# Request Models
# ============================================================================

class SaveArtifactRequest(BaseModel):
    """Generated content to store."""
    title: str = ""
    content: str


class SaveRecipesRequest(BaseModel):
    content: str


class CheckItemRequest(BaseModel):
    checked: bool


class ArtifactKind(str, Enum):
    MEAL_PLAN = "meal_plan"
    RECIPE = "recipe"
    SHOPPING_LIST = "shopping_list"


class ParseRequest(BaseModel):
    kind: ArtifactKind
    content: str


class ParseResponse(BaseModel):
    parsed: bool
    source: Optional[str] = None
    record: Optional[dict[str, Any]] = None
    raw_text: Optional[str] = None


PARSERS = {
    ArtifactKind.MEAL_PLAN: parse_meal_plan,
    ArtifactKind.RECIPE: parse_recipe,
    ArtifactKind.SHOPPING_LIST: parse_shopping_list,
}


def _require_content(content: str) -> None:
    if not content.strip():
        raise HTTPException(status_code=400, detail="content is required")


# ============================================================================
# Meal plans
# ============================================================================

@router.post("/meal-plans", response_model=dict)
async def create_meal_plan(
    request: SaveArtifactRequest,
    user_id: str = Query(..., description="User ID"),
) -> dict:
    """Save a generated meal plan.

    Returns:
        {id: str, created: bool}
    """
    _require_content(request.content)
    try:
        plan_id = await save_meal_plan(user_id, request.title, request.content)
        return {"id": plan_id, "created": True}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/meal-plans", response_model=list[MealPlanRecord])
async def list_meal_plans(
    user_id: str = Query(..., description="User ID"),
    limit: int = Query(20, description="Maximum plans to return"),
) -> list[MealPlanRecord]:
    try:
        return await get_meal_plans(user_id, limit)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/meal-plans/{plan_id}", response_model=MealPlanRecord)
async def read_meal_plan(
    plan_id: str,
    user_id: str = Query(..., description="User ID"),
) -> MealPlanRecord:
    try:
        return await get_meal_plan(plan_id, user_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/meal-plans/{plan_id}", response_model=dict)
async def remove_meal_plan(
    plan_id: str,
    user_id: str = Query(..., description="User ID"),
) -> dict:
    """Delete a meal plan and its meals."""
    try:
        await delete_meal_plan(plan_id, user_id)
        return {"deleted": True}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


# ============================================================================
# Recipes
# ============================================================================

@router.post("/recipes", response_model=dict)
async def create_recipe(
    request: SaveArtifactRequest,
    user_id: str = Query(..., description="User ID"),
) -> dict:
    """Save one generated recipe. The title in the content wins."""
    _require_content(request.content)
    try:
        recipe_id = await save_recipe(user_id, request.title, request.content)
        return {"id": recipe_id, "created": True}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/recipes/batch", response_model=dict)
async def create_recipes(
    request: SaveRecipesRequest,
    user_id: str = Query(..., description="User ID"),
) -> dict:
    """Save a JSON "recipes" array, or the whole content as one recipe."""
    _require_content(request.content)
    try:
        count = await save_recipes(user_id, request.content)
        return {"saved": count}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/recipes", response_model=list[RecipeRecord])
async def list_recipes(
    user_id: str = Query(..., description="User ID"),
    limit: int = Query(20, description="Maximum recipes to return"),
) -> list[RecipeRecord]:
    try:
        return await get_recipes(user_id, limit)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/recipes/{recipe_id}", response_model=RecipeRecord)
async def read_recipe(
    recipe_id: str,
    user_id: str = Query(..., description="User ID"),
) -> RecipeRecord:
    try:
        return await get_recipe(recipe_id, user_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/recipes/{recipe_id}", response_model=dict)
async def remove_recipe(
    recipe_id: str,
    user_id: str = Query(..., description="User ID"),
) -> dict:
    try:
        await delete_recipe(recipe_id, user_id)
        return {"deleted": True}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


# ============================================================================
# Shopping lists
# ============================================================================

@router.post("/shopping-lists", response_model=dict)
async def create_shopping_list(
    request: SaveArtifactRequest,
    user_id: str = Query(..., description="User ID"),
) -> dict:
    """Save a generated shopping list and its items."""
    _require_content(request.content)
    try:
        list_id = await save_shopping_list(user_id, request.title, request.content)
        return {"id": list_id, "created": True}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/shopping-lists", response_model=list[ShoppingListRecord])
async def list_shopping_lists(
    user_id: str = Query(..., description="User ID"),
    limit: int = Query(20, description="Maximum lists to return"),
) -> list[ShoppingListRecord]:
    try:
        return await get_shopping_lists(user_id, limit)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/shopping-lists/{list_id}", response_model=ShoppingListRecord)
async def read_shopping_list(
    list_id: str,
    user_id: str = Query(..., description="User ID"),
) -> ShoppingListRecord:
    """Get a shopping list with all its items."""
    try:
        return await get_shopping_list(list_id, user_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.patch("/shopping-lists/{list_id}/items/{item_id}", response_model=dict)
async def check_item(
    list_id: str,
    item_id: str,
    request: CheckItemRequest,
    user_id: str = Query(..., description="User ID"),
) -> dict:
    """Check or uncheck an item."""
    try:
        await update_shopping_item_checked(item_id, request.checked, user_id)
        return {"updated": True}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.delete("/shopping-lists/{list_id}", response_model=dict)
async def remove_shopping_list(
    list_id: str,
    user_id: str = Query(..., description="User ID"),
) -> dict:
    try:
        await delete_shopping_list(list_id, user_id)
        return {"deleted": True}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


# ============================================================================
# Parsing
# ============================================================================

@router.post("/parse", response_model=ParseResponse)
async def parse_content(request: ParseRequest) -> ParseResponse:
    """Run the parser without saving anything."""
    result = PARSERS[request.kind](request.content)
    if isinstance(result, Parsed):
        return ParseResponse(parsed=True, source=result.source, record=result.record)
    return ParseResponse(parsed=False, raw_text=result.raw_text)

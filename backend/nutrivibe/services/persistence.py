"""
Artifact persistence service.

Saves generated meal plans, recipes and shopping lists. A saved artifact's
data column always carries either the parsed structure or the raw model
output under "raw".
"""

import logging
import re
from datetime import date, datetime, timezone
from typing import Optional

from nutrivibe.models.meal_plans import MealPlanRecord
from nutrivibe.models.recipes import RecipeRecord
from nutrivibe.models.shopping import ShoppingItem, ShoppingListRecord
from nutrivibe.services.markdown_parser import (
    Parsed,
    extract_recipe_title,
    load_json_object,
    parse_meal_plan,
    parse_recipe,
    parse_shopping_list,
    shopping_categories,
)
from nutrivibe.services.supabase import get_supabase_client, TABLES

logger = logging.getLogger(__name__)

DEFAULT_MEAL_PLAN_SUMMARY = "AI Generated Meal Plan"

# 1800, "1,800", "350 kcal", "420.5"
CALORIE_PATTERN = re.compile(r"\d[\d,]*(?:\.\d+)?")


class PersistenceError(Exception):
    """A primary insert returned no row."""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _raw_data(content: str) -> dict:
    return {"raw": content, "generated_at": _now(), "format": "markdown"}


def _insert_one(table: str, values: dict) -> dict:
    client = get_supabase_client()
    result = client.table(TABLES[table]).insert(values).execute()
    if not result.data:
        raise PersistenceError(f"Failed to insert into {TABLES[table]}")
    return result.data[0]


def _to_calories(value) -> int:
    """Whole calories from a number or a string like "1,800 kcal"; 0 when absent."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    match = CALORIE_PATTERN.search(str(value))
    if not match:
        return 0
    return int(float(match.group(0).replace(",", "")))


def _day_calories(day: dict) -> int:
    total = _to_calories(day.get("total_calories") or day.get("totalCalories"))
    if total:
        return total
    return sum(_to_calories(meal.get("calories")) for meal in day.get("meals") or [] if isinstance(meal, dict))


def summarize_meal_plan(record: dict) -> dict:
    """Columns derived from a parsed meal plan."""
    days = [d for d in record.get("days") or [] if isinstance(d, dict)]
    plan_date = days[0].get("date") if days else None
    return {
        "summary": record.get("summary") or record.get("description") or DEFAULT_MEAL_PLAN_SUMMARY,
        "total_days": len(days),
        "estimated_calories": sum(_day_calories(d) for d in days),
        "plan_date": plan_date or date.today().isoformat(),
    }


# =============================================================================
# Meal plans
# =============================================================================

async def save_meal_plan(user_id: str, title: str, content: str) -> str:
    """
    Save a generated meal plan.

    Stores the parsed structure when the content parses, the raw text
    otherwise. Individual meals and the plan's shopping list are saved
    afterwards on a best-effort basis.

    Returns the meal plan ID.
    """
    parsed = parse_meal_plan(content)

    if isinstance(parsed, Parsed):
        data = dict(parsed.record)
        if not data.get("days"):
            data["raw"] = content
        columns = summarize_meal_plan(data)
    else:
        data = _raw_data(content)
        columns = {
            "summary": DEFAULT_MEAL_PLAN_SUMMARY,
            "total_days": 0,
            "estimated_calories": 0,
            "plan_date": date.today().isoformat(),
        }

    row = _insert_one("meal_plans", {
        "user_id": user_id,
        "title": title or "AI Meal Plan",
        "data": data,
        **columns,
    })
    plan_id = row["id"]
    logger.info(f"Saved meal plan {plan_id} for {user_id[:8]} ({columns['total_days']} days)")

    if data.get("days"):
        await save_meal_plan_details(plan_id, user_id, data)

    return plan_id


async def save_meal_plan_details(plan_id: str, user_id: str, record: dict) -> None:
    """Save per-meal rows and the embedded shopping list. Never raises."""
    try:
        meals = _meal_rows(plan_id, user_id, record)
        if meals:
            get_supabase_client().table(TABLES["meals"]).insert(meals).execute()
            logger.info(f"Saved {len(meals)} meals for meal plan {plan_id}")
    except Exception as e:
        logger.warning(f"Could not save individual meals for {plan_id}: {e}")

    try:
        shopping_list = record.get("shopping_list") or record.get("shoppingList")
        categories = shopping_categories(shopping_list)
        if any(c["items"] for c in categories):
            await _create_shopping_list(
                user_id,
                "Shopping List for Meal Plan",
                _flatten(categories),
                data={"categories": categories, "generated_at": _now()},
                meal_plan_id=plan_id,
            )
    except Exception as e:
        logger.error(f"Error saving shopping list from meal plan {plan_id}: {e}")


def _meal_rows(plan_id: str, user_id: str, record: dict) -> list[dict]:
    meals = []
    for day_index, day in enumerate(record.get("days") or []):
        if not isinstance(day, dict):
            continue
        for meal_index, meal in enumerate(day.get("meals") or []):
            if not isinstance(meal, dict):
                continue
            meals.append({
                "meal_plan_id": plan_id,
                "user_id": user_id,
                "day_number": day.get("day_number") or day_index + 1,
                "meal_order": meal_index + 1,
                "meal_type": meal.get("meal_type") or meal.get("type") or "unknown",
                "name": meal.get("name") or "Unnamed Meal",
                "calories": _to_calories(meal.get("calories")),
                "ingredients": meal.get("ingredients") or [],
                "instructions": meal.get("instructions") or [],
                "nutritional_notes": meal.get("nutritional_notes") or "",
                "data": meal,
            })
    return meals


async def get_meal_plans(user_id: str, limit: int = 20) -> list[MealPlanRecord]:
    rows = _list_rows("meal_plans", user_id, limit)
    return [MealPlanRecord.model_validate(row) for row in rows]


async def get_meal_plan(plan_id: str, user_id: str) -> MealPlanRecord:
    """Raises ValueError if the plan does not exist or belongs to someone else."""
    row = _get_row("meal_plans", plan_id, user_id, "Meal plan")
    return MealPlanRecord.model_validate(row)


async def delete_meal_plan(plan_id: str, user_id: str) -> bool:
    """Delete a plan and its meals. Its shopping list is kept but unlinked."""
    client = get_supabase_client()
    _get_row("meal_plans", plan_id, user_id, "Meal plan")
    client.table(TABLES["meals"]).delete().eq("meal_plan_id", plan_id).execute()
    (
        client.table(TABLES["shopping_lists"])
        .update({"meal_plan_id": None})
        .eq("meal_plan_id", plan_id)
        .eq("user_id", user_id)
        .execute()
    )
    return _delete_row("meal_plans", plan_id, user_id, "Meal plan")


# =============================================================================
# Recipes
# =============================================================================

def _recipe_calories(details: dict) -> Optional[int]:
    for key in ("calories per serving", "calories"):
        match = re.search(r"\d+", str(details.get(key) or ""))
        if match:
            return int(match.group(0))
    return None


async def save_recipe(user_id: str, title: str, content: str) -> str:
    """
    Save one generated recipe.

    The raw markdown is always kept; parsed sections are added when the
    recipe layout was recognized. Returns the recipe ID.
    """
    extracted = extract_recipe_title(content, default="")
    data = _raw_data(content)
    description = "AI Generated Recipe"
    calories = None

    parsed = parse_recipe(content)
    if isinstance(parsed, Parsed):
        data["sections"] = parsed.record
        description = parsed.record.get("description") or description
        calories = _recipe_calories(parsed.record.get("details") or {})

    row = _insert_one("recipes", {
        "user_id": user_id,
        "title": extracted or title or "AI Recipe",
        "description": description,
        "calories": calories,
        "image_url": None,
        "data": data,
    })
    logger.info(f"Saved recipe {row['id']} for {user_id[:8]}")
    return row["id"]


async def save_recipes(user_id: str, content: str) -> int:
    """
    Save a batch of recipes from a JSON {"recipes": [...]} payload.

    Anything else is stored as a single raw row. Returns the row count.
    """
    client = get_supabase_client()
    payload = load_json_object(content) or {}
    recipes = payload.get("recipes")

    if isinstance(recipes, list) and recipes:
        rows = []
        for recipe in recipes:
            if not isinstance(recipe, dict):
                continue
            nutrition = recipe.get("nutrition") if isinstance(recipe.get("nutrition"), dict) else {}
            rows.append({
                "user_id": user_id,
                "title": recipe.get("name") or recipe.get("title") or "AI Recipe",
                "description": recipe.get("description"),
                "calories": nutrition.get("calories"),
                "image_url": recipe.get("image"),
                "data": recipe,
            })
        if rows:
            client.table(TABLES["recipes"]).insert(rows).execute()
            logger.info(f"Saved {len(rows)} recipes for {user_id[:8]}")
            return len(rows)

    _insert_one("recipes", {
        "user_id": user_id,
        "title": "AI Recipes",
        "description": None,
        "data": {"raw": content, "generated_at": _now()},
    })
    return 1


async def get_recipes(user_id: str, limit: int = 20) -> list[RecipeRecord]:
    rows = _list_rows("recipes", user_id, limit)
    return [RecipeRecord.model_validate(row) for row in rows]


async def get_recipe(recipe_id: str, user_id: str) -> RecipeRecord:
    row = _get_row("recipes", recipe_id, user_id, "Recipe")
    return RecipeRecord.model_validate(row)


async def delete_recipe(recipe_id: str, user_id: str) -> bool:
    return _delete_row("recipes", recipe_id, user_id, "Recipe")


# =============================================================================
# Shopping lists
# =============================================================================

def _flatten(categories: list[dict]) -> list[ShoppingItem]:
    return [
        ShoppingItem(
            name=str(item["name"]),
            quantity=None if item.get("quantity") is None else str(item["quantity"]),
            category=category["category"],
        )
        for category in categories
        for item in category["items"]
    ]


async def _create_shopping_list(
    user_id: str,
    title: str,
    items: list[ShoppingItem],
    data: dict,
    meal_plan_id: Optional[str] = None,
) -> str:
    client = get_supabase_client()

    list_data = {"user_id": user_id, "title": title, "status": "active", "data": data}
    if meal_plan_id:
        list_data["meal_plan_id"] = meal_plan_id

    row = _insert_one("shopping_lists", list_data)
    list_id = row["id"]

    if items:
        rows = [
            {
                "list_id": list_id,
                "user_id": user_id,
                "name": item.name,
                "quantity": item.quantity,
                "category": item.category,
                "checked": False,
            }
            for item in items
        ]
        # Insert in batches of 100
        for i in range(0, len(rows), 100):
            client.table(TABLES["shopping_list_items"]).insert(rows[i:i + 100]).execute()
        logger.info(f"Inserted {len(rows)} items into shopping list {list_id}")

    return list_id


async def save_shopping_list(user_id: str, title: str, content: str) -> str:
    """
    Save a generated shopping list and its items.

    Items come from a JSON "items"/"categories" payload or from markdown
    bullets. The raw text is always kept on the list row. Returns the list ID.
    """
    data = _raw_data(content)
    items = []

    parsed = parse_shopping_list(content)
    if isinstance(parsed, Parsed):
        categories = parsed.record["categories"]
        items = _flatten(categories)
        if items:
            data["categories"] = categories
    if not items:
        logger.info(f"No items recognized in shopping list for {user_id[:8]}")
    return await _create_shopping_list(user_id, title or "AI Shopping List", items, data)


async def get_shopping_lists(user_id: str, limit: int = 20) -> list[ShoppingListRecord]:
    rows = _list_rows("shopping_lists", user_id, limit)
    return [ShoppingListRecord.model_validate(row) for row in rows]


async def get_shopping_list(list_id: str, user_id: str) -> ShoppingListRecord:
    """Get a list with its items. Raises ValueError if not found."""
    client = get_supabase_client()
    row = _get_row("shopping_lists", list_id, user_id, "Shopping list")
    items = (
        client.table(TABLES["shopping_list_items"])
        .select("*")
        .eq("list_id", list_id)
        .execute()
    )
    return ShoppingListRecord.model_validate({**row, "items": items.data or []})


async def update_shopping_item_checked(item_id: str, checked: bool, user_id: str) -> bool:
    client = get_supabase_client()
    result = (
        client.table(TABLES["shopping_list_items"])
        .update({"checked": checked})
        .eq("id", item_id)
        .eq("user_id", user_id)
        .execute()
    )
    if not result.data:
        raise ValueError(f"Shopping list item {item_id} not found")
    return True


async def delete_shopping_list(list_id: str, user_id: str) -> bool:
    client = get_supabase_client()
    _get_row("shopping_lists", list_id, user_id, "Shopping list")
    client.table(TABLES["shopping_list_items"]).delete().eq("list_id", list_id).execute()
    return _delete_row("shopping_lists", list_id, user_id, "Shopping list")


# =============================================================================
# Shared queries
# =============================================================================

def _list_rows(table: str, user_id: str, limit: int) -> list[dict]:
    client = get_supabase_client()
    result = (
        client.table(TABLES[table])
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return result.data or []


def _get_row(table: str, row_id: str, user_id: str, label: str) -> dict:
    client = get_supabase_client()
    result = (
        client.table(TABLES[table])
        .select("*")
        .eq("id", row_id)
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    if not result.data:
        raise ValueError(f"{label} {row_id} not found")
    return result.data[0]


def _delete_row(table: str, row_id: str, user_id: str, label: str) -> bool:
    client = get_supabase_client()
    result = (
        client.table(TABLES[table])
        .delete()
        .eq("id", row_id)
        .eq("user_id", user_id)
        .execute()
    )
    if not result.data:
        raise ValueError(f"{label} {row_id} not found")
    logger.info(f"Deleted {TABLES[table]} row {row_id}")
    return True

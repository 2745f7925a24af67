"""Shopping list Pydantic models."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

from .meal_plans import BudgetTier


class ShoppingListOptions(BaseModel):
    """Parameters for a generated shopping list."""

    meal_plan: list[str] = Field(default_factory=list)  # meal names to shop for
    budget: BudgetTier = BudgetTier.MEDIUM
    location: Optional[str] = None
    preferences: list[str] = Field(default_factory=list)


class BudgetShoppingListOptions(BaseModel):
    """Parameters for a shopping list capped at a naira amount."""

    meal_plan: Any
    budget: float = Field(gt=0)  # naira
    location: str


class ShoppingItem(BaseModel):
    """One line of a shopping list."""

    name: str
    quantity: Optional[str] = None
    category: str = "General"


class ShoppingListRecord(BaseModel):
    """A row of the shopping_lists table with its items."""

    id: str
    user_id: str
    title: str
    status: Optional[str] = "active"
    meal_plan_id: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    items: list[dict[str, Any]] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

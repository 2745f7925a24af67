"""User profile and subscription Pydantic models."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class FitnessGoal(str, Enum):
    """What the user is training or eating for."""

    WEIGHT_LOSS = "weight_loss"
    MUSCLE_GAIN = "muscle_gain"
    MAINTENANCE = "maintenance"
    ATHLETIC_PERFORMANCE = "athletic_performance"


class DietaryPreference(str, Enum):
    """Supported dietary patterns."""

    NONE = "none"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    KETO = "keto"
    PALEO = "paleo"
    MEDITERRANEAN = "mediterranean"


class SubscriptionPlan(str, Enum):
    """Subscription tiers."""

    FREE = "free"
    PRO_MONTHLY = "pro_monthly"
    PRO_ANNUAL = "pro_annual"


class SubscriptionStatus(str, Enum):
    """Billing state mirrored from Stripe."""

    ACTIVE = "active"
    CANCELED = "canceled"
    PAST_DUE = "past_due"
    UNPAID = "unpaid"
    TRIALING = "trialing"


class UserProfile(BaseModel):
    """A row of the profiles table.

    Enum-typed columns are kept as plain strings so that a value written by
    another client (or a new tier) does not make the whole row unreadable.
    """

    user_id: str
    id: Optional[str] = None
    full_name: Optional[str] = None

    fitness_goal: Optional[str] = None
    dietary_preference: Optional[str] = None
    allergies: list[str] = Field(default_factory=list)
    location: Optional[str] = None
    caloric_needs: Optional[int] = None

    subscription_plan: Optional[str] = SubscriptionPlan.FREE.value
    subscription_status: Optional[str] = None
    current_period_start: Optional[str] = None
    current_period_end: Optional[str] = None
    trial_end: Optional[str] = None
    cancel_at_period_end: Optional[bool] = None

    # Usage counters
    usage_ai_generations: int = 0  # monthly
    usage_ai_generations_daily: int = 0
    usage_ai_generations_reset_date: Optional[date] = None

    @field_validator("allergies", mode="before")
    @classmethod
    def _none_to_empty_list(cls, v):
        return v or []

    @field_validator("usage_ai_generations", "usage_ai_generations_daily", mode="before")
    @classmethod
    def _none_to_zero(cls, v):
        return v or 0

    @field_validator("usage_ai_generations_reset_date", mode="before")
    @classmethod
    def _date_only(cls, v):
        # Older rows stored a full ISO timestamp
        if isinstance(v, str) and len(v) > 10:
            return v[:10]
        return v

    @property
    def display_name(self) -> str:
        return self.full_name or "User"

    @property
    def allergies_text(self) -> str:
        return ", ".join(self.allergies) if self.allergies else "None"

    def context_lines(self) -> str:
        """Profile bullet list shared by the prompt templates."""
        return "\n".join([
            f"- Fitness Goal: {self.fitness_goal or 'Not specified'}",
            f"- Dietary Preference: {self.dietary_preference or 'None'}",
            f"- Allergies: {self.allergies_text}",
            f"- Location: {self.location or 'Nigeria'}",
            f"- Caloric Needs: {self.caloric_needs or 'Not specified'} calories/day",
        ])


class PlanDetails(BaseModel):
    """A purchasable subscription plan."""

    id: SubscriptionPlan
    name: str
    price: int  # in kobo (₦1 = 100 kobo)
    interval: str  # month, year
    features: list[str]
    popular: bool = False
    savings: Optional[int] = None


class SubscriptionSummary(BaseModel):
    """Subscription state shown on the dashboard."""

    plan: str
    status: str
    current_period_start: str
    current_period_end: str
    trial_end: Optional[str] = None
    cancel_at_period_end: bool = False
    ai_generations_remaining: int
    ai_generations_limit: int


class UsageStats(BaseModel):
    """Raw counters and limits for the settings page."""

    daily_usage: int
    monthly_usage: int
    daily_limit: int
    monthly_limit: int

"""
Subscription plan catalog and per-user subscription state.

Prices are in kobo (₦1 = 100 kobo). Checkout and billing changes happen in
Stripe; this module only reads what the webhook wrote to the profile.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from nutrivibe.models.profiles import (
    PlanDetails,
    SubscriptionPlan,
    SubscriptionStatus,
    SubscriptionSummary,
    UsageStats,
    UserProfile,
)
from nutrivibe.services.supabase import get_supabase_client, get_profile_row, TABLES
from nutrivibe.services.usage import check_user_usage, get_subscription_limits

logger = logging.getLogger(__name__)


PLANS = [
    PlanDetails(
        id=SubscriptionPlan.FREE,
        name="Free",
        price=0,
        interval="month",
        features=[
            "Basic meal plans (3 meals/day)",
            "Limited recipe database (50 recipes)",
            "Basic calorie tracking",
            "Basic grocery lists",
            "3 AI generations per day",
        ],
    ),
    PlanDetails(
        id=SubscriptionPlan.PRO_MONTHLY,
        name="Pro Monthly",
        price=250000,
        interval="month",
        features=[
            "Advanced meal plans with customization",
            "Full recipe database (500+ Nigerian & global)",
            "Smart grocery lists with market optimization",
            "Advanced progress analytics & trends",
            "Priority AI processing",
            "20 AI generations per day",
            "Meal prep schedules",
            "Macro tracking & optimization",
        ],
        popular=True,
    ),
    PlanDetails(
        id=SubscriptionPlan.PRO_ANNUAL,
        name="Pro Annual",
        price=2500000,
        interval="year",
        features=[
            "Everything in Pro Monthly plan",
            "2 months free (₦5,000 savings)",
            "Priority customer support",
            "Early access to new features",
            "Advanced nutrition coaching tips",
        ],
        savings=500000,
    ),
]

PLAN_NAMES = {plan.id.value: plan.name for plan in PLANS}
PRO_PLANS = {SubscriptionPlan.PRO_MONTHLY.value, SubscriptionPlan.PRO_ANNUAL.value}


def get_plans() -> list[PlanDetails]:
    return PLANS


def format_price(kobo: int) -> str:
    """250000 -> "₦2,500"."""
    naira = kobo / 100
    if naira == int(naira):
        return f"₦{int(naira):,}"
    return f"₦{naira:,.2f}"


def get_plan_name(plan: Optional[str]) -> str:
    return PLAN_NAMES.get(plan or "", "Unknown Plan")


def is_pro_plan(plan: Optional[str]) -> bool:
    return plan in PRO_PLANS


def _default_period() -> tuple[str, str]:
    now = datetime.now(timezone.utc)
    return now.isoformat(), (now + timedelta(days=30)).isoformat()


async def get_subscription_summary(user_id: str) -> SubscriptionSummary:
    """
    Subscription state plus today's remaining generations.

    Users without a profile see the free plan.
    """
    row = await get_profile_row(user_id)
    period_start, period_end = _default_period()

    if not row:
        limits = get_subscription_limits(SubscriptionPlan.FREE.value)
        return SubscriptionSummary(
            plan=SubscriptionPlan.FREE.value,
            status=SubscriptionStatus.ACTIVE.value,
            current_period_start=period_start,
            current_period_end=period_end,
            ai_generations_remaining=limits["daily"],
            ai_generations_limit=limits["daily"],
        )

    profile = UserProfile.model_validate(row)
    usage = await check_user_usage(user_id)

    return SubscriptionSummary(
        plan=profile.subscription_plan or SubscriptionPlan.FREE.value,
        status=profile.subscription_status or SubscriptionStatus.ACTIVE.value,
        current_period_start=profile.current_period_start or period_start,
        current_period_end=profile.current_period_end or period_end,
        trial_end=profile.trial_end,
        cancel_at_period_end=bool(profile.cancel_at_period_end),
        ai_generations_remaining=max(0, usage.daily_limit - usage.daily_used),
        ai_generations_limit=usage.daily_limit,
    )


async def get_usage_stats(user_id: str) -> UsageStats:
    """Raises ProfileNotFoundError when the user has no profile."""
    usage = await check_user_usage(user_id)
    return UsageStats(
        daily_usage=usage.daily_used,
        monthly_usage=usage.monthly_used,
        daily_limit=usage.daily_limit,
        monthly_limit=usage.monthly_limit,
    )


async def get_billing_history(user_id: str, limit: int = 50) -> list[dict]:
    client = get_supabase_client()
    result = (
        client.table(TABLES["billing_history"])
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return result.data or []

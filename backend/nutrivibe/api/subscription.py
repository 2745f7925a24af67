"""Subscription plan and usage endpoints."""

from fastapi import APIRouter, HTTPException, Query

from nutrivibe.models.profiles import SubscriptionSummary, UsageStats
from nutrivibe.services.subscriptions import (
    format_price,
    get_billing_history,
    get_plans,
    get_subscription_summary,
    get_usage_stats,
)
from nutrivibe.services.usage import ProfileNotFoundError, reset_user_usage

router = APIRouter(prefix="/api/subscription", tags=["subscription"])


@router.get("/plans", response_model=list[dict])
async def list_plans() -> list[dict]:
    """Plan catalog with display prices."""
    return [
        {**plan.model_dump(mode="json"), "display_price": format_price(plan.price)}
        for plan in get_plans()
    ]


@router.get("/summary", response_model=SubscriptionSummary)
async def subscription_summary(
    user_id: str = Query(..., description="User ID"),
) -> SubscriptionSummary:
    try:
        return await get_subscription_summary(user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/usage", response_model=UsageStats)
async def usage_stats(
    user_id: str = Query(..., description="User ID"),
) -> UsageStats:
    try:
        return await get_usage_stats(user_id)
    except ProfileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/billing-history", response_model=list[dict])
async def billing_history(
    user_id: str = Query(..., description="User ID"),
    limit: int = Query(50, description="Maximum entries to return"),
) -> list[dict]:
    try:
        return await get_billing_history(user_id, limit)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/usage/reset", response_model=dict)
async def reset_usage(
    user_id: str = Query(..., description="User ID"),
) -> dict:
    """Zero both usage counters (admin/support)."""
    try:
        reset = await reset_user_usage(user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    if not reset:
        raise HTTPException(status_code=404, detail=f"Profile for user {user_id} not found")
    return {"reset": True}

"""
Usage accounting for AI generations.

Every user has two counters on their profile row:

- usage_ai_generations_daily: generations since the start of the day
- usage_ai_generations: generations since the start of the month

plus usage_ai_generations_reset_date, the last day either counter was
touched. Counters are never reset by a job. They are reset lazily the first
time a row is read on a new day (daily) or in a new month (both), and the
reset is written back together with the new reset date.

Reservations are optimistic: the increment is an UPDATE filtered on the
counter values that were read, so two concurrent requests cannot both spend
the last slot. The loser re-reads and tries again.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from nutrivibe.config import get_settings
from nutrivibe.models.generation import AIFeature, UsageStatus
from nutrivibe.models.profiles import SubscriptionPlan, UserProfile
from nutrivibe.services.supabase import get_supabase_client, get_profile_row, TABLES

logger = logging.getLogger(__name__)
settings = get_settings()


PLAN_LIMITS = {
    SubscriptionPlan.FREE.value: {"daily": 3, "monthly": 50},
    SubscriptionPlan.PRO_MONTHLY.value: {"daily": 20, "monthly": 500},
    SubscriptionPlan.PRO_ANNUAL.value: {"daily": 20, "monthly": 500},
}

COUNTER_COLUMNS = (
    "usage_ai_generations",
    "usage_ai_generations_daily",
    "usage_ai_generations_reset_date",
)


class ProfileNotFoundError(Exception):
    """The user has no profile row."""


class QuotaExceededError(Exception):
    """The user has no generations left in the current period."""

    def __init__(self, status: UsageStatus):
        self.status = status
        super().__init__(
            "Daily or monthly AI generation limit reached. "
            "Upgrade to Pro for more generations."
        )


class UsageConflictError(Exception):
    """Counters kept changing underneath a reservation."""


@dataclass
class Reservation:
    """A quota slot taken ahead of an upstream call."""

    user_id: str
    day: date
    status: UsageStatus


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def get_subscription_limits(plan: Optional[str]) -> dict[str, int]:
    """Look up daily/monthly limits for a plan. Unknown plans get free limits."""
    return PLAN_LIMITS.get(plan or SubscriptionPlan.FREE.value, PLAN_LIMITS["free"])


def apply_calendar_reset(
    daily_used: int,
    monthly_used: int,
    reset_date: Optional[date],
    today: date,
) -> tuple[int, int, bool]:
    """Return (daily_used, monthly_used, stale) as of today.

    stale is True when the stored counters must be rewritten.
    """
    if reset_date is None:
        return 0, 0, True
    if reset_date == today:
        return daily_used, monthly_used, False
    if (reset_date.year, reset_date.month) == (today.year, today.month):
        return 0, monthly_used, True
    return 0, 0, True


def build_usage_status(
    plan: Optional[str],
    daily_used: int,
    monthly_used: int,
    today: date,
) -> UsageStatus:
    limits = get_subscription_limits(plan)
    return UsageStatus(
        daily_used=daily_used,
        daily_limit=limits["daily"],
        monthly_used=monthly_used,
        monthly_limit=limits["monthly"],
        can_generate=daily_used < limits["daily"] and monthly_used < limits["monthly"],
        next_reset=(today + timedelta(days=1)).isoformat(),
    )


async def _load_profile(user_id: str) -> tuple[dict, UserProfile]:
    row = await get_profile_row(user_id)
    if not row:
        raise ProfileNotFoundError(f"Profile for user {user_id} not found")
    return row, UserProfile.model_validate(row)


def _compare_and_set(user_id: str, observed: dict, values: dict) -> bool:
    """Update counters only if they still hold the observed values."""
    client = get_supabase_client()
    query = client.table(TABLES["profiles"]).update(values).eq("user_id", user_id)
    for column in COUNTER_COLUMNS:
        raw = observed.get(column)
        if raw is None:
            query = query.is_(column, "null")
        else:
            query = query.eq(column, raw)
    result = query.execute()
    return bool(result.data)


async def check_user_usage(
    user_id: str,
    feature: Optional[AIFeature] = None,
    today: Optional[date] = None,
) -> UsageStatus:
    """Get a user's quota state, applying any pending calendar reset.

    Limits are shared by all features; feature is accepted for logging.
    """
    today = today or today_utc()
    row, profile = await _load_profile(user_id)

    daily, monthly, stale = apply_calendar_reset(
        profile.usage_ai_generations_daily,
        profile.usage_ai_generations,
        profile.usage_ai_generations_reset_date,
        today,
    )
    if stale:
        written = _compare_and_set(user_id, row, {
            "usage_ai_generations_daily": daily,
            "usage_ai_generations": monthly,
            "usage_ai_generations_reset_date": today.isoformat(),
        })
        if written:
            logger.info(f"Reset usage counters for {user_id[:8]} (daily={daily}, monthly={monthly})")

    status = build_usage_status(profile.subscription_plan, daily, monthly, today)
    if not status.can_generate:
        logger.info(
            f"User {user_id[:8]} is out of quota for {feature.value if feature else 'ai'}: "
            f"{daily}/{status.daily_limit} daily, {monthly}/{status.monthly_limit} monthly"
        )
    return status


async def reserve_generation(user_id: str, today: Optional[date] = None) -> Reservation:
    """Take one generation slot, or raise QuotaExceededError.

    Increments both counters in one conditional update.
    """
    today = today or today_utc()

    for attempt in range(1, settings.usage_reservation_attempts + 1):
        row, profile = await _load_profile(user_id)
        daily, monthly, _ = apply_calendar_reset(
            profile.usage_ai_generations_daily,
            profile.usage_ai_generations,
            profile.usage_ai_generations_reset_date,
            today,
        )

        status = build_usage_status(profile.subscription_plan, daily, monthly, today)
        if not status.can_generate:
            logger.info(f"Quota exhausted for {user_id[:8]}: {daily} today, {monthly} this month")
            raise QuotaExceededError(status)

        if _compare_and_set(user_id, row, {
            "usage_ai_generations_daily": daily + 1,
            "usage_ai_generations": monthly + 1,
            "usage_ai_generations_reset_date": today.isoformat(),
        }):
            return Reservation(
                user_id=user_id,
                day=today,
                status=build_usage_status(profile.subscription_plan, daily + 1, monthly + 1, today),
            )

        logger.info(f"Usage counters for {user_id[:8]} changed concurrently (attempt {attempt})")

    raise UsageConflictError(f"Could not reserve a generation for {user_id}")


async def release_generation(reservation: Reservation) -> bool:
    """Give back a reserved slot after a failed generation.

    No-op if the counters have been reset since the reservation was taken.
    """
    user_id = reservation.user_id

    for _ in range(settings.usage_reservation_attempts):
        row, profile = await _load_profile(user_id)
        if profile.usage_ai_generations_reset_date != reservation.day:
            logger.info(f"Counters for {user_id[:8]} were reset; nothing to release")
            return False

        if _compare_and_set(user_id, row, {
            "usage_ai_generations_daily": max(0, profile.usage_ai_generations_daily - 1),
            "usage_ai_generations": max(0, profile.usage_ai_generations - 1),
            "usage_ai_generations_reset_date": reservation.day.isoformat(),
        }):
            return True

    logger.warning(f"Could not release generation for {user_id[:8]}")
    return False


async def reset_user_usage(user_id: str, today: Optional[date] = None) -> bool:
    """Zero both counters (e.g. after a plan change)."""
    today = today or today_utc()
    client = get_supabase_client()
    result = (
        client.table(TABLES["profiles"])
        .update({
            "usage_ai_generations": 0,
            "usage_ai_generations_daily": 0,
            "usage_ai_generations_reset_date": today.isoformat(),
        })
        .eq("user_id", user_id)
        .execute()
    )
    return bool(result.data)

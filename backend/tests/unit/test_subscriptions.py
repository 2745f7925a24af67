"""
Unit tests for the subscription catalog and summaries.
"""

import pytest
from unittest.mock import patch, AsyncMock

from nutrivibe.services.subscriptions import (
    format_price,
    get_plan_name,
    get_plans,
    get_subscription_summary,
    get_usage_stats,
    is_pro_plan,
)
from nutrivibe.services.usage import ProfileNotFoundError, build_usage_status
from datetime import date


class TestCatalog:
    """Tests for the plan catalog helpers."""

    @pytest.mark.unit
    def test_three_plans(self):
        plans = get_plans()
        assert [p.id.value for p in plans] == ["free", "pro_monthly", "pro_annual"]
        assert plans[1].popular is True
        assert plans[2].savings == 500000

    @pytest.mark.unit
    @pytest.mark.parametrize("kobo,expected", [
        (0, "₦0"),
        (250000, "₦2,500"),
        (2500000, "₦25,000"),
        (150050, "₦1,500.50"),
    ])
    def test_format_price(self, kobo, expected):
        assert format_price(kobo) == expected

    @pytest.mark.unit
    def test_plan_names(self):
        assert get_plan_name("pro_annual") == "Pro Annual"
        assert get_plan_name("gold") == "Unknown Plan"
        assert get_plan_name(None) == "Unknown Plan"

    @pytest.mark.unit
    def test_is_pro_plan(self):
        assert is_pro_plan("pro_monthly") is True
        assert is_pro_plan("free") is False
        assert is_pro_plan(None) is False


class TestSummary:
    """Tests for per-user subscription state."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_profile_defaults_to_free(self, test_user_id):
        with patch("nutrivibe.services.subscriptions.get_profile_row", AsyncMock(return_value=None)):
            summary = await get_subscription_summary(test_user_id)

        assert summary.plan == "free"
        assert summary.status == "active"
        assert summary.ai_generations_remaining == 3
        assert summary.ai_generations_limit == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_remaining_from_daily_usage(self, test_user_id, profile_row):
        row = {**profile_row, "subscription_plan": "pro_monthly", "cancel_at_period_end": True}
        usage = build_usage_status("pro_monthly", 5, 40, date(2026, 10, 19))
        with patch("nutrivibe.services.subscriptions.get_profile_row", AsyncMock(return_value=row)), \
             patch("nutrivibe.services.subscriptions.check_user_usage", AsyncMock(return_value=usage)):
            summary = await get_subscription_summary(test_user_id)

        assert summary.plan == "pro_monthly"
        assert summary.cancel_at_period_end is True
        assert summary.ai_generations_remaining == 15
        assert summary.ai_generations_limit == 20

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_usage_stats(self, test_user_id):
        usage = build_usage_status("free", 2, 9, date(2026, 10, 19))
        with patch("nutrivibe.services.subscriptions.check_user_usage", AsyncMock(return_value=usage)):
            stats = await get_usage_stats(test_user_id)

        assert stats.daily_usage == 2
        assert stats.monthly_usage == 9
        assert stats.monthly_limit == 50

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_usage_stats_missing_profile(self, test_user_id):
        with patch("nutrivibe.services.subscriptions.check_user_usage",
                   AsyncMock(side_effect=ProfileNotFoundError("missing"))):
            with pytest.raises(ProfileNotFoundError):
                await get_usage_stats(test_user_id)

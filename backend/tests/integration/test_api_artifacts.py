"""
Integration tests for saved artifact and subscription endpoints.
"""

import pytest
from unittest.mock import patch, AsyncMock

from nutrivibe.models.meal_plans import MealPlanRecord
from nutrivibe.services.usage import ProfileNotFoundError

USER = "test-user-00000000-0000-0000-0000-000000000000"


class TestArtifacts:
    """Tests for /api/artifacts."""

    @pytest.mark.integration
    def test_save_meal_plan(self, client):
        with patch("nutrivibe.api.artifacts.save_meal_plan", AsyncMock(return_value="plan-1")) as save:
            response = client.post(
                f"/api/artifacts/meal-plans?user_id={USER}",
                json={"title": "Week 1", "content": "## Day 1"},
            )

        assert response.status_code == 200
        assert response.json() == {"id": "plan-1", "created": True}
        save.assert_awaited_once_with(USER, "Week 1", "## Day 1")

    @pytest.mark.integration
    def test_blank_content_rejected(self, client):
        response = client.post(f"/api/artifacts/recipes?user_id={USER}", json={"content": "  "})
        assert response.status_code == 400

    @pytest.mark.integration
    def test_get_meal_plan(self, client):
        record = MealPlanRecord(id="plan-1", user_id=USER, title="Week 1", total_days=3)
        with patch("nutrivibe.api.artifacts.get_meal_plan", AsyncMock(return_value=record)):
            response = client.get(f"/api/artifacts/meal-plans/plan-1?user_id={USER}")

        assert response.status_code == 200
        assert response.json()["total_days"] == 3

    @pytest.mark.integration
    def test_missing_meal_plan_is_404(self, client):
        with patch("nutrivibe.api.artifacts.get_meal_plan",
                   AsyncMock(side_effect=ValueError("Meal plan plan-1 not found"))):
            response = client.get(f"/api/artifacts/meal-plans/plan-1?user_id={USER}")
        assert response.status_code == 404

    @pytest.mark.integration
    def test_check_item(self, client):
        with patch("nutrivibe.api.artifacts.update_shopping_item_checked", AsyncMock(return_value=True)) as update:
            response = client.patch(
                f"/api/artifacts/shopping-lists/list-1/items/item-1?user_id={USER}",
                json={"checked": True},
            )

        assert response.status_code == 200
        update.assert_awaited_once_with("item-1", True, USER)

    @pytest.mark.integration
    def test_parse_meal_plan(self, client, sample_meal_plan_markdown):
        response = client.post(
            "/api/artifacts/parse",
            json={"kind": "meal_plan", "content": sample_meal_plan_markdown},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["parsed"] is True
        assert data["source"] == "markdown"
        assert len(data["record"]["days"]) == 3

    @pytest.mark.integration
    def test_parse_unrecognized(self, client):
        response = client.post("/api/artifacts/parse", json={"kind": "recipe", "content": "just text"})

        data = response.json()
        assert data["parsed"] is False
        assert data["raw_text"] == "just text"


class TestSubscription:
    """Tests for /api/subscription."""

    @pytest.mark.integration
    def test_plans(self, client):
        response = client.get("/api/subscription/plans")

        assert response.status_code == 200
        plans = response.json()
        assert [p["id"] for p in plans] == ["free", "pro_monthly", "pro_annual"]
        assert plans[1]["display_price"] == "₦2,500"

    @pytest.mark.integration
    def test_usage_without_profile(self, client):
        with patch("nutrivibe.api.subscription.get_usage_stats",
                   AsyncMock(side_effect=ProfileNotFoundError("missing"))):
            response = client.get(f"/api/subscription/usage?user_id={USER}")
        assert response.status_code == 404

    @pytest.mark.integration
    def test_reset_usage(self, client):
        with patch("nutrivibe.api.subscription.reset_user_usage", AsyncMock(return_value=True)):
            response = client.post(f"/api/subscription/usage/reset?user_id={USER}")
        assert response.status_code == 200
        assert response.json() == {"reset": True}

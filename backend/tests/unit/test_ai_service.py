"""
Unit tests for the AI service: message building, retries and the quota-checked pipeline.
"""

import pytest
import httpx
import openai
from datetime import date
from unittest.mock import patch, AsyncMock, MagicMock

from nutrivibe.models.generation import AIFeature, GenerationRequest
from nutrivibe.services.ai import (
    AIService,
    GenerationError,
    build_messages,
    build_system_prompt,
    calculate_cost,
    generate_title,
)
from nutrivibe.services.retry import RetryPolicy
from nutrivibe.services.usage import (
    ProfileNotFoundError,
    QuotaExceededError,
    Reservation,
    UsageConflictError,
    build_usage_status,
)

TODAY = date(2026, 10, 19)


def make_completion(content="## Day 1\n### Breakfast (300 calories)", total_tokens=1000):
    """Build an object shaped like an OpenAI chat completion."""
    completion = MagicMock()
    completion.choices = [MagicMock()]
    completion.choices[0].message.content = content
    completion.usage.prompt_tokens = total_tokens // 2
    completion.usage.completion_tokens = total_tokens - total_tokens // 2
    completion.usage.total_tokens = total_tokens
    completion.model = "llama-3.3-70b-versatile"
    return completion


def status_error(status_code: int) -> openai.APIStatusError:
    request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
    return openai.APIStatusError(
        f"HTTP {status_code}",
        response=httpx.Response(status_code, request=request),
        body=None,
    )


def make_service(side_effect=None, attempts=3):
    client = MagicMock()
    client.chat.completions.create = AsyncMock(side_effect=side_effect)
    service = AIService(client=client, retry_policy=RetryPolicy(attempts=attempts, delay_seconds=0))
    return service, client.chat.completions.create


@pytest.fixture
def reservation(test_user_id):
    return Reservation(
        user_id=test_user_id,
        day=TODAY,
        status=build_usage_status("free", 1, 1, TODAY),
    )


@pytest.fixture
def meal_plan_request(test_user_id, sample_profile):
    return GenerationRequest(
        user_id=test_user_id,
        feature=AIFeature.MEAL_PLAN_GENERATION,
        prompt="Create a 3-day meal plan for Ada Okafor",
        user_profile=sample_profile,
    )


class TestHelpers:
    """Tests for cost, titles and prompt assembly."""

    @pytest.mark.unit
    def test_cost_is_flat_per_token(self):
        assert calculate_cost(1000) == pytest.approx(0.0005)
        assert calculate_cost(0) == 0

    @pytest.mark.unit
    def test_title_truncates_long_prompts(self):
        title = generate_title(AIFeature.RECIPE_RECOMMENDATION, "x" * 80)
        assert title == "Recipe Recommendation: " + "x" * 50 + "..."

    @pytest.mark.unit
    def test_system_prompt_carries_profile(self, sample_profile):
        prompt = build_system_prompt(sample_profile, AIFeature.NUTRITION_EDUCATION)
        assert "You are NutriVibe" in prompt
        assert "- Name: Ada Okafor" in prompt
        assert "- Dietary Preference: vegetarian" in prompt
        assert "- Allergies: peanuts" in prompt
        assert "For nutrition education, provide:" in prompt

    @pytest.mark.unit
    def test_system_prompt_defaults(self, test_user_id):
        from nutrivibe.models.profiles import UserProfile
        prompt = build_system_prompt(UserProfile(user_id=test_user_id), AIFeature.MEAL_PLAN_GENERATION)
        assert "- Name: User" in prompt
        assert "- Location: Nigeria" in prompt
        assert "- Allergies: None" in prompt

    @pytest.mark.unit
    def test_system_prompt_appends_context(self, sample_profile):
        prompt = build_system_prompt(sample_profile, AIFeature.MEAL_PLAN_GENERATION, {"days": 3})
        assert 'Additional Context: {"days": 3}' in prompt

    @pytest.mark.unit
    def test_verbatim_features_send_prompt_only(self, test_user_id, sample_profile):
        request = GenerationRequest(
            user_id=test_user_id,
            feature=AIFeature.RECIPE_RECOMMENDATION,
            prompt="Create a Nigerian recipe",
            user_profile=sample_profile,
        )
        assert build_messages(request) == [{"role": "system", "content": "Create a Nigerian recipe"}]

    @pytest.mark.unit
    def test_advisor_features_get_preamble(self, meal_plan_request):
        messages = build_messages(meal_plan_request)
        assert [m["role"] for m in messages] == ["system", "user"]
        assert messages[0]["content"].startswith("You are NutriVibe")
        assert messages[1]["content"] == meal_plan_request.prompt


class TestSend:
    """Tests for AIService.send."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success_reports_tokens_and_cost(self):
        service, create = make_service([make_completion("hello", total_tokens=2000)])
        result = await service.send("prompt", AIFeature.MEAL_PLAN_GENERATION)

        assert result.content == "hello"
        assert result.tokens.total == 2000
        assert result.cost == pytest.approx(0.001)
        assert result.attempts == 1
        kwargs = create.call_args.kwargs
        assert kwargs["messages"] == [{"role": "system", "content": "prompt"}]
        assert kwargs["stream"] is False

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fails_twice_then_succeeds(self):
        service, create = make_service([status_error(503), status_error(429), make_completion("ok")])
        result = await service.send("prompt", AIFeature.MEAL_PLAN_GENERATION)

        assert result.content == "ok"
        assert result.attempts == 3
        assert create.call_count == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_always_failing_raises_after_all_attempts(self):
        service, create = make_service(status_error(500), attempts=3)
        with pytest.raises(openai.APIStatusError):
            await service.send("prompt", AIFeature.MEAL_PLAN_GENERATION)
        assert create.call_count == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_terminal_error_single_attempt(self):
        service, create = make_service(status_error(401))
        with pytest.raises(openai.APIStatusError):
            await service.send("prompt", AIFeature.MEAL_PLAN_GENERATION)
        assert create.call_count == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_choices_is_generation_error(self):
        completion = make_completion()
        completion.choices = []
        service, create = make_service([completion])
        with pytest.raises(GenerationError):
            await service.send("prompt", AIFeature.MEAL_PLAN_GENERATION)
        assert create.call_count == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_usage_counts_zero_tokens(self):
        completion = make_completion("text")
        completion.usage = None
        service, _ = make_service([completion])
        result = await service.send("prompt", AIFeature.MEAL_PLAN_GENERATION)
        assert result.tokens.total == 0
        assert result.cost == 0


class TestGenerateContent:
    """Tests for the full generation pipeline."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success(self, meal_plan_request, reservation):
        service, _ = make_service([make_completion("## Day 1", total_tokens=1000)])
        with patch("nutrivibe.services.ai.reserve_generation", AsyncMock(return_value=reservation)), \
             patch("nutrivibe.services.ai.release_generation", AsyncMock()) as release:
            response = await service.generate_content(meal_plan_request)

        assert response.success is True
        assert response.content == "## Day 1"
        assert response.tokens.total == 1000
        assert response.cost == pytest.approx(0.0005)
        assert response.usage.daily_used == 1
        assert response.usage.daily_limit == 3
        release.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_quota_exceeded_never_calls_upstream(self, meal_plan_request):
        service, create = make_service([make_completion()])
        error = QuotaExceededError(build_usage_status("free", 3, 20, TODAY))
        with patch("nutrivibe.services.ai.reserve_generation", AsyncMock(side_effect=error)):
            response = await service.generate_content(meal_plan_request)

        assert response.success is False
        assert response.error_code == "quota_exceeded"
        assert response.usage.daily_used == 3
        assert "Upgrade to Pro" in response.error
        create.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_profile_fails_closed(self, meal_plan_request):
        service, create = make_service([make_completion()])
        with patch("nutrivibe.services.ai.reserve_generation",
                   AsyncMock(side_effect=ProfileNotFoundError("missing"))):
            response = await service.generate_content(meal_plan_request)

        assert response.success is False
        assert response.error_code == "profile_not_found"
        create.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_usage_conflict(self, meal_plan_request):
        service, create = make_service([make_completion()])
        with patch("nutrivibe.services.ai.reserve_generation",
                   AsyncMock(side_effect=UsageConflictError("busy"))):
            response = await service.generate_content(meal_plan_request)

        assert response.error_code == "usage_conflict"
        create.assert_not_called()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_upstream_failure_releases_reservation(self, meal_plan_request, reservation):
        service, create = make_service(status_error(500))
        with patch("nutrivibe.services.ai.reserve_generation", AsyncMock(return_value=reservation)), \
             patch("nutrivibe.services.ai.release_generation", AsyncMock(return_value=True)) as release:
            response = await service.generate_content(meal_plan_request)

        assert response.success is False
        assert response.error_code == "generation_failed"
        assert create.call_count == 3
        release.assert_awaited_once_with(reservation)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_release_failure_is_not_raised(self, meal_plan_request, reservation):
        service, _ = make_service(status_error(400))
        with patch("nutrivibe.services.ai.reserve_generation", AsyncMock(return_value=reservation)), \
             patch("nutrivibe.services.ai.release_generation", AsyncMock(side_effect=RuntimeError("db down"))):
            response = await service.generate_content(meal_plan_request)

        assert response.error_code == "generation_failed"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_generate_shortcut_builds_request(self, test_user_id, sample_profile, reservation):
        service, create = make_service([make_completion("Recipe: Moi Moi")])
        with patch("nutrivibe.services.ai.reserve_generation", AsyncMock(return_value=reservation)):
            response = await service.generate(
                test_user_id, sample_profile, AIFeature.RECIPE_RECOMMENDATION, "Create a recipe"
            )

        assert response.success is True
        assert create.call_args.kwargs["messages"] == [{"role": "system", "content": "Create a recipe"}]


class TestGenerationHistory:
    """Tests for the optional generation log."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_save_history_row(self, meal_plan_request, mock_supabase):
        service, _ = make_service()
        result = await make_service([make_completion("plan")])[0].send("p", AIFeature.MEAL_PLAN_GENERATION)

        with patch("nutrivibe.services.ai.get_supabase_client", return_value=mock_supabase):
            await service.save_generation_history(meal_plan_request, result)

        mock_supabase.table.assert_called_with("ai_generations")
        row = mock_supabase.query.insert.call_args[0][0]
        assert row["feature"] == "meal_plan_generation"
        assert row["content"] == "plan"
        assert row["title"].startswith("Meal Plan: ")
        assert row["metadata"]["user_profile"]["dietary_preference"] == "vegetarian"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_save_history_swallows_errors(self, meal_plan_request):
        service, _ = make_service()
        result = await make_service([make_completion("plan")])[0].send("p", AIFeature.MEAL_PLAN_GENERATION)

        with patch("nutrivibe.services.ai.get_supabase_client", side_effect=RuntimeError("db down")):
            await service.save_generation_history(meal_plan_request, result)

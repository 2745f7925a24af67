"""AI service - chat completion client and the generation pipeline.

The upstream is any OpenAI-compatible endpoint (Groq by default), reached
through the OpenAI SDK with its built-in retries turned off so that
RetryPolicy owns the attempt count.
"""

import json
import logging
from functools import lru_cache
from typing import Optional

from openai import AsyncOpenAI

from nutrivibe.config import get_settings
from nutrivibe.models.generation import (
    AIFeature,
    GenerationRequest,
    GenerationResponse,
    GenerationResult,
    TokenUsage,
    VERBATIM_FEATURES,
)
from nutrivibe.models.profiles import UserProfile
from nutrivibe.services.retry import RetryPolicy
from nutrivibe.services.supabase import get_supabase_client, TABLES
from nutrivibe.services.usage import (
    ProfileNotFoundError,
    QuotaExceededError,
    UsageConflictError,
    release_generation,
    reserve_generation,
)

logger = logging.getLogger(__name__)
settings = get_settings()


FEATURE_TITLES = {
    AIFeature.MEAL_PLAN_GENERATION: "Meal Plan",
    AIFeature.MEAL_PLAN_CUSTOMIZATION: "Meal Plan Customization",
    AIFeature.RECIPE_RECOMMENDATION: "Recipe Recommendation",
    AIFeature.NUTRITION_EDUCATION: "Nutrition Education",
    AIFeature.CULTURAL_FOOD_UNDERSTANDING: "Cultural Food Guide",
    AIFeature.SHOPPING_LIST_GENERATION: "Shopping List",
    AIFeature.SHOPPING_LIST_CUSTOMIZATION: "Shopping List Customization",
    AIFeature.BUDGET_OPTIMIZATION: "Budget Shopping List",
}

FEATURE_GUIDANCE = {
    AIFeature.MEAL_PLAN_GENERATION: """For meal plans, provide:
- Daily meal breakdown with calories
- Nigerian recipe names and ingredients
- Grocery shopping list
- Meal prep tips
- Cultural food substitutions if needed""",
    AIFeature.NUTRITION_EDUCATION: """For nutrition education, provide:
- Simple explanations with Nigerian food examples
- Practical applications for daily life
- Cultural context and local alternatives""",
}


class GenerationError(Exception):
    """The upstream answered but the response was unusable."""


def calculate_cost(total_tokens: int) -> float:
    """Flat per-token pricing."""
    return total_tokens * settings.llm_cost_per_token


def generate_title(feature: AIFeature, prompt: str) -> str:
    """Title for a generation history entry."""
    feature_name = FEATURE_TITLES.get(feature, "AI Generation")
    preview = prompt[:50] + "..." if len(prompt) > 50 else prompt
    return f"{feature_name}: {preview}"


def build_system_prompt(
    profile: UserProfile,
    feature: AIFeature,
    additional_context: Optional[dict] = None,
) -> str:
    """Advisor preamble sent ahead of non-verbatim feature prompts."""
    prompt = f"""You are NutriVibe, an AI nutritionist specializing in Nigerian cuisine and healthy eating.
You provide practical, culturally-aware advice with clear structure and actionable steps.

User Profile:
- Name: {profile.display_name}
{profile.context_lines()}
- Cultural Context: Nigerian cuisine and local ingredients

Instructions:
- Always consider the user's cultural background and preferences
- Provide practical, actionable advice
- Use local Nigerian ingredients when possible
- Consider the user's dietary restrictions and allergies
- Provide clear nutritional information
- Include meal prep tips and cultural context"""

    guidance = FEATURE_GUIDANCE.get(feature)
    if guidance:
        prompt += f"\n\n{guidance}"

    if additional_context:
        prompt += f"\n\nAdditional Context: {json.dumps(additional_context, default=str)}"

    return prompt


def build_messages(request: GenerationRequest) -> list[dict]:
    """Chat messages for a request."""
    if request.feature in VERBATIM_FEATURES:
        return [{"role": "system", "content": request.prompt}]

    return [
        {
            "role": "system",
            "content": build_system_prompt(
                request.user_profile, request.feature, request.additional_context
            ),
        },
        {"role": "user", "content": request.prompt},
    ]


class AIService:
    """Chat completion client plus quota-checked generation."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ):
        self._client = client
        self.retry_policy = retry_policy or RetryPolicy(
            attempts=settings.llm_retry_attempts,
            delay_seconds=settings.llm_retry_delay_seconds,
        )

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=settings.groq_api_key,
                base_url=settings.llm_base_url,
                timeout=settings.llm_timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def send(
        self,
        prompt: str,
        feature: AIFeature,
        messages: Optional[list[dict]] = None,
    ) -> GenerationResult:
        """Call the chat completions endpoint with retries.

        Raises the last upstream error once retries are exhausted, or the
        first terminal one.
        """
        messages = messages or [{"role": "system", "content": prompt}]

        async def call() -> GenerationResult:
            response = await self.client.chat.completions.create(
                model=settings.llm_model,
                messages=messages,
                max_tokens=settings.llm_max_tokens,
                temperature=settings.llm_temperature,
                stream=False,
            )
            return self._to_result(response)

        result, attempts = await self.retry_policy.run(call, f"{feature.value} generation")
        result.attempts = attempts
        logger.info(
            f"{feature.value}: {len(result.content)} chars, "
            f"{result.tokens.total} tokens, {attempts} attempt(s)"
        )
        return result

    def _to_result(self, response) -> GenerationResult:
        if not response.choices:
            raise GenerationError("Invalid response format from LLM API: no choices")

        content = response.choices[0].message.content
        if content is None:
            raise GenerationError("Invalid response format from LLM API: empty message")

        usage = response.usage
        tokens = TokenUsage(
            prompt=usage.prompt_tokens if usage else 0,
            completion=usage.completion_tokens if usage else 0,
            total=usage.total_tokens if usage else 0,
        )
        return GenerationResult(
            content=content,
            tokens=tokens,
            cost=calculate_cost(tokens.total),
            model=getattr(response, "model", None) or settings.llm_model,
        )

    async def generate_content(self, request: GenerationRequest) -> GenerationResponse:
        """Run one generation: reserve quota, call upstream, report usage.

        Never raises for quota or upstream problems; those come back as
        success=False with an error_code.
        """
        user_id = request.user_id

        try:
            reservation = await reserve_generation(user_id)
        except QuotaExceededError as e:
            return GenerationResponse(
                success=False,
                usage=e.status.snapshot(),
                error=str(e),
                error_code="quota_exceeded",
            )
        except ProfileNotFoundError as e:
            return GenerationResponse(success=False, error=str(e), error_code="profile_not_found")
        except UsageConflictError as e:
            return GenerationResponse(success=False, error=str(e), error_code="usage_conflict")

        messages = build_messages(request)
        logger.debug(f"Prompt for {request.feature.value}: {messages[-1]['content'][:200]}...")

        try:
            result = await self.send(request.prompt, request.feature, messages)
        except Exception as e:
            logger.error(f"AI generation failed for {user_id[:8]}: {e}")
            try:
                await release_generation(reservation)
            except Exception as release_error:
                logger.error(f"Could not release reservation for {user_id[:8]}: {release_error}")
            return GenerationResponse(
                success=False,
                usage=reservation.status.snapshot(),
                error=str(e) or e.__class__.__name__,
                error_code="generation_failed",
            )

        if settings.record_generation_history:
            await self.save_generation_history(request, result)

        return GenerationResponse(
            success=True,
            content=result.content,
            tokens=result.tokens,
            cost=result.cost,
            usage=reservation.status.snapshot(),
        )

    async def generate(
        self,
        user_id: str,
        profile: UserProfile,
        feature: AIFeature,
        prompt: str,
        context: Optional[dict] = None,
    ) -> GenerationResponse:
        """Shortcut used by the per-feature services."""
        response = await self.generate_content(GenerationRequest(
            user_id=user_id,
            feature=feature,
            prompt=prompt,
            user_profile=profile,
            additional_context=context,
        ))
        if not response.success:
            logger.warning(f"{feature.value} failed for {user_id[:8]}: {response.error}")
        return response

    async def save_generation_history(
        self,
        request: GenerationRequest,
        result: GenerationResult,
    ) -> None:
        """Record a generation for analytics. Failures are logged only."""
        profile = request.user_profile
        metadata = {
            "prompt": request.prompt,
            "user_profile": {
                "fitness_goal": profile.fitness_goal,
                "dietary_preference": profile.dietary_preference,
                "allergies": profile.allergies,
                "location": profile.location,
                "caloric_needs": profile.caloric_needs,
            },
            "additional_context": request.additional_context or {},
            "model": result.model,
            "temperature": settings.llm_temperature,
        }

        try:
            client = get_supabase_client()
            client.table(TABLES["generations"]).insert({
                "user_id": request.user_id,
                "feature": request.feature.value,
                "title": generate_title(request.feature, request.prompt),
                "content": result.content,
                "metadata": metadata,
                "tokens_used": result.tokens.total,
                "cost": result.cost,
            }).execute()
        except Exception as e:
            logger.error(f"Error saving generation history: {e}")

    async def get_user_generations(
        self,
        user_id: str,
        feature: Optional[AIFeature] = None,
        limit: int = 50,
    ) -> list[dict]:
        """Recorded generations, newest first."""
        client = get_supabase_client()
        query = client.table(TABLES["generations"]).select("*").eq("user_id", user_id)
        if feature:
            query = query.eq("feature", feature.value)
        result = query.order("created_at", desc=True).limit(limit).execute()
        return result.data or []


@lru_cache
def get_ai_service() -> AIService:
    """Get cached AI service instance."""
    return AIService()

"""Shopping list generation service."""

import json
from typing import Any

from nutrivibe.models.generation import AIFeature, GenerationResponse
from nutrivibe.models.profiles import UserProfile
from nutrivibe.models.shopping import BudgetShoppingListOptions, ShoppingListOptions
from nutrivibe.services.ai import get_ai_service

SUBSTITUTION_RULES = """IMPORTANT: If the requested meals contain ingredients that conflict with the user's dietary preferences or allergies, you MUST:
1. Clearly explain WHY you're making substitutions
2. Provide suitable alternatives that align with their profile
3. Explain the nutritional benefits of the substitutions
4. Ensure the alternatives still achieve the same meal goals"""

# Keeps the response in the bullet shape parse_shopping_list understands
LIST_FORMAT = """Format the list as markdown: one "### Category" heading per category, then one
"- Item name - quantity" bullet per item."""


def _profile_block(profile: UserProfile) -> str:
    return f"""User Profile:
- Fitness Goal: {profile.fitness_goal or 'Not specified'}
- Dietary Preference: {profile.dietary_preference or 'No restrictions'}
- Allergies: {profile.allergies_text}
- Caloric Needs: {profile.caloric_needs or 'Not specified'}"""


def build_shopping_list_prompt(profile: UserProfile, options: ShoppingListOptions) -> str:
    location = options.location or profile.location or "Nigeria"
    budget = options.budget.value
    return f"""Generate an optimized shopping list for a user in {location} with the following requirements:

{_profile_block(profile)}

Shopping Requirements:
- Meals to prepare: {', '.join(options.meal_plan) or 'A balanced week of meals'}
- Budget: {budget} range
- Location: {location}
- Preferences: {', '.join(options.preferences) or 'None'}

{SUBSTITUTION_RULES}

Please create a comprehensive shopping list that:
1. Includes all necessary ingredients for the specified meals (with substitutions as needed)
2. Is optimized for the {location} market
3. Respects dietary restrictions and allergies
4. Fits within the {budget} budget range
5. Groups items by category (proteins, vegetables, grains, etc.)
6. Includes approximate quantities and local market prices where possible
7. Suggests local alternatives for hard-to-find ingredients

{LIST_FORMAT}

Start with a brief explanation of any substitutions, then give the organized list."""


def build_shopping_list_customization_prompt(
    profile: UserProfile,
    current_list: Any,
    feedback: str,
) -> str:
    location = profile.location or "Nigeria"
    return f"""Customize the following shopping list based on user feedback:

Current Shopping List:
{json.dumps(current_list, indent=2, default=str)}

User Feedback:
{feedback}

{_profile_block(profile)}
- Location: {location}

IMPORTANT: When making changes based on the feedback, always explain:
1. WHY you're making each change
2. How the change aligns with their dietary preferences/allergies
3. The nutritional impact of any substitutions

Update the list to address the feedback while keeping all necessary ingredients, the dietary
restrictions, the budget and local availability in {location}.

{LIST_FORMAT}"""


def build_budget_shopping_list_prompt(profile: UserProfile, options: BudgetShoppingListOptions) -> str:
    budget = f"₦{options.budget:,.0f}"
    return f"""Create a budget-optimized shopping list for a user with a budget of {budget} in {options.location}:

{_profile_block(profile)}

Meal Plan:
{json.dumps(options.meal_plan, indent=2, default=str)}

Budget: {budget}

IMPORTANT: If any ingredients need to be substituted due to budget constraints or dietary preferences, clearly explain
why, how the alternative fits the budget and how it respects their dietary preferences/allergies.

Please create a shopping list that:
1. Stays within the {budget} budget
2. Prioritizes essential ingredients
3. Groups items by priority (essential vs. optional)
4. Provides cost estimates for each item
5. Suggests bulk buying opportunities and seasonal ingredients
6. Includes local market shopping tips for {options.location}

{LIST_FORMAT}"""


async def generate_shopping_list(
    user_id: str,
    profile: UserProfile,
    options: ShoppingListOptions,
) -> GenerationResponse:
    prompt = build_shopping_list_prompt(profile, options)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.SHOPPING_LIST_GENERATION, prompt,
        options.model_dump(mode="json"),
    )


async def customize_shopping_list(
    user_id: str,
    profile: UserProfile,
    current_list: Any,
    feedback: str,
) -> GenerationResponse:
    prompt = build_shopping_list_customization_prompt(profile, current_list, feedback)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.SHOPPING_LIST_CUSTOMIZATION, prompt,
        {"feedback": feedback, "customization_type": "shopping_list"},
    )


async def generate_budget_shopping_list(
    user_id: str,
    profile: UserProfile,
    options: BudgetShoppingListOptions,
) -> GenerationResponse:
    prompt = build_budget_shopping_list_prompt(profile, options)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.BUDGET_OPTIMIZATION, prompt,
        {"budget": options.budget, "location": options.location, "optimization_type": "budget"},
    )

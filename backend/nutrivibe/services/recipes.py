"""Recipe recommendation service."""

from nutrivibe.models.generation import AIFeature, GenerationResponse
from nutrivibe.models.meal_plans import PrepTime
from nutrivibe.models.profiles import UserProfile
from nutrivibe.models.recipes import RecipeOptions
from nutrivibe.services.ai import get_ai_service


COOKING_TIME_TEXT = {
    PrepTime.QUICK: "under 30 minutes",
    PrepTime.MODERATE: "30-60 minutes",
    PrepTime.EXTENSIVE: "over 60 minutes",
}

# Layout shared by every single-recipe prompt; parse_recipe reads these labels
RECIPE_FORMAT = """**Recipe: [Traditional Name] - [English Translation]**

**Description:** [Brief description and cultural significance]

**Recipe Details:**
- **Cuisine:** [Cuisine]
- **Difficulty:** [Easy/Medium/Hard]
- **Cooking Time:** [Minutes]
- **Servings:** [Number of people]
- **Calories per serving:** [Estimated calories]

**Ingredients:**
- [Ingredient name] - [Amount/Quantity]

**Instructions:**
1. [Step-by-step instruction]

**Nutritional Information:**
- **Protein:** [Amount]g
- **Carbohydrates:** [Amount]g
- **Fat:** [Amount]g
- **Fiber:** [Amount]g

**Cultural Context:** [Background and regional variations]

**Health Benefits:** [How it supports the user's goals]

**Pro Tips:** [Cooking tips, substitutions and variations]"""


def build_recipe_prompt(profile: UserProfile, options: RecipeOptions) -> str:
    """One recipe for exactly what the user asked for."""
    request = options.recipe_request
    restrictions = list(options.dietary_restrictions)
    if profile.dietary_preference and profile.dietary_preference != "none":
        restrictions.append(profile.dietary_preference)

    constraints = [
        f"- Cuisine: {options.cuisine or 'as implied by the request'}",
        f"- Dietary restrictions: {', '.join(restrictions) or 'None'}",
        f"- Allergies: {profile.allergies_text}",
        f"- Cooking time: {COOKING_TIME_TEXT[options.cooking_time]}",
        f"- Skill level: {options.skill_level.value}",
    ]
    if options.ingredients:
        constraints.append(f"- Prefer these available ingredients: {', '.join(options.ingredients)}")

    return f"""You are a recipe generator.

USER REQUEST: "{request}"

CRITICAL INSTRUCTIONS:
1. Generate ONLY ONE recipe for "{request}"
2. Do not generate multiple recipes
3. Do not generate Nigerian recipes unless specifically requested
4. Do not default to any other dish
5. If the request conflicts with the restrictions or allergies below, adapt it and explain each substitution

Constraints:
{chr(10).join(constraints)}

REQUIRED FORMAT:
{RECIPE_FORMAT}

Generate ONLY the "{request}" recipe. Nothing else."""


def build_recipe_alternatives_prompt(profile: UserProfile, original_recipe: str, reason: str) -> str:
    """Three alternatives to a dish the user cannot or will not cook."""
    return f"""I need alternative recipe suggestions for "{original_recipe}" because: {reason}

**My Profile:**
{profile.context_lines()}

**Please provide 3 alternative recipe options.** For each one:

1. **Address My Reason for Change:** explain how the alternative solves the issue while keeping similar taste and nutrition
2. **Recipe:** traditional Nigerian dish name, short description, complete ingredient list and instructions
3. **Modifications and Substitutions:** locally available ingredient swaps and cooking method variations
4. **Health and Dietary Considerations:** how it supports my fitness goal, respects my restrictions and avoids my allergens

Start each option with a "**Recipe: [Name]**" line.
Keep the alternatives practical, culturally authentic and achievable with ingredients found in {profile.location or 'Nigeria'}."""


def build_cultural_food_prompt(profile: UserProfile, foods: list[str]) -> str:
    """Cultural and nutritional background for a list of dishes."""
    return f"""Explain the nutritional benefits and cultural significance of these Nigerian foods: {', '.join(foods)}

**My Profile:**
{profile.context_lines()}

**For each dish, please provide:**

1. **Traditional Preparation Methods:** how it is made, regional variations, serving occasions
2. **Modern Healthy Variations:** healthier cooking alternatives, substitutions and portion guidance for my dietary needs
3. **Nutritional Profile:** macronutrient breakdown, key vitamins and minerals, how it fits my fitness goal ({profile.fitness_goal or 'Not specified'})
4. **Cultural Importance:** historical significance, celebrations and regional preferences
5. **Practical Applications:** how to include it in my meal plan, local alternatives, budget-friendly preparation and storage tips

Make the information practical, culturally rich and personally relevant."""


def build_ingredient_recipe_prompt(profile: UserProfile, ingredients: list[str]) -> str:
    """A recipe built around what the user already has."""
    available = ", ".join(ingredients)
    return f"""Generate a detailed, structured recipe using these available ingredients: {available}

{RECIPE_FORMAT}

**My Profile Context:**
{profile.context_lines()}

**Requirements:**
- Maximize use of my available ingredients: {available}
- Suggest minimal additional ingredients
- Keep the recipe culturally authentic Nigerian cuisine
- Respect my dietary restrictions and allergies
- Provide practical, achievable instructions"""


def build_recipe_customization_prompt(
    profile: UserProfile,
    original_recipe: str,
    customization_request: str,
) -> str:
    """Rewrite a recipe to satisfy a user's change request."""
    return f"""You are a helpful Nigerian chef assistant. The user wants to customize their recipe based on this request: "{customization_request}"

**Original Recipe:**
{original_recipe}

**User's Profile:**
{profile.context_lines()}

**Customize the recipe to address the request while keeping this structured format:**

{RECIPE_FORMAT}

**Important Guidelines:**
- Address the user's specific request: "{customization_request}"
- Explain every change in the description
- Respect the user's dietary restrictions and allergies
- Keep the recipe practical and maintain or improve its nutritional value"""


async def get_recipe_recommendation(
    user_id: str,
    profile: UserProfile,
    options: RecipeOptions,
) -> GenerationResponse:
    prompt = build_recipe_prompt(profile, options)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.RECIPE_RECOMMENDATION, prompt,
        options.model_dump(mode="json"),
    )


async def get_recipe_alternatives(
    user_id: str,
    profile: UserProfile,
    original_recipe: str,
    reason: str,
) -> GenerationResponse:
    prompt = build_recipe_alternatives_prompt(profile, original_recipe, reason)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.RECIPE_RECOMMENDATION, prompt,
        {"original_recipe": original_recipe, "reason": reason, "request_type": "alternative"},
    )


async def get_cultural_food_understanding(
    user_id: str,
    profile: UserProfile,
    foods: list[str],
) -> GenerationResponse:
    prompt = build_cultural_food_prompt(profile, foods)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.CULTURAL_FOOD_UNDERSTANDING, prompt,
        {"foods": foods, "request_type": "cultural_understanding"},
    )


async def get_recipes_by_ingredients(
    user_id: str,
    profile: UserProfile,
    ingredients: list[str],
) -> GenerationResponse:
    prompt = build_ingredient_recipe_prompt(profile, ingredients)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.RECIPE_RECOMMENDATION, prompt,
        {"ingredients": ingredients, "request_type": "ingredient_based"},
    )


async def customize_recipe(
    user_id: str,
    profile: UserProfile,
    original_recipe: str,
    customization_request: str,
) -> GenerationResponse:
    prompt = build_recipe_customization_prompt(profile, original_recipe, customization_request)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.RECIPE_RECOMMENDATION, prompt,
        {"customization_request": customization_request, "request_type": "customization"},
    )

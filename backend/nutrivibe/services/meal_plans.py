"""
Meal plan generation service.

Prompt builders are pure functions of (profile, options). The async
wrappers turn them into generation requests.
"""

from datetime import date
from typing import Optional

from nutrivibe.models.generation import AIFeature, GenerationResponse
from nutrivibe.models.meal_plans import BudgetTier, MealPlanOptions, PrepTime
from nutrivibe.models.profiles import UserProfile
from nutrivibe.services.ai import get_ai_service


BUDGET_TEXT = {
    BudgetTier.LOW: "budget-friendly (₦500-₦1000 per day)",
    BudgetTier.MEDIUM: "moderate budget (₦1000-₦2000 per day)",
    BudgetTier.HIGH: "premium ingredients (₦2000+ per day)",
}

PREP_TIME_TEXT = {
    PrepTime.QUICK: "quick preparation (15-30 minutes)",
    PrepTime.MODERATE: "moderate preparation (30-60 minutes)",
    PrepTime.EXTENSIVE: "detailed preparation (60+ minutes)",
}


def _goal(profile: UserProfile, options: MealPlanOptions) -> str:
    return options.goal or profile.fitness_goal or "general health"


def _plan_header(profile: UserProfile, options: MealPlanOptions) -> str:
    restrictions = ", ".join(options.dietary_restrictions) or "None"
    cultural = ", ".join(options.cultural_preferences) or "Nigerian"
    return f"""## **Profile Information**
- **Fitness Goal**: {_goal(profile, options)}
- **Dietary Preference**: {profile.dietary_preference or 'None'}
- **Additional Restrictions**: {restrictions}
- **Allergies**: {profile.allergies_text}
- **Location**: {profile.location or 'Nigeria'}
- **Daily Calories**: {profile.caloric_needs or 'Not specified'} calories
- **Cultural Preferences**: {cultural}"""


def build_meal_plan_prompt(
    profile: UserProfile,
    options: MealPlanOptions,
    today: Optional[date] = None,
) -> str:
    """Full meal plan prompt with the markdown layout the parser expects."""
    today = today or date.today()
    name = profile.display_name
    goal = _goal(profile, options)
    budget_text = BUDGET_TEXT[options.budget]
    prep_text = PREP_TIME_TEXT[options.meal_prep_time]

    return f"""Create a {options.days}-day meal plan for {name} with the following requirements:

{_plan_header(profile, options)}
- **Budget**: {budget_text}
- **Prep Time**: {prep_text}

## **IMPORTANT: Profile-Based Substitutions**
If any requested meals or ingredients conflict with the user's dietary preferences or allergies, you MUST:
1. Clearly explain WHY you're making substitutions
2. Provide suitable alternatives that align with their profile
3. Explain the nutritional benefits of the substitutions
4. Ensure the alternatives still achieve their fitness goals

For example, if they request meat but their profile shows "vegetarian", explain which item you replaced,
what you replaced it with, and how the replacement keeps the protein needed for the {goal} goal.

## **Requirements**
- Focus on Nigerian cuisine and local ingredients
- Ensure nutritional balance for {goal}
- Include detailed cooking instructions
- Provide accurate calorie counts per meal
- Suggest local ingredient alternatives
- Include meal prep tips and storage advice
- Start with a brief explanation of any profile-based substitutions made

## **Output Format**
Please structure your response with clear markdown formatting:

# **{options.days}-Day Meal Plan for {name}**

## **Nutritional Overview**
- **Daily Target**: {profile.caloric_needs or 'Not specified'} calories
- **Goal**: {goal}
- **Dietary**: {profile.dietary_preference or 'None'}
- **Budget**: {budget_text}

---

## **Day 1 - [Day Name]**
### **Breakfast** (XX calories)
**Ingredients:**
- Ingredient 1 (quantity)
- Ingredient 2 (quantity)

**Instructions:**
1. Step 1
2. Step 2

**Nutritional Notes:** Protein: XXg, Carbs: XXg, Fat: XXg

### **Lunch** (XX calories)
[Same structure as breakfast]

### **Snack** (XX calories)
[Same structure as breakfast]

### **Dinner** (XX calories)
[Same structure as breakfast]

**Daily Total: XXX calories**

---

[Repeat for each day up to Day {options.days}]

## **Shopping List**
### **Proteins**
- Item (quantity needed for {options.days} days)

### **Vegetables**
- Item (quantity needed for {options.days} days)

### **Grains & Staples**
- Item (quantity needed for {options.days} days)

### **Spices & Seasonings**
- Item (quantity needed for {options.days} days)

## **Meal Prep Tips**
- Tip 1
- Tip 2

## **Substitutions & Alternatives**
- **For [allergy/restriction]**: Use [alternative] instead of [original]
- **Budget-friendly**: [cheaper alternative] instead of [expensive item]

## **Weekly Nutritional Summary**
- **Average Daily Calories**: XXX
- **Protein Range**: XX-XXg
- **Carb Range**: XX-XXg
- **Fat Range**: XX-XXg

## **Cultural Notes**
- Note about Nigerian cuisine traditions
- Local ingredient benefits
- Seasonal considerations

---

**Generated on**: {today.strftime('%A, %B %d, %Y')}

Please ensure all meals are practical, culturally appropriate, and nutritionally balanced."""


def build_meal_plan_customization_prompt(
    profile: UserProfile,
    current_meal_plan: str,
    customization_request: str,
) -> str:
    """Ask for an edited copy of an existing plan in the same layout."""
    return f"""I have an existing meal plan that I'd like to customize. Here's the current plan:

{current_meal_plan}

## **Customization Request**
{customization_request}

## **User Profile Context**
{profile.context_lines()}

## **IMPORTANT: Profile-Based Changes**
When making changes based on the customization request, always explain:
1. WHY you're making each change
2. How the change aligns with their dietary preferences/allergies
3. The nutritional impact of any substitutions
4. How the change addresses their specific request

## **Requirements**
- Maintain the same markdown structure and formatting
- Keep the same level of detail and organization
- Ensure all changes align with the original nutritional goals
- Preserve the Nigerian cuisine focus and local ingredients
- Update any affected sections (shopping list, prep tips, etc.)
- Start with a clear explanation of the changes made and why they were necessary

Please provide the updated meal plan with the requested changes while keeping the same format."""


def build_budget_meal_plan_prompt(profile: UserProfile, options: MealPlanOptions) -> str:
    """Meal plan prompt focused on cost."""
    return f"""Create a {options.days}-day budget-optimized meal plan for {profile.display_name} with the following requirements:

{_plan_header(profile, options)}
- **Budget Focus**: {BUDGET_TEXT[options.budget]}
- **Prep Time**: {PREP_TIME_TEXT[options.meal_prep_time]}

## **Budget Optimization Requirements**
- Focus on cost-effective ingredients
- Suggest bulk buying opportunities
- Include seasonal produce recommendations
- Provide money-saving meal prep tips
- Suggest affordable protein alternatives
- Include cost breakdown per meal

## **Output Format**
Use "## Day N" headers and "### Meal (N calories)" meal headers, with additional budget-focused sections:

- **Cost per meal** estimates
- **Bulk buying tips**
- **Seasonal savings**
- **Leftover utilization ideas**
- **Budget-friendly substitutions**

Please ensure the plan is both affordable and nutritionally complete."""


def build_quick_meal_plan_prompt(profile: UserProfile, options: MealPlanOptions) -> str:
    """Meal plan prompt focused on cooking time."""
    return f"""Create a {options.days}-day time-efficient meal plan for {profile.display_name} with the following requirements:

{_plan_header(profile, options)}
- **Budget**: {BUDGET_TEXT[options.budget]}
- **Prep Time Focus**: {PREP_TIME_TEXT[options.meal_prep_time]}

## **Time Efficiency Requirements**
- Minimize cooking time per meal
- Include make-ahead options
- Suggest time-saving kitchen hacks
- Provide batch cooking strategies
- Include quick-cook ingredient alternatives
- Add meal prep timeline

## **Output Format**
Use "## Day N" headers and "### Meal (N calories)" meal headers, with additional time-focused sections:

- **Prep time per meal**
- **Make-ahead instructions**
- **Batch cooking tips**
- **Storage and reheating tips**

Please ensure the plan is both time-efficient and nutritionally balanced."""


async def generate_meal_plan(
    user_id: str,
    profile: UserProfile,
    options: MealPlanOptions,
) -> GenerationResponse:
    prompt = build_meal_plan_prompt(profile, options)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.MEAL_PLAN_GENERATION, prompt,
        {"options": options.model_dump(mode="json")},
    )


async def customize_meal_plan(
    user_id: str,
    profile: UserProfile,
    current_meal_plan: str,
    customization_request: str,
) -> GenerationResponse:
    prompt = build_meal_plan_customization_prompt(profile, current_meal_plan, customization_request)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.MEAL_PLAN_CUSTOMIZATION, prompt,
        {"customization_request": customization_request},
    )


async def generate_budget_meal_plan(
    user_id: str,
    profile: UserProfile,
    options: MealPlanOptions,
) -> GenerationResponse:
    prompt = build_budget_meal_plan_prompt(profile, options)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.MEAL_PLAN_GENERATION, prompt,
        {"options": options.model_dump(mode="json"), "budget_focus": options.budget.value},
    )


async def generate_quick_meal_plan(
    user_id: str,
    profile: UserProfile,
    options: MealPlanOptions,
) -> GenerationResponse:
    prompt = build_quick_meal_plan_prompt(profile, options)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.MEAL_PLAN_GENERATION, prompt,
        {"options": options.model_dump(mode="json"), "time_focus": options.meal_prep_time.value},
    )

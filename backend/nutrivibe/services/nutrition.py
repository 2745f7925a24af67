"""Nutrition education service."""

from nutrivibe.models.generation import AIFeature, GenerationResponse
from nutrivibe.models.nutrition import Difficulty, NutritionEducationOptions
from nutrivibe.models.profiles import UserProfile
from nutrivibe.services.ai import get_ai_service


def build_nutrition_education_prompt(profile: UserProfile, options: NutritionEducationOptions) -> str:
    topic = options.topic
    level = options.difficulty.value
    goal = profile.fitness_goal or "Not specified"

    sections = [
        f"""1. **Core Concept Explanation:**
   - Clear, {level}-level explanation of {topic}
   - How it relates to my fitness goal ({goal})
   - Common misconceptions and clarifications""",
    ]
    if options.cultural_context:
        sections.append(f"""{len(sections) + 1}. **Nigerian Cultural Context:**
   - How {topic} relates to traditional Nigerian eating habits
   - Cultural foods that support or challenge this concept
   - Traditional cooking methods and their nutritional impact""")
    if options.practical_examples:
        sections.append(f"""{len(sections) + 1}. **Practical Applications:**
   - How to apply {topic} to my daily meals
   - Specific Nigerian food examples and modifications
   - Shopping and cooking tips""")
    sections.append(f"""{len(sections) + 1}. **Personalized Recommendations:**
   - How {topic} affects my dietary restrictions
   - Portion control strategies for my caloric needs
   - Progress tracking methods""")

    return f"""Provide personalized nutrition education about "{topic}" tailored to my needs and cultural background.

**My Profile:**
{profile.context_lines()}

**Education Requirements:**
- Topic: {topic}
- Difficulty Level: {level}
- Include Cultural Context: {'Yes' if options.cultural_context else 'No'}
- Include Practical Examples: {'Yes' if options.practical_examples else 'No'}

**Please provide:**

{chr(10).join(sections)}

Use simple, clear language appropriate for the {level} level and keep the advice actionable."""


def build_health_advice_prompt(profile: UserProfile, question: str) -> str:
    return f"""I have a health question: {question}

**My Profile:**
{profile.context_lines()}

**Please provide personalized health advice that:**

1. **Addresses My Specific Question:** a direct answer, likely causes and solutions
2. **Considers My Profile:** my fitness goal, dietary restrictions, allergies and caloric needs
3. **Provides Cultural Context:** Nigerian perspectives, traditional remedies and local food solutions
4. **Offers Practical Solutions:** meal and snack suggestions, shopping and habit changes
5. **Includes Safety Guidelines:** warning signs and when to consult a healthcare professional

Keep the advice evidence-based and practical."""


def build_meal_timing_prompt(profile: UserProfile, schedule: str) -> str:
    return f"""I need advice on meal timing and portion control based on my schedule: {schedule}

**My Profile:**
{profile.context_lines()}

**Please provide personalized meal timing advice that:**

1. **Optimizes My Schedule:** best meal and snack times, pre and post-activity nutrition
2. **Supports My Fitness Goal:** how timing affects {profile.fitness_goal or 'my goals'} and recovery
3. **Portion Control Strategies:** portion estimates and plate composition using Nigerian foods
4. **Cultural Meal Timing:** traditional Nigerian meal patterns
5. **Practical Implementation:** meal prep schedules, quick options for busy days, storage and reheating

Keep the timing realistic for my routine."""


def build_supplement_prompt(profile: UserProfile, current_supplements: list[str]) -> str:
    taking = ", ".join(current_supplements) or "No supplements"
    return f"""I need advice about supplements and vitamins. I'm currently taking: {taking}

**My Profile:**
{profile.context_lines()}

**Please provide personalized supplement advice that:**

1. **Evaluates My Current Supplements:** effectiveness, interactions, dosage and timing
2. **Addresses My Specific Needs:** supplements that support my goal and fill dietary gaps, allergy-safe options
3. **Provides Natural Alternatives:** Nigerian foods rich in the relevant nutrients
4. **Safety and Quality Guidelines:** choosing safe products and when to consult a professional
5. **Implementation Strategy:** schedule, absorption timing and progress monitoring

Prioritize food-based nutrition over supplements."""


def build_nutrition_quiz_prompt(profile: UserProfile, level: Difficulty) -> str:
    quiz_level = level.value
    return f"""Create a personalized nutrition quiz for me at the {quiz_level} level.

**My Profile:**
{profile.context_lines()}

**Please create a {quiz_level}-level quiz that:**

1. **Quiz Structure:**
   - 10 multiple-choice questions
   - 5 true/false questions
   - 3 scenario-based questions
   - Difficulty appropriate for {quiz_level} level

2. **Content Focus:** Nigerian cuisine and nutrition, my fitness goal ({profile.fitness_goal or 'general health'}), dietary restrictions and local ingredients

3. **Answer Explanations:** a detailed explanation for each answer and how it relates to my profile

4. **Learning Outcomes:** what I'll learn and next steps for nutrition education

Make it engaging, educational and culturally relevant."""


async def get_nutrition_education(
    user_id: str,
    profile: UserProfile,
    options: NutritionEducationOptions,
) -> GenerationResponse:
    prompt = build_nutrition_education_prompt(profile, options)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.NUTRITION_EDUCATION, prompt,
        options.model_dump(mode="json"),
    )


async def get_health_advice(user_id: str, profile: UserProfile, question: str) -> GenerationResponse:
    prompt = build_health_advice_prompt(profile, question)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.NUTRITION_EDUCATION, prompt,
        {"health_question": question, "request_type": "health_advice"},
    )


async def get_meal_timing_advice(user_id: str, profile: UserProfile, schedule: str) -> GenerationResponse:
    prompt = build_meal_timing_prompt(profile, schedule)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.NUTRITION_EDUCATION, prompt,
        {"schedule": schedule, "request_type": "meal_timing"},
    )


async def get_supplement_advice(
    user_id: str,
    profile: UserProfile,
    current_supplements: list[str],
) -> GenerationResponse:
    prompt = build_supplement_prompt(profile, current_supplements)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.NUTRITION_EDUCATION, prompt,
        {"current_supplements": current_supplements, "request_type": "supplement_advice"},
    )


async def get_nutrition_quiz(user_id: str, profile: UserProfile, level: Difficulty) -> GenerationResponse:
    prompt = build_nutrition_quiz_prompt(profile, level)
    return await get_ai_service().generate(
        user_id, profile, AIFeature.NUTRITION_EDUCATION, prompt,
        {"quiz_type": level.value, "request_type": "nutrition_quiz"},
    )

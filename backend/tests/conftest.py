"""
Pytest configuration and shared fixtures.

Fixtures defined here are available to all tests.
"""

import os
import sys
import pytest
from pathlib import Path
from unittest.mock import MagicMock

# Add backend to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment
os.environ["TESTING"] = "true"


# =============================================================================
# App Fixtures
# =============================================================================


@pytest.fixture
def app():
    """FastAPI test application."""
    from nutrivibe.main import app
    return app


@pytest.fixture
def client(app):
    """Sync test client for API tests."""
    from fastapi.testclient import TestClient
    return TestClient(app)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def mock_supabase():
    """Mock Supabase client for unit tests.

    Every query chain ends in the same execute() result so tests only set
    .data on the part they care about.
    """
    mock = MagicMock()
    query = MagicMock()
    for method in ("select", "insert", "update", "delete", "eq", "is_", "order", "limit"):
        getattr(query, method).return_value = query
    query.execute.return_value.data = []
    mock.table.return_value = query
    mock.query = query
    return mock


@pytest.fixture
def test_user_id():
    """Test user ID for database operations."""
    return "test-user-00000000-0000-0000-0000-000000000000"


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def profile_row(test_user_id):
    """A profiles row as Supabase returns it."""
    return {
        "id": "profile-uuid",
        "user_id": test_user_id,
        "full_name": "Ada Okafor",
        "fitness_goal": "weight_loss",
        "dietary_preference": "vegetarian",
        "allergies": ["peanuts"],
        "location": "Lagos",
        "caloric_needs": 1800,
        "subscription_plan": "free",
        "subscription_status": "active",
        "usage_ai_generations": 0,
        "usage_ai_generations_daily": 0,
        "usage_ai_generations_reset_date": None,
    }


@pytest.fixture
def sample_profile(profile_row):
    from nutrivibe.models.profiles import UserProfile
    return UserProfile.model_validate(profile_row)


@pytest.fixture
def sample_meal_plan_markdown():
    """Meal plan in the layout the prompt asks for."""
    return """# 🍽️ Your 3-Day Meal Plan!

## **Day 1 - Monday**
### **Breakfast** (350 calories)
**Akara with Pap**
**Ingredients:**
- 1 cup beans
- 1 onion (chopped)

**Instructions:**
1. Blend the beans with the onion
2. Fry in small balls

**Nutritional Notes:** High in plant protein

### **Lunch** (500 calories)
**Jollof Rice**
**Ingredients:**
- 1 cup rice

### **Dinner** (450 calories)
**Efo Riro**

**Daily Total: 1300 calories**

---

## **Day 2 - Tuesday**
### **Breakfast** (300 calories)
**Moi Moi**

### **Dinner** (400 calories)
**Vegetable Soup with Eba**

## **Day 3 - Wednesday**
### **Lunch** (550 calories)
**Ofada Rice**

## 🛒 **Shopping List**
### Grains & Starches
- Rice - 2kg
- Garri - 1 paint
### Proteins
- Beans - 1kg

## 📝 **Meal Prep Tips**
- Soak beans overnight
- Cook stew in bulk

## 🌍 **Cultural Notes**
- Akara is a classic weekend breakfast
"""


@pytest.fixture
def sample_recipe_markdown():
    return """**Recipe: Vegetarian Jollof Rice**

**Description:** A smoky one-pot rice dish.

**Recipe Details:**
- Prep Time: 15 minutes
- Cook Time: 45 minutes
- Servings: 4
- Difficulty: Medium

**Ingredients:**
- 2 cups long grain rice
- 4 tomatoes
- 1 red bell pepper

**Instructions:**
1. Blend the tomatoes and pepper
2. Fry the base in oil
3. Add rice and stock, cook until done

**Nutritional Information (per serving):**
- Calories: 420
- Protein: 9g
"""


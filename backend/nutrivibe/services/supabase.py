"""Supabase client service."""

import logging
from functools import lru_cache

from supabase import create_client, Client

from nutrivibe.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


@lru_cache
def get_supabase_client() -> Client:
    """Get Supabase client with service role key (admin access)."""
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
    )


# Table names (match the web app)
TABLES = {
    "profiles": "profiles",
    "meal_plans": "meal_plans",
    "meals": "meals",
    "recipes": "recipes",
    "shopping_lists": "shopping_lists",
    "shopping_list_items": "shopping_list_items",
    "billing_history": "billing_history",
    "generations": "ai_generations",
}


async def get_profile_row(user_id: str) -> dict | None:
    """Get a user's profile row, or None if they have not set one up."""
    client = get_supabase_client()
    result = (
        client.table(TABLES["profiles"])
        .select("*")
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    rows = result.data or []
    return rows[0] if rows else None


from functools import lru_cache

from supabase import Client, create_client

from engagement_engine.config import settings


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    """Shared service-role client; created on first use and injected into routes."""
    return create_client(settings.supabase_url, settings.supabase_service_role_key)

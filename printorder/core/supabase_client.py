# printorder/core/supabase_client.py
from supabase import AsyncClient, acreate_client

from printorder.core.config import Settings


async def create_supabase(settings: Settings) -> AsyncClient:
    """
    Create the async Supabase client used by the repositories.

    Key selection:
      - service role key when configured (backend only, bypasses RLS)
      - anon/public key otherwise (RLS applies)

    The client is created once in the application lifespan and handed to
    repositories explicitly; nothing caches it at module level.

    WARNING:
      - Never expose service role key to frontend.
    """
    key = settings.SUPABASE_SERVICE_ROLE_KEY or settings.SUPABASE_KEY
    return await acreate_client(settings.SUPABASE_URL, key)

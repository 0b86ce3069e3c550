"""Supabase clients for the backend."""

import logging
from functools import lru_cache

from supabase import AsyncClient, Client, acreate_client, create_client

from ..config import settings
from ..errors import MissingConfigurationError

logger = logging.getLogger(__name__)


def _require_credentials() -> tuple[str, str]:
    if not settings.supabase_url or not settings.supabase_key:
        logger.error("Supabase credentials not configured (missing URL or key)")
        raise MissingConfigurationError(
            "Supabase is not configured. Set DD_SUPABASE_URL and DD_SUPABASE_KEY environment variables."
        )
    return settings.supabase_url, settings.supabase_key


@lru_cache()
def get_supabase_client() -> Client:
    """Get cached Supabase client instance used for table and auth calls.

    Raises:
        MissingConfigurationError: if either connection secret is absent.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    url, key = _require_credentials()
    return create_client(url, key)


async def get_async_supabase_client() -> AsyncClient:
    """Create the async client that carries realtime channels.

    The synchronous client has no realtime support, so change subscriptions
    need a client bound to the running event loop.
    """
    url, key = _require_credentials()
    return await acreate_client(url, key)


# Example usage patterns:
#
# client = get_supabase_client()
#
# # Newest deliveries with their customer and courier labels
# result = client.table('deliveries') \
#     .select('*, customer:customers(name,state,postal_code), courier:couriers(name)') \
#     .order('created_at', desc=True) \
#     .execute()
#
# # Latest ping for a delivery
# result = client.table('delivery_tracking') \
#     .select('*') \
#     .eq('delivery_id', delivery_id) \
#     .order('timestamp', desc=True) \
#     .limit(1) \
#     .execute()
#
# # Realtime inserts (async client)
# channel = async_client.channel('all-tracking')
# await channel.on_postgres_changes('INSERT', schema='public', table='delivery_tracking', callback=cb).subscribe()
